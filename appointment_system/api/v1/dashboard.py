from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...api.deps import get_current_identity
from ...core.database import get_db
from ...schemas.dashboard import DashboardResponse
from ...services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("", response_model=DashboardResponse, dependencies=[Depends(get_current_identity)])
async def dashboard(db: Session = Depends(get_db)):
    return DashboardService(db).summary()
