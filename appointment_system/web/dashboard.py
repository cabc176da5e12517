from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..api.deps import RequestContext, page_context
from ..core.database import get_db
from ..services.dashboard_service import DashboardService
from .common import view

router = APIRouter(tags=["Dashboard pages"])


@router.get("/dashboard")
async def dashboard_page(
    context: RequestContext = Depends(page_context()),
    db: Session = Depends(get_db)
):
    return view(context, "Dashboard", summary=DashboardService(db).summary())
