from typing import List

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from ...api.deps import ensure_matching_id, get_current_identity, require_role
from ...core.database import get_db
from ...core.security import UserRole
from ...schemas.staff import StaffCreate, StaffResponse, StaffUpdate
from ...services.staff_service import StaffService

router = APIRouter(
    prefix="/staff",
    tags=["Staff"],
    dependencies=[Depends(get_current_identity)],
)

admin_only = [Depends(require_role(UserRole.ADMIN.value))]


@router.get("", response_model=List[StaffResponse])
async def list_staff(db: Session = Depends(get_db)):
    return StaffService(db).list_staff()


@router.get("/{staff_id}", response_model=StaffResponse)
async def get_staff(staff_id: int, db: Session = Depends(get_db)):
    return StaffService(db).get_staff_response(staff_id)


@router.post(
    "",
    response_model=StaffResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=admin_only,
)
async def create_staff(
    request: Request,
    data: StaffCreate,
    response: Response,
    db: Session = Depends(get_db)
):
    staff = StaffService(db).create_staff(data)
    response.headers["Location"] = str(request.url_for("get_staff", staff_id=staff.id))
    return staff


@router.put("/{staff_id}", response_model=StaffResponse, dependencies=admin_only)
async def update_staff(staff_id: int, data: StaffUpdate, db: Session = Depends(get_db)):
    ensure_matching_id(staff_id, data.id)
    return StaffService(db).update_staff(staff_id, data)


@router.delete("/{staff_id}", dependencies=admin_only)
async def delete_staff(staff_id: int, db: Session = Depends(get_db)):
    """Hard delete, or deactivate when appointments still reference the staff member."""
    if StaffService(db).delete_staff(staff_id):
        return {"message": "Staff member has appointments and was deactivated instead of deleted."}
    return Response(status_code=status.HTTP_204_NO_CONTENT)
