from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..api.deps import RequestContext, ensure_matching_id, page_context
from ..core.database import get_db
from ..core.security import UserRole
from ..schemas.staff import StaffCreate, StaffUpdate
from ..services.staff_service import StaffService
from .common import read_form, redirect, view

router = APIRouter(prefix="/staffs", tags=["Staff pages"])

INDEX = router.prefix

# Everyone signed in may look; only administrators change anything
admin_context = page_context(UserRole.ADMIN.value)


@router.get("")
async def staff_index(
    context: RequestContext = Depends(page_context()),
    db: Session = Depends(get_db)
):
    return view(context, "Staff", staff=StaffService(db).list_staff())


@router.get("/create")
async def staff_create_page(context: RequestContext = Depends(admin_context)):
    return view(context, "New staff member")


@router.post("/create")
async def staff_create(
    request: Request,
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    data = await read_form(request, StaffCreate)
    StaffService(db).create_staff(data)
    return redirect(INDEX)


@router.get("/{staff_id}")
async def staff_details(
    staff_id: int,
    context: RequestContext = Depends(page_context()),
    db: Session = Depends(get_db)
):
    return view(context, "Staff member", staff=StaffService(db).get_staff_response(staff_id))


@router.get("/{staff_id}/edit")
async def staff_edit_page(
    staff_id: int,
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    return view(context, "Edit staff member", staff=StaffService(db).get_staff_response(staff_id))


@router.post("/{staff_id}/edit")
async def staff_edit(
    staff_id: int,
    request: Request,
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    data = await read_form(request, StaffUpdate)
    ensure_matching_id(staff_id, data.id)
    StaffService(db).update_staff(staff_id, data)
    return redirect(INDEX)


@router.get("/{staff_id}/delete")
async def staff_delete_page(
    staff_id: int,
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    staff = StaffService(db).get_staff_response(staff_id)
    return view(
        context,
        "Delete staff member",
        staff=staff,
        will_deactivate=staff.appointment_count > 0,
    )


@router.post("/{staff_id}/delete")
async def staff_delete(
    staff_id: int,
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    StaffService(db).delete_staff(staff_id)
    return redirect(INDEX)
