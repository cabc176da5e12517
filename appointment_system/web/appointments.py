from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..api.deps import RequestContext, ensure_matching_id, page_context
from ..core.database import get_db
from ..models.appointment import AppointmentStatus
from ..schemas.appointment import AppointmentCreate, AppointmentUpdate
from ..services.appointment_service import AppointmentService
from ..services.staff_service import StaffService
from .common import read_form, redirect, view

router = APIRouter(prefix="/appointments", tags=["Appointment pages"])

INDEX = router.prefix


def _form_options(db: Session) -> dict:
    return {
        "staff": [member for member in StaffService(db).list_staff() if member.is_active],
        "statuses": [item.value for item in AppointmentStatus],
    }


@router.get("")
async def appointment_index(
    context: RequestContext = Depends(page_context()),
    db: Session = Depends(get_db)
):
    return view(context, "Appointments", appointments=AppointmentService(db).list_appointments())


@router.get("/create")
async def appointment_create_page(
    context: RequestContext = Depends(page_context()),
    db: Session = Depends(get_db)
):
    return view(context, "New appointment", **_form_options(db))


@router.post("/create")
async def appointment_create(
    request: Request,
    context: RequestContext = Depends(page_context()),
    db: Session = Depends(get_db)
):
    data = await read_form(request, AppointmentCreate, checkbox_fields=())
    AppointmentService(db).create_appointment(data)
    return redirect(INDEX)


@router.get("/{appointment_id}")
async def appointment_details(
    appointment_id: int,
    context: RequestContext = Depends(page_context()),
    db: Session = Depends(get_db)
):
    appointment = AppointmentService(db).get_appointment_response(appointment_id)
    return view(context, "Appointment", appointment=appointment)


@router.get("/{appointment_id}/edit")
async def appointment_edit_page(
    appointment_id: int,
    context: RequestContext = Depends(page_context()),
    db: Session = Depends(get_db)
):
    appointment = AppointmentService(db).get_appointment_response(appointment_id)
    return view(context, "Edit appointment", appointment=appointment, **_form_options(db))


@router.post("/{appointment_id}/edit")
async def appointment_edit(
    appointment_id: int,
    request: Request,
    context: RequestContext = Depends(page_context()),
    db: Session = Depends(get_db)
):
    data = await read_form(request, AppointmentUpdate, checkbox_fields=())
    ensure_matching_id(appointment_id, data.id)
    AppointmentService(db).update_appointment(appointment_id, data)
    return redirect(INDEX)


@router.get("/{appointment_id}/delete")
async def appointment_delete_page(
    appointment_id: int,
    context: RequestContext = Depends(page_context()),
    db: Session = Depends(get_db)
):
    appointment = AppointmentService(db).get_appointment_response(appointment_id)
    return view(context, "Delete appointment", appointment=appointment)


@router.post("/{appointment_id}/delete")
async def appointment_delete(
    appointment_id: int,
    context: RequestContext = Depends(page_context()),
    db: Session = Depends(get_db)
):
    AppointmentService(db).delete_appointment(appointment_id)
    return redirect(INDEX)
