from typing import List

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from ...api.deps import ensure_matching_id, get_current_identity
from ...core.database import get_db
from ...schemas.appointment import AppointmentCreate, AppointmentResponse, AppointmentUpdate
from ...services.appointment_service import AppointmentService

router = APIRouter(
    prefix="/appointments",
    tags=["Appointments"],
    dependencies=[Depends(get_current_identity)],
)


@router.get("", response_model=List[AppointmentResponse])
async def list_appointments(db: Session = Depends(get_db)):
    return AppointmentService(db).list_appointments()


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(appointment_id: int, db: Session = Depends(get_db)):
    return AppointmentService(db).get_appointment_response(appointment_id)


@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    request: Request,
    data: AppointmentCreate,
    response: Response,
    db: Session = Depends(get_db)
):
    appointment = AppointmentService(db).create_appointment(data)
    response.headers["Location"] = str(request.url_for("get_appointment", appointment_id=appointment.id))
    return appointment


@router.put("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: int,
    data: AppointmentUpdate,
    db: Session = Depends(get_db)
):
    ensure_matching_id(appointment_id, data.id)
    return AppointmentService(db).update_appointment(appointment_id, data)


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_appointment(appointment_id: int, db: Session = Depends(get_db)):
    AppointmentService(db).delete_appointment(appointment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
