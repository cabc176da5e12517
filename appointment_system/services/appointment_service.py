from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ..core.exceptions import EntityNotFound, ValidationFailed
from ..models.appointment import Appointment
from ..models.staff import Staff
from ..schemas.appointment import AppointmentCreate, AppointmentResponse


class AppointmentService:
    def __init__(self, db: Session):
        self.db = db

    def _with_staff_name(self):
        return self.db.query(Appointment, Staff.full_name).outerjoin(
            Staff, Staff.id == Appointment.staff_id
        )

    def list_appointments(self) -> List[AppointmentResponse]:
        """All appointments, newest start time first."""
        rows = (
            self._with_staff_name()
            .order_by(Appointment.start_time.desc(), Appointment.id.desc())
            .all()
        )
        return [self.to_response(appointment, staff_name) for appointment, staff_name in rows]

    def recent_appointments(self, limit: int = 5) -> List[AppointmentResponse]:
        rows = (
            self._with_staff_name()
            .order_by(Appointment.created_at.desc(), Appointment.id.desc())
            .limit(limit)
            .all()
        )
        return [self.to_response(appointment, staff_name) for appointment, staff_name in rows]

    def get_appointment(self, appointment_id: int) -> Appointment:
        appointment = self.db.query(Appointment).filter(Appointment.id == appointment_id).first()
        if not appointment:
            raise EntityNotFound("Appointment not found.")
        return appointment

    def get_appointment_response(self, appointment_id: int) -> AppointmentResponse:
        appointment = self.get_appointment(appointment_id)
        return self.to_response(appointment, self._staff_name(appointment.staff_id))

    def create_appointment(self, data: AppointmentCreate) -> AppointmentResponse:
        staff = self._require_staff(data.staff_id)

        appointment = Appointment(
            staff_id=staff.id,
            client_name=data.client_name,
            client_email=data.client_email,
            client_phone=data.client_phone,
            start_time=data.start_time,
            duration_minutes=data.duration_minutes,
            status=data.status,
            notes=data.notes,
        )
        self.db.add(appointment)
        self.db.commit()
        self.db.refresh(appointment)
        return self.to_response(appointment, staff.full_name)

    def update_appointment(self, appointment_id: int, data: AppointmentCreate) -> AppointmentResponse:
        appointment = self.get_appointment(appointment_id)
        staff = self._require_staff(data.staff_id)

        appointment.staff_id = staff.id
        appointment.client_name = data.client_name
        appointment.client_email = data.client_email
        appointment.client_phone = data.client_phone
        appointment.start_time = data.start_time
        appointment.duration_minutes = data.duration_minutes
        appointment.status = data.status
        appointment.notes = data.notes
        appointment.updated_at = datetime.now(timezone.utc).replace(tzinfo=None)
        try:
            self.db.commit()
        except StaleDataError:
            self.db.rollback()
            raise EntityNotFound("Appointment no longer exists.")
        self.db.refresh(appointment)
        return self.to_response(appointment, staff.full_name)

    def delete_appointment(self, appointment_id: int) -> None:
        appointment = self.get_appointment(appointment_id)
        self.db.delete(appointment)
        self.db.commit()

    def _require_staff(self, staff_id: int) -> Staff:
        staff = self.db.query(Staff).filter(Staff.id == staff_id).first()
        if not staff:
            raise ValidationFailed(
                "Staff member not found.",
                errors={"staff_id": "Staff member not found."},
            )
        return staff

    def _staff_name(self, staff_id: int) -> str:
        row = self.db.query(Staff.full_name).filter(Staff.id == staff_id).first()
        return row[0] if row else ""

    @staticmethod
    def to_response(appointment: Appointment, staff_name: Optional[str]) -> AppointmentResponse:
        return AppointmentResponse(
            id=appointment.id,
            staff_id=appointment.staff_id,
            staff_name=staff_name or "",
            client_name=appointment.client_name,
            client_email=appointment.client_email,
            client_phone=appointment.client_phone,
            start_time=appointment.start_time,
            duration_minutes=appointment.duration_minutes,
            status=appointment.status,
            notes=appointment.notes,
            created_at=appointment.created_at,
            updated_at=appointment.updated_at,
        )
