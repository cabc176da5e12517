import logging
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ..core.exceptions import EntityNotFound
from ..models.appointment import Appointment
from ..models.staff import Staff
from ..schemas.staff import StaffCreate, StaffResponse

logger = logging.getLogger(__name__)


class StaffService:
    def __init__(self, db: Session):
        self.db = db

    def list_staff(self) -> List[StaffResponse]:
        counts = dict(
            self.db.query(Appointment.staff_id, func.count(Appointment.id))
            .group_by(Appointment.staff_id)
            .all()
        )
        staff = self.db.query(Staff).order_by(Staff.full_name, Staff.id).all()
        return [self.to_response(member, counts.get(member.id, 0)) for member in staff]

    def get_staff(self, staff_id: int) -> Staff:
        staff = self.db.query(Staff).filter(Staff.id == staff_id).first()
        if not staff:
            raise EntityNotFound("Staff member not found.")
        return staff

    def get_staff_response(self, staff_id: int) -> StaffResponse:
        staff = self.get_staff(staff_id)
        return self.to_response(staff, self.appointment_count(staff.id))

    def create_staff(self, data: StaffCreate) -> StaffResponse:
        staff = Staff(
            full_name=data.full_name,
            email=data.email,
            phone_number=data.phone_number,
            specialty=data.specialty,
            is_active=data.is_active,
        )
        self.db.add(staff)
        self.db.commit()
        self.db.refresh(staff)
        return self.to_response(staff, 0)

    def update_staff(self, staff_id: int, data: StaffCreate) -> StaffResponse:
        staff = self.get_staff(staff_id)
        staff.full_name = data.full_name
        staff.email = data.email
        staff.phone_number = data.phone_number
        staff.specialty = data.specialty
        staff.is_active = data.is_active
        try:
            self.db.commit()
        except StaleDataError:
            # Deleted by another request while this edit was in flight
            self.db.rollback()
            raise EntityNotFound("Staff member no longer exists.")
        self.db.refresh(staff)
        return self.to_response(staff, self.appointment_count(staff.id))

    def delete_staff(self, staff_id: int) -> bool:
        """Delete a staff member, or deactivate it when appointments reference it.

        Returns True when the row was kept and only deactivated.
        """
        staff = self.get_staff(staff_id)
        if self.appointment_count(staff.id):
            staff.is_active = False
            self.db.commit()
            logger.info(f"Staff {staff.id} deactivated instead of deleted (has appointments)")
            return True

        self.db.delete(staff)
        self.db.commit()
        return False

    def appointment_count(self, staff_id: int) -> int:
        return self.db.query(Appointment).filter(Appointment.staff_id == staff_id).count()

    @staticmethod
    def to_response(staff: Staff, appointment_count: int) -> StaffResponse:
        return StaffResponse(
            id=staff.id,
            full_name=staff.full_name,
            email=staff.email,
            phone_number=staff.phone_number,
            specialty=staff.specialty,
            is_active=staff.is_active,
            appointment_count=appointment_count,
        )
