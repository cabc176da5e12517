from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from ..models.appointment import Appointment, AppointmentStatus
from ..models.staff import Staff
from ..models.user import User
from ..schemas.dashboard import DashboardResponse
from .appointment_service import AppointmentService


class DashboardService:
    def __init__(self, db: Session):
        self.db = db

    def summary(self, now: datetime = None) -> DashboardResponse:
        now = now or datetime.now(timezone.utc).replace(tzinfo=None)
        today = datetime(now.year, now.month, now.day)
        tomorrow = today + timedelta(days=1)

        appointments = self.db.query(Appointment)
        return DashboardResponse(
            total_appointments=appointments.count(),
            scheduled_appointments=appointments.filter(Appointment.status == AppointmentStatus.SCHEDULED).count(),
            completed_appointments=appointments.filter(Appointment.status == AppointmentStatus.COMPLETED).count(),
            cancelled_appointments=appointments.filter(Appointment.status == AppointmentStatus.CANCELLED).count(),
            today_appointments=appointments.filter(
                Appointment.start_time >= today, Appointment.start_time < tomorrow
            ).count(),
            total_staff=self.db.query(Staff).count(),
            active_staff=self.db.query(Staff).filter(Staff.is_active.is_(True)).count(),
            total_users=self.db.query(User).count(),
            active_users=self.db.query(User).filter(User.is_active.is_(True)).count(),
            pending_approvals=self.db.query(User).filter(User.is_approved.is_(False)).count(),
            recent_appointments=AppointmentService(self.db).recent_appointments(limit=5),
        )
