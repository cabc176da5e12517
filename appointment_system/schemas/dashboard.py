from typing import List

from pydantic import BaseModel

from .appointment import AppointmentResponse


class DashboardResponse(BaseModel):
    total_appointments: int = 0
    scheduled_appointments: int = 0
    completed_appointments: int = 0
    cancelled_appointments: int = 0
    today_appointments: int = 0
    total_staff: int = 0
    active_staff: int = 0
    total_users: int = 0
    active_users: int = 0
    pending_approvals: int = 0
    recent_appointments: List[AppointmentResponse] = []
