from .user import User
from .role import Role, RoleLink
from .menu import Menu, MenuLink
from .staff import Staff
from .appointment import Appointment, AppointmentStatus

__all__ = [
    "User",
    "Role",
    "RoleLink",
    "Menu",
    "MenuLink",
    "Staff",
    "Appointment",
    "AppointmentStatus",
]
