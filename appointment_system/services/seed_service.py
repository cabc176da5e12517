"""
Initial data for an empty database.

Each table is seeded only when it has no rows, so running the routine on
every startup is safe.
"""

import logging

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.security import UserRole, get_password_hash
from ..models.menu import Menu, MenuLink
from ..models.role import Role, RoleLink
from ..models.user import User

logger = logging.getLogger(__name__)

DEFAULT_ROLES = [
    (UserRole.ADMIN.value, "Full access to every page"),
    (UserRole.STAFF.value, "Day-to-day appointment handling"),
]

DEFAULT_MENUS = [
    ("Dashboard", "/dashboard", 1),
    ("Appointments", "/appointments", 2),
    ("Staff", "/staffs", 3),
    ("Users", "/users", 4),
    ("Roles", "/roles", 5),
    ("Menus", "/menus", 6),
]


def seed(db: Session) -> bool:
    """Create the default roles, menus and accounts. Returns True if anything was added."""
    changed = False

    if not db.query(Role.id).first():
        for name, description in DEFAULT_ROLES:
            db.add(Role(name=name, description=description, is_active=True))
        db.commit()
        changed = True

    if not db.query(Menu.id).first():
        for name, url, order in DEFAULT_MENUS:
            db.add(Menu(name=name, url=url, display_order=order, is_active=True))
        db.commit()
        changed = True

    if not db.query(User.id).first():
        roles = {role.name: role.id for role in db.query(Role).all()}
        menus = {menu.name: menu.id for menu in db.query(Menu).all()}

        admin = _add_user(db, "Administrator", settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD)
        staff = _add_user(db, "Staff User", settings.STAFF_USERNAME, settings.STAFF_PASSWORD)

        if UserRole.ADMIN.value in roles:
            db.add(RoleLink(user_id=admin.id, role_id=roles[UserRole.ADMIN.value]))
        for menu_id in menus.values():
            db.add(MenuLink(user_id=admin.id, menu_id=menu_id))

        if UserRole.STAFF.value in roles:
            db.add(RoleLink(user_id=staff.id, role_id=roles[UserRole.STAFF.value]))
        if "Appointments" in menus:
            db.add(MenuLink(user_id=staff.id, menu_id=menus["Appointments"]))

        db.commit()
        changed = True

    if changed:
        logger.info("Seed data created")
    return changed


def _add_user(db: Session, full_name: str, username: str, password: str) -> User:
    user = User(
        full_name=full_name,
        username=username,
        password_hash=get_password_hash(password),
        is_active=True,
        is_approved=True,
    )
    db.add(user)
    db.flush()
    return user
