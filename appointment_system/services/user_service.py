import logging
from typing import Iterable, List, Type

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ..core.exceptions import DuplicateValue, EntityNotFound
from ..core.security import get_password_hash
from ..models.menu import Menu, MenuLink
from ..models.role import Role, RoleLink
from ..models.user import User
from ..schemas.user import AssignmentOption, UserCreate, UserResponse, UserUpdate
from .menu_service import MenuService
from .role_service import RoleService

logger = logging.getLogger(__name__)

USERNAME_TAKEN = "This username is already taken."


class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.roles = RoleService(db)
        self.menus = MenuService(db)

    def list_users(self) -> List[UserResponse]:
        """Users awaiting approval first, then alphabetical by full name."""
        users = (
            self.db.query(User)
            .order_by(User.is_approved.asc(), User.full_name.asc(), User.id.asc())
            .all()
        )
        return self.to_responses(users)

    def get_user(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise EntityNotFound("User not found.")
        return user

    def get_user_response(self, user_id: int) -> UserResponse:
        return self.to_responses([self.get_user(user_id)])[0]

    def username_exists(self, username: str, exclude_id: int = None) -> bool:
        query = self.db.query(User.id).filter(User.username == username)
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        return query.first() is not None

    def create_user(self, data: UserCreate, approved: bool = True) -> User:
        """Create an account with its role and menu selection.

        Accounts created by an administrator are approved immediately.
        """
        if self.username_exists(data.username):
            raise DuplicateValue("username", USERNAME_TAKEN)

        user = User(
            full_name=data.full_name,
            username=data.username,
            email=data.email,
            password_hash=get_password_hash(data.password),
            is_active=data.is_active,
            is_approved=approved,
        )
        self.db.add(user)
        try:
            self.db.flush()
            self.replace_assignments(user.id, data.role_ids, data.menu_ids)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            if self.username_exists(data.username):
                raise DuplicateValue("username", USERNAME_TAKEN)
            raise

        self.db.refresh(user)
        return user

    def update_user(self, user_id: int, data: UserUpdate) -> User:
        user = self.get_user(user_id)
        if self.username_exists(data.username, exclude_id=user.id):
            raise DuplicateValue("username", USERNAME_TAKEN)

        user.full_name = data.full_name
        user.username = data.username
        user.email = data.email
        user.is_active = data.is_active
        if data.password:
            user.password_hash = get_password_hash(data.password)

        try:
            self.replace_assignments(user.id, data.role_ids, data.menu_ids)
            self.db.commit()
        except StaleDataError:
            # The row was deleted by someone else while this edit was in flight
            self.db.rollback()
            raise EntityNotFound("User no longer exists.")
        except IntegrityError:
            self.db.rollback()
            if not self.db.query(User.id).filter(User.id == user_id).first():
                raise EntityNotFound("User no longer exists.")
            if self.username_exists(data.username, exclude_id=user_id):
                raise DuplicateValue("username", USERNAME_TAKEN)
            raise

        self.db.refresh(user)
        return user

    def replace_assignments(self, user_id: int, role_ids: Iterable[int], menu_ids: Iterable[int]) -> None:
        """Replace every role and menu link of a user with the given selection.

        Existing links are deleted and one row is inserted per distinct
        selected id that names an existing role or menu. The caller commits.
        """
        self.db.query(RoleLink).filter(RoleLink.user_id == user_id).delete(synchronize_session=False)
        self.db.query(MenuLink).filter(MenuLink.user_id == user_id).delete(synchronize_session=False)

        for role_id in self._existing_ids(Role, role_ids):
            self.db.add(RoleLink(user_id=user_id, role_id=role_id))
        for menu_id in self._existing_ids(Menu, menu_ids):
            self.db.add(MenuLink(user_id=user_id, menu_id=menu_id))

    def approve_user(self, user_id: int) -> User:
        user = self.get_user(user_id)
        user.is_approved = True
        self.db.commit()
        logger.info(f"User '{user.username}' approved")
        return user

    def delete_user(self, user_id: int) -> None:
        user = self.get_user(user_id)
        self.db.query(RoleLink).filter(RoleLink.user_id == user.id).delete(synchronize_session=False)
        self.db.query(MenuLink).filter(MenuLink.user_id == user.id).delete(synchronize_session=False)
        self.db.delete(user)
        self.db.commit()

    # A rejected registration is removed outright
    reject_user = delete_user

    def assignment_options(self, user_id: int = None):
        """Checkbox options for the edit form, with current links selected."""
        role_ids = set(self.roles.role_ids_for_user(user_id)) if user_id else set()
        menu_ids = set(self.menus.menu_ids_for_user(user_id)) if user_id else set()
        roles = [
            AssignmentOption(id=role.id, name=role.name, selected=role.id in role_ids)
            for role in self.roles.list_active_roles()
        ]
        menus = [
            AssignmentOption(id=menu.id, name=menu.name, selected=menu.id in menu_ids)
            for menu in self.menus.list_active_menus()
        ]
        return roles, menus

    def to_responses(self, users: List[User]) -> List[UserResponse]:
        ids = [user.id for user in users]
        role_names = self.roles.role_names_for_users(ids)
        menu_names = self._menu_names_for_users(ids)
        return [
            UserResponse(
                id=user.id,
                full_name=user.full_name,
                username=user.username,
                email=user.email,
                is_active=user.is_active,
                is_approved=user.is_approved,
                created_at=user.created_at,
                roles=role_names.get(user.id, []),
                menus=menu_names.get(user.id, []),
            )
            for user in users
        ]

    def _menu_names_for_users(self, user_ids: List[int]):
        names = {}
        if not user_ids:
            return names
        rows = (
            self.db.query(MenuLink.user_id, Menu.name)
            .join(Menu, Menu.id == MenuLink.menu_id)
            .filter(MenuLink.user_id.in_(user_ids))
            .order_by(Menu.display_order, Menu.id)
            .all()
        )
        for user_id, name in rows:
            names.setdefault(user_id, []).append(name)
        return names

    def _existing_ids(self, model: Type, ids: Iterable[int]) -> List[int]:
        wanted = list(dict.fromkeys(ids))
        if not wanted:
            return []
        found = {row_id for (row_id,) in self.db.query(model.id).filter(model.id.in_(wanted)).all()}
        return [row_id for row_id in wanted if row_id in found]
