import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import (
    AccountDisabled, DuplicateValue, InvalidCredentials, PendingApproval
)
from ..core.security import (
    Identity, generate_unusable_password, get_password_hash, verify_password
)
from ..models.menu import MenuLink
from ..models.role import RoleLink
from ..models.user import User
from ..schemas.auth import OAuthUserInfo, UserRegister
from .menu_service import MenuService
from .role_service import RoleService
from .user_service import USERNAME_TAKEN

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session):
        self.db = db
        self.roles = RoleService(db)
        self.menus = MenuService(db)

    def authenticate(self, username: str, password: str) -> Identity:
        """Check a username and password and return the caller's identity.

        Only active accounts are considered. Unknown users and wrong passwords
        fail with the same error; correct credentials on an account that is
        not yet approved fail with PendingApproval.
        """
        user = self.db.query(User).filter(
            User.username == username,
            User.is_active.is_(True)
        ).first()

        if not user or not verify_password(password, user.password_hash):
            logger.warning(f"Failed login attempt for username '{username}'")
            raise InvalidCredentials()

        if not user.is_approved:
            logger.info(f"Login refused for unapproved user '{username}'")
            raise PendingApproval()

        return self.build_identity(user)

    def build_identity(self, user: User) -> Identity:
        return Identity(
            user_id=user.id,
            username=user.username,
            full_name=user.full_name,
            roles=self.roles.role_names_for_user(user.id),
        )

    def register(self, data: UserRegister) -> User:
        """Self-registration. The account waits for an administrator."""
        if self.db.query(User.id).filter(User.username == data.username).first():
            raise DuplicateValue("username", USERNAME_TAKEN)

        user = User(
            full_name=data.full_name,
            username=data.username,
            email=data.email,
            password_hash=get_password_hash(data.password),
            is_active=True,
            is_approved=False,
        )
        self._add_with_defaults(user)
        logger.info(f"User '{user.username}' registered, awaiting approval")
        return user

    def link_external_identity(self, info: OAuthUserInfo) -> User:
        """Match a third-party identity to a local account by email.

        A known email reuses that account; an unknown one provisions a new
        unapproved account. Either way the caller is only signed in when the
        account is active and approved.
        """
        email = str(info.email)
        user = self.db.query(User).filter(User.email == email).order_by(User.id).first()

        if user:
            if not user.is_active:
                raise AccountDisabled()
            if not user.is_approved:
                raise PendingApproval()
            return user

        user = User(
            full_name=(info.name or email.split("@")[0])[:100],
            username=self.derive_username(email),
            email=email,
            password_hash=get_password_hash(generate_unusable_password()),
            is_active=True,
            is_approved=False,
        )
        self._add_with_defaults(user)
        logger.info(f"Provisioned '{user.username}' from {info.provider} sign-in, awaiting approval")
        raise PendingApproval()

    def derive_username(self, email: str) -> str:
        """Email local part, suffixed 1, 2, ... until it is free."""
        base = email.split("@")[0][:45] or "user"
        candidate = base
        suffix = 0
        while self.db.query(User.id).filter(User.username == candidate).first():
            suffix += 1
            candidate = f"{base}{suffix}"
        return candidate

    def _add_with_defaults(self, user: User) -> None:
        role = self.roles.get_by_name(settings.DEFAULT_ROLE_NAME)
        menu = self.menus.get_by_name(settings.DEFAULT_MENU_NAME)

        self.db.add(user)
        try:
            self.db.flush()
            if role:
                self.db.add(RoleLink(user_id=user.id, role_id=role.id))
            if menu:
                self.db.add(MenuLink(user_id=user.id, menu_id=menu.id))
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateValue("username", USERNAME_TAKEN)
        self.db.refresh(user)
