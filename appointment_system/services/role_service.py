from collections import defaultdict
from typing import Dict, Iterable, List

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ..core.exceptions import DuplicateValue, EntityNotFound
from ..models.role import Role, RoleLink
from ..schemas.role import RoleCreate, RoleResponse

ROLE_NAME_TAKEN = "A role with this name already exists."


class RoleService:
    def __init__(self, db: Session):
        self.db = db

    def list_roles(self) -> List[RoleResponse]:
        counts = dict(
            self.db.query(RoleLink.role_id, func.count(RoleLink.id))
            .group_by(RoleLink.role_id)
            .all()
        )
        roles = self.db.query(Role).order_by(Role.name).all()
        return [self.to_response(role, counts.get(role.id, 0)) for role in roles]

    def list_active_roles(self) -> List[Role]:
        return self.db.query(Role).filter(Role.is_active.is_(True)).order_by(Role.name).all()

    def get_role(self, role_id: int) -> Role:
        role = self.db.query(Role).filter(Role.id == role_id).first()
        if not role:
            raise EntityNotFound("Role not found.")
        return role

    def get_role_response(self, role_id: int) -> RoleResponse:
        role = self.get_role(role_id)
        return self.to_response(role, self._user_count(role.id))

    def create_role(self, data: RoleCreate) -> RoleResponse:
        self._ensure_unique_name(data.name)

        role = Role(name=data.name, description=data.description, is_active=data.is_active)
        self.db.add(role)
        self._commit_unique()
        self.db.refresh(role)
        return self.to_response(role, 0)

    def update_role(self, role_id: int, data: RoleCreate) -> RoleResponse:
        role = self.get_role(role_id)
        self._ensure_unique_name(data.name, exclude_id=role.id)

        role.name = data.name
        role.description = data.description
        role.is_active = data.is_active
        self._commit_unique()
        self.db.refresh(role)
        return self.to_response(role, self._user_count(role.id))

    def delete_role(self, role_id: int) -> None:
        role = self.get_role(role_id)
        self.db.query(RoleLink).filter(RoleLink.role_id == role.id).delete(synchronize_session=False)
        self.db.delete(role)
        self.db.commit()

    def get_by_name(self, name: str):
        return self.db.query(Role).filter(Role.name == name).first()

    def role_names_for_user(self, user_id: int) -> List[str]:
        return self.role_names_for_users([user_id]).get(user_id, [])

    def role_names_for_users(self, user_ids: Iterable[int]) -> Dict[int, List[str]]:
        """Map each user id to the names of its linked roles."""
        ids = list(user_ids)
        names: Dict[int, List[str]] = defaultdict(list)
        if not ids:
            return names
        rows = (
            self.db.query(RoleLink.user_id, Role.name)
            .join(Role, Role.id == RoleLink.role_id)
            .filter(RoleLink.user_id.in_(ids))
            .order_by(Role.name)
            .all()
        )
        for user_id, name in rows:
            names[user_id].append(name)
        return names

    def role_ids_for_user(self, user_id: int) -> List[int]:
        rows = self.db.query(RoleLink.role_id).filter(RoleLink.user_id == user_id).all()
        return [role_id for (role_id,) in rows]

    @staticmethod
    def to_response(role: Role, user_count: int) -> RoleResponse:
        return RoleResponse(
            id=role.id,
            name=role.name,
            description=role.description,
            is_active=role.is_active,
            user_count=user_count,
        )

    def _user_count(self, role_id: int) -> int:
        return self.db.query(RoleLink).filter(RoleLink.role_id == role_id).count()

    def _ensure_unique_name(self, name: str, exclude_id: int = None) -> None:
        query = self.db.query(Role).filter(Role.name == name)
        if exclude_id is not None:
            query = query.filter(Role.id != exclude_id)
        if query.first():
            raise DuplicateValue("name", ROLE_NAME_TAKEN)

    def _commit_unique(self) -> None:
        # Another request may insert the same name between check and commit
        try:
            self.db.commit()
        except StaleDataError:
            self.db.rollback()
            raise EntityNotFound("Role no longer exists.")
        except IntegrityError:
            self.db.rollback()
            raise DuplicateValue("name", ROLE_NAME_TAKEN)
