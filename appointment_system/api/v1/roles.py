from typing import List

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from ...api.deps import ensure_matching_id, require_role
from ...core.database import get_db
from ...core.security import UserRole
from ...schemas.role import RoleCreate, RoleResponse, RoleUpdate
from ...services.role_service import RoleService

router = APIRouter(
    prefix="/roles",
    tags=["Roles"],
    dependencies=[Depends(require_role(UserRole.ADMIN.value))],
)


@router.get("", response_model=List[RoleResponse])
async def list_roles(db: Session = Depends(get_db)):
    return RoleService(db).list_roles()


@router.get("/{role_id}", response_model=RoleResponse)
async def get_role(role_id: int, db: Session = Depends(get_db)):
    return RoleService(db).get_role_response(role_id)


@router.post("", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def create_role(
    request: Request,
    data: RoleCreate,
    response: Response,
    db: Session = Depends(get_db)
):
    role = RoleService(db).create_role(data)
    response.headers["Location"] = str(request.url_for("get_role", role_id=role.id))
    return role


@router.put("/{role_id}", response_model=RoleResponse)
async def update_role(role_id: int, data: RoleUpdate, db: Session = Depends(get_db)):
    ensure_matching_id(role_id, data.id)
    return RoleService(db).update_role(role_id, data)


@router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role(role_id: int, db: Session = Depends(get_db)):
    RoleService(db).delete_role(role_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
