from typing import List

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from ...api.deps import ensure_matching_id, require_role
from ...core.database import get_db
from ...core.security import UserRole
from ...schemas.common import MessageResponse
from ...schemas.user import UserCreate, UserResponse, UserUpdate
from ...services.user_service import UserService

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    dependencies=[Depends(require_role(UserRole.ADMIN.value))],
)


@router.get("", response_model=List[UserResponse])
async def list_users(db: Session = Depends(get_db)):
    return UserService(db).list_users()


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, db: Session = Depends(get_db)):
    return UserService(db).get_user_response(user_id)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: Request,
    data: UserCreate,
    response: Response,
    db: Session = Depends(get_db)
):
    service = UserService(db)
    user = service.create_user(data)
    response.headers["Location"] = str(request.url_for("get_user", user_id=user.id))
    return service.get_user_response(user.id)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(user_id: int, data: UserUpdate, db: Session = Depends(get_db)):
    """Update a user; the role and menu lists replace the current assignments."""
    ensure_matching_id(user_id, data.id)
    service = UserService(db)
    user = service.update_user(user_id, data)
    return service.get_user_response(user.id)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: int, db: Session = Depends(get_db)):
    UserService(db).delete_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{user_id}/approve", response_model=MessageResponse)
async def approve_user(user_id: int, db: Session = Depends(get_db)):
    user = UserService(db).approve_user(user_id)
    return {"message": f"User '{user.username}' approved."}


@router.post("/{user_id}/reject", response_model=MessageResponse)
async def reject_user(user_id: int, db: Session = Depends(get_db)):
    UserService(db).reject_user(user_id)
    return {"message": "Registration rejected."}
