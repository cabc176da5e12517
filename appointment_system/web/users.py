from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..api.deps import RequestContext, ensure_matching_id, page_context
from ..core.database import get_db
from ..core.security import UserRole
from ..schemas.user import UserCreate, UserUpdate
from ..services.user_service import UserService
from .common import read_form, redirect, view

router = APIRouter(prefix="/users", tags=["User pages"])

INDEX = router.prefix
ASSIGNMENTS = ("role_ids", "menu_ids")

admin_context = page_context(UserRole.ADMIN.value)


def _form_view(context: RequestContext, service: UserService, title: str, user_id: int = None) -> dict:
    roles, menus = service.assignment_options(user_id)
    user = service.get_user_response(user_id) if user_id else None
    return view(context, title, account=user, role_options=roles, menu_options=menus)


@router.get("")
async def user_index(
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    users = UserService(db).list_users()
    return view(
        context,
        "Users",
        users=users,
        pending_count=sum(1 for user in users if not user.is_approved),
    )


@router.get("/create")
async def user_create_page(
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    return _form_view(context, UserService(db), "New user")


@router.post("/create")
async def user_create(
    request: Request,
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    data = await read_form(request, UserCreate, list_fields=ASSIGNMENTS)
    UserService(db).create_user(data)
    return redirect(INDEX)


@router.get("/{user_id}")
async def user_details(
    user_id: int,
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    return view(context, "User", account=UserService(db).get_user_response(user_id))


@router.get("/{user_id}/edit")
async def user_edit_page(
    user_id: int,
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    """Edit form with every active role and menu as a checkbox."""
    return _form_view(context, UserService(db), "Edit user", user_id)


@router.post("/{user_id}/edit")
async def user_edit(
    user_id: int,
    request: Request,
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    data = await read_form(request, UserUpdate, list_fields=ASSIGNMENTS)
    ensure_matching_id(user_id, data.id)
    UserService(db).update_user(user_id, data)
    return redirect(INDEX)


@router.get("/{user_id}/delete")
async def user_delete_page(
    user_id: int,
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    return view(context, "Delete user", account=UserService(db).get_user_response(user_id))


@router.post("/{user_id}/delete")
async def user_delete(
    user_id: int,
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    UserService(db).delete_user(user_id)
    return redirect(INDEX)


@router.post("/{user_id}/approve")
async def user_approve(
    user_id: int,
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    UserService(db).approve_user(user_id)
    return redirect(INDEX)


@router.post("/{user_id}/reject")
async def user_reject(
    user_id: int,
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    UserService(db).reject_user(user_id)
    return redirect(INDEX)
