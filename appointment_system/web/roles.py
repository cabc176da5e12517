from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..api.deps import RequestContext, ensure_matching_id, page_context
from ..core.database import get_db
from ..core.security import UserRole
from ..schemas.role import RoleCreate, RoleUpdate
from ..services.role_service import RoleService
from .common import read_form, redirect, view

router = APIRouter(prefix="/roles", tags=["Role pages"])

INDEX = router.prefix

admin_context = page_context(UserRole.ADMIN.value)


@router.get("")
async def role_index(
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    return view(context, "Roles", roles=RoleService(db).list_roles())


@router.get("/create")
async def role_create_page(context: RequestContext = Depends(admin_context)):
    return view(context, "New role")


@router.post("/create")
async def role_create(
    request: Request,
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    RoleService(db).create_role(await read_form(request, RoleCreate))
    return redirect(INDEX)


@router.get("/{role_id}")
async def role_details(
    role_id: int,
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    return view(context, "Role", role=RoleService(db).get_role_response(role_id))


@router.get("/{role_id}/edit")
async def role_edit_page(
    role_id: int,
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    return view(context, "Edit role", role=RoleService(db).get_role_response(role_id))


@router.post("/{role_id}/edit")
async def role_edit(
    role_id: int,
    request: Request,
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    data = await read_form(request, RoleUpdate)
    ensure_matching_id(role_id, data.id)
    RoleService(db).update_role(role_id, data)
    return redirect(INDEX)


@router.get("/{role_id}/delete")
async def role_delete_page(
    role_id: int,
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    return view(context, "Delete role", role=RoleService(db).get_role_response(role_id))


@router.post("/{role_id}/delete")
async def role_delete(
    role_id: int,
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    RoleService(db).delete_role(role_id)
    return redirect(INDEX)
