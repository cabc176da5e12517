from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..api.deps import RequestContext, ensure_matching_id, page_context
from ..core.database import get_db
from ..core.security import UserRole
from ..schemas.menu import MenuCreate, MenuResponse, MenuUpdate
from ..services.menu_service import MenuService
from .common import read_form, redirect, view

router = APIRouter(prefix="/menus", tags=["Menu pages"])

INDEX = router.prefix

admin_context = page_context(UserRole.ADMIN.value)


def _menu(db: Session, menu_id: int) -> MenuResponse:
    return MenuResponse.model_validate(MenuService(db).get_menu(menu_id))


@router.get("")
async def menu_index(
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    menus = [MenuResponse.model_validate(menu) for menu in MenuService(db).list_menus()]
    return view(context, "Menus", items=menus)


@router.get("/create")
async def menu_create_page(context: RequestContext = Depends(admin_context)):
    return view(context, "New menu")


@router.post("/create")
async def menu_create(
    request: Request,
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    MenuService(db).create_menu(await read_form(request, MenuCreate))
    return redirect(INDEX)


@router.get("/{menu_id}")
async def menu_details(
    menu_id: int,
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    return view(context, "Menu", item=_menu(db, menu_id))


@router.get("/{menu_id}/edit")
async def menu_edit_page(
    menu_id: int,
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    return view(context, "Edit menu", item=_menu(db, menu_id))


@router.post("/{menu_id}/edit")
async def menu_edit(
    menu_id: int,
    request: Request,
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    data = await read_form(request, MenuUpdate)
    ensure_matching_id(menu_id, data.id)
    MenuService(db).update_menu(menu_id, data)
    return redirect(INDEX)


@router.get("/{menu_id}/delete")
async def menu_delete_page(
    menu_id: int,
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    return view(context, "Delete menu", item=_menu(db, menu_id))


@router.post("/{menu_id}/delete")
async def menu_delete(
    menu_id: int,
    context: RequestContext = Depends(admin_context),
    db: Session = Depends(get_db)
):
    MenuService(db).delete_menu(menu_id)
    return redirect(INDEX)
