from typing import List

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from ...api.deps import RequestContext, ensure_matching_id, page_context, require_role
from ...core.database import get_db
from ...core.security import UserRole
from ...schemas.menu import MenuCreate, MenuResponse, MenuUpdate
from ...services.menu_service import MenuService

router = APIRouter(prefix="/menus", tags=["Menus"])

admin_only = [Depends(require_role(UserRole.ADMIN.value))]


@router.get("/mine", response_model=List[MenuResponse])
async def my_menus(context: RequestContext = Depends(page_context())):
    """Navigation entries of the current caller."""
    return context.menus


@router.get("", response_model=List[MenuResponse], dependencies=admin_only)
async def list_menus(db: Session = Depends(get_db)):
    return MenuService(db).list_menus()


@router.get("/{menu_id}", response_model=MenuResponse, dependencies=admin_only)
async def get_menu(menu_id: int, db: Session = Depends(get_db)):
    return MenuService(db).get_menu(menu_id)


@router.post(
    "",
    response_model=MenuResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=admin_only,
)
async def create_menu(
    request: Request,
    data: MenuCreate,
    response: Response,
    db: Session = Depends(get_db)
):
    menu = MenuService(db).create_menu(data)
    response.headers["Location"] = str(request.url_for("get_menu", menu_id=menu.id))
    return menu


@router.put("/{menu_id}", response_model=MenuResponse, dependencies=admin_only)
async def update_menu(menu_id: int, data: MenuUpdate, db: Session = Depends(get_db)):
    ensure_matching_id(menu_id, data.id)
    return MenuService(db).update_menu(menu_id, data)


@router.delete("/{menu_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=admin_only)
async def delete_menu(menu_id: int, db: Session = Depends(get_db)):
    MenuService(db).delete_menu(menu_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
