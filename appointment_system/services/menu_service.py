from typing import List

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ..core.exceptions import EntityNotFound
from ..models.menu import Menu, MenuLink
from ..schemas.menu import MenuCreate


class MenuService:
    def __init__(self, db: Session):
        self.db = db

    def list_menus(self) -> List[Menu]:
        """All menus by display order; ties keep insertion order."""
        return self.db.query(Menu).order_by(Menu.display_order, Menu.id).all()

    def list_active_menus(self) -> List[Menu]:
        return (
            self.db.query(Menu)
            .filter(Menu.is_active.is_(True))
            .order_by(Menu.display_order, Menu.id)
            .all()
        )

    def get_menu(self, menu_id: int) -> Menu:
        menu = self.db.query(Menu).filter(Menu.id == menu_id).first()
        if not menu:
            raise EntityNotFound("Menu not found.")
        return menu

    def create_menu(self, data: MenuCreate) -> Menu:
        menu = Menu(
            name=data.name,
            url=data.url,
            display_order=data.display_order,
            is_active=data.is_active,
        )
        self.db.add(menu)
        self.db.commit()
        self.db.refresh(menu)
        return menu

    def update_menu(self, menu_id: int, data: MenuCreate) -> Menu:
        menu = self.get_menu(menu_id)
        menu.name = data.name
        menu.url = data.url
        menu.display_order = data.display_order
        menu.is_active = data.is_active
        try:
            self.db.commit()
        except StaleDataError:
            self.db.rollback()
            raise EntityNotFound("Menu no longer exists.")
        self.db.refresh(menu)
        return menu

    def delete_menu(self, menu_id: int) -> None:
        menu = self.get_menu(menu_id)
        self.db.query(MenuLink).filter(MenuLink.menu_id == menu.id).delete(synchronize_session=False)
        self.db.delete(menu)
        self.db.commit()

    def resolve_for_user(self, user_id: int) -> List[Menu]:
        """Return the active menus assigned to a user, in navigation order.

        Inactive menus are dropped even when assigned. Equal display orders
        fall back to the menu's insertion order, and a user without any
        assignment gets an empty list.
        """
        return (
            self.db.query(Menu)
            .join(MenuLink, MenuLink.menu_id == Menu.id)
            .filter(MenuLink.user_id == user_id, Menu.is_active.is_(True))
            .order_by(Menu.display_order, Menu.id)
            .all()
        )

    def menu_ids_for_user(self, user_id: int) -> List[int]:
        rows = self.db.query(MenuLink.menu_id).filter(MenuLink.user_id == user_id).all()
        return [menu_id for (menu_id,) in rows]

    def get_by_name(self, name: str):
        return self.db.query(Menu).filter(Menu.name == name).first()
