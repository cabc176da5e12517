from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, UniqueConstraint

from ..core.database import Base


class Menu(Base):
    __tablename__ = "menus"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    url = Column(String(255), nullable=False)
    display_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    def __repr__(self):
        return f"<Menu(id={self.id}, name='{self.name}', order={self.display_order})>"


class MenuLink(Base):
    """One row per (user, menu) assignment."""
    __tablename__ = "user_menus"
    __table_args__ = (
        UniqueConstraint("user_id", "menu_id", name="uq_user_menus_user_menu"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    menu_id = Column(Integer, ForeignKey("menus.id", ondelete="CASCADE"), nullable=False, index=True)

    def __repr__(self):
        return f"<MenuLink(user_id={self.user_id}, menu_id={self.menu_id})>"
