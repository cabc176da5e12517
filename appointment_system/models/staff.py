from sqlalchemy import Column, Integer, String, Boolean

from ..core.database import Base


class Staff(Base):
    __tablename__ = "staff"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(100), nullable=False, index=True)

    # Contact information
    email = Column(String(255), nullable=True, index=True)
    phone_number = Column(String(20), nullable=True)
    specialty = Column(String(100), nullable=True)

    # Cleared instead of deleting once appointments reference the row
    is_active = Column(Boolean, nullable=False, default=True)

    def __repr__(self):
        return f"<Staff(id={self.id}, name='{self.full_name}', active={self.is_active})>"
