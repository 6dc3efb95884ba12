from typing import Optional

from sqlalchemy import Boolean, Column, DateTime, Integer
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class BaseModel(Base):
    """Columnas de auditoría comunes a todas las tablas."""
    __abstract__ = True

    id = Column(Integer, primary_key=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    is_active = Column(Boolean, default=True, nullable=False)
    created_by = Column(Integer, nullable=True)  # ID del usuario que creó
    updated_by = Column(Integer, nullable=True)  # ID del usuario que actualizó

    def soft_delete(self, user_id: Optional[int] = None) -> None:
        """Baja lógica; el registro se conserva."""
        self.is_active = False
        if user_id is not None:
            self.updated_by = user_id
