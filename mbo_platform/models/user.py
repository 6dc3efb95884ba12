import enum

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from mbo_platform.models.base import BaseModel


class UserRole(str, enum.Enum):
    """Roles de usuario"""
    EMPLOYEE = "employee"
    ADMIN = "admin"


class User(BaseModel):
    """Empleado con datos retributivos y posición en el organigrama."""
    __tablename__ = "users"

    email = Column(String(255), unique=True, index=True, nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    tax_code = Column(String(16), nullable=True)

    role = Column(String(20), nullable=False, default=UserRole.EMPLOYEE.value)
    department = Column(String(100), index=True, nullable=True)
    cost_center = Column(String(50), nullable=True)
    manager_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    ral = Column(Float, nullable=True)  # retribución anual bruta
    mbo_percentage = Column(Integer, nullable=True)  # % de la RAL destinado al MBO
    mbo_regulation_accepted_at = Column(DateTime(timezone=True), nullable=True)

    phone = Column(String(30), nullable=True)
    address = Column(Text, nullable=True)
    postal_code = Column(String(10), nullable=True)
    city = Column(String(100), nullable=True)

    manager = relationship("User", remote_side="User.id", backref="direct_reports")
    assignments = relationship(
        "ObjectiveAssignment",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    document_acceptances = relationship(
        "DocumentAcceptance",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    regulation_acceptance = relationship(
        "MboRegulationAcceptance",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def mbo_target(self) -> float:
        from mbo_platform.services.scoring import calculate_mbo_target
        return calculate_mbo_target(self.ral, self.mbo_percentage)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
