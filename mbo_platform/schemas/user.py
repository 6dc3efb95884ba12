from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from mbo_platform.models.user import UserRole


def _validate_mbo_percentage(value: Optional[int]) -> Optional[int]:
    if value is not None and value % 5 != 0:
        raise ValueError("El porcentaje MBO debe ser múltiplo de 5")
    return value


class UserBase(BaseModel):
    """Schema base para usuario"""

    email: EmailStr = Field(..., description="Email del usuario")
    first_name: str = Field(..., min_length=1, max_length=100, description="Nombre")
    last_name: str = Field(..., min_length=1, max_length=100, description="Apellido")
    tax_code: Optional[str] = Field(None, max_length=16, description="Código fiscal")
    department: Optional[str] = Field(None, max_length=100)
    cost_center: Optional[str] = Field(None, max_length=50)
    manager_id: Optional[int] = Field(None, description="ID del responsable directo")
    ral: Optional[float] = Field(None, ge=0, allow_inf_nan=False, description="Retribución anual bruta")
    mbo_percentage: Optional[int] = Field(None, ge=0, le=100, description="% de la RAL destinado al MBO")
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = None
    postal_code: Optional[str] = Field(None, max_length=10)
    city: Optional[str] = Field(None, max_length=100)

    @field_validator("mbo_percentage")
    @classmethod
    def validate_mbo_percentage(cls, value):
        return _validate_mbo_percentage(value)

    model_config = ConfigDict(from_attributes=True)


class UserCreate(UserBase):
    """Schema para creación de usuario"""

    role: UserRole = Field(UserRole.EMPLOYEE, description="Rol del usuario")
    is_active: bool = True

    model_config = ConfigDict(
        use_enum_values=True,
        json_schema_extra={
            "example": {
                "email": "mario.rossi@acme.it",
                "first_name": "Mario",
                "last_name": "Rossi",
                "department": "Sales",
                "role": "employee",
                "ral": 50000,
                "mbo_percentage": 10,
            }
        },
    )


class UserUpdate(BaseModel):
    """Schema para actualización de usuario"""

    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    tax_code: Optional[str] = Field(None, max_length=16)
    role: Optional[UserRole] = None
    department: Optional[str] = Field(None, max_length=100)
    cost_center: Optional[str] = Field(None, max_length=50)
    manager_id: Optional[int] = None
    ral: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    mbo_percentage: Optional[int] = Field(None, ge=0, le=100)
    is_active: Optional[bool] = None
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = None
    postal_code: Optional[str] = Field(None, max_length=10)
    city: Optional[str] = Field(None, max_length=100)

    @field_validator("mbo_percentage")
    @classmethod
    def validate_mbo_percentage(cls, value):
        return _validate_mbo_percentage(value)

    model_config = ConfigDict(use_enum_values=True)


class UserResponse(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    full_name: str
    tax_code: Optional[str] = None
    role: str
    department: Optional[str] = None
    cost_center: Optional[str] = None
    manager_id: Optional[int] = None
    ral: Optional[float] = None
    mbo_percentage: Optional[int] = None
    mbo_target: float = 0.0
    mbo_regulation_accepted_at: Optional[datetime] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdate(BaseModel):
    """Datos personales que cada usuario puede modificar de su propio perfil."""

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = None
    postal_code: Optional[str] = Field(None, max_length=10)
    city: Optional[str] = Field(None, max_length=100)


class UserSummary(BaseModel):
    id: int
    full_name: str
    email: str
    department: Optional[str] = None
    manager_id: Optional[int] = None
    role: str

    model_config = ConfigDict(from_attributes=True)


class UserFilter(BaseModel):
    role: Optional[UserRole] = None
    department: Optional[str] = None
    is_active: Optional[bool] = None
    search: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True)
