from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mbo_platform.core.config import settings
from mbo_platform.models.objective import AssignmentStatus
from mbo_platform.schemas.objective import ObjectiveResponse


def _validate_weight(value: Optional[int]) -> Optional[int]:
    if value is not None and value % 5 != 0:
        raise ValueError("El peso debe ser múltiplo de 5")
    return value


class AssignmentCreate(BaseModel):
    """Asigna una entrada del diccionario a un usuario creando una instancia nueva."""

    user_id: int
    objective_id: int = Field(..., description="ID de la entrada del diccionario")
    weight: int = Field(default_factory=lambda: settings.DEFAULT_ASSIGNMENT_WEIGHT, ge=5, le=100)
    status: AssignmentStatus = AssignmentStatus.ASSIGNED
    progress: int = Field(0, ge=0, le=100)
    deadline: Optional[datetime] = None

    @field_validator("weight")
    @classmethod
    def validate_weight(cls, value):
        return _validate_weight(value)

    model_config = ConfigDict(use_enum_values=True)


class AssignmentUpdate(BaseModel):
    status: Optional[AssignmentStatus] = None
    progress: Optional[int] = Field(None, ge=0, le=100)
    weight: Optional[int] = Field(None, ge=5, le=100)
    user_id: Optional[int] = None
    objective_id: Optional[int] = Field(None, description="ID de la instancia de objetivo")

    @field_validator("weight")
    @classmethod
    def validate_weight(cls, value):
        return _validate_weight(value)

    model_config = ConfigDict(use_enum_values=True)


class BulkAssignmentIn(BaseModel):
    department: str = Field(..., min_length=1, description='Departamento o "all"')
    objective_id: int = Field(..., description="ID de la entrada del diccionario")
    weight: int = Field(..., ge=5, le=100)
    deadline: Optional[datetime] = None

    @field_validator("weight")
    @classmethod
    def validate_weight(cls, value):
        return _validate_weight(value)


class AssignmentResponse(BaseModel):
    id: int
    user_id: int
    objective_id: int
    weight: int
    status: str
    progress: int
    assigned_at: Optional[datetime] = None
    actual_value: Optional[float] = None
    qualitative_result: Optional[str] = None
    multiplier: Optional[float] = None
    reported_at: Optional[datetime] = None
    objective: Optional[ObjectiveResponse] = None
    economic_value: Optional[float] = None
    achieved_value: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)


class BatchFailure(BaseModel):
    user_id: int
    user_name: str
    reason: str


class BatchResult(BaseModel):
    objective_id: Optional[int] = None
    succeeded: List[AssignmentResponse] = []
    failed: List[BatchFailure] = []
    total_users: int = 0
    assigned_count: int = 0
