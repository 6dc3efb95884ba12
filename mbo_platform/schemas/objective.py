from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from mbo_platform.models.objective import ObjectiveType, QualitativeResult
from mbo_platform.schemas.catalog import CalculationTypeResponse, IndicatorClusterResponse


def _check_target_threshold(objective_type, target_value, threshold_value):
    if objective_type == ObjectiveType.NUMERIC.value:
        if target_value is None:
            raise ValueError("Los objetivos numéricos requieren target_value")
        if threshold_value is not None and threshold_value >= target_value:
            raise ValueError("threshold_value debe ser menor que target_value")


class DictionaryCreate(BaseModel):
    """Entrada del diccionario de objetivos."""

    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    indicator_cluster_id: int
    calculation_type_id: int
    objective_type: ObjectiveType = ObjectiveType.NUMERIC
    target_value: Optional[float] = Field(None, allow_inf_nan=False)
    threshold_value: Optional[float] = Field(None, allow_inf_nan=False)

    model_config = ConfigDict(
        use_enum_values=True,
        json_schema_extra={
            "example": {
                "title": "Fatturato area Nord",
                "indicator_cluster_id": 1,
                "calculation_type_id": 1,
                "objective_type": "numeric",
                "target_value": 100000,
                "threshold_value": 50000,
            }
        },
    )

    @model_validator(mode="after")
    def validate_values(self):
        if self.objective_type == ObjectiveType.QUALITATIVE.value:
            self.target_value = None
            self.threshold_value = None
        _check_target_threshold(self.objective_type, self.target_value, self.threshold_value)
        return self


class DictionaryUpdate(BaseModel):
    """Actualización parcial; la coherencia final se valida en el servicio."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    indicator_cluster_id: Optional[int] = None
    calculation_type_id: Optional[int] = None
    objective_type: Optional[ObjectiveType] = None
    target_value: Optional[float] = Field(None, allow_inf_nan=False)
    threshold_value: Optional[float] = Field(None, allow_inf_nan=False)

    model_config = ConfigDict(use_enum_values=True)


class DictionaryResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    indicator_cluster_id: int
    calculation_type_id: int
    objective_type: str
    target_value: Optional[float] = None
    threshold_value: Optional[float] = None
    actual_value: Optional[float] = None
    qualitative_result: Optional[str] = None
    reported_at: Optional[datetime] = None
    indicator_cluster: Optional[IndicatorClusterResponse] = None
    calculation_type: Optional[CalculationTypeResponse] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class DictionaryFilter(BaseModel):
    search: Optional[str] = None
    indicator_cluster_id: Optional[int] = None
    objective_type: Optional[ObjectiveType] = None

    model_config = ConfigDict(use_enum_values=True)


class ObjectiveCreate(BaseModel):
    dictionary_id: int
    cluster_id: Optional[int] = Field(None, description="Por defecto, el cluster del diccionario")
    deadline: Optional[datetime] = None


class ObjectiveUpdate(BaseModel):
    cluster_id: Optional[int] = None
    deadline: Optional[datetime] = None


class ObjectiveResponse(BaseModel):
    id: int
    dictionary_id: int
    cluster_id: int
    title: Optional[str] = None
    description: Optional[str] = None
    objective_type: Optional[str] = None
    target_value: Optional[float] = None
    threshold_value: Optional[float] = None
    deadline: Optional[datetime] = None
    actual_value: Optional[float] = None
    qualitative_result: Optional[str] = None
    multiplier: Optional[float] = None
    reported_at: Optional[datetime] = None
    is_reported: bool = False
    indicator_cluster: Optional[IndicatorClusterResponse] = None
    calculation_type: Optional[CalculationTypeResponse] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AssignedUser(BaseModel):
    assignment_id: int
    user_id: int
    full_name: str
    department: Optional[str] = None
    weight: int
    status: str
    progress: int


class ObjectiveWithAssignments(ObjectiveResponse):
    assigned_users: List[AssignedUser] = []


class ReportIn(BaseModel):
    """Resultado reportado: actual_value para numéricos, qualitative_result para cualitativos."""

    actual_value: Optional[float] = Field(None, allow_inf_nan=False)
    qualitative_result: Optional[QualitativeResult] = None

    model_config = ConfigDict(
        use_enum_values=True,
        json_schema_extra={"example": {"actual_value": 75000}},
    )
