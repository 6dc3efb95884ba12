from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class IndicatorClusterBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None


class IndicatorClusterCreate(IndicatorClusterBase):
    pass


class IndicatorClusterUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None


class IndicatorClusterResponse(IndicatorClusterBase):
    id: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CalculationTypeBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    formula: Optional[str] = Field(None, description="Descripción textual de la fórmula")


class CalculationTypeCreate(CalculationTypeBase):
    pass


class CalculationTypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    formula: Optional[str] = None


class CalculationTypeResponse(CalculationTypeBase):
    id: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BusinessFunctionBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    first_level_id: Optional[int] = Field(None, description="Función de primer nivel de la que depende")
    second_level_id: Optional[int] = Field(None, description="Función de segundo nivel de la que depende")


class BusinessFunctionCreate(BusinessFunctionBase):
    pass


class BusinessFunctionUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    first_level_id: Optional[int] = None
    second_level_id: Optional[int] = None


class BusinessFunctionResponse(BusinessFunctionBase):
    id: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
