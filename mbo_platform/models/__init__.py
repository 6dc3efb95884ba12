from .base import Base, BaseModel
from .catalog import BusinessFunction, CalculationType, IndicatorCluster
from .document import Document, DocumentAcceptance, DocumentType, MboRegulationAcceptance
from .objective import (
    AssignmentStatus,
    Objective,
    ObjectiveAssignment,
    ObjectiveDictionary,
    ObjectiveType,
    QualitativeResult,
)
from .user import User, UserRole

__all__ = [
    "Base",
    "BaseModel",
    "BusinessFunction",
    "CalculationType",
    "IndicatorCluster",
    "Document",
    "DocumentAcceptance",
    "DocumentType",
    "MboRegulationAcceptance",
    "AssignmentStatus",
    "Objective",
    "ObjectiveAssignment",
    "ObjectiveDictionary",
    "ObjectiveType",
    "QualitativeResult",
    "User",
    "UserRole",
]
