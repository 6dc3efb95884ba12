import enum

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from mbo_platform.models.base import BaseModel


class ObjectiveType(str, enum.Enum):
    NUMERIC = "numeric"
    QUALITATIVE = "qualitative"


class QualitativeResult(str, enum.Enum):
    REACHED = "reached"
    PARTIAL = "partial"
    NOT_REACHED = "not_reached"


class AssignmentStatus(str, enum.Enum):
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    PENDING_APPROVAL = "pending_approval"


class ObjectiveDictionary(BaseModel):
    """Plantilla reutilizable de objetivo."""
    __tablename__ = "objectives_dictionary"

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    indicator_cluster_id = Column(Integer, ForeignKey("indicator_clusters.id"), nullable=False)
    calculation_type_id = Column(Integer, ForeignKey("calculation_types.id"), nullable=False)
    objective_type = Column(String(20), nullable=False, default=ObjectiveType.NUMERIC.value)
    target_value = Column(Float, nullable=True)
    threshold_value = Column(Float, nullable=True)

    # Último reporte a nivel de diccionario
    actual_value = Column(Float, nullable=True)
    qualitative_result = Column(String(20), nullable=True)
    reported_at = Column(DateTime(timezone=True), nullable=True)

    indicator_cluster = relationship("IndicatorCluster", back_populates="dictionary_items")
    calculation_type = relationship("CalculationType", back_populates="dictionary_items")
    objectives = relationship(
        "Objective",
        back_populates="dictionary",
        cascade="all, delete-orphan",
    )

    @property
    def is_numeric(self) -> bool:
        return self.objective_type == ObjectiveType.NUMERIC.value


class Objective(BaseModel):
    """Instancia de un objetivo del diccionario, con los datos de reporte."""
    __tablename__ = "objectives"

    dictionary_id = Column(Integer, ForeignKey("objectives_dictionary.id"), nullable=False, index=True)
    cluster_id = Column(Integer, ForeignKey("indicator_clusters.id"), nullable=False)
    deadline = Column(DateTime(timezone=True), nullable=True)

    actual_value = Column(Float, nullable=True)
    qualitative_result = Column(String(20), nullable=True)
    multiplier = Column(Float, nullable=True)  # 0-1
    reported_at = Column(DateTime(timezone=True), nullable=True)

    dictionary = relationship("ObjectiveDictionary", back_populates="objectives")
    cluster = relationship("IndicatorCluster")
    assignments = relationship(
        "ObjectiveAssignment",
        back_populates="objective",
        cascade="all, delete-orphan",
    )

    @property
    def is_reported(self) -> bool:
        return self.reported_at is not None

    @property
    def title(self):
        return self.dictionary.title if self.dictionary else None

    @property
    def description(self):
        return self.dictionary.description if self.dictionary else None

    @property
    def objective_type(self):
        return self.dictionary.objective_type if self.dictionary else None

    @property
    def target_value(self):
        return self.dictionary.target_value if self.dictionary else None

    @property
    def threshold_value(self):
        return self.dictionary.threshold_value if self.dictionary else None

    @property
    def indicator_cluster(self):
        return self.cluster

    @property
    def calculation_type(self):
        return self.dictionary.calculation_type if self.dictionary else None


class ObjectiveAssignment(BaseModel):
    """Asignación de una instancia de objetivo a un usuario con un peso."""
    __tablename__ = "objective_assignments"
    __table_args__ = (
        UniqueConstraint("user_id", "objective_id", name="uq_assignment_user_objective"),
    )

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    objective_id = Column(Integer, ForeignKey("objectives.id", ondelete="CASCADE"), nullable=False, index=True)
    weight = Column(Integer, nullable=False)  # % del MBO total, múltiplos de 5
    status = Column(String(30), nullable=False, default=AssignmentStatus.ASSIGNED.value)
    progress = Column(Integer, nullable=False, default=0)  # 0-100
    assigned_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="assignments")
    objective = relationship("Objective", back_populates="assignments")

    @property
    def actual_value(self):
        return self.objective.actual_value if self.objective else None

    @property
    def qualitative_result(self):
        return self.objective.qualitative_result if self.objective else None

    @property
    def multiplier(self):
        return self.objective.multiplier if self.objective else None

    @property
    def reported_at(self):
        return self.objective.reported_at if self.objective else None
