from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from mbo_platform.models.base import BaseModel


class IndicatorCluster(BaseModel):
    """Agrupación de objetivos (grupo, dirección, ESG, individuales...)."""
    __tablename__ = "indicator_clusters"

    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)

    dictionary_items = relationship("ObjectiveDictionary", back_populates="indicator_cluster")


class CalculationType(BaseModel):
    """Tipo de cálculo descriptivo asociado a un objetivo del diccionario."""
    __tablename__ = "calculation_types"

    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    formula = Column(Text, nullable=True)

    dictionary_items = relationship("ObjectiveDictionary", back_populates="calculation_type")


class BusinessFunction(BaseModel):
    """Estructura organizativa (función de negocio) con sus niveles superiores."""
    __tablename__ = "business_functions"

    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    first_level_id = Column(Integer, ForeignKey("business_functions.id", ondelete="SET NULL"), nullable=True)
    second_level_id = Column(Integer, ForeignKey("business_functions.id", ondelete="SET NULL"), nullable=True)

    first_level = relationship("BusinessFunction", remote_side="BusinessFunction.id", foreign_keys=[first_level_id])
    second_level = relationship("BusinessFunction", remote_side="BusinessFunction.id", foreign_keys=[second_level_id])
