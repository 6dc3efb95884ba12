from typing import Optional

from sqlalchemy.orm import Session

from mbo_platform.crud.base import CreateSchemaType, CRUDBase, ModelType, UpdateSchemaType
from mbo_platform.models.catalog import BusinessFunction, CalculationType, IndicatorCluster
from mbo_platform.schemas.catalog import (
    BusinessFunctionCreate,
    BusinessFunctionUpdate,
    CalculationTypeCreate,
    CalculationTypeUpdate,
    IndicatorClusterCreate,
    IndicatorClusterUpdate,
)


class CRUDCatalog(CRUDBase[ModelType, CreateSchemaType, UpdateSchemaType]):
    """Elementos de catálogo identificados por nombre."""

    def get_by_name(self, db: Session, name: str) -> Optional[ModelType]:
        return db.query(self.model).filter(self.model.name == name).first()


class CRUDIndicatorCluster(CRUDCatalog[IndicatorCluster, IndicatorClusterCreate, IndicatorClusterUpdate]):
    pass


class CRUDCalculationType(CRUDCatalog[CalculationType, CalculationTypeCreate, CalculationTypeUpdate]):
    pass


class CRUDBusinessFunction(CRUDCatalog[BusinessFunction, BusinessFunctionCreate, BusinessFunctionUpdate]):
    def get_all(self, db: Session) -> list[BusinessFunction]:
        return db.query(BusinessFunction).order_by(BusinessFunction.name, BusinessFunction.id).all()

    def get_children(self, db: Session, function_id: int) -> list[BusinessFunction]:
        return (
            db.query(BusinessFunction)
            .filter(
                (BusinessFunction.first_level_id == function_id)
                | (BusinessFunction.second_level_id == function_id)
            )
            .all()
        )


indicator_cluster = CRUDIndicatorCluster(IndicatorCluster)
calculation_type = CRUDCalculationType(CalculationType)
business_function = CRUDBusinessFunction(BusinessFunction)
