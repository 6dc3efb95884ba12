import logging
from typing import Any, Dict

from sqlalchemy.orm import Session

from mbo_platform.core.exceptions import ConflictException, NotFoundException, ValidationException
from mbo_platform.crud.catalog import calculation_type as calculation_type_crud
from mbo_platform.crud.catalog import indicator_cluster as cluster_crud
from mbo_platform.crud.objective import dictionary as dictionary_crud
from mbo_platform.models.objective import ObjectiveDictionary, ObjectiveType
from mbo_platform.schemas.objective import DictionaryCreate, DictionaryUpdate

logger = logging.getLogger(__name__)


class DictionaryService:
    @staticmethod
    def _check_references(db: Session, values: Dict[str, Any]) -> None:
        cluster_id = values.get("indicator_cluster_id")
        if cluster_id is not None and not cluster_crud.get(db, id=cluster_id):
            raise ValidationException(f"Cluster {cluster_id} inexistente", field="indicator_cluster_id")
        calculation_type_id = values.get("calculation_type_id")
        if calculation_type_id is not None and not calculation_type_crud.get(db, id=calculation_type_id):
            raise ValidationException(
                f"Tipo de cálculo {calculation_type_id} inexistente", field="calculation_type_id"
            )

    @staticmethod
    def normalize_values(values: Dict[str, Any]) -> Dict[str, Any]:
        """Aplica las reglas de tipo: los cualitativos no llevan objetivo ni umbral."""
        if values.get("objective_type") == ObjectiveType.QUALITATIVE.value:
            values["target_value"] = None
            values["threshold_value"] = None
            return values
        target = values.get("target_value")
        threshold = values.get("threshold_value")
        if target is None:
            raise ValidationException("Los objetivos numéricos requieren target_value", field="target_value")
        if threshold is not None and threshold >= target:
            raise ValidationException("threshold_value debe ser menor que target_value", field="threshold_value")
        return values

    @classmethod
    def create_item(cls, db: Session, *, data: DictionaryCreate, admin_id: int) -> ObjectiveDictionary:
        values = data.model_dump()
        cls._check_references(db, values)
        item = dictionary_crud.create(db, obj_in=values, user_id=admin_id)
        logger.info("Objetivo de diccionario %s creado", item.id)
        return item

    @classmethod
    def update_item(
        cls, db: Session, *, item_id: int, data: DictionaryUpdate, admin_id: int
    ) -> ObjectiveDictionary:
        item = dictionary_crud.get(db, id=item_id)
        if not item:
            raise NotFoundException("Objetivo del diccionario", item_id)

        changes = data.model_dump(exclude_unset=True)
        for required in ("title", "indicator_cluster_id", "calculation_type_id", "objective_type"):
            if required in changes and changes[required] is None:
                raise ValidationException(f"El campo {required} no puede ser nulo", field=required)
        cls._check_references(db, changes)

        merged = {
            "objective_type": item.objective_type,
            "target_value": item.target_value,
            "threshold_value": item.threshold_value,
        }
        merged.update({k: v for k, v in changes.items() if k in merged})
        changes.update(cls.normalize_values(merged))
        return dictionary_crud.update(db, db_obj=item, obj_in=changes, user_id=admin_id)

    @staticmethod
    def delete_item(db: Session, *, item_id: int, force: bool = False) -> int:
        """Elimina la entrada con sus instancias; sin force, 409 si hay asignaciones activas."""
        item = dictionary_crud.get(db, id=item_id)
        if not item:
            raise NotFoundException("Objetivo del diccionario", item_id)

        active = dictionary_crud.count_active_assignments(db, item.id)
        if active and not force:
            message = f"El objetivo tiene {active} asignaciones activas; usa force=true para eliminarlo"
            raise ConflictException(
                message,
                errors=[{"field": "force", "message": message, "active_assignments": active}],
            )

        db.delete(item)
        db.commit()
        logger.info("Objetivo de diccionario %s eliminado (%s asignaciones activas)", item_id, active)
        return active
