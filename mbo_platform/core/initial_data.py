"""
Semilla mínima: catálogo de clusters y tipos de cálculo, y administrador inicial.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from mbo_platform.core.config import settings
from mbo_platform.crud.catalog import calculation_type as calculation_type_crud
from mbo_platform.crud.catalog import indicator_cluster as cluster_crud
from mbo_platform.crud.user import user as user_crud
from mbo_platform.database import SessionLocal
from mbo_platform.models.catalog import CalculationType, IndicatorCluster
from mbo_platform.models.user import User, UserRole

logger = logging.getLogger(__name__)

DEFAULT_CLUSTERS = [
    ("Obiettivi di Gruppo", "Obiettivi legati alle performance del gruppo aziendale"),
    ("Obiettivi di Direzione", "Obiettivi specifici della direzione di appartenenza"),
    ("Obiettivi ESG", "Obiettivi legati a sostenibilità, governance e responsabilità sociale"),
    ("Obiettivi Individuali", "Obiettivi personali di sviluppo e performance"),
]

DEFAULT_CALCULATION_TYPES = [
    ("Interpolazione Lineare", "Calcolo lineare tra soglia e target", "(valore - soglia) / (target - soglia) * 100"),
    ("100% al Target", "100% solo se raggiunto il target esatto", "valore >= target ? 100 : 0"),
    ("Lineare Inversa", "Più basso il valore, migliore il risultato", "(target - valore) / (target - soglia) * 100"),
    ("Soglia On/Off", "Attivazione binaria sopra soglia", "valore >= soglia ? 100 : 0"),
]


def seed_catalog(db: Session) -> int:
    """Crea los elementos del catálogo que falten. Devuelve cuántos se crearon."""
    created = 0
    for name, description in DEFAULT_CLUSTERS:
        if not cluster_crud.get_by_name(db, name):
            db.add(IndicatorCluster(name=name, description=description))
            created += 1
    for name, description, formula in DEFAULT_CALCULATION_TYPES:
        if not calculation_type_crud.get_by_name(db, name):
            db.add(CalculationType(name=name, description=description, formula=formula))
            created += 1
    db.commit()
    return created


def seed_bootstrap_admin(db: Session, email: Optional[str]) -> Optional[User]:
    """Garantiza que el email configurado exista como administrador."""
    if not email:
        return None
    user = user_crud.get_by_email(db, email)
    if user:
        if not user.is_admin or not user.is_active:
            user.role = UserRole.ADMIN.value
            user.is_active = True
            db.commit()
        return user

    user = User(
        email=email,
        first_name="Amministratore",
        last_name="MBO",
        role=UserRole.ADMIN.value,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Administrador inicial creado: %s", email)
    return user


def seed_initial_data(db: Optional[Session] = None) -> None:
    own_session = db is None
    db = db or SessionLocal()
    try:
        if settings.SEED_CATALOG:
            created = seed_catalog(db)
            if created:
                logger.info("Catálogo inicial: %s elementos creados", created)
        seed_bootstrap_admin(db, settings.BOOTSTRAP_ADMIN_EMAIL)
    finally:
        if own_session:
            db.close()
