import itertools

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mbo_platform.api import deps
from mbo_platform.database import Base
from mbo_platform.main import app
from mbo_platform.models import (
    CalculationType,
    IndicatorCluster,
    Objective,
    ObjectiveAssignment,
    ObjectiveDictionary,
    User,
)


@pytest.fixture()
def db():
    # Base nueva por test: el esquema se crea siempre desde cero
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[deps.get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db):
    counter = itertools.count(1)

    def _make(role="employee", **fields):
        n = next(counter)
        fields.setdefault("email", f"utente{n}@acme.it")
        fields.setdefault("first_name", f"Nome{n}")
        fields.setdefault("last_name", "Rossi")
        user = User(role=role, **fields)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture()
def admin(make_user):
    return make_user(role="admin", email="admin@acme.it", first_name="Anna", last_name="Admin")


@pytest.fixture()
def employee(make_user):
    return make_user(
        email="mario.rossi@acme.it",
        first_name="Mario",
        department="Sales",
        ral=50000,
        mbo_percentage=10,
    )


@pytest.fixture()
def catalog(db):
    cluster = IndicatorCluster(name="Obiettivi Individuali")
    calculation_type = CalculationType(name="Interpolazione Lineare")
    db.add_all([cluster, calculation_type])
    db.commit()
    return cluster, calculation_type


@pytest.fixture()
def make_dictionary(db, catalog):
    cluster, calculation_type = catalog

    def _make(objective_type="numeric", target_value=100000, threshold_value=50000, title="Fatturato"):
        if objective_type == "qualitative":
            target_value = threshold_value = None
        item = ObjectiveDictionary(
            title=title,
            indicator_cluster_id=cluster.id,
            calculation_type_id=calculation_type.id,
            objective_type=objective_type,
            target_value=target_value,
            threshold_value=threshold_value,
        )
        db.add(item)
        db.commit()
        db.refresh(item)
        return item

    return _make


@pytest.fixture()
def make_assignment(db):
    def _make(user, item, weight=20, progress=0, status="assigned"):
        objective = Objective(dictionary_id=item.id, cluster_id=item.indicator_cluster_id)
        db.add(objective)
        db.flush()
        assignment = ObjectiveAssignment(
            user_id=user.id,
            objective_id=objective.id,
            weight=weight,
            progress=progress,
            status=status,
        )
        db.add(assignment)
        db.commit()
        db.refresh(assignment)
        return assignment

    return _make
