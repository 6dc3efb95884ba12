from sqlalchemy import create_engine, inspect

from mbo_platform.database import Base
from mbo_platform.models import Objective


def test_schema_is_created_on_a_fresh_database():
    engine = create_engine("sqlite://")
    Base.metadata.create_all(bind=engine)

    inspector = inspect(engine)
    assert {
        "users",
        "indicator_clusters",
        "calculation_types",
        "business_functions",
        "objectives_dictionary",
        "objectives",
        "objective_assignments",
    } <= set(inspector.get_table_names())
    engine.dispose()


def test_index_names_are_unique():
    names = [index.name for table in Base.metadata.sorted_tables for index in table.indexes]
    assert len(names) == len(set(names))
    assert [i.name for i in Objective.__table__.indexes] == ["ix_objectives_dictionary_id"]
