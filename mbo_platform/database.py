from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from mbo_platform.core.config import settings
from mbo_platform.models.base import Base


def _normalize_database_url(raw_url: str) -> str:
    db_url = (raw_url or "").strip()
    if db_url.startswith("postgres://"):
        return db_url.replace("postgres://", "postgresql://", 1)
    return db_url


DATABASE_URL = _normalize_database_url(settings.DATABASE_URL)
IS_SQLITE_DATABASE = DATABASE_URL.startswith("sqlite:///")

# SQLite necesita compartir la conexión entre hilos del servidor
engine_kwargs = {"connect_args": {"check_same_thread": False}} if IS_SQLITE_DATABASE else {}
engine = create_engine(DATABASE_URL, **engine_kwargs)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


__all__ = ["engine", "Base", "SessionLocal"]
