import secrets
from typing import List, Optional, Union

from pydantic import AnyHttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # API
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "MBO Platform"
    VERSION: str = "1.0.0"

    # Tokens emitidos por el proveedor de identidad externo
    SECRET_KEY: str = secrets.token_urlsafe(32)
    ALGORITHM: str = "HS256"
    TOKEN_AUDIENCE: Optional[str] = None

    # CORS
    BACKEND_CORS_ORIGINS: List[Union[str, AnyHttpUrl]] = [
        "http://localhost:3000",
        "http://localhost:5000",
    ]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(
        cls, v: Union[str, List[str]]
    ) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # Database
    DATABASE_URL: str = "sqlite:///./mbo.db"

    # Aplicación
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Reglas MBO
    ALLOW_WEIGHT_OVERFLOW: bool = False
    DEFAULT_ASSIGNMENT_WEIGHT: int = 20
    MAX_TOTAL_WEIGHT: int = 100

    # Datos iniciales
    SEED_CATALOG: bool = True
    BOOTSTRAP_ADMIN_EMAIL: Optional[str] = None

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env")


settings = Settings()
