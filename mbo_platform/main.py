import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from mbo_platform.api.v1.router import api_router
from mbo_platform.core.config import settings
from mbo_platform.core.exceptions import AppException
from mbo_platform.core.initial_data import seed_initial_data
from mbo_platform.database import Base, engine
from mbo_platform.templates.api import ApiResponseTemplate

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Crear tablas y datos iniciales
    Base.metadata.create_all(bind=engine)
    seed_initial_data()
    logger.info("%s %s iniciado (%s)", settings.PROJECT_NAME, settings.VERSION, settings.ENVIRONMENT)
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    debug=settings.DEBUG,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    lifespan=lifespan,
)

# Configurar CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    errors = exc.errors if isinstance(exc, AppException) else None
    return JSONResponse(
        ApiResponseTemplate.error(str(exc.detail), exc.status_code, errors=errors),
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        ApiResponseTemplate.error(
            "Datos de entrada no válidos",
            status.HTTP_400_BAD_REQUEST,
            errors=ApiResponseTemplate.field_errors(exc.errors()),
        ),
        status_code=status.HTTP_400_BAD_REQUEST,
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Error no controlado en %s %s", request.method, request.url.path)
    return JSONResponse(
        ApiResponseTemplate.error("Error interno del servidor", status.HTTP_500_INTERNAL_SERVER_ERROR),
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


# Incluir rutas
app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/")
async def root():
    return {"message": f"{settings.PROJECT_NAME} API", "version": settings.VERSION}
