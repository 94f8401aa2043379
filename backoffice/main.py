import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backoffice.core.config import CORS_ORIGINS, DATABASE_URL, LOG_LEVEL
from backoffice.core.database import Base, engine
from backoffice.core.errors import register_exception_handlers
from backoffice.core.logging_setup import configure_logging
from backoffice.core.startup_checks import (
    ensure_migrations_applied,
    validate_auth_configuration,
    validate_database_environment,
)
from backoffice.middleware.auth_rate_limit import AuthRateLimitMiddleware
from backoffice.middleware.observability import ObservabilityMiddleware
import backoffice.models  # garante que os models são importados antes do create_all

from backoffice.routers.auth import router as auth_router
from backoffice.routers.restaurants import router as restaurants_router
from backoffice.routers.users import router as users_router

configure_logging(LOG_LEVEL)

logger = logging.getLogger(__name__)
STARTUP_PREFIX = "[STARTUP]"
REPO_ROOT = Path(__file__).resolve().parents[1]
ALEMBIC_CONFIG_PATH = Path(
    os.getenv("ALEMBIC_CONFIG", str(REPO_ROOT / "alembic.ini"))
)


@asynccontextmanager
async def lifespan(_: FastAPI):
    _startup_tasks()
    yield


app = FastAPI(
    title="Restaurant Back-office API",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(AuthRateLimitMiddleware)
app.add_middleware(ObservabilityMiddleware)

register_exception_handlers(app)


def _startup_tasks() -> None:
    try:
        validate_database_environment()
        validate_auth_configuration()
        if DATABASE_URL.startswith("sqlite"):
            # Em SQLite (dev/test) o schema vem do metadata; nos demais, das migrations.
            Base.metadata.create_all(bind=engine)
        else:
            ensure_migrations_applied(engine=engine, alembic_config_path=ALEMBIC_CONFIG_PATH)
    except Exception:
        logger.exception("%s ERROR startup failed", STARTUP_PREFIX)
        raise
    logger.info("%s ready", STARTUP_PREFIX)


# Routers
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(restaurants_router)


@app.get("/")
def root():
    return {"status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}
