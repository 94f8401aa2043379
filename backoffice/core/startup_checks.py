from __future__ import annotations

import logging
from pathlib import Path

from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from backoffice.core.config import DATABASE_URL, ENV_NORMALIZED, IS_PROD, JWT_SECRET_KEY, VALID_PRODUCT_KEYS

logger = logging.getLogger(__name__)
MIGRATIONS_PREFIX = "[MIGRATIONS]"
CONFIG_PREFIX = "[CONFIG]"


def validate_database_environment() -> None:
    if IS_PROD and DATABASE_URL.startswith("sqlite"):
        logger.critical("%s SQLite is forbidden in production", MIGRATIONS_PREFIX)
        raise RuntimeError("SQLite is forbidden in production environment")


def validate_auth_configuration() -> None:
    if not JWT_SECRET_KEY:
        logger.critical("%s JWT_SECRET_KEY not configured", CONFIG_PREFIX)
        raise RuntimeError("JWT_SECRET_KEY não configurado.")
    if not VALID_PRODUCT_KEYS:
        # Sem chaves nenhum restaurante novo consegue se registrar, mas o login segue funcionando.
        logger.warning("%s VALID_PRODUCT_KEYS is empty; admin registration is disabled", CONFIG_PREFIX)


def ensure_migrations_applied(*, engine: Engine, alembic_config_path: Path) -> None:
    if ENV_NORMALIZED == "test":
        logger.info("%s skipped migration check in test environment", MIGRATIONS_PREFIX)
        return

    if not alembic_config_path.exists():
        logger.critical("%s alembic config not found path=%s", MIGRATIONS_PREFIX, alembic_config_path)
        raise RuntimeError("alembic config not found")

    alembic_cfg = Config(str(alembic_config_path))
    script_directory = ScriptDirectory.from_config(alembic_cfg)
    expected_heads = set(script_directory.get_heads())

    with engine.connect() as connection:
        inspector = inspect(connection)
        if "alembic_version" not in inspector.get_table_names():
            logger.critical("%s alembic_version table missing", MIGRATIONS_PREFIX)
            raise RuntimeError("Database has no migration state")

        current_rows = connection.exec_driver_sql("SELECT version_num FROM alembic_version").fetchall()

    current_heads = {row[0] for row in current_rows if row and row[0]}
    if current_heads != expected_heads:
        logger.critical(
            "%s pending migration detected current=%s expected=%s",
            MIGRATIONS_PREFIX,
            sorted(current_heads),
            sorted(expected_heads),
        )
        raise RuntimeError("Pending migrations detected")

    logger.info("%s migration state verified", MIGRATIONS_PREFIX)
