import os

# Precisa acontecer antes de qualquer import de ``backoffice`` (config lê o ambiente no import).
os.environ.setdefault("ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("AUTH_RATE_LIMIT_ENABLED", "0")
os.environ.setdefault("CORS_ORIGINS", "http://localhost:3000")
os.environ.setdefault(
    "VALID_PRODUCT_KEYS",
    ",".join(
        [
            "RPK-2024-ADMIN-001",
            "RPK-2024-ADMIN-002",
            "RPK-2024-ADMIN-003",
            "RPK-2024-DEMO-001",
        ]
    ),
)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from backoffice.core.database import Base, get_db  # noqa: E402
import backoffice.models  # noqa: E402,F401
from backoffice.services import credentials as credentials_module  # noqa: E402
from backoffice.services.passwords import hash_password  # noqa: E402

from tests.fixtures_data import ADMIN_PAYLOAD  # noqa: E402


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch):
    # custo mínimo do bcrypt para a suíte não ficar lenta
    monkeypatch.setattr(credentials_module, "hash_password", lambda password: hash_password(password, rounds=4))


@pytest.fixture()
def client(session_factory, monkeypatch):
    from backoffice import main

    def _override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    monkeypatch.setattr(main, "_startup_tasks", lambda: None)
    main.app.dependency_overrides[get_db] = _override_get_db
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.pop(get_db, None)


@pytest.fixture()
def admin_auth(client):
    """Registra o admin padrão e devolve (token, corpo da resposta)."""
    response = client.post("/auth/register-admin", json=ADMIN_PAYLOAD)
    assert response.status_code == 201, response.text
    body = response.json()
    return body["token"], body
