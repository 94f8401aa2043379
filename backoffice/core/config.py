import os

from dotenv import load_dotenv

# Carrega o .env da raiz do projeto
load_dotenv()

_TRUTHY = {"1", "true", "yes", "on"}

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./backoffice.db")
ENV = os.getenv("ENV", "dev")
ENV_NORMALIZED = ENV.lower()
IS_DEV = ENV_NORMALIZED in {"dev", "development", "local"}
IS_TEST = ENV_NORMALIZED == "test"
IS_PROD = ENV_NORMALIZED in {"prod", "production"}

# CORS
_cors_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS = [origin.strip() for origin in _cors_env.split(",") if origin.strip() and origin.strip() != "*"]

if not CORS_ORIGINS and IS_DEV:
    CORS_ORIGINS = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

# Auth (JWT)
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRE_MINUTES = int(os.getenv("JWT_EXPIRE_MINUTES", str(60 * 24 * 7)))

AUTH_COOKIE_NAME = "token"
AUTH_COOKIE_MAX_AGE_SECONDS = int(os.getenv("AUTH_COOKIE_MAX_AGE_SECONDS", str(7 * 24 * 60 * 60)))
AUTH_COOKIE_SECURE = os.getenv(
    "AUTH_COOKIE_SECURE",
    "1" if IS_PROD else "0",
).strip().lower() in _TRUTHY

# Chaves de produto aceitas (lista separada por vírgula). Somente leitura:
# é repassada explicitamente ao ProductKeyLedger.
VALID_PRODUCT_KEYS = tuple(
    key.strip() for key in os.getenv("VALID_PRODUCT_KEYS", "").split(",") if key.strip()
)

# Rate limit das rotas públicas de autenticação
AUTH_RATE_LIMIT_ENABLED = os.getenv("AUTH_RATE_LIMIT_ENABLED", "1").strip().lower() in _TRUTHY
AUTH_RATE_LIMIT_WINDOW_SECONDS = int(os.getenv("AUTH_RATE_LIMIT_WINDOW_SECONDS", str(15 * 60)))
AUTH_RATE_LIMIT_MAX = int(os.getenv("AUTH_RATE_LIMIT_MAX", "5"))
LOGIN_RATE_LIMIT_MAX = int(os.getenv("LOGIN_RATE_LIMIT_MAX", "10"))
# Só ligue atrás de um proxy reverso que sobrescreve X-Forwarded-For
TRUST_FORWARDED_FOR = os.getenv("TRUST_FORWARDED_FOR", "0").strip().lower() in _TRUTHY

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
