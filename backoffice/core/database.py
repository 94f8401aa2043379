from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from backoffice.core.config import DATABASE_URL

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=_connect_args)

# Uma sessão por requisição
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Provê uma sessão de banco para um endpoint FastAPI."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
