from datetime import timedelta

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String

from backoffice.core.database import Base
from backoffice.models.restaurant import DEFAULT_PLAN
from backoffice.models.user import utcnow

KEY_VALIDITY_DAYS = 365


def _key_expiry():
    return utcnow() + timedelta(days=KEY_VALIDITY_DAYS)


class ProductKey(Base):
    __tablename__ = "product_keys"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String, nullable=False, unique=True, index=True)  # sempre em maiúsculas
    is_used = Column(Boolean, nullable=False, default=False, index=True)
    used_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    used_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, nullable=False, default=_key_expiry)
    plan = Column(String(20), nullable=False, default=DEFAULT_PLAN)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
