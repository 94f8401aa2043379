from datetime import timedelta

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String

from backoffice.core.database import Base
from backoffice.models.user import utcnow

PLANS = ("starter", "professional", "enterprise")
DEFAULT_PLAN = "starter"
SUBSCRIPTION_ACTIVE = "active"
SUBSCRIPTION_STATUSES = (SUBSCRIPTION_ACTIVE, "inactive", "suspended")
SUBSCRIPTION_TRIAL_DAYS = 30
DEFAULT_COUNTRY = "India"


def _subscription_expiry():
    return utcnow() + timedelta(days=SUBSCRIPTION_TRIAL_DAYS)


class Restaurant(Base):
    __tablename__ = "restaurants"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)

    address_street = Column(String, nullable=True)
    address_city = Column(String, nullable=True)
    address_state = Column(String, nullable=True)
    address_zip_code = Column(String, nullable=True)
    address_country = Column(String, nullable=False, default=DEFAULT_COUNTRY)

    phone = Column(String(30), nullable=True)
    email = Column(String, nullable=True)

    # 1:1 com o admin dono. Sem FK porque users.restaurant_id já aponta para cá.
    admin_id = Column(Integer, nullable=False, unique=True, index=True)
    product_key = Column(String, nullable=False, unique=True, index=True)

    currency = Column(String(3), nullable=False, default="INR")
    tax_rate = Column(Float, nullable=False, default=8.5)
    timezone = Column(String, nullable=False, default="Asia/Kolkata")

    subscription_plan = Column(String(20), nullable=False, default=DEFAULT_PLAN)
    subscription_status = Column(String(20), nullable=False, default=SUBSCRIPTION_ACTIVE)
    subscription_expires_at = Column(DateTime, nullable=False, default=_subscription_expiry)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
