from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String

from backoffice.core.database import Base

ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"
ROLE_CASHIER = "cashier"
ROLE_KITCHEN = "kitchen"
STAFF_ROLES = (ROLE_MANAGER, ROLE_CASHIER, ROLE_KITCHEN)
ALL_ROLES = (ROLE_ADMIN,) + STAFF_ROLES

STATUS_ACTIVE = "active"
STATUS_INACTIVE = "inactive"
USER_STATUSES = (STATUS_ACTIVE, STATUS_INACTIVE)


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    # obrigatório para staff; no admin é preenchido logo após criar o restaurante
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=True, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    name = Column(String(50), nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)

    role = Column(String(20), nullable=False, index=True)  # admin | manager | cashier | kitchen
    status = Column(String(20), nullable=False, default=STATUS_ACTIVE)
    employee_id = Column(String(20), unique=True, nullable=True)

    phone = Column(String(30), nullable=True)
    address = Column(String(200), nullable=True)
    hire_date = Column(DateTime, default=utcnow)
    salary = Column(Float, nullable=True)

    last_login_at = Column(DateTime, nullable=True)
    is_email_verified = Column(Boolean, nullable=False, default=False)
    reset_password_token = Column(String, nullable=True)
    reset_password_expires_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE
