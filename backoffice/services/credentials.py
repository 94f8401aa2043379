from __future__ import annotations

import logging
import secrets
import string
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backoffice.core.errors import EmailTaken, StorageFailure, ValidationFailed
from backoffice.models.user import (
    ROLE_ADMIN,
    ROLE_CASHIER,
    ROLE_KITCHEN,
    ROLE_MANAGER,
    STAFF_ROLES,
    STATUS_ACTIVE,
    USER_STATUSES,
    User,
)
from backoffice.services.passwords import hash_password, verify_password

logger = logging.getLogger(__name__)

EMPLOYEE_ID_PREFIXES = {
    ROLE_MANAGER: "MGR",
    ROLE_CASHIER: "CSH",
    ROLE_KITCHEN: "KIT",
}
_BASE36 = string.digits + string.ascii_uppercase

# campos que nunca saem da API
SECRET_FIELDS = ("password_hash", "reset_password_token", "reset_password_expires_at")
PUBLIC_FIELDS = (
    "id",
    "name",
    "email",
    "role",
    "status",
    "restaurant_id",
    "created_by_id",
    "employee_id",
    "phone",
    "address",
    "hire_date",
    "salary",
    "last_login_at",
    "is_email_verified",
    "created_at",
    "updated_at",
)
UPDATABLE_FIELDS = {"name", "status", "phone", "address", "salary", "password"}


@dataclass(frozen=True)
class AdminAccount:
    """Dono do restaurante: não tem restaurante nem criador no momento da criação."""

    name: str
    email: str
    password: str


@dataclass(frozen=True)
class StaffAccount:
    """Funcionário: sempre vinculado a um restaurante e ao admin que o criou."""

    name: str
    email: str
    password: str
    role: str
    restaurant_id: int
    created_by_id: int
    phone: Optional[str] = None
    address: Optional[str] = None
    salary: Optional[float] = None


NewAccount = Union[AdminAccount, StaffAccount]


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def generate_employee_id(role: str) -> str:
    """``<PREFIXO>-<6 últimos dígitos do timestamp em ms>-<3 chars aleatórios>``."""
    prefix = EMPLOYEE_ID_PREFIXES[role]
    timestamp = str(int(time.time() * 1000))[-6:]
    random_part = "".join(secrets.choice(_BASE36) for _ in range(3))
    return f"{prefix}-{timestamp}-{random_part}"


def ensure_positive_salary(salary: Optional[float]) -> None:
    if salary is not None and salary <= 0:
        raise ValidationFailed("Salário deve ser maior que zero")


def to_public_dict(user: User) -> Dict[str, Any]:
    return {field: getattr(user, field, None) for field in PUBLIC_FIELDS}


class CredentialStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def email_exists(self, email: str) -> bool:
        normalized = normalize_email(email)
        return self.db.query(User.id).filter(func.lower(User.email) == normalized).first() is not None

    def create_user(self, account: NewAccount) -> User:
        if isinstance(account, StaffAccount):
            if account.role not in STAFF_ROLES:
                raise ValidationFailed("Role deve ser manager, cashier ou kitchen")
            ensure_positive_salary(account.salary)
            user = User(
                name=account.name.strip(),
                email=normalize_email(account.email),
                password_hash=hash_password(account.password),
                role=account.role,
                status=STATUS_ACTIVE,
                restaurant_id=account.restaurant_id,
                created_by_id=account.created_by_id,
                employee_id=generate_employee_id(account.role),
                phone=account.phone,
                address=account.address,
                salary=account.salary,
            )
        elif isinstance(account, AdminAccount):
            user = User(
                name=account.name.strip(),
                email=normalize_email(account.email),
                password_hash=hash_password(account.password),
                role=ROLE_ADMIN,
                status=STATUS_ACTIVE,
            )
        else:
            raise TypeError(f"Tipo de conta não suportado: {type(account).__name__}")

        if self.email_exists(user.email):
            raise EmailTaken()

        self.db.add(user)
        try:
            self.db.flush()
        except IntegrityError as exc:
            # e-mail criado em paralelo ou colisão de employee_id; a transação precisa de rollback
            logger.error("[CREDENTIALS] create failed email=%s role=%s", user.email, user.role)
            raise StorageFailure("Falha ao criar usuário. Tente novamente.") from exc
        return user

    def find_by_email(self, email: str) -> Optional[User]:
        normalized = normalize_email(email)
        if not normalized:
            return None
        return self.db.query(User).filter(func.lower(User.email) == normalized).first()

    def find_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def find_public_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        user = self.find_by_email(email)
        return to_public_dict(user) if user is not None else None

    def verify(self, user: User, password: str) -> bool:
        return verify_password(password, user.password_hash)

    def update(self, user: User, **fields: Any) -> User:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationFailed(f"Campos não editáveis: {', '.join(sorted(unknown))}")

        if "status" in fields and fields["status"] is not None and fields["status"] not in USER_STATUSES:
            raise ValidationFailed("Status deve ser active ou inactive")
        ensure_positive_salary(fields.get("salary"))

        for field, value in fields.items():
            if value is None:
                continue
            if field == "password":
                user.password_hash = hash_password(value)
            else:
                setattr(user, field, value)
        self.db.flush()
        return user

    def delete(self, user: User) -> None:
        self.db.delete(user)
        self.db.flush()
