from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from backoffice.core.errors import BackofficeError, NotFound
from backoffice.models.user import ROLE_ADMIN, User
from backoffice.services.authorization_service import AuthorizationService
from backoffice.services.credentials import CredentialStore, StaffAccount, to_public_dict
from backoffice.services.restaurants import RestaurantStore

logger = logging.getLogger(__name__)
STAFF_PREFIX = "[STAFF]"


class StaffService:
    """Gestão de funcionários sempre restrita ao restaurante de quem chama."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.credentials = CredentialStore(db)
        self.restaurants = RestaurantStore(db)

    def resolve_restaurant_id(self, actor: User) -> int:
        if actor.role == ROLE_ADMIN:
            restaurant = self.restaurants.find_by_admin(actor.id)
            if restaurant is None:
                raise NotFound("Restaurante não encontrado")
            return restaurant.id
        if actor.restaurant_id is None:
            raise NotFound("Restaurante não encontrado")
        return actor.restaurant_id

    def _load_in_scope(self, actor: User, staff_id: int) -> User:
        target = self.credentials.find_by_id(staff_id)
        if target is None or target.role == ROLE_ADMIN or target.restaurant_id is None:
            raise NotFound("Funcionário não encontrado")

        owned = self.restaurants.find_by_admin(actor.id) if actor.role == ROLE_ADMIN else None
        AuthorizationService.ensure_tenant_access(
            user=actor,
            restaurant_id=target.restaurant_id,
            owned_restaurant=owned,
        )
        return target

    def register_staff(
        self,
        admin: User,
        *,
        name: str,
        email: str,
        password: str,
        role: str,
        phone: Optional[str] = None,
        address: Optional[str] = None,
        salary: Optional[float] = None,
    ) -> Dict[str, Any]:
        restaurant_id = self.resolve_restaurant_id(admin)
        try:
            staff = self.credentials.create_user(
                StaffAccount(
                    name=name,
                    email=email,
                    password=password,
                    role=role,
                    restaurant_id=restaurant_id,
                    created_by_id=admin.id,
                    phone=phone,
                    address=address,
                    salary=salary,
                )
            )
            self.db.commit()
        except BackofficeError:
            self.db.rollback()
            raise

        self.db.refresh(staff)
        logger.info(
            "%s registered staff_id=%s role=%s employee_id=%s restaurant_id=%s",
            STAFF_PREFIX,
            staff.id,
            staff.role,
            staff.employee_id,
            restaurant_id,
        )
        return to_public_dict(staff)

    def list_staff(self, actor: User, restaurant_id: Optional[int] = None) -> List[Dict[str, Any]]:
        scope_id = restaurant_id if restaurant_id is not None else self.resolve_restaurant_id(actor)
        staff = (
            self.db.query(User)
            .filter(User.restaurant_id == scope_id, User.role != ROLE_ADMIN)
            .order_by(User.created_at.desc(), User.id.desc())
            .all()
        )
        return [to_public_dict(member) for member in staff]

    def get_staff(self, actor: User, staff_id: int) -> Dict[str, Any]:
        return to_public_dict(self._load_in_scope(actor, staff_id))

    def update_staff(self, admin: User, staff_id: int, **fields: Any) -> Dict[str, Any]:
        target = self._load_in_scope(admin, staff_id)
        try:
            self.credentials.update(target, **fields)
            self.db.commit()
        except BackofficeError:
            self.db.rollback()
            raise

        self.db.refresh(target)
        logger.info(
            "%s updated staff_id=%s fields=%s",
            STAFF_PREFIX,
            target.id,
            ",".join(sorted(key for key, value in fields.items() if value is not None)),
        )
        return to_public_dict(target)

    def delete_staff(self, admin: User, staff_id: int) -> None:
        target = self._load_in_scope(admin, staff_id)
        self.credentials.delete(target)
        self.db.commit()
        logger.info("%s deleted staff_id=%s", STAFF_PREFIX, staff_id)
