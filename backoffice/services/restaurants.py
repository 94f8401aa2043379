from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from backoffice.core.errors import KeyAlreadyUsed, NotFound
from backoffice.models.restaurant import DEFAULT_COUNTRY, DEFAULT_PLAN, SUBSCRIPTION_ACTIVE, Restaurant
from backoffice.models.user import ROLE_ADMIN, User
from backoffice.services.product_keys import normalize_key


@dataclass(frozen=True)
class RestaurantAddress:
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None


class RestaurantStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def create(
        self,
        *,
        admin_id: int,
        product_key: str,
        name: str,
        address: Optional[RestaurantAddress] = None,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        plan: str = DEFAULT_PLAN,
    ) -> Restaurant:
        admin = self.db.query(User).filter(User.id == admin_id, User.role == ROLE_ADMIN).first()
        if admin is None:
            raise NotFound("Admin não encontrado")

        normalized_key = normalize_key(product_key)
        if self.db.query(Restaurant.id).filter(Restaurant.product_key == normalized_key).first() is not None:
            raise KeyAlreadyUsed()

        address = address or RestaurantAddress()
        restaurant = Restaurant(
            name=name.strip(),
            address_street=address.street,
            address_city=address.city,
            address_state=address.state,
            address_zip_code=address.zip_code,
            address_country=address.country or DEFAULT_COUNTRY,
            phone=phone,
            email=(email or "").strip().lower() or None,
            admin_id=admin_id,
            product_key=normalized_key,
            subscription_plan=plan,
        )
        self.db.add(restaurant)
        self.db.flush()
        return restaurant

    def find_by_id(self, restaurant_id: int) -> Optional[Restaurant]:
        return self.db.query(Restaurant).filter(Restaurant.id == restaurant_id).first()

    def find_by_admin(self, admin_id: int) -> Optional[Restaurant]:
        return self.db.query(Restaurant).filter(Restaurant.admin_id == admin_id).first()


def is_operational(restaurant: Optional[Restaurant]) -> bool:
    if restaurant is None:
        return False
    return bool(restaurant.is_active) and restaurant.subscription_status == SUBSCRIPTION_ACTIVE


def to_summary_dict(restaurant: Restaurant) -> Dict[str, Any]:
    return {
        "id": restaurant.id,
        "name": restaurant.name,
        "address": {
            "street": restaurant.address_street,
            "city": restaurant.address_city,
            "state": restaurant.address_state,
            "zip_code": restaurant.address_zip_code,
            "country": restaurant.address_country,
        },
        "phone": restaurant.phone,
        "email": restaurant.email,
        "admin_id": restaurant.admin_id,
        "subscription": {
            "plan": restaurant.subscription_plan,
            "status": restaurant.subscription_status,
            "expires_at": restaurant.subscription_expires_at,
        },
        "is_active": restaurant.is_active,
    }
