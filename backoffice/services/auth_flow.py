"""Fluxos de autenticação: registro de admin + restaurante, login e troca de senha.

O registro grava admin, restaurante e resgate da chave numa única transação:
se qualquer passo falhar, nada fica persistido (sem admin órfão).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backoffice.core.errors import BackofficeError, EmailTaken, InvalidCredentials, NotFound, StorageFailure
from backoffice.models.user import User, utcnow
from backoffice.services.authorization_service import AuthorizationService
from backoffice.services.credentials import AdminAccount, CredentialStore, to_public_dict
from backoffice.services.product_keys import KeyAvailability, ProductKeyLedger
from backoffice.services.restaurants import RestaurantAddress, RestaurantStore, to_summary_dict
from backoffice.services.tokens import TokenService

logger = logging.getLogger(__name__)
AUTH_PREFIX = "[AUTH]"


@dataclass(frozen=True)
class RegisterAdminCommand:
    name: str
    email: str
    password: str
    product_key: str
    restaurant_name: str
    restaurant_address: Optional[RestaurantAddress] = None
    restaurant_phone: Optional[str] = None


@dataclass(frozen=True)
class AuthResult:
    token: str
    user: Dict[str, Any]


class AuthenticationFlow:
    def __init__(self, db: Session, ledger: ProductKeyLedger, tokens: TokenService) -> None:
        self.db = db
        self.ledger = ledger
        self.tokens = tokens
        self.credentials = CredentialStore(db)
        self.restaurants = RestaurantStore(db)

    def _issue(self, user: User) -> AuthResult:
        return AuthResult(token=self.tokens.issue(user.id), user=to_public_dict(user))

    def validate_product_key(self, key: str) -> KeyAvailability:
        return self.ledger.check_availability(key)

    def register_admin(self, command: RegisterAdminCommand) -> AuthResult:
        availability = self.ledger.check_availability(command.product_key)
        if self.credentials.email_exists(command.email):
            raise EmailTaken()

        try:
            admin = self.credentials.create_user(
                AdminAccount(name=command.name, email=command.email, password=command.password)
            )
            restaurant = self.restaurants.create(
                admin_id=admin.id,
                product_key=command.product_key,
                name=command.restaurant_name,
                address=command.restaurant_address,
                phone=command.restaurant_phone,
                email=admin.email,
                plan=availability.plan,
            )
            admin.restaurant_id = restaurant.id
            self.ledger.redeem(command.product_key, admin.id)
            self.db.commit()
        except BackofficeError:
            self.db.rollback()
            logger.warning("%s register_admin rolled back email=%s", AUTH_PREFIX, command.email)
            raise
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("%s register_admin storage failure email=%s", AUTH_PREFIX, command.email)
            raise StorageFailure("Erro no servidor durante o registro do admin") from exc

        self.db.refresh(admin)
        logger.info(
            "%s admin registered user_id=%s restaurant_id=%s plan=%s",
            AUTH_PREFIX,
            admin.id,
            restaurant.id,
            restaurant.subscription_plan,
        )
        return self._issue(admin)

    def login(self, email: str, password: str) -> AuthResult:
        user = self.credentials.find_by_email(email)
        if user is None:
            logger.info("%s login failed: unknown email", AUTH_PREFIX)
            raise InvalidCredentials()

        # conta inativa é checada antes da senha
        AuthorizationService.ensure_active(user=user)

        if not self.credentials.verify(user, password):
            logger.info("%s login failed: bad password user_id=%s", AUTH_PREFIX, user.id)
            raise InvalidCredentials()

        if AuthorizationService.needs_subscription_check(user):
            restaurant = self.restaurants.find_by_id(user.restaurant_id)
            AuthorizationService.ensure_subscription_active(user=user, restaurant=restaurant)

        user.last_login_at = utcnow()
        self.db.commit()
        self.db.refresh(user)
        logger.info("%s login success user_id=%s role=%s", AUTH_PREFIX, user.id, user.role)
        return self._issue(user)

    def update_password(self, user_id: int, current_password: str, new_password: str) -> AuthResult:
        user = self.credentials.find_by_id(user_id)
        if user is None:
            raise NotFound("Usuário não encontrado")

        if not self.credentials.verify(user, current_password):
            raise InvalidCredentials("Senha atual incorreta", status_code=400)

        self.credentials.update(user, password=new_password)
        self.db.commit()
        self.db.refresh(user)
        logger.info("%s password updated user_id=%s", AUTH_PREFIX, user.id)
        return self._issue(user)

    def current_user_profile(self, user: User) -> Dict[str, Any]:
        profile = to_public_dict(user)
        restaurant = None
        if user.restaurant_id is not None:
            restaurant = self.restaurants.find_by_id(user.restaurant_id)
        profile["restaurant"] = to_summary_dict(restaurant) if restaurant is not None else None
        return profile
