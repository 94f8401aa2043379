# backoffice/deps.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from backoffice.core.database import get_db
from backoffice.core.errors import TokenInvalid, Unauthenticated
from backoffice.core.request_context import bind_identity
from backoffice.models.user import User
from backoffice.services.auth_flow import AuthenticationFlow
from backoffice.services.authorization_service import AuthorizationService
from backoffice.services.product_keys import ProductKeyLedger, get_default_allowed_keys
from backoffice.services.restaurants import RestaurantStore
from backoffice.services.staff import StaffService
from backoffice.services.tokens import TokenService, get_token_service

# auto_error=False: a ausência do header vira nosso Unauthenticated em vez do 403 padrão
bearer_scheme = HTTPBearer(auto_error=False)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestIdentity:
    """Snapshot do usuário autenticado guardado em ``request.state.identity``."""

    user_id: int
    role: str
    restaurant_id: Optional[int]


def get_allowed_product_keys() -> tuple[str, ...]:
    return get_default_allowed_keys()


def get_product_key_ledger(
    db: Session = Depends(get_db),
    allowed_keys: tuple[str, ...] = Depends(get_allowed_product_keys),
) -> ProductKeyLedger:
    return ProductKeyLedger(db, allowed_keys)


def get_auth_flow(
    db: Session = Depends(get_db),
    ledger: ProductKeyLedger = Depends(get_product_key_ledger),
    tokens: TokenService = Depends(get_token_service),
) -> AuthenticationFlow:
    return AuthenticationFlow(db, ledger, tokens)


def get_staff_service(db: Session = Depends(get_db)) -> StaffService:
    return StaffService(db)


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> User:
    """Lê o bearer token, valida e recarrega o usuário e o restaurante do banco."""
    if credentials is None or not credentials.credentials:
        raise Unauthenticated()

    try:
        user_id = tokens.verify(credentials.credentials)
    except TokenInvalid as exc:
        logger.info("[AUTH] bearer token rejected: %s", exc.message)
        raise Unauthenticated("Token inválido ou expirado") from exc

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise Unauthenticated("Token inválido. Usuário não encontrado.")

    restaurant = None
    if AuthorizationService.needs_subscription_check(user):
        restaurant = RestaurantStore(db).find_by_id(user.restaurant_id)
    AuthorizationService.ensure_account_usable(user=user, restaurant=restaurant, request=request)

    request.state.identity = RequestIdentity(
        user_id=user.id,
        role=user.role,
        restaurant_id=user.restaurant_id,
    )
    bind_identity(user)
    return user


def require_role(roles: Iterable[str]):
    allowed = tuple(AuthorizationService.normalize_role(role) for role in roles)

    def _dependency(
        request: Request,
        user: User = Depends(get_current_user),
    ) -> User:
        AuthorizationService.ensure_role(user=user, roles=allowed, request=request)
        return user

    return _dependency


def require_tenant_access(
    restaurant_id: int,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> User:
    """Garante que o usuário pertence ao restaurante da rota (``/{restaurant_id}``)."""
    owned = RestaurantStore(db).find_by_admin(user.id) if user.is_admin else None
    AuthorizationService.ensure_tenant_access(
        user=user,
        restaurant_id=restaurant_id,
        owned_restaurant=owned,
        request=request,
    )
    return user
