from __future__ import annotations

import logging
from typing import Iterable, Optional

from fastapi import Request

from backoffice.core.errors import AccountInactive, Forbidden, SubscriptionInactive
from backoffice.models.restaurant import Restaurant
from backoffice.models.user import ROLE_ADMIN, STATUS_ACTIVE, User
from backoffice.services.restaurants import is_operational

logger = logging.getLogger(__name__)


class AuthorizationService:
    """Centralize account-status, RBAC and tenant-scope checks."""

    @staticmethod
    def normalize_role(role: str | None) -> str:
        return (role or "").strip().lower()

    @staticmethod
    def log_access_denied(
        *,
        reason: str,
        user: User,
        restaurant_id: int | None,
        request: Optional[Request] = None,
    ) -> None:
        endpoint = f"{request.method} {request.url.path}" if request is not None else None
        logger.warning(
            "Access denied (%s): user_id=%s user_role=%s user_restaurant=%s restaurant_id=%s endpoint=%s",
            reason,
            getattr(user, "id", None),
            getattr(user, "role", None),
            getattr(user, "restaurant_id", None),
            restaurant_id,
            endpoint,
        )

    @staticmethod
    def needs_subscription_check(user: User) -> bool:
        return user.role != ROLE_ADMIN and user.restaurant_id is not None

    @classmethod
    def ensure_active(cls, *, user: User, request: Optional[Request] = None) -> None:
        if user.status != STATUS_ACTIVE:
            cls.log_access_denied(
                reason="account_inactive",
                user=user,
                restaurant_id=user.restaurant_id,
                request=request,
            )
            raise AccountInactive()

    @classmethod
    def ensure_subscription_active(
        cls,
        *,
        user: User,
        restaurant: Restaurant | None,
        request: Optional[Request] = None,
    ) -> None:
        """Restaurante existente, ativo e com assinatura ``active``."""
        if not is_operational(restaurant):
            cls.log_access_denied(
                reason="subscription_inactive",
                user=user,
                restaurant_id=user.restaurant_id,
                request=request,
            )
            raise SubscriptionInactive()

    @classmethod
    def ensure_account_usable(
        cls,
        *,
        user: User,
        restaurant: Restaurant | None,
        request: Optional[Request] = None,
    ) -> None:
        """``restaurant`` só é consultado quando ``needs_subscription_check`` é verdadeiro."""
        cls.ensure_active(user=user, request=request)
        if cls.needs_subscription_check(user):
            cls.ensure_subscription_active(user=user, restaurant=restaurant, request=request)

    @classmethod
    def ensure_role(
        cls,
        *,
        user: User,
        roles: Iterable[str],
        request: Optional[Request] = None,
    ) -> None:
        allowed = {cls.normalize_role(role) for role in roles}
        if cls.normalize_role(user.role) not in allowed:
            cls.log_access_denied(
                reason="role_denied",
                user=user,
                restaurant_id=user.restaurant_id,
                request=request,
            )
            raise Forbidden(f"Acesso negado. Role '{user.role}' não tem permissão para este recurso.")

    @classmethod
    def ensure_tenant_access(
        cls,
        *,
        user: User,
        restaurant_id: int,
        owned_restaurant: Restaurant | None = None,
        request: Optional[Request] = None,
    ) -> int:
        """Admin acessa o restaurante que possui; qualquer usuário acessa o restaurante em que está lotado.

        ``owned_restaurant`` é o restaurante cujo ``admin_id`` é o usuário (só relevante para admin).
        """
        target = int(restaurant_id)
        owns_target = (
            user.role == ROLE_ADMIN
            and owned_restaurant is not None
            and int(owned_restaurant.admin_id) == int(user.id)
            and int(owned_restaurant.id) == target
        )
        assigned_to_target = user.restaurant_id is not None and int(user.restaurant_id) == target
        allowed = owns_target or assigned_to_target

        if not allowed:
            cls.log_access_denied(
                reason="tenant_mismatch",
                user=user,
                restaurant_id=target,
                request=request,
            )
            raise Forbidden("Acesso negado. Você só pode acessar o seu restaurante.")
        return target
