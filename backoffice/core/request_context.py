from __future__ import annotations

from contextvars import ContextVar
from typing import Any


_REQUEST_ID_CTX: ContextVar[str | None] = ContextVar("request_id", default=None)
_RESTAURANT_ID_CTX: ContextVar[str | None] = ContextVar("restaurant_id", default=None)
_USER_ID_CTX: ContextVar[str | None] = ContextVar("user_id", default=None)
_CLIENT_IP_CTX: ContextVar[str | None] = ContextVar("client_ip", default=None)


def set_request_context(
    *,
    request_id: str | None = None,
    restaurant_id: Any = None,
    user_id: Any = None,
    client_ip: str | None = None,
) -> None:
    if request_id is not None:
        _REQUEST_ID_CTX.set(request_id)
    if restaurant_id is not None:
        _RESTAURANT_ID_CTX.set(str(restaurant_id))
    if user_id is not None:
        _USER_ID_CTX.set(str(user_id))
    if client_ip is not None:
        _CLIENT_IP_CTX.set(client_ip)


def bind_identity(user) -> None:
    """Registra o usuário autenticado no contexto de log da requisição."""
    set_request_context(
        user_id=getattr(user, "id", None),
        restaurant_id=getattr(user, "restaurant_id", None),
    )


def get_request_id() -> str | None:
    return _REQUEST_ID_CTX.get()


def get_restaurant_id() -> str | None:
    return _RESTAURANT_ID_CTX.get()


def get_user_id() -> str | None:
    return _USER_ID_CTX.get()


def get_client_ip() -> str | None:
    return _CLIENT_IP_CTX.get()


def clear_request_context() -> None:
    _REQUEST_ID_CTX.set(None)
    _RESTAURANT_ID_CTX.set(None)
    _USER_ID_CTX.set(None)
    _CLIENT_IP_CTX.set(None)
