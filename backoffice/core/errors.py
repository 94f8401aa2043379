"""Erros de domínio do back-office e seus handlers HTTP.

Os serviços levantam subclasses de ``BackofficeError``; a borda HTTP as
converte em ``{"success": false, "message": ...}`` com o status adequado.
Nenhuma exceção de storage atravessa a borda sem tradução.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class BackofficeError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "BAD_REQUEST"
    default_message = "Requisição inválida"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.headers = headers
        super().__init__(self.message)


class KeyNotAllowed(BackofficeError):
    error_code = "KEY_NOT_ALLOWED"
    default_message = "Chave de produto inválida"


class KeyAlreadyUsed(BackofficeError):
    error_code = "KEY_ALREADY_USED"
    default_message = "Chave de produto já utilizada"


class EmailTaken(BackofficeError):
    error_code = "EMAIL_TAKEN"
    default_message = "Já existe um usuário com este e-mail"


class ValidationFailed(BackofficeError):
    error_code = "VALIDATION_FAILED"
    default_message = "Validação falhou"


class InvalidCredentials(BackofficeError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "INVALID_CREDENTIALS"
    default_message = "Credenciais inválidas"


class AccountInactive(BackofficeError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "ACCOUNT_INACTIVE"
    default_message = "Conta inativa. Procure o administrador."


class TokenInvalid(BackofficeError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "TOKEN_INVALID"
    default_message = "Token inválido ou expirado"


class Unauthenticated(BackofficeError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "UNAUTHENTICATED"
    default_message = "Acesso negado. Token não informado."


class SubscriptionInactive(BackofficeError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "SUBSCRIPTION_INACTIVE"
    default_message = "Assinatura do restaurante inativa. Procure o administrador."


class Forbidden(BackofficeError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "FORBIDDEN"
    default_message = "Acesso negado"


class NotFound(BackofficeError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"
    default_message = "Recurso não encontrado"


class StorageFailure(BackofficeError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "STORAGE_FAILURE"
    default_message = "Erro interno do servidor"


def _error_body(message: str, error_code: str, **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "message": message, "error_code": error_code}
    body.update(extra)
    return body


async def handle_backoffice_error(request: Request, exc: BackofficeError) -> JSONResponse:
    headers = dict(exc.headers or {})
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers.setdefault("WWW-Authenticate", "Bearer")
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.message, exc.error_code),
        headers=headers or None,
    )


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg"),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(ValidationFailed.default_message, ValidationFailed.error_code, errors=errors),
    )


async def handle_storage_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Storage failure at %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=StorageFailure.status_code,
        content=_error_body(StorageFailure.default_message, StorageFailure.error_code),
    )


def register_exception_handlers(app) -> None:
    app.add_exception_handler(BackofficeError, handle_backoffice_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(SQLAlchemyError, handle_storage_error)
