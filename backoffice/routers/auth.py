# backoffice/routers/auth.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from fastapi.security import OAuth2PasswordRequestForm

from backoffice.core.config import AUTH_COOKIE_MAX_AGE_SECONDS, AUTH_COOKIE_NAME, AUTH_COOKIE_SECURE
from backoffice.deps import get_auth_flow, get_current_user
from backoffice.models.user import User
from backoffice.schemas.auth import (
    AuthResponse,
    LoginPayload,
    MessageResponse,
    ProductKeyPayload,
    ProductKeyStatusResponse,
    RegisterAdminPayload,
    UpdatePasswordPayload,
)
from backoffice.services.auth_flow import AuthenticationFlow, AuthResult, RegisterAdminCommand
from backoffice.services.restaurants import RestaurantAddress

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_token_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=token,
        max_age=AUTH_COOKIE_MAX_AGE_SECONDS,
        httponly=True,
        secure=AUTH_COOKIE_SECURE,
        samesite="strict",
        path="/",
    )


def _token_response(response: Response, result: AuthResult) -> dict:
    _set_token_cookie(response, result.token)
    return {"success": True, "token": result.token, "user": result.user}


@router.post("/validate-product-key", response_model=ProductKeyStatusResponse)
def validate_product_key(payload: ProductKeyPayload, flow: AuthenticationFlow = Depends(get_auth_flow)):
    availability = flow.validate_product_key(payload.product_key)
    return {"success": True, "message": "Chave de produto válida", "plan": availability.plan}


@router.post("/register-admin", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register_admin(
    payload: RegisterAdminPayload,
    response: Response,
    flow: AuthenticationFlow = Depends(get_auth_flow),
):
    address = None
    if payload.restaurant_address is not None:
        address = RestaurantAddress(**payload.restaurant_address.model_dump())

    result = flow.register_admin(
        RegisterAdminCommand(
            name=payload.name,
            email=payload.email,
            password=payload.password,
            product_key=payload.product_key,
            restaurant_name=payload.restaurant_name,
            restaurant_address=address,
            restaurant_phone=payload.restaurant_phone,
        )
    )
    return _token_response(response, result)


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginPayload, response: Response, flow: AuthenticationFlow = Depends(get_auth_flow)):
    return _token_response(response, flow.login(payload.email, payload.password))


@router.post("/token")
def token(form_data: OAuth2PasswordRequestForm = Depends(), flow: AuthenticationFlow = Depends(get_auth_flow)):
    """Endpoint usado pelo botão Authorize do Swagger UI (form-data: username e password)."""
    result = flow.login(form_data.username, form_data.password)
    return {"access_token": result.token, "token_type": "bearer"}


@router.get("/me")
def me(user: User = Depends(get_current_user), flow: AuthenticationFlow = Depends(get_auth_flow)):
    return {"success": True, "user": flow.current_user_profile(user)}


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response, user: User = Depends(get_current_user)):
    # Token é stateless: só limpamos o cookie. O JWT segue válido até expirar.
    response.delete_cookie(
        key=AUTH_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=AUTH_COOKIE_SECURE,
        samesite="strict",
    )
    return {"success": True, "message": "Logout realizado com sucesso"}


@router.put("/updatepassword", response_model=AuthResponse)
def update_password(
    payload: UpdatePasswordPayload,
    response: Response,
    user: User = Depends(get_current_user),
    flow: AuthenticationFlow = Depends(get_auth_flow),
):
    result = flow.update_password(user.id, payload.current_password, payload.new_password)
    return _token_response(response, result)
