from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, EmailStr, Field, field_validator

PASSWORD_STRENGTH_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


class UserRead(BaseModel):
    id: int
    name: str
    email: EmailStr
    role: str
    status: str
    restaurant_id: Optional[int] = None
    created_by_id: Optional[int] = None
    employee_id: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    hire_date: Optional[datetime] = None
    salary: Optional[float] = None
    last_login_at: Optional[datetime] = None
    is_email_verified: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AddressPayload(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = Field(None, validation_alias=AliasChoices("zip_code", "zipCode"))
    country: Optional[str] = None


class ProductKeyPayload(BaseModel):
    product_key: str = Field(..., min_length=1, validation_alias=AliasChoices("product_key", "productKey"))


class RegisterAdminPayload(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    product_key: str = Field(..., min_length=10, validation_alias=AliasChoices("product_key", "productKey"))
    restaurant_name: str = Field(
        ...,
        min_length=2,
        max_length=100,
        validation_alias=AliasChoices("restaurant_name", "restaurantName"),
    )
    restaurant_address: Optional[AddressPayload] = Field(
        None, validation_alias=AliasChoices("restaurant_address", "restaurantAddress")
    )
    restaurant_phone: Optional[str] = Field(
        None, max_length=30, validation_alias=AliasChoices("restaurant_phone", "restaurantPhone")
    )

    @field_validator("name", "product_key", "restaurant_name")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return value.strip()

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, value: str) -> str:
        if not PASSWORD_STRENGTH_PATTERN.match(value):
            raise ValueError("A senha precisa ter ao menos uma letra maiúscula, uma minúscula e um número")
        return value


class LoginPayload(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UpdatePasswordPayload(BaseModel):
    current_password: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("current_password", "currentPassword")
    )
    new_password: str = Field(..., min_length=6, validation_alias=AliasChoices("new_password", "newPassword"))


class AuthResponse(BaseModel):
    success: bool = True
    token: str
    user: UserRead


class ProductKeyStatusResponse(BaseModel):
    success: bool = True
    message: str
    plan: Optional[str] = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str
