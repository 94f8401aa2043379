from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field

from backoffice.schemas.auth import UserRead


class StaffCreatePayload(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: Literal["manager", "cashier", "kitchen"]
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = Field(None, max_length=200)
    salary: Optional[float] = Field(None, gt=0)


class StaffUpdatePayload(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = Field(None, max_length=200)
    salary: Optional[float] = Field(None, gt=0)
    status: Optional[Literal["active", "inactive"]] = None


class StaffResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    user: UserRead


class StaffListResponse(BaseModel):
    success: bool = True
    count: int
    staff: List[UserRead]
