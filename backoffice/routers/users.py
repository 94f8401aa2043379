from __future__ import annotations

from fastapi import APIRouter, Depends, status

from backoffice.deps import get_staff_service, require_role
from backoffice.models.user import ROLE_ADMIN, ROLE_MANAGER, User
from backoffice.schemas.auth import MessageResponse
from backoffice.schemas.users import StaffCreatePayload, StaffListResponse, StaffResponse, StaffUpdatePayload
from backoffice.services.staff import StaffService

router = APIRouter(prefix="/users", tags=["users"])

ADMIN_ONLY = [ROLE_ADMIN]
ADMIN_OR_MANAGER = [ROLE_ADMIN, ROLE_MANAGER]


@router.post("/register-staff", response_model=StaffResponse, status_code=status.HTTP_201_CREATED)
def register_staff(
    payload: StaffCreatePayload,
    user: User = Depends(require_role(ADMIN_ONLY)),
    service: StaffService = Depends(get_staff_service),
):
    staff = service.register_staff(
        user,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        role=payload.role,
        phone=payload.phone,
        address=payload.address,
        salary=payload.salary,
    )
    return {"success": True, "message": "Funcionário cadastrado com sucesso", "user": staff}


@router.get("/staff", response_model=StaffListResponse)
def list_staff(
    user: User = Depends(require_role(ADMIN_OR_MANAGER)),
    service: StaffService = Depends(get_staff_service),
):
    staff = service.list_staff(user)
    return {"success": True, "count": len(staff), "staff": staff}


@router.get("/staff/{staff_id}", response_model=StaffResponse)
def get_staff_member(
    staff_id: int,
    user: User = Depends(require_role(ADMIN_OR_MANAGER)),
    service: StaffService = Depends(get_staff_service),
):
    return {"success": True, "user": service.get_staff(user, staff_id)}


@router.put("/staff/{staff_id}", response_model=StaffResponse)
def update_staff(
    staff_id: int,
    payload: StaffUpdatePayload,
    user: User = Depends(require_role(ADMIN_ONLY)),
    service: StaffService = Depends(get_staff_service),
):
    staff = service.update_staff(user, staff_id, **payload.model_dump(exclude_unset=True))
    return {"success": True, "message": "Funcionário atualizado com sucesso", "user": staff}


@router.delete("/staff/{staff_id}", response_model=MessageResponse)
def delete_staff(
    staff_id: int,
    user: User = Depends(require_role(ADMIN_ONLY)),
    service: StaffService = Depends(get_staff_service),
):
    service.delete_staff(user, staff_id)
    return {"success": True, "message": "Funcionário removido com sucesso"}
