from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from backoffice.core.database import get_db
from backoffice.core.errors import NotFound
from backoffice.deps import get_staff_service, require_tenant_access
from backoffice.models.user import ROLE_ADMIN, ROLE_MANAGER, User
from backoffice.schemas.users import StaffListResponse
from backoffice.services.authorization_service import AuthorizationService
from backoffice.services.restaurants import RestaurantStore, to_summary_dict
from backoffice.services.staff import StaffService

router = APIRouter(prefix="/restaurants", tags=["restaurants"])


@router.get("/{restaurant_id}")
def get_restaurant(
    restaurant_id: int,
    user: User = Depends(require_tenant_access),
    db: Session = Depends(get_db),
):
    restaurant = RestaurantStore(db).find_by_id(restaurant_id)
    if restaurant is None:
        raise NotFound("Restaurante não encontrado")
    return {"success": True, "restaurant": to_summary_dict(restaurant)}


@router.get("/{restaurant_id}/staff", response_model=StaffListResponse)
def list_restaurant_staff(
    restaurant_id: int,
    request: Request,
    user: User = Depends(require_tenant_access),
    service: StaffService = Depends(get_staff_service),
):
    AuthorizationService.ensure_role(user=user, roles=[ROLE_ADMIN, ROLE_MANAGER], request=request)
    staff = service.list_staff(user, restaurant_id=restaurant_id)
    return {"success": True, "count": len(staff), "staff": staff}
