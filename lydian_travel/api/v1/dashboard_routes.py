from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from lydian_travel.core.security import require_roles
from lydian_travel.dependencies import get_db
from lydian_travel.models.user import User
from lydian_travel.schemas.dashboard import (
    PropertyOwnerDashboard,
    TransferOwnerDashboard,
    VehicleOwnerDashboard,
)
from lydian_travel.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboards", tags=["dashboards"])


@router.get("/property-owner", response_model=PropertyOwnerDashboard)
def property_owner_dashboard(
    current_user: User = Depends(require_roles("property_owner")),
    db: Session = Depends(get_db),
):
    service = DashboardService(db)
    return service.property_owner(current_user)


@router.get("/vehicle-owner", response_model=VehicleOwnerDashboard)
def vehicle_owner_dashboard(
    current_user: User = Depends(require_roles("vehicle_owner")),
    db: Session = Depends(get_db),
):
    service = DashboardService(db)
    return service.vehicle_owner(current_user)


@router.get("/transfer-owner", response_model=TransferOwnerDashboard)
def transfer_owner_dashboard(
    current_user: User = Depends(require_roles("transfer_owner")),
    db: Session = Depends(get_db),
):
    service = DashboardService(db)
    return service.transfer_owner(current_user)


__all__ = ["router"]
