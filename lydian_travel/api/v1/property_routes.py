"""Rental property listing wizard, owner management and public search."""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status
from sqlalchemy.orm import Session

from lydian_travel.core.security import get_current_user, require_roles
from lydian_travel.dependencies import get_db
from lydian_travel.models.user import User
from lydian_travel.schemas.property import PropertyReject, PropertyResponse, PropertyUpdate
from lydian_travel.schemas.property_submission import PropertySubmission, StepValidationResponse
from lydian_travel.services.property_service import PropertyService

router = APIRouter(prefix="/properties", tags=["properties"])

_property_owner = require_roles("property_owner")
_admin = require_roles("admin")


@router.post("/wizard/steps/{step}/validate", response_model=StepValidationResponse)
def validate_wizard_step(step: int, payload: Dict[str, Any] = Body(...)):
    """Validate a single step of the listing wizard without saving anything."""

    return PropertyService.validate_step(step, payload)


@router.post("", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED)
def submit_property(
    submission: PropertySubmission,
    current_user: User = Depends(_property_owner),
    db: Session = Depends(get_db),
):
    service = PropertyService(db)
    return service.submit_property(current_user, submission)


@router.get("", response_model=List[PropertyResponse])
def search_properties(
    *,
    db: Session = Depends(get_db),
    city: Optional[str] = Query(None, description="Filter by city"),
    property_type: Optional[str] = Query(None, description="Filter by property type"),
    guests: Optional[int] = Query(None, ge=1, description="Minimum guest capacity"),
    max_price: Optional[Decimal] = Query(None, gt=0, description="Maximum nightly price"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    """Search active listings."""

    service = PropertyService(db)
    return service.search_properties(
        city=city,
        property_type=property_type,
        guests=guests,
        max_price=max_price,
        limit=limit,
        offset=offset,
    )


@router.get("/mine", response_model=List[PropertyResponse])
def list_my_properties(
    current_user: User = Depends(_property_owner),
    db: Session = Depends(get_db),
):
    service = PropertyService(db)
    return service.list_owner_properties(current_user)


@router.get("/slug/{slug}", response_model=PropertyResponse)
def get_property_by_slug(slug: str, db: Session = Depends(get_db)):
    service = PropertyService(db)
    return service.get_property_by_slug(slug)


@router.get("/{property_id}", response_model=PropertyResponse)
def get_property(property_id: int, db: Session = Depends(get_db)):
    service = PropertyService(db)
    return service.get_public_property(property_id)


@router.patch("/{property_id}", response_model=PropertyResponse)
def update_property(
    property_id: int,
    payload: PropertyUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    service = PropertyService(db)
    return service.update_property(property_id, current_user, payload)


@router.delete("/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_property(
    property_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    service = PropertyService(db)
    service.delete_property(property_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{property_id}/approve", response_model=PropertyResponse)
def approve_property(
    property_id: int,
    _: User = Depends(_admin),
    db: Session = Depends(get_db),
):
    service = PropertyService(db)
    return service.approve_property(property_id)


@router.post("/{property_id}/reject", response_model=PropertyResponse)
def reject_property(
    property_id: int,
    payload: PropertyReject,
    _: User = Depends(_admin),
    db: Session = Depends(get_db),
):
    service = PropertyService(db)
    return service.reject_property(property_id, payload.reason)


__all__ = ["router"]
