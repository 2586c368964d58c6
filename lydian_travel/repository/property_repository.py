from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from lydian_travel.models.property import RentalProperty


def list_properties(
    db: Session,
    *,
    city: Optional[str] = None,
    property_type: Optional[str] = None,
    guests: Optional[int] = None,
    max_price: Optional[Decimal] = None,
    status_filter: Optional[str] = "active",
    owner_id: Optional[int] = None,
    limit: int = 50,
    offset: int = 0,
) -> List[RentalProperty]:
    query = db.query(RentalProperty)

    if status_filter is not None:
        query = query.filter(RentalProperty.status == status_filter)
    if owner_id is not None:
        query = query.filter(RentalProperty.id_owner == owner_id)
    if city:
        query = query.filter(func.lower(RentalProperty.city).contains(city.lower()))
    if property_type:
        query = query.filter(RentalProperty.property_type == property_type)
    if guests is not None:
        query = query.filter(RentalProperty.max_guests >= guests)
    if max_price is not None:
        query = query.filter(RentalProperty.base_price <= max_price)

    return (
        query.order_by(RentalProperty.rating.desc(), RentalProperty.id_property)
        .offset(offset)
        .limit(limit)
        .all()
    )


def list_owner_properties(db: Session, owner_id: int) -> List[RentalProperty]:
    return (
        db.query(RentalProperty)
        .filter(RentalProperty.id_owner == owner_id)
        .order_by(RentalProperty.id_property)
        .all()
    )


def get_property(db: Session, property_id: int) -> Optional[RentalProperty]:
    return db.query(RentalProperty).filter(RentalProperty.id_property == property_id).first()


def get_property_by_slug(db: Session, slug: str) -> Optional[RentalProperty]:
    return db.query(RentalProperty).filter(RentalProperty.slug == slug).first()


def slug_exists(db: Session, slug: str) -> bool:
    return db.query(RentalProperty.id_property).filter(RentalProperty.slug == slug).first() is not None


def create_property(db: Session, property_data: Dict[str, Any]) -> RentalProperty:
    rental_property = RentalProperty(**property_data)
    db.add(rental_property)
    db.flush()
    return rental_property


def delete_property(db: Session, rental_property: RentalProperty) -> None:
    db.delete(rental_property)
    db.flush()
