import logging
import re
import unicodedata
from decimal import Decimal
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lydian_travel.models.property import RentalProperty
from lydian_travel.models.user import User
from lydian_travel.repository import booking_repository, property_repository
from lydian_travel.schemas.property import PropertyUpdate
from lydian_travel.schemas.property_submission import STEP_MODELS, PropertySubmission

logger = logging.getLogger(__name__)

_TURKISH_ASCII = str.maketrans(
    {"ı": "i", "İ": "i", "ş": "s", "Ş": "s", "ğ": "g", "Ğ": "g", "ç": "c", "Ç": "c", "ö": "o", "Ö": "o", "ü": "u", "Ü": "u"}
)


def slugify(value: str) -> str:
    """Lower-case ASCII slug, with Turkish letters folded to their base letter."""
    value = value.translate(_TURKISH_ASCII)
    value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    value = re.sub(r"[^a-zA-Z0-9]+", "-", value).strip("-").lower()
    return value or "property"


def format_validation_errors(exc: ValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        message = error.get("msg", "Invalid input")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages)


class PropertyService:
    def __init__(self, db: Session):
        self.db = db

    def _commit(self, message: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("%s: %s", message, exc)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=message,
            ) from exc

    @staticmethod
    def validate_step(step: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        model = STEP_MODELS.get(step)
        if model is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Unknown wizard step",
            )
        try:
            model.model_validate(payload)
        except ValidationError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=format_validation_errors(exc),
            ) from exc
        return {"valid": True, "step": step}

    def _unique_slug(self, name: str) -> str:
        base = slugify(name)
        candidate = base
        suffix = 2
        while property_repository.slug_exists(self.db, candidate):
            candidate = f"{base}-{suffix}"
            suffix += 1
        return candidate

    @staticmethod
    def _ensure_can_manage(rental_property: RentalProperty, user: User) -> None:
        if user.role != "admin" and rental_property.id_owner != user.id_user:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions",
            )

    def submit_property(self, owner: User, submission: PropertySubmission) -> RentalProperty:
        basic = submission.basic_info
        location = submission.location
        amenities = submission.amenities
        pricing = submission.pricing
        photos = submission.photos
        rules = submission.rules
        legal = submission.legal
        review = submission.review

        target_status = "draft" if review.submission_type == "save_draft" else "pending_review"
        property_data = {
            "id_owner": owner.id_user,
            "name": basic.name,
            "slug": self._unique_slug(basic.name),
            "property_type": basic.property_type,
            "description": basic.description,
            "highlights": list(basic.highlights),
            "bedrooms": basic.bedrooms,
            "bathrooms": Decimal(str(basic.bathrooms)),
            "max_guests": basic.max_guests,
            "beds": location.beds.model_dump() if location.beds is not None else {},
            "country": location.country,
            "province": location.province,
            "city": location.city,
            "district": location.district,
            "address": location.address,
            "postal_code": location.postal_code,
            "latitude": Decimal(str(location.latitude)),
            "longitude": Decimal(str(location.longitude)),
            "timezone": location.timezone,
            "amenities": list(amenities.amenities),
            "custom_amenities": list(amenities.custom_amenities),
            "features": dict(amenities.features),
            "safety": dict(amenities.safety),
            "base_price": pricing.base_price,
            "currency": pricing.currency,
            "seasonal_prices": [season.model_dump(mode="json") for season in pricing.seasonal_prices],
            "weekly_discount": pricing.weekly_discount,
            "monthly_discount": pricing.monthly_discount,
            "cleaning_fee": pricing.cleaning_fee,
            "security_deposit": pricing.security_deposit,
            "min_stay": pricing.min_stay,
            "max_stay": pricing.max_stay,
            "photos": [photo.model_dump() for photo in photos.photos],
            "cover_photo_index": photos.cover_photo_index,
            "video_url": photos.video_url,
            "virtual_tour_url": photos.virtual_tour_url,
            "check_in_time": rules.check_in_time,
            "check_out_time": rules.check_out_time,
            "house_rules": rules.house_rules.model_dump(),
            "custom_rules": list(rules.custom_rules),
            "cancellation_policy": rules.cancellation_policy,
            "legal": legal.model_dump(),
            "submission_notes": review.notes,
            "verification_method": review.verification_method,
            "status": target_status,
        }

        rental_property = property_repository.create_property(self.db, property_data)
        self._commit("Could not save property")
        self.db.refresh(rental_property)
        logger.info(
            "Property %s submitted by user %s as %s",
            rental_property.slug,
            owner.id_user,
            target_status,
        )
        return rental_property

    def list_owner_properties(self, owner: User) -> List[RentalProperty]:
        return property_repository.list_owner_properties(self.db, owner.id_user)

    def search_properties(
        self,
        *,
        city: Optional[str] = None,
        property_type: Optional[str] = None,
        guests: Optional[int] = None,
        max_price: Optional[Decimal] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[RentalProperty]:
        return property_repository.list_properties(
            self.db,
            city=city,
            property_type=property_type,
            guests=guests,
            max_price=max_price,
            limit=limit,
            offset=offset,
        )

    def get_property(self, property_id: int) -> RentalProperty:
        rental_property = property_repository.get_property(self.db, property_id)
        if rental_property is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")
        return rental_property

    def get_public_property(self, property_id: int) -> RentalProperty:
        rental_property = self.get_property(property_id)
        if rental_property.status != "active":
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")
        return rental_property

    def get_property_by_slug(self, slug: str) -> RentalProperty:
        rental_property = property_repository.get_property_by_slug(self.db, slug)
        if rental_property is None or rental_property.status != "active":
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")
        return rental_property

    def get_owned_property(self, property_id: int, user: User) -> RentalProperty:
        rental_property = self.get_property(property_id)
        self._ensure_can_manage(rental_property, user)
        return rental_property

    def update_property(self, property_id: int, user: User, payload: PropertyUpdate) -> RentalProperty:
        rental_property = self.get_owned_property(property_id, user)
        update_data = payload.model_dump(exclude_unset=True)

        min_stay = update_data.get("min_stay", rental_property.min_stay)
        max_stay = update_data.get("max_stay", rental_property.max_stay)
        if max_stay is not None and max_stay < min_stay:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Maximum stay must be greater than or equal to minimum stay",
            )
        check_in = update_data.get("check_in_time", rental_property.check_in_time)
        check_out = update_data.get("check_out_time", rental_property.check_out_time)
        if check_in == check_out:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Check-out time must be different from check-in time",
            )

        for field, value in update_data.items():
            if field == "highlights" and value is not None:
                value = list(value)
            setattr(rental_property, field, value)

        self._commit("Could not update property")
        self.db.refresh(rental_property)
        return rental_property

    def delete_property(self, property_id: int, user: User) -> None:
        rental_property = self.get_owned_property(property_id, user)
        if booking_repository.list_listing_bookings(
            self.db, listing="property", listing_ids=[rental_property.id_property]
        ):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Property has bookings and cannot be deleted",
            )
        property_repository.delete_property(self.db, rental_property)
        self._commit("Could not delete property")

    def _set_status(self, property_id: int, new_status: str, note: Optional[str] = None) -> RentalProperty:
        rental_property = self.get_property(property_id)
        rental_property.status = new_status
        if note:
            rental_property.submission_notes = note
        self._commit("Could not update property status")
        self.db.refresh(rental_property)
        logger.info("Property %s moved to %s", rental_property.slug, new_status)
        return rental_property

    def approve_property(self, property_id: int) -> RentalProperty:
        return self._set_status(property_id, "active")

    def reject_property(self, property_id: int, reason: Optional[str] = None) -> RentalProperty:
        return self._set_status(property_id, "rejected", reason)
