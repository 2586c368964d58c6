import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lydian_travel.models.booking import Booking, BookingStatus, BookingType
from lydian_travel.models.review import Review, ReviewVote
from lydian_travel.models.user import User
from lydian_travel.repository import booking_repository, property_repository, review_repository
from lydian_travel.schemas.review import ReviewCreate, ReviewResponse

logger = logging.getLogger(__name__)

_LISTING_BY_BOOKING_TYPE = {
    BookingType.PROPERTY: ("property", "id_property"),
    BookingType.CAR: ("vehicle", "id_vehicle"),
    BookingType.TRANSFER: ("transfer", "id_transfer_vehicle"),
}


def summarize_ratings(distribution: Dict[int, int]) -> Dict[str, Any]:
    """Average rating and a per-star count (1..5) from grouped rating counts."""
    counts = {star: int(distribution.get(star, 0)) for star in range(1, 6)}
    total = sum(counts.values())
    if total == 0:
        return {"average_rating": 0.0, "total": 0, "distribution": counts}
    average = Decimal(sum(star * count for star, count in counts.items())) / Decimal(total)
    return {
        "average_rating": float(average.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)),
        "total": total,
        "distribution": counts,
    }


def _listing_for(booking: Booking) -> Optional[tuple[str, int]]:
    mapping = _LISTING_BY_BOOKING_TYPE.get(booking.booking_type)
    if mapping is None:
        return None
    listing_type, column = mapping
    listing_id = getattr(booking, column)
    if listing_id is None:
        return None
    return listing_type, listing_id


class ReviewService:
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
    def to_response(review: Review) -> ReviewResponse:
        response = ReviewResponse.model_validate(review)
        if review.user is not None:
            response.author_name = review.user.full_name
        return response

    def _refresh_property_rating(self, property_id: int) -> None:
        rental_property = property_repository.get_property(self.db, property_id)
        if rental_property is None:
            return
        summary = summarize_ratings(review_repository.rating_distribution(self.db, "property", property_id))
        rental_property.rating = Decimal(str(summary["average_rating"]))
        rental_property.review_count = summary["total"]

    def create_review(self, user: User, payload: ReviewCreate) -> Review:
        booking = booking_repository.get_booking(self.db, payload.booking_id, user_id=user.id_user)
        if booking is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
        if booking.status != BookingStatus.COMPLETED:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Only completed bookings can be reviewed",
            )
        listing = _listing_for(booking)
        if listing is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="This booking cannot be reviewed",
            )
        if review_repository.get_review_by_booking(self.db, booking.id_booking) is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="This booking has already been reviewed",
            )

        listing_type, listing_id = listing
        review = review_repository.create_review(
            self.db,
            Review(
                id_user=user.id_user,
                id_booking=booking.id_booking,
                listing_type=listing_type,
                listing_id=listing_id,
                rating=payload.rating,
                title=payload.title,
                comment=payload.comment,
                helpful_count=0,
                not_helpful_count=0,
            ),
        )
        if listing_type == "property":
            self._refresh_property_rating(listing_id)

        self._commit("Could not save review")
        self.db.refresh(review)
        logger.info("Review %s created for %s %s", review.id_review, listing_type, listing_id)
        return review

    def list_reviews(
        self, listing_type: str, listing_id: int, *, limit: int = 20, offset: int = 0
    ) -> Dict[str, Any]:
        summary = summarize_ratings(review_repository.rating_distribution(self.db, listing_type, listing_id))
        reviews = review_repository.list_listing_reviews(
            self.db, listing_type, listing_id, limit=limit, offset=offset
        )
        summary["reviews"] = [self.to_response(review) for review in reviews]
        return summary

    def _get_review(self, review_id: int) -> Review:
        review = review_repository.get_review(self.db, review_id)
        if review is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Review not found")
        return review

    def vote(self, review_id: int, user: User, helpful: bool) -> Review:
        review = self._get_review(review_id)
        if review_repository.get_vote(self.db, review.id_review, user.id_user) is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="You have already voted on this review",
            )
        review_repository.create_vote(
            self.db,
            ReviewVote(
                id_review=review.id_review,
                id_user=user.id_user,
                vote_type="helpful" if helpful else "not_helpful",
            ),
        )
        if helpful:
            review.helpful_count = (review.helpful_count or 0) + 1
        else:
            review.not_helpful_count = (review.not_helpful_count or 0) + 1

        self._commit("Could not save vote")
        self.db.refresh(review)
        return review

    def delete_review(self, review_id: int, user: User) -> None:
        review = self._get_review(review_id)
        if user.role != "admin" and review.id_user != user.id_user:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions",
            )
        listing_type, listing_id = review.listing_type, review.listing_id
        review_repository.delete_review(self.db, review)
        if listing_type == "property":
            self._refresh_property_rating(listing_id)
        self._commit("Could not delete review")
