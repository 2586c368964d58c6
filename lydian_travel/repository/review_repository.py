from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from lydian_travel.models.review import Review, ReviewVote


def list_listing_reviews(
    db: Session, listing_type: str, listing_id: int, *, limit: int = 20, offset: int = 0
) -> List[Review]:
    return (
        db.query(Review)
        .filter(Review.listing_type == listing_type, Review.listing_id == listing_id)
        .order_by(Review.created_at.desc(), Review.id_review.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )


def rating_distribution(db: Session, listing_type: str, listing_id: int) -> Dict[int, int]:
    rows = (
        db.query(Review.rating, func.count(Review.id_review))
        .filter(Review.listing_type == listing_type, Review.listing_id == listing_id)
        .group_by(Review.rating)
        .all()
    )
    return {rating: count for rating, count in rows}


def get_review(db: Session, review_id: int) -> Optional[Review]:
    return db.query(Review).filter(Review.id_review == review_id).first()


def get_review_by_booking(db: Session, booking_id: int) -> Optional[Review]:
    return db.query(Review).filter(Review.id_booking == booking_id).first()


def create_review(db: Session, review: Review) -> Review:
    db.add(review)
    db.flush()
    return review


def delete_review(db: Session, review: Review) -> None:
    db.delete(review)
    db.flush()


def get_vote(db: Session, review_id: int, user_id: int) -> Optional[ReviewVote]:
    return (
        db.query(ReviewVote)
        .filter(ReviewVote.id_review == review_id, ReviewVote.id_user == user_id)
        .first()
    )


def create_vote(db: Session, vote: ReviewVote) -> ReviewVote:
    db.add(vote)
    db.flush()
    return vote
