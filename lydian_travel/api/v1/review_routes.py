from typing import Literal

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from lydian_travel.core.security import get_current_user
from lydian_travel.dependencies import get_db
from lydian_travel.models.user import User
from lydian_travel.schemas.review import (
    ReviewCreate,
    ReviewListResponse,
    ReviewResponse,
    ReviewVoteRequest,
)
from lydian_travel.services.review_service import ReviewService

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
def create_review(
    payload: ReviewCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    service = ReviewService(db)
    return service.to_response(service.create_review(current_user, payload))


@router.get("/{listing_type}/{listing_id}", response_model=ReviewListResponse)
def list_reviews(
    listing_type: Literal["property", "vehicle", "transfer"],
    listing_id: int,
    *,
    db: Session = Depends(get_db),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    """Reviews of one listing together with its rating summary."""

    service = ReviewService(db)
    return service.list_reviews(listing_type, listing_id, limit=limit, offset=offset)


@router.post("/{review_id}/vote", response_model=ReviewResponse)
def vote_review(
    review_id: int,
    payload: ReviewVoteRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    service = ReviewService(db)
    return service.to_response(service.vote(review_id, current_user, payload.helpful))


@router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_review(
    review_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    service = ReviewService(db)
    service.delete_review(review_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
