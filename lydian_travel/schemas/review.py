from __future__ import annotations

from datetime import datetime
from typing import Annotated, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field as PydanticField, StringConstraints

ListingTypeLiteral = Literal["property", "vehicle", "transfer"]


class ReviewCreate(BaseModel):
    booking_id: int = PydanticField(..., gt=0)
    rating: int = PydanticField(..., ge=1, le=5)
    title: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=120)]
    comment: Annotated[str, StringConstraints(strip_whitespace=True, min_length=10, max_length=2000)]


class ReviewVoteRequest(BaseModel):
    helpful: bool


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_review: int
    id_user: int
    id_booking: int
    listing_type: str
    listing_id: int
    rating: int
    title: str
    comment: str
    helpful_count: int
    not_helpful_count: int
    author_name: Optional[str] = None
    created_at: Optional[datetime] = None


class ReviewListResponse(BaseModel):
    average_rating: float
    total: int
    distribution: Dict[int, int]
    reviews: List[ReviewResponse]
