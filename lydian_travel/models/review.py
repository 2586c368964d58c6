from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import relationship

from lydian_travel.core.database import Base


class Review(Base):
    __tablename__ = "reviews"

    id_review = Column(Integer, primary_key=True, index=True)
    id_user = Column(Integer, ForeignKey("users.id_user", ondelete="CASCADE"), nullable=False)
    id_booking = Column(Integer, ForeignKey("bookings.id_booking", ondelete="CASCADE"), unique=True, nullable=False)
    listing_type = Column(String(20), nullable=False)
    listing_id = Column(Integer, nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    title = Column(String(120), nullable=False)
    comment = Column(Text, nullable=False)
    helpful_count = Column(Integer, nullable=False, default=0)
    not_helpful_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", lazy="joined")
    votes = relationship("ReviewVote", back_populates="review", cascade="all, delete-orphan")


class ReviewVote(Base):
    __tablename__ = "review_votes"
    __table_args__ = (UniqueConstraint("id_review", "id_user", name="uq_review_vote_user"),)

    id_vote = Column(Integer, primary_key=True, index=True)
    id_review = Column(Integer, ForeignKey("reviews.id_review", ondelete="CASCADE"), nullable=False)
    id_user = Column(Integer, ForeignKey("users.id_user", ondelete="CASCADE"), nullable=False)
    vote_type = Column(String(20), nullable=False)

    review = relationship("Review", back_populates="votes")
