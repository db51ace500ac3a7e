"""
app/schemas/social.py

Purpose: Reviews and reports
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from app.models.social import ReviewTargetType, ReportStatus


class ReviewCreate(BaseModel):
    target_id: str
    target_type: ReviewTargetType
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field("", max_length=2000)


class Review(BaseModel):
    id: str
    target_id: str
    target_type: ReviewTargetType
    author_id: str
    author_name: Optional[str] = None
    author_avatar: Optional[str] = None
    rating: int
    comment: str = ""
    created_at: datetime


class ReviewSummary(BaseModel):
    reviews: List[Review]
    average_rating: float
    count: int


class ReportCreate(BaseModel):
    listing_id: Optional[str] = None
    target_user_id: Optional[str] = None
    reason: str = Field(..., min_length=1, max_length=200)
    details: Optional[str] = Field(None, max_length=2000)


class Report(BaseModel):
    id: str
    listing_id: Optional[str] = None
    target_user_id: Optional[str] = None
    user_id: str
    reason: str
    details: Optional[str] = None
    created_at: datetime
    status: ReportStatus
