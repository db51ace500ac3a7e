"""
app/schemas/listing.py

Purpose: Listing request and response schemas
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime

from app.db.mongo import to_public
from app.models.listing import ListingStatus, ListingCondition
from utils.format_utils import get_listing_url


class ListingBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=5000)
    price: int = Field(..., ge=0, description="Price in VND")
    category: str = Field(..., description="Category id")
    images: List[str] = Field(default_factory=list, description="Image URLs or base64 data URLs")
    location: Optional[str] = None
    address: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    condition: ListingCondition = ListingCondition.USED
    attributes: Dict[str, Any] = Field(default_factory=dict)


class ListingCreate(ListingBase):

    class Config:
        json_schema_extra = {
            "example": {
                "title": "iPhone 15 Pro Max 256GB VNA",
                "description": "Máy đẹp, pin 98%, đủ hộp.",
                "price": 29500000,
                "category": "3",
                "images": ["data:image/jpeg;base64,/9j/4AAQ..."],
                "location": "TPHCM",
                "condition": "used"
            }
        }


class ListingUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    price: Optional[int] = Field(None, ge=0)
    category: Optional[str] = None
    images: Optional[List[str]] = None
    location: Optional[str] = None
    address: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    condition: Optional[ListingCondition] = None
    attributes: Optional[Dict[str, Any]] = None


class ListingStatusUpdate(BaseModel):
    status: ListingStatus


class Listing(ListingBase):
    id: str
    slug: str = ""
    keywords: List[str] = Field(default_factory=list)
    view_count: int = 0
    seller_id: str
    seller_name: Optional[str] = None
    seller_avatar: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    status: ListingStatus
    tier: str = "free"
    url: Optional[str] = None


class ListingPage(BaseModel):
    listings: List[Listing]
    next_cursor: Optional[str] = None
    has_more: bool = False


class BatchDeleteRequest(BaseModel):
    ids: List[str] = Field(..., min_length=1)


class BatchDeleteResult(BaseModel):
    deleted: int


class FavoriteState(BaseModel):
    favorite: bool


def to_listing(doc: Dict[str, Any]) -> Listing:
    """Builds the API shape of a stored listing."""
    data = to_public(doc)
    data["url"] = get_listing_url(doc["_id"], doc.get("title", ""))
    return Listing(**data)
