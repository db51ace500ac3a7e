"""
app/schemas/misc.py

Purpose: Uploads, geocoding, link import and dashboard payloads
"""

from typing import Optional

from pydantic import BaseModel, Field


class UploadRequest(BaseModel):
    data_url: str = Field(..., description="data:image/<type>;base64,...")
    folder: str = Field("uploads", pattern=r"^[a-zA-Z0-9_\-/]+$")


class UploadResult(BaseModel):
    url: str


class LocationInfo(BaseModel):
    address: str
    city: str
    lat: float
    lng: float


class LinkRequest(BaseModel):
    url: str = Field(..., max_length=2048, description="Product page link")


class LinkMetadata(BaseModel):
    title: str
    image: str
    url: str
    brand: str


class LinkPreviewResult(BaseModel):
    success: bool
    data: Optional[LinkMetadata] = None
    error: Optional[str] = None


class ScreenshotResult(BaseModel):
    success: bool = True
    base64: str = Field(..., description="data:image/jpeg;base64,...")


class DashboardStats(BaseModel):
    users: int
    listings: int
    pending_listings: int
    pending_transactions: int
    pending_reports: int
    pending_verifications: int
