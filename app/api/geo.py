"""
app/api/geo.py

Purpose: Reverse geocoding for the listing form
"""

from fastapi import APIRouter, Query

from app.schemas.misc import LocationInfo
from app.services.geocoding_service import get_geocoding_service

router = APIRouter(prefix="/geo", tags=["Geo"])


@router.get("/reverse", response_model=LocationInfo)
async def reverse_geocode(lat: float = Query(..., ge=-90, le=90), lng: float = Query(..., ge=-180, le=180)):
    return LocationInfo(**await get_geocoding_service().reverse_geocode(lat, lng))
