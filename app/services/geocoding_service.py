"""
app/services/geocoding_service.py

Purpose: Reverse geocoding for listing locations

- Coordinates -> display address and city via BigDataCloud
- Never fails: falls back to raw coordinates and a coarse region
"""

from typing import Optional, Dict, Any

import httpx

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

CITY_PREFIXES = ("Thành phố ", "Tỉnh ")


def coarse_region(lat: float) -> str:
    """North / central / south Vietnam by latitude."""
    if lat > 16:
        return "Miền Bắc"
    if lat > 11:
        return "Miền Trung"
    return "Miền Nam"


def _clean_city(city: str) -> str:
    for prefix in CITY_PREFIXES:
        city = city.replace(prefix, "")
    return city


class GeocodingService:
    """
    Thin client for the BigDataCloud reverse-geocode endpoint.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport
        self._timeout = settings.HTTP_TIMEOUT_SECONDS

    def fallback(self, lat: float, lng: float) -> Dict[str, Any]:
        return {
            "address": f"Vị trí: {lat:.4f}, {lng:.4f}",
            "city": coarse_region(lat),
            "lat": lat,
            "lng": lng,
        }

    async def reverse_geocode(self, lat: float, lng: float) -> Dict[str, Any]:
        """
        Resolves coordinates to ``{address, city, lat, lng}``.
        """
        params = {"latitude": lat, "longitude": lng, "localityLanguage": "vi"}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(settings.GEOCODING_API_URL, params=params)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Reverse geocoding failed, using coordinates: {e}")
            return self.fallback(lat, lng)

        if not data:
            return self.fallback(lat, lng)

        city = data.get("city") or data.get("principalSubdivision") or data.get("locality") or "Khác"
        parts = [data.get("locality"), data.get("principalSubdivision"), data.get("countryName")]
        address = ", ".join(p for p in parts if p)

        return {
            "address": address or f"{lat:.4f}, {lng:.4f}",
            "city": _clean_city(city),
            "lat": lat,
            "lng": lng,
        }


# Global service instance
_geocoding_service: Optional[GeocodingService] = None


def get_geocoding_service() -> GeocodingService:
    """Get or create the global geocoding service."""
    global _geocoding_service
    if _geocoding_service is None:
        _geocoding_service = GeocodingService()
    return _geocoding_service
