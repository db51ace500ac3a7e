"""
app/api/system.py

Purpose: Public reference data

- Categories and locations
- Public system settings (prices, tiers, bank transfer details)
"""

from typing import List, Dict, Any

from fastapi import APIRouter

from app.schemas.settings import SystemSettings
from app.services import settings_service
from utils.constants import CATEGORIES, LOCATIONS

router = APIRouter(tags=["System"])


@router.get("/categories", response_model=List[Dict[str, Any]])
async def get_categories():
    return CATEGORIES


@router.get("/locations", response_model=List[str])
async def get_locations():
    return LOCATIONS


@router.get("/settings", response_model=SystemSettings)
async def get_settings():
    return SystemSettings(**await settings_service.get_settings())
