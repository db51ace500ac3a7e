"""
app/services/settings_service.py

Purpose: Marketplace-wide settings

- Stored as a singleton document in the `system` collection
- Missing keys fall back to the built-in defaults
"""

import copy
from typing import Dict, Any

from app.core.exceptions import ValidationError
from app.core.logging import get_logger
from app.db.mongo import get_collection, SYSTEM
from app.models.user import SubscriptionTier
from utils.constants import DEFAULT_SETTINGS
from utils.time_utils import utc_now

logger = get_logger(__name__)

SETTINGS_ID = "settings"


def _merge_settings(stored: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(DEFAULT_SETTINGS)
    for key, value in stored.items():
        if key in ("_id", "updated_at"):
            continue
        if key == "tier_configs" and isinstance(value, dict):
            for tier, config in value.items():
                merged["tier_configs"].setdefault(tier, {}).update(config or {})
        else:
            merged[key] = value
    return merged


async def get_settings() -> Dict[str, Any]:
    """
    Returns the current settings merged over defaults.
    """
    stored = await get_collection(SYSTEM).find_one({"_id": SETTINGS_ID})
    return _merge_settings(stored or {})


async def get_tier_config(tier: str) -> Dict[str, Any]:
    configs = (await get_settings())["tier_configs"]
    return configs.get(tier) or configs[SubscriptionTier.FREE.value]


async def get_push_price() -> int:
    """Listing push price after the configured discount."""
    current = await get_settings()
    price = current["push_price"] * (1 - current.get("push_discount", 0) / 100)
    return int(round(price))


async def get_tier_price(tier: str) -> int:
    """Subscription price after the configured tier discount."""
    current = await get_settings()
    price = current["tier_configs"][tier]["price"] * (1 - current.get("tier_discount", 0) / 100)
    return int(round(price))


def _validate(new_settings: Dict[str, Any]):
    if new_settings.get("push_price", 0) < 0:
        raise ValidationError("push_price must not be negative")

    for field in ("push_discount", "tier_discount"):
        value = new_settings.get(field, 0)
        if not 0 <= value <= 100:
            raise ValidationError(f"{field} must be between 0 and 100")

    for tier, config in new_settings.get("tier_configs", {}).items():
        if tier not in {t.value for t in SubscriptionTier}:
            raise ValidationError(f"Unknown subscription tier: {tier}")
        for field in ("price", "max_images", "posts_per_day"):
            if field in config and config[field] < 0:
                raise ValidationError(f"{tier}.{field} must not be negative")


async def update_settings(new_settings: Dict[str, Any]) -> Dict[str, Any]:
    """
    Replaces the stored settings document.

    Raises:
        ValidationError: If a price, discount or limit is out of range
    """
    _validate(new_settings)

    doc = {k: v for k, v in new_settings.items() if k != "_id"}
    doc["updated_at"] = utc_now()

    await get_collection(SYSTEM).replace_one({"_id": SETTINGS_ID}, doc, upsert=True)
    logger.info("System settings updated")

    return _merge_settings(doc)
