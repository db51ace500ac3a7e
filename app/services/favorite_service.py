"""
app/services/favorite_service.py

Purpose: Saved listings per user
"""

from typing import List, Dict, Any

from app.db.mongo import get_collection, FAVORITES
from app.services import listing_service


async def get_favorites(user_id: str) -> List[str]:
    doc = await get_collection(FAVORITES).find_one({"_id": user_id})
    return doc.get("listing_ids", []) if doc else []


async def toggle_favorite(user_id: str, listing_id: str) -> bool:
    """
    Adds or removes a listing from the user's favorites.

    Returns:
        True if the listing is now a favorite
    """
    await listing_service.get_listing_or_raise(listing_id)
    favorites = get_collection(FAVORITES)

    removed = await favorites.update_one(
        {"_id": user_id, "listing_ids": listing_id},
        {"$pull": {"listing_ids": listing_id}}
    )
    if removed.modified_count:
        return False

    await favorites.update_one(
        {"_id": user_id},
        {"$addToSet": {"listing_ids": listing_id}},
        upsert=True
    )
    return True


async def get_favorite_listings(user_id: str) -> List[Dict[str, Any]]:
    """Favorite listings that still exist, in the order they were saved."""
    return await listing_service.get_listings_by_ids(await get_favorites(user_id))
