"""
app/services/listing_service.py

Purpose: Listing catalogue

- VIP strip, paged feed and accent-insensitive search
- Create with tier limits and auto-approval
- Content edits, moderation and seller status changes
- Single and batch deletion
"""

from typing import Optional, Dict, Any, List, Tuple

from pymongo import DESCENDING, ReturnDocument

from app.core.config import settings
from app.core.exceptions import ResourceNotFoundError, PermissionDeniedError, ValidationError, ConflictError
from app.core.logging import get_logger, LogContext
from app.core.security import AuthSession
from app.db.mongo import get_listings_collection, new_id
from app.db.pagination import find_page
from app.models.listing import ListingStatus, ListingCondition, MODERATION_STATUSES, seller_can_set
from app.models.social import NotificationType
from app.models.user import effective_tier
from app.services import mail_service, notification_service, settings_service, storage_service, user_service
from utils.constants import (
    CATEGORY_IDS,
    DEFAULT_LOCATION,
    VIP_LISTINGS_LIMIT,
    LISTING_APPROVED_TITLE,
    LISTING_REJECTED_TITLE,
    LISTING_STATUS_MESSAGE,
    LISTING_STATUS_LABELS,
    NEW_LISTING_EMAIL_SUBJECT,
    NEW_LISTING_EMAIL_HTML,
)
from utils.format_utils import format_price, slugify
from utils.search_utils import build_keywords, is_search_match, calculate_relevance_score
from utils.time_utils import utc_now, start_of_day
from utils.validation_utils import sanitize_input

logger = get_logger(__name__)

# Fields a seller may edit after posting
EDITABLE_FIELDS = (
    "title", "description", "price", "category", "images", "location",
    "address", "lat", "lng", "condition", "attributes",
)


# ============================================================
# READS
# ============================================================

async def get_vip_listings(max_count: int = VIP_LISTINGS_LIMIT) -> List[Dict[str, Any]]:
    """Approved listings of Pro sellers, newest first."""
    cursor = (
        get_listings_collection()
        .find({"status": ListingStatus.APPROVED.value, "tier": "pro"})
        .sort([("created_at", DESCENDING), ("_id", DESCENDING)])
        .limit(max_count)
    )
    return await cursor.to_list(length=max_count)


def _can_see_unpublished(session: Optional[AuthSession], seller_id: Optional[str]) -> bool:
    if session is None:
        return False
    return session.is_admin or (seller_id is not None and seller_id == session.user_id)


async def get_listings_paged(
    page_size: int = 20,
    cursor: Optional[str] = None,
    category: Optional[str] = None,
    seller_id: Optional[str] = None,
    status: Optional[ListingStatus] = None,
    search: Optional[str] = None,
    location: Optional[str] = None,
    session: Optional[AuthSession] = None,
) -> Tuple[List[Dict[str, Any]], Optional[str], bool]:
    """
    Pages through listings, newest first.

    Without ``status`` only approved listings are returned, except when
    sellers browse their own listings. With ``search`` the newest approved
    listings are scanned and the matches returned by relevance, in a single
    page.

    Returns:
        (listings, next_cursor, has_more)
    """
    filters: Dict[str, Any] = {}
    if category:
        filters["category"] = category
    if location and location != DEFAULT_LOCATION:
        filters["location"] = location

    if search and search.strip():
        return await search_listings(search, filters), None, False

    if seller_id:
        filters["seller_id"] = seller_id

    if status:
        status = ListingStatus(status)
        if status != ListingStatus.APPROVED and not _can_see_unpublished(session, seller_id):
            raise PermissionDeniedError("Not allowed to browse unpublished listings")
        filters["status"] = status.value
    elif not (seller_id and _can_see_unpublished(session, seller_id)):
        filters["status"] = ListingStatus.APPROVED.value

    return await find_page(get_listings_collection(), filters, "created_at", page_size, cursor)


async def search_listings(query_text: str, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    """
    Accent-insensitive title search over the newest approved listings,
    ordered by relevance.
    """
    query = dict(filters or {})
    query["status"] = ListingStatus.APPROVED.value
    limit = settings.SEARCH_SCAN_LIMIT

    candidates = await (
        get_listings_collection()
        .find(query)
        .sort([("created_at", DESCENDING), ("_id", DESCENDING)])
        .limit(limit)
        .to_list(length=limit)
    )

    query_text = query_text.strip()
    matches = [doc for doc in candidates if is_search_match(doc.get("title", ""), query_text)]
    # sorted() is stable, so equal scores keep newest-first order
    matches = sorted(matches, key=lambda doc: calculate_relevance_score(doc["title"], query_text), reverse=True)

    logger.debug(f"Search '{query_text}': {len(matches)}/{len(candidates)} matched")
    return matches


async def get_listing(listing_id: str) -> Optional[Dict[str, Any]]:
    return await get_listings_collection().find_one({"_id": listing_id})


async def get_listing_or_raise(listing_id: str) -> Dict[str, Any]:
    listing = await get_listing(listing_id)
    if not listing:
        raise ResourceNotFoundError("Listing not found")
    return listing


async def get_listings_by_ids(listing_ids: List[str]) -> List[Dict[str, Any]]:
    if not listing_ids:
        return []
    docs = await get_listings_collection().find({"_id": {"$in": listing_ids}}).to_list(length=len(listing_ids))
    by_id = {doc["_id"]: doc for doc in docs}
    return [by_id[i] for i in listing_ids if i in by_id]


async def increment_view_count(listing_id: str) -> None:
    await get_listings_collection().update_one({"_id": listing_id}, {"$inc": {"view_count": 1}})


# ============================================================
# WRITES
# ============================================================

def _validate_content(data: Dict[str, Any]):
    if "title" in data and not data["title"]:
        raise ValidationError("Title must not be empty")
    if "price" in data and (data["price"] is None or data["price"] < 0):
        raise ValidationError("Price must not be negative")
    if "category" in data and data["category"] not in CATEGORY_IDS:
        raise ValidationError(f"Unknown category: {data['category']}")
    if "condition" in data:
        ListingCondition(data["condition"])


async def _store_images(images: List[str], seller_id: str) -> List[str]:
    return [
        await storage_service.store_image_if_needed(image, f"listings/{seller_id}", owner_id=seller_id)
        for image in images
    ]


async def create_listing(seller_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Publishes a listing for a seller.

    The seller's current tier sets the image cap, the daily posting cap and
    whether the listing skips moderation.

    Raises:
        ValidationError: Bad content or too many images
        ConflictError: Daily posting limit reached
    """
    with LogContext(user_id=seller_id):
        seller = await user_service.get_user_or_raise(seller_id)
        tier = effective_tier(seller)
        tier_config = await settings_service.get_tier_config(tier.value)

        data = {k: v for k, v in data.items() if k in EDITABLE_FIELDS}
        data["title"] = sanitize_input(data.get("title", ""), max_length=200)
        data["description"] = sanitize_input(data.get("description", ""), max_length=5000)
        _validate_content(data)
        if "category" not in data:
            raise ValidationError("Category is required")

        images = data.get("images") or []
        if len(images) > tier_config["max_images"]:
            raise ValidationError(
                f"Your plan allows at most {tier_config['max_images']} images",
                details={"max_images": tier_config["max_images"], "tier": tier.value}
            )

        posted_today = await get_listings_collection().count_documents({
            "seller_id": seller_id,
            "created_at": {"$gte": start_of_day()},
        })
        if posted_today >= tier_config["posts_per_day"]:
            raise ConflictError(
                "Daily posting limit reached",
                code="POST_LIMIT_REACHED",
                details={"posts_per_day": tier_config["posts_per_day"], "tier": tier.value}
            )

        listing_id = new_id()
        now = utc_now()
        auto_approve = bool(tier_config.get("auto_approve"))

        listing = {
            "_id": listing_id,
            "title": data["title"],
            "description": data["description"],
            "price": int(data.get("price") or 0),
            "category": data["category"],
            "images": await _store_images(images, seller_id),
            "slug": slugify(data["title"]),
            "keywords": build_keywords(data["title"]),
            "view_count": 0,
            "location": data.get("location") or DEFAULT_LOCATION,
            "address": data.get("address"),
            "lat": data.get("lat"),
            "lng": data.get("lng"),
            "seller_id": seller_id,
            "seller_name": seller.get("name"),
            "seller_avatar": seller.get("avatar"),
            "created_at": now,
            "updated_at": None,
            "status": (ListingStatus.APPROVED if auto_approve else ListingStatus.PENDING).value,
            "approved_at": now if auto_approve else None,
            "condition": ListingCondition(data.get("condition") or ListingCondition.USED).value,
            "tier": tier.value,
            "attributes": data.get("attributes") or {},
        }
        await get_listings_collection().insert_one(listing)
        logger.info(f"Listing created ({listing['status']})", extra={"listing_id": listing_id})

        await mail_service.queue_admin_email(
            NEW_LISTING_EMAIL_SUBJECT.format(title=listing["title"]),
            NEW_LISTING_EMAIL_HTML.format(
                title=listing["title"],
                price=format_price(listing["price"]),
                category=listing["category"],
                seller=listing["seller_name"],
            ),
        )
        return listing


def _ensure_owner_or_admin(listing: Dict[str, Any], session: AuthSession):
    if not session.is_admin and listing["seller_id"] != session.user_id:
        raise PermissionDeniedError("You can only manage your own listings")


async def update_listing_content(listing_id: str, session: AuthSession, changes: Dict[str, Any]) -> Dict[str, Any]:
    """
    Edits listing content. Slug and keywords follow the title.
    """
    with LogContext(user_id=session.user_id, listing_id=listing_id):
        listing = await get_listing_or_raise(listing_id)
        _ensure_owner_or_admin(listing, session)

        update = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS and v is not None}
        if "title" in update:
            update["title"] = sanitize_input(update["title"], max_length=200)
        if "description" in update:
            update["description"] = sanitize_input(update["description"], max_length=5000)
        _validate_content(update)

        if "images" in update:
            seller = await user_service.get_user(listing["seller_id"])
            tier_config = await settings_service.get_tier_config(effective_tier(seller or {}).value)
            if len(update["images"]) > tier_config["max_images"]:
                raise ValidationError(
                    f"Your plan allows at most {tier_config['max_images']} images",
                    details={"max_images": tier_config["max_images"]}
                )
            update["images"] = await _store_images(update["images"], listing["seller_id"])

        if "title" in update:
            update["slug"] = slugify(update["title"])
            update["keywords"] = build_keywords(update["title"])
        if "condition" in update:
            update["condition"] = ListingCondition(update["condition"]).value

        update["updated_at"] = utc_now()

        listing = await get_listings_collection().find_one_and_update(
            {"_id": listing_id},
            {"$set": update},
            return_document=ReturnDocument.AFTER
        )
        logger.info("Listing content updated")
        return listing


async def update_listing_status(listing_id: str, status: ListingStatus, session: AuthSession) -> Dict[str, Any]:
    """
    Changes a listing's status.

    Admins moderate (approve/reject, notifying the seller). Sellers may mark
    their own listing sold or hidden, and re-show a hidden listing that had
    been approved before.
    """
    status = ListingStatus(status)

    with LogContext(user_id=session.user_id, listing_id=listing_id):
        listing = await get_listing_or_raise(listing_id)
        current = ListingStatus(listing["status"])

        if not session.is_admin:
            _ensure_owner_or_admin(listing, session)
            if not seller_can_set(current, status):
                raise PermissionDeniedError(f"Cannot change a {current.value} listing to {status.value}")
            if status == ListingStatus.APPROVED and not listing.get("approved_at"):
                raise PermissionDeniedError("This listing has not been approved yet")

        update: Dict[str, Any] = {"status": status.value, "updated_at": utc_now()}
        if status == ListingStatus.APPROVED and not listing.get("approved_at"):
            update["approved_at"] = update["updated_at"]

        listing = await get_listings_collection().find_one_and_update(
            {"_id": listing_id},
            {"$set": update},
            return_document=ReturnDocument.AFTER
        )
        logger.info(f"Listing status {current.value} -> {status.value}")

        if session.is_admin and status in MODERATION_STATUSES:
            approved = status == ListingStatus.APPROVED
            await notification_service.send_notification(
                listing["seller_id"],
                LISTING_APPROVED_TITLE if approved else LISTING_REJECTED_TITLE,
                LISTING_STATUS_MESSAGE.format(title=listing["title"], status=LISTING_STATUS_LABELS[status.value]),
                type=NotificationType.SUCCESS if approved else NotificationType.ERROR,
                link=f"/listings/{listing_id}",
            )

        return listing


async def delete_listing(listing_id: str, session: AuthSession) -> None:
    listing = await get_listing_or_raise(listing_id)
    _ensure_owner_or_admin(listing, session)

    await get_listings_collection().delete_one({"_id": listing_id})
    logger.info("Listing deleted", extra={"listing_id": listing_id, "user_id": session.user_id})


async def delete_listings_batch(listing_ids: List[str]) -> int:
    """Admin bulk delete. Returns the number of listings removed."""
    if not listing_ids:
        return 0
    result = await get_listings_collection().delete_many({"_id": {"$in": listing_ids}})
    logger.warning(f"Batch deleted {result.deleted_count} listings")
    return result.deleted_count
