"""
app/services/review_service.py

Purpose: Ratings on listings and sellers

- Add a review and notify the reviewed party
- Review list with average rating
- Live review stream per target
"""

from typing import Optional, Dict, Any, List

from pymongo import DESCENDING

from app.core.exceptions import ValidationError, ResourceNotFoundError
from app.core.logging import get_logger
from app.db.mongo import get_collection, new_id, REVIEWS
from app.models.social import NotificationType, ReviewTargetType
from app.realtime.hub import get_event_hub, reviews_topic, Subscription
from app.services import notification_service, user_service, listing_service
from utils.constants import USER_REVIEW_TITLE, LISTING_REVIEW_TITLE, REVIEW_MESSAGE
from utils.time_utils import utc_now
from utils.validation_utils import validate_rating, sanitize_input

logger = get_logger(__name__)


async def add_review(
    author_id: str,
    target_id: str,
    target_type: ReviewTargetType,
    rating: int,
    comment: str,
) -> Dict[str, Any]:
    """
    Stores a review. The reviewed user, or the listing's seller, is notified
    unless they wrote the review themselves.

    Raises:
        ValidationError: Rating outside 1..5
        ResourceNotFoundError: Unknown target
    """
    target_type = ReviewTargetType(target_type)
    if not validate_rating(rating):
        raise ValidationError("Rating must be a whole number from 1 to 5")

    if target_type == ReviewTargetType.USER:
        await user_service.get_user_or_raise(target_id)
        receiver_id = target_id
        title = USER_REVIEW_TITLE
        link = f"/profile/{author_id}"
    else:
        listing = await listing_service.get_listing(target_id)
        if not listing:
            raise ResourceNotFoundError("Listing not found")
        receiver_id = listing["seller_id"]
        title = LISTING_REVIEW_TITLE.format(title=listing["title"])
        link = f"/listings/{target_id}"

    author = await user_service.get_user_or_raise(author_id)
    review = {
        "_id": new_id(),
        "target_id": target_id,
        "target_type": target_type.value,
        "author_id": author_id,
        "author_name": author.get("name"),
        "author_avatar": author.get("avatar"),
        "rating": rating,
        "comment": sanitize_input(comment or "", max_length=2000),
        "created_at": utc_now(),
    }
    await get_collection(REVIEWS).insert_one(review)
    logger.info(f"Review {rating}* on {target_type.value} {target_id}", extra={"user_id": author_id})

    await get_event_hub().publish(reviews_topic(target_type.value, target_id))

    if receiver_id != author_id:
        await notification_service.send_notification(
            receiver_id,
            title,
            REVIEW_MESSAGE.format(author=review["author_name"], rating=rating, comment=review["comment"]),
            type=NotificationType.REVIEW,
            link=link,
        )

    return review


async def get_reviews(target_id: str, target_type: ReviewTargetType) -> List[Dict[str, Any]]:
    """Reviews of a target, newest first."""
    cursor = (
        get_collection(REVIEWS)
        .find({"target_id": target_id, "target_type": ReviewTargetType(target_type).value})
        .sort([("created_at", DESCENDING), ("_id", DESCENDING)])
    )
    return await cursor.to_list(length=None)


def summarize(reviews: List[Dict[str, Any]]) -> Dict[str, Any]:
    count = len(reviews)
    average = round(sum(r["rating"] for r in reviews) / count, 1) if count else 0.0
    return {"reviews": reviews, "average_rating": average, "count": count}


async def get_review_summary(target_id: str, target_type: ReviewTargetType) -> Dict[str, Any]:
    return summarize(await get_reviews(target_id, target_type))


async def subscribe_reviews(target_id: str, target_type: ReviewTargetType) -> Subscription:
    target_type = ReviewTargetType(target_type)
    return await get_event_hub().subscribe(
        reviews_topic(target_type.value, target_id),
        lambda: get_review_summary(target_id, target_type)
    )
