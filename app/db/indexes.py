"""
app/db/indexes.py

Purpose: Database index management

- Creates unique and performance indexes
- Ensures fast lookups and data integrity
- TTL indexes for automatic cleanup
"""

from pymongo import ASCENDING, DESCENDING

from app.db.mongo import (
    get_collection,
    USERS,
    LISTINGS,
    TRANSACTIONS,
    CHATS,
    REVIEWS,
    NOTIFICATIONS,
    REPORTS,
    FOLLOWS,
    MAIL,
    REVOKED_TOKENS,
)
from app.core.logging import get_logger

logger = get_logger(__name__)


async def create_indexes():
    """
    Creates all necessary database indexes for optimal performance.
    This function is idempotent - safe to run multiple times.
    """
    try:
        logger.info("Creating database indexes...")

        # ==============================================
        # USERS
        # ==============================================
        users = get_collection(USERS)
        await users.create_index("email", unique=True, name="email_unique")
        await users.create_index([("joined_at", DESCENDING)], name="joined_at_idx")
        await users.create_index(
            [("verification_status", ASCENDING), ("joined_at", DESCENDING)],
            name="verification_joined_idx"
        )
        logger.debug("Created indexes on users")

        # ==============================================
        # LISTINGS
        # ==============================================
        listings = get_collection(LISTINGS)
        await listings.create_index(
            [("status", ASCENDING), ("created_at", DESCENDING), ("_id", DESCENDING)],
            name="status_created_idx"
        )
        await listings.create_index(
            [("status", ASCENDING), ("tier", ASCENDING), ("created_at", DESCENDING)],
            name="status_tier_created_idx"
        )
        await listings.create_index(
            [("status", ASCENDING), ("category", ASCENDING), ("created_at", DESCENDING)],
            name="status_category_created_idx"
        )
        await listings.create_index(
            [("status", ASCENDING), ("location", ASCENDING), ("created_at", DESCENDING)],
            name="status_location_created_idx"
        )
        await listings.create_index(
            [("seller_id", ASCENDING), ("created_at", DESCENDING)],
            name="seller_created_idx"
        )
        await listings.create_index("keywords", name="keywords_idx")
        logger.debug("Created indexes on listings")

        # ==============================================
        # TRANSACTIONS
        # ==============================================
        transactions = get_collection(TRANSACTIONS)
        await transactions.create_index(
            [("user_id", ASCENDING), ("created_at", DESCENDING)],
            name="user_created_idx"
        )
        await transactions.create_index(
            [("status", ASCENDING), ("created_at", DESCENDING)],
            name="status_created_idx"
        )
        logger.debug("Created indexes on transactions")

        # ==============================================
        # CHATS
        # ==============================================
        chats = get_collection(CHATS)
        await chats.create_index("participant_ids", name="participants_idx")
        await chats.create_index(
            [("listing_id", ASCENDING), ("participant_ids", ASCENDING)],
            name="listing_participants_idx"
        )
        logger.debug("Created indexes on chats")

        # ==============================================
        # SOCIAL
        # ==============================================
        await get_collection(REVIEWS).create_index(
            [("target_id", ASCENDING), ("target_type", ASCENDING), ("created_at", DESCENDING)],
            name="target_created_idx"
        )
        await get_collection(NOTIFICATIONS).create_index(
            [("user_id", ASCENDING), ("created_at", DESCENDING)],
            name="user_created_idx"
        )
        await get_collection(NOTIFICATIONS).create_index(
            [("user_id", ASCENDING), ("read", ASCENDING)],
            name="user_read_idx"
        )
        await get_collection(REPORTS).create_index(
            [("status", ASCENDING), ("created_at", DESCENDING)],
            name="status_created_idx"
        )
        await get_collection(FOLLOWS).create_index("follower_id", name="follower_idx")
        await get_collection(FOLLOWS).create_index("followed_id", name="followed_idx")
        logger.debug("Created indexes on social collections")

        # ==============================================
        # HOUSEKEEPING
        # ==============================================
        await get_collection(MAIL).create_index("created_at", name="mail_created_idx")

        # Revoked tokens disappear once the token would have expired anyway
        await get_collection(REVOKED_TOKENS).create_index(
            "expires_at",
            expireAfterSeconds=0,
            name="revoked_token_ttl_idx"
        )
        logger.debug("Created TTL index on revoked_tokens.expires_at")

        logger.info("All database indexes created successfully")

    except Exception as e:
        logger.error(f"Failed to create indexes: {str(e)}", exc_info=True)
        raise


async def drop_all_indexes():
    """
    Drops all custom indexes (keeps _id index).
    Use with caution! Only for maintenance/migration.
    """
    try:
        logger.warning("Dropping all database indexes...")

        for name in (USERS, LISTINGS, TRANSACTIONS, CHATS, REVIEWS,
                     NOTIFICATIONS, REPORTS, FOLLOWS, MAIL, REVOKED_TOKENS):
            await get_collection(name).drop_indexes()

        logger.info("All indexes dropped successfully")

    except Exception as e:
        logger.error(f"Failed to drop indexes: {str(e)}", exc_info=True)
        raise
