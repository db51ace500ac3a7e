"""
app/db/mongo.py

Purpose: MongoDB connection setup

- Initializes Motor client with connection pooling
- Collection accessors for every marketplace entity
- Multi-document transaction helper
- Health checks and retry logic
- Proper connection lifecycle management
"""

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase, AsyncIOMotorCollection
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError
from typing import Optional, Dict, Any, Callable, Awaitable, TypeVar
import asyncio
import uuid
from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# Collection names
USERS = "users"
LISTINGS = "listings"
TRANSACTIONS = "transactions"
CHATS = "chats"
REVIEWS = "reviews"
NOTIFICATIONS = "notifications"
REPORTS = "reports"
FOLLOWS = "follows"
FAVORITES = "favorites"
SYSTEM = "system"
MAIL = "mail"
FILES = "files"
REVOKED_TOKENS = "revoked_tokens"

# Global MongoDB client
_client: Optional[AsyncIOMotorClient] = None
_database: Optional[AsyncIOMotorDatabase] = None


async def connect_to_mongo():
    """
    Establishes connection to MongoDB with retry logic.
    Called during application startup.
    """
    global _client, _database

    if _client is not None:
        logger.warning("MongoDB client already initialized")
        return

    max_retries = 3
    retry_delay = 2

    for attempt in range(1, max_retries + 1):
        try:
            logger.info(
                f"Attempting to connect to MongoDB (attempt {attempt}/{max_retries})"
            )

            _client = AsyncIOMotorClient(
                settings.MONGODB_URL,
                maxPoolSize=50,
                minPoolSize=10,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=10000,
                retryWrites=True,
                retryReads=True,
            )

            _database = _client[settings.MONGODB_DB_NAME]

            await _client.admin.command("ping")

            logger.info(
                f"Successfully connected to MongoDB: {settings.MONGODB_DB_NAME}"
            )
            return

        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.error(
                f"Failed to connect to MongoDB (attempt {attempt}/{max_retries}): {e}"
            )
            _client = None
            _database = None

            if attempt < max_retries:
                logger.info(f"Retrying in {retry_delay} seconds...")
                await asyncio.sleep(retry_delay)
                retry_delay *= 2  # Exponential backoff
            else:
                logger.critical("Failed to connect to MongoDB after all retries")
                raise ConnectionError("Could not establish MongoDB connection") from e


async def close_mongo_connection():
    """
    Closes the MongoDB connection.
    Called during application shutdown.
    """
    global _client, _database

    if _client:
        logger.info("Closing MongoDB connection")
        _client.close()
        _client = None
        _database = None
        logger.info("MongoDB connection closed")


async def check_database_health() -> bool:
    """
    Checks if the database connection is healthy.

    Returns:
        True if connection is healthy, False otherwise
    """
    try:
        if _client is None:
            logger.error("MongoDB client not initialized")
            return False

        await _client.admin.command("ping")
        return True

    except Exception as e:
        logger.error(f"Database health check failed: {str(e)}")
        return False


def get_database() -> AsyncIOMotorDatabase:
    """
    Returns the MongoDB database instance.

    Raises:
        RuntimeError: If database is not initialized
    """
    if _database is None:
        raise RuntimeError(
            "Database not initialized. Call connect_to_mongo() during startup."
        )
    return _database


def get_collection(name: str) -> AsyncIOMotorCollection:
    """Returns a collection of the marketplace database by name."""
    return get_database()[name]


def get_users_collection() -> AsyncIOMotorCollection:
    return get_collection(USERS)


def get_listings_collection() -> AsyncIOMotorCollection:
    return get_collection(LISTINGS)


def get_transactions_collection() -> AsyncIOMotorCollection:
    return get_collection(TRANSACTIONS)


def get_chats_collection() -> AsyncIOMotorCollection:
    return get_collection(CHATS)


def get_notifications_collection() -> AsyncIOMotorCollection:
    return get_collection(NOTIFICATIONS)


async def run_in_transaction(callback: Callable[[Any], Awaitable[T]]) -> T:
    """
    Runs ``callback(session)`` inside a MongoDB multi-document transaction.

    The driver retries the callback on transient transaction errors, so the
    callback must do its reads inside the transaction. When transactions are
    disabled (standalone mongod, tests) the callback runs with ``session=None``
    and callers rely on conditional updates for their guarantees.
    """
    if not settings.MONGODB_TRANSACTIONS_ENABLED:
        return await callback(None)

    if _client is None:
        raise RuntimeError(
            "Database not initialized. Call connect_to_mongo() during startup."
        )

    async with await _client.start_session() as session:
        return await session.with_transaction(callback)


def new_id() -> str:
    """Generates a document id."""
    return uuid.uuid4().hex


def to_public(doc: Optional[Dict[str, Any]], hidden: tuple = ("password_hash",)) -> Optional[Dict[str, Any]]:
    """
    Converts a stored document to its API shape: ``_id`` becomes ``id`` and
    private fields are dropped.
    """
    if doc is None:
        return None
    data = {k: v for k, v in doc.items() if k != "_id" and k not in hidden}
    data["id"] = doc["_id"]
    return data
