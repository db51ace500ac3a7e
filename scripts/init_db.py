"""
Database initialization script

Run once (or after schema changes) to create indexes:
    python scripts/init_db.py [--reset]

--reset drops the custom indexes first (after changing an index definition).
"""

import asyncio
import sys
from pathlib import Path
from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables
load_dotenv()

import logging

from app.db import mongo
from app.db.indexes import create_indexes, drop_all_indexes

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)

COLLECTIONS = [
    mongo.USERS, mongo.LISTINGS, mongo.TRANSACTIONS, mongo.CHATS, mongo.REVIEWS,
    mongo.NOTIFICATIONS, mongo.REPORTS, mongo.FOLLOWS, mongo.MAIL, mongo.REVOKED_TOKENS,
]


async def main():
    logger.info("=" * 60)
    logger.info("  Chợ Của Tui Database Setup")
    logger.info("=" * 60 + "\n")

    await mongo.connect_to_mongo()
    try:
        if "--reset" in sys.argv:
            logger.warning("⚠️  Dropping existing indexes...")
            await drop_all_indexes()

        await create_indexes()

        logger.info("\n🔍 Verifying indexes...")
        for name in COLLECTIONS:
            collection = mongo.get_collection(name)
            indexes = await collection.index_information()
            count = await collection.count_documents({})
            logger.info(f"\n  {name} ({count} documents):")
            for idx_name in indexes.keys():
                if idx_name != "_id_":
                    logger.info(f"    ✅ {idx_name}")

        logger.info("\n✅ Database initialization complete!")
    finally:
        await mongo.close_mongo_connection()

    logger.info("\n" + "=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
