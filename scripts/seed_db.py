"""
Demo data script

Removes previous demo data and creates 50 users and 100 listings:
    python scripts/seed_db.py
"""

import asyncio
import sys
from pathlib import Path
from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).parent.parent))
load_dotenv()

import logging

from app.core.config import settings
from app.db import mongo
from app.services.seed_service import seed_database

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


async def main():
    if settings.is_production:
        logger.error("❌ Refusing to seed a production database")
        sys.exit(1)

    await mongo.connect_to_mongo()
    try:
        result = await seed_database()
        logger.info(
            f"✅ Removed {result['removed_users']} users / {result['removed_listings']} listings, "
            f"created {result['users']} users / {result['listings']} listings"
        )
    finally:
        await mongo.close_mongo_connection()


if __name__ == "__main__":
    asyncio.run(main())
