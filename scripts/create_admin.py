"""
Creates an administrator account, or promotes an existing one:
    python scripts/create_admin.py admin@example.com [password]
"""

import asyncio
import sys
from pathlib import Path
from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).parent.parent))
load_dotenv()

import logging

from app.db import mongo
from app.models.user import UserRole
from app.services import auth_service, user_service
from utils.validation_utils import normalize_email

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


async def main(email: str, password: str = None):
    await mongo.connect_to_mongo()
    try:
        user = await user_service.get_user_by_email(normalize_email(email))
        if not user:
            if not password:
                logger.error("❌ No such user; pass a password to create one")
                sys.exit(1)
            _, user = await auth_service.register(email, password, "Admin")
            logger.info(f"✅ Created user {user['_id']}")

        await user_service.set_user_role(user["_id"], UserRole.ADMIN)
        logger.info(f"✅ {email} is now an admin")
    finally:
        await mongo.close_mongo_connection()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)
    asyncio.run(main(*sys.argv[1:3]))
