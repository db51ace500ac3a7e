"""
app/services/seed_service.py

Purpose: Demo data for development environments

- Removes previously seeded users and listings (ids prefixed "seed_")
- Creates 50 users and 100 listings with varied tiers and statuses
"""

import random
from datetime import timedelta
from typing import Dict, Any, Optional

from app.core.logging import get_logger
from app.db.mongo import get_users_collection, get_listings_collection
from app.models.listing import ListingStatus, ListingCondition
from app.models.user import new_user_document, SubscriptionTier, VerificationStatus
from utils.constants import SEED_ID_PREFIX, DEFAULT_LOCATION
from utils.format_utils import slugify
from utils.search_utils import build_keywords
from utils.time_utils import utc_now, calculate_subscription_expiry

logger = get_logger(__name__)

SEED_USERS = 50
SEED_LISTINGS = 100

FIRST_NAMES = ["Nguyễn", "Trần", "Lê", "Phạm", "Hoàng", "Huỳnh", "Phan", "Vũ", "Võ", "Đặng"]
MIDDLE_NAMES = ["Văn", "Thị", "Hữu", "Đức", "Ngọc", "Minh", "Quốc", "Thanh", "Mỹ", "Anh"]
LAST_NAMES = ["An", "Bình", "Cường", "Dũng", "Giang", "Hương", "Khánh", "Lan", "Nam", "Tâm", "Tuấn", "Vy"]
CITIES = ["TP Hà Nội", "TPHCM", "TP Đà Nẵng", "TP Cần Thơ", "TP Hải Phòng", "Đồng Nai"]

SEED_CATALOGUE = [
    {"category": "2", "keyword": "motorcycle,car", "products": [
        ("Honda SH 150i 2022 Chính chủ", 85000000),
        ("Yamaha Exciter 155 VVA Lướt", 42000000),
        ("Mazda 3 Luxury 2021 Màu Đỏ", 620000000),
        ("VinFast Lux A2.0 Bản Cao Cấp", 750000000),
    ]},
    {"category": "3", "keyword": "smartphone,laptop", "products": [
        ("iPhone 15 Pro Max 256GB VNA", 29500000),
        ("MacBook Air M2 Midnight Fullbox", 24000000),
        ("Samsung Galaxy S24 Ultra Xám", 26000000),
        ("Tai nghe Sony WH-1000XM5", 6500000),
    ]},
    {"category": "1", "keyword": "apartment,house", "products": [
        ("Chung cư cao cấp Vinhome 2PN", 4500000000),
        ("Nhà phố liền kề Khu đô thị mới", 8200000000),
        ("Phòng trọ khép kín Full nội thất", 3500000),
    ]},
    {"category": "6", "keyword": "fashion,shoes", "products": [
        ("Giày Nike Jordan 1 High Panda", 3200000),
        ("Áo Hoodie Essentials Chính hãng", 1500000),
    ]},
]


async def clear_seed_data() -> Dict[str, int]:
    prefix = {"$regex": f"^{SEED_ID_PREFIX}"}
    users = await get_users_collection().delete_many({"_id": prefix})
    listings = await get_listings_collection().delete_many({"_id": prefix})
    return {"users": users.deleted_count, "listings": listings.deleted_count}


async def seed_database(rng: Optional[random.Random] = None) -> Dict[str, Any]:
    """
    Resets demo data.

    Returns:
        Counts of removed and created documents
    """
    rng = rng or random.Random()
    removed = await clear_seed_data()
    logger.info(f"Removed {removed['users']} seed users and {removed['listings']} seed listings")

    now = utc_now()
    users = []
    for i in range(SEED_USERS):
        uid = f"{SEED_ID_PREFIX}user_{i}"
        user = new_user_document(
            uid,
            f"user{i}@seed.com",
            name=f"{rng.choice(FIRST_NAMES)} {rng.choice(MIDDLE_NAMES)} {rng.choice(LAST_NAMES)}",
        )
        roll = rng.random()
        tier = SubscriptionTier.PRO if roll > 0.8 else (SubscriptionTier.BASIC if roll > 0.5 else SubscriptionTier.FREE)
        user.update({
            "location": rng.choice(CITIES),
            "joined_at": now - timedelta(seconds=rng.randint(0, 10_000_000)),
            "wallet_balance": rng.randint(0, 5_000_000),
            "subscription_tier": tier.value,
            "subscription_expires": calculate_subscription_expiry(now) if tier != SubscriptionTier.FREE else None,
            "verification_status": (
                VerificationStatus.VERIFIED if rng.random() > 0.7 else VerificationStatus.UNVERIFIED
            ).value,
        })
        users.append(user)

    listings = []
    for i in range(SEED_LISTINGS):
        seller = rng.choice(users)
        group = rng.choice(SEED_CATALOGUE)
        title, base_price = rng.choice(group["products"])
        price = base_price + rng.randint(-500_000, 500_000)
        status = ListingStatus.APPROVED if rng.random() > 0.1 else ListingStatus.PENDING
        created_at = now - timedelta(seconds=rng.randint(0, 604_800))
        location = seller.get("location") or DEFAULT_LOCATION

        listings.append({
            "_id": f"{SEED_ID_PREFIX}listing_{i}",
            "title": title,
            "description": (
                f"Cần bán {title}. Hàng còn mới, sử dụng kỹ. Bao test thoải mái. "
                f"Liên hệ {seller['name']} để ép giá. Giao dịch trực tiếp tại {location}."
            ),
            "price": price if price > 0 else 1_000_000,
            "category": group["category"],
            "images": [
                f"https://loremflickr.com/800/600/{group['keyword']}?lock={i}",
                f"https://picsum.photos/seed/{i}/800/600",
            ],
            "slug": slugify(title),
            "keywords": build_keywords(title),
            "view_count": 0,
            "location": location,
            "address": f"Quận {rng.randint(1, 12)}, {location}",
            "lat": None,
            "lng": None,
            "seller_id": seller["_id"],
            "seller_name": seller["name"],
            "seller_avatar": seller["avatar"],
            "created_at": created_at,
            "updated_at": None,
            "status": status.value,
            "approved_at": created_at if status == ListingStatus.APPROVED else None,
            "condition": rng.choice([ListingCondition.NEW, ListingCondition.USED]).value,
            "tier": "pro" if rng.random() > 0.8 else "free",
            "attributes": {"brand": "Chính hãng", "origin": "Việt Nam", "status": "99%"},
        })

    await get_users_collection().insert_many(users)
    await get_listings_collection().insert_many(listings)

    logger.info(f"Seeded {len(users)} users and {len(listings)} listings")
    return {
        "removed_users": removed["users"],
        "removed_listings": removed["listings"],
        "users": len(users),
        "listings": len(listings),
    }
