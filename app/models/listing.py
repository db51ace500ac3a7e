"""
app/models/listing.py

Purpose: Listing document model

- Status and condition enums
- Status changes sellers may make on their own listings
"""

from enum import Enum
from typing import Dict, Set


class ListingStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SOLD = "sold"
    HIDDEN = "hidden"


class ListingCondition(str, Enum):
    NEW = "new"
    USED = "used"


# Moderation outcomes only admins can set
MODERATION_STATUSES = {ListingStatus.APPROVED, ListingStatus.REJECTED}

# What a seller may do with their own listing, by current status
SELLER_TRANSITIONS: Dict[ListingStatus, Set[ListingStatus]] = {
    ListingStatus.PENDING: {ListingStatus.HIDDEN},
    ListingStatus.APPROVED: {ListingStatus.SOLD, ListingStatus.HIDDEN},
    ListingStatus.HIDDEN: {ListingStatus.APPROVED},
    ListingStatus.SOLD: {ListingStatus.HIDDEN},
    ListingStatus.REJECTED: set(),
}


def seller_can_set(current: ListingStatus, target: ListingStatus) -> bool:
    return target in SELLER_TRANSITIONS.get(current, set())
