"""
app/services/admin_service.py

Purpose: Back-office dashboard figures
"""

from typing import Dict

from app.db.mongo import (
    get_users_collection,
    get_listings_collection,
    get_transactions_collection,
    get_collection,
    REPORTS,
)
from app.models.listing import ListingStatus
from app.models.social import ReportStatus
from app.models.transaction import TransactionStatus
from app.models.user import VerificationStatus


async def get_dashboard_stats() -> Dict[str, int]:
    """Counts of everything waiting on an admin."""
    return {
        "users": await get_users_collection().count_documents({}),
        "listings": await get_listings_collection().count_documents({}),
        "pending_listings": await get_listings_collection().count_documents(
            {"status": ListingStatus.PENDING.value}
        ),
        "pending_transactions": await get_transactions_collection().count_documents(
            {"status": TransactionStatus.PENDING.value}
        ),
        "pending_reports": await get_collection(REPORTS).count_documents(
            {"status": ReportStatus.PENDING.value}
        ),
        "pending_verifications": await get_users_collection().count_documents(
            {"verification_status": VerificationStatus.PENDING.value}
        ),
    }
