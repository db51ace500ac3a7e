"""
app/services/transaction_service.py

Purpose: Wallet and subscription payments

- Deposit and subscription requests confirmed manually by an admin
  after a bank transfer
- Approval state machine (pending -> success | failed), applied at most once
- Wallet spending: subscriptions and listing pushes
"""

from typing import Optional, Dict, Any, List

from pymongo import DESCENDING, ReturnDocument

from app.core.config import settings
from app.core.exceptions import (
    TransactionNotFoundError,
    TransactionAlreadyProcessedError,
    UserNotFoundError,
    InsufficientFundsError,
    ResourceNotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from app.core.logging import get_logger, LogContext
from app.db.mongo import (
    get_transactions_collection,
    get_users_collection,
    get_listings_collection,
    run_in_transaction,
)
from app.models.transaction import (
    TransactionStatus,
    TransactionType,
    new_transaction_document,
    is_valid_transition,
)
from app.models.social import NotificationType
from app.models.user import SubscriptionTier
from app.services import mail_service, notification_service, settings_service
from utils.constants import (
    DEPOSIT_APPROVED_TITLE,
    DEPOSIT_APPROVED_MESSAGE,
    SUBSCRIPTION_APPROVED_TITLE,
    SUBSCRIPTION_APPROVED_MESSAGE,
    DEPOSIT_EMAIL_SUBJECT,
    DEPOSIT_EMAIL_HTML,
    SUBSCRIPTION_TRANSFER_EMAIL_SUBJECT,
    SUBSCRIPTION_TRANSFER_EMAIL_HTML,
    WALLET_SUBSCRIPTION_EMAIL_SUBJECT,
    WALLET_SUBSCRIPTION_EMAIL_HTML,
    PUSH_EMAIL_SUBJECT,
    PUSH_EMAIL_HTML,
)
from utils.format_utils import format_price
from utils.time_utils import utc_now, calculate_subscription_expiry

logger = get_logger(__name__)


# ============================================================
# REQUESTS
# ============================================================

async def request_deposit(user_id: str, amount: int, method: str) -> Dict[str, Any]:
    """
    Records a pending deposit for an admin to confirm.

    Repeated calls create separate pending records.
    """
    if amount <= 0:
        raise ValidationError("Amount must be positive")

    with LogContext(user_id=user_id):
        doc = new_transaction_document(
            user_id=user_id,
            amount=amount,
            tx_type=TransactionType.DEPOSIT,
            description=f"Deposit via {method}",
            method=method,
        )
        await get_transactions_collection().insert_one(doc)
        logger.info(f"Deposit requested: {amount}", extra={"transaction_id": doc["_id"]})

        await mail_service.queue_admin_email(
            DEPOSIT_EMAIL_SUBJECT.format(amount=format_price(amount), method=method),
            DEPOSIT_EMAIL_HTML.format(user_id=user_id, amount=format_price(amount), method=method),
        )
        return doc


async def request_subscription_transfer(user_id: str, tier: SubscriptionTier, price: int) -> Dict[str, Any]:
    """
    Records a pending subscription payment made by bank transfer.
    """
    tier = SubscriptionTier(tier)
    if tier == SubscriptionTier.FREE:
        raise ValidationError("Cannot buy the free tier")
    if price <= 0:
        raise ValidationError("Amount must be positive")

    with LogContext(user_id=user_id):
        doc = new_transaction_document(
            user_id=user_id,
            amount=price,
            tx_type=TransactionType.PAYMENT,
            description=f"Upgrade to {tier.value.upper()} (Transfer)",
            method="transfer",
            metadata={"target_tier": tier.value},
        )
        await get_transactions_collection().insert_one(doc)
        logger.info(f"Subscription transfer requested: {tier.value}", extra={"transaction_id": doc["_id"]})

        await mail_service.queue_admin_email(
            SUBSCRIPTION_TRANSFER_EMAIL_SUBJECT.format(tier=tier.value.upper()),
            SUBSCRIPTION_TRANSFER_EMAIL_HTML.format(user_id=user_id, tier=tier.value, amount=format_price(price)),
        )
        return doc


# ============================================================
# ADMIN APPROVAL
# ============================================================

async def approve_transaction(transaction_id: str) -> Dict[str, Any]:
    """
    Approves a pending transaction and applies its effect exactly once.

    - deposit: wallet_balance += amount
    - payment with metadata.target_tier: subscription tier and expiry set

    Raises:
        TransactionNotFoundError: Unknown id
        TransactionAlreadyProcessedError: Status is no longer pending
        UserNotFoundError: Owner no longer exists
    """
    with LogContext(transaction_id=transaction_id):

        async def _apply(session) -> Dict[str, Any]:
            transactions = get_transactions_collection()
            users = get_users_collection()

            tx = await transactions.find_one({"_id": transaction_id}, session=session)
            if not tx:
                raise TransactionNotFoundError()
            if not is_valid_transition(TransactionStatus(tx["status"]), TransactionStatus.SUCCESS):
                raise TransactionAlreadyProcessedError()

            user = await users.find_one({"_id": tx["user_id"]}, session=session)
            if not user:
                raise UserNotFoundError()

            now = utc_now()
            claimed = await transactions.update_one(
                {"_id": transaction_id, "status": TransactionStatus.PENDING.value},
                {"$set": {"status": TransactionStatus.SUCCESS.value, "processed_at": now}},
                session=session,
            )
            if claimed.matched_count == 0:
                raise TransactionAlreadyProcessedError()

            target_tier = (tx.get("metadata") or {}).get("target_tier")
            if tx["type"] == TransactionType.DEPOSIT.value:
                await users.update_one(
                    {"_id": user["_id"]},
                    {"$inc": {"wallet_balance": tx["amount"]}},
                    session=session,
                )
            elif tx["type"] == TransactionType.PAYMENT.value and target_tier:
                await users.update_one(
                    {"_id": user["_id"]},
                    {"$set": {
                        "subscription_tier": target_tier,
                        "subscription_expires": calculate_subscription_expiry(now, settings.SUBSCRIPTION_DAYS),
                    }},
                    session=session,
                )

            tx["status"] = TransactionStatus.SUCCESS.value
            tx["processed_at"] = now
            return tx

        tx = await run_in_transaction(_apply)
        logger.info("Transaction approved", extra={"user_id": tx["user_id"]})

        if tx["type"] == TransactionType.DEPOSIT.value:
            title = DEPOSIT_APPROVED_TITLE
            message = DEPOSIT_APPROVED_MESSAGE.format(amount=format_price(tx["amount"]))
        else:
            title = SUBSCRIPTION_APPROVED_TITLE
            message = SUBSCRIPTION_APPROVED_MESSAGE

        await notification_service.send_notification(
            tx["user_id"], title, message, type=NotificationType.SUCCESS, link="/wallet"
        )
        return tx


async def reject_transaction(transaction_id: str) -> Dict[str, Any]:
    """
    Marks a pending transaction as failed. No balance or tier change.

    Raises:
        TransactionNotFoundError: Unknown id
        TransactionAlreadyProcessedError: Status is no longer pending
    """
    with LogContext(transaction_id=transaction_id):
        tx = await get_transactions_collection().find_one_and_update(
            {"_id": transaction_id, "status": TransactionStatus.PENDING.value},
            {"$set": {"status": TransactionStatus.FAILED.value, "processed_at": utc_now()}},
            return_document=ReturnDocument.AFTER,
        )
        if tx:
            logger.info("Transaction rejected", extra={"user_id": tx["user_id"]})
            return tx

        if await get_transactions_collection().count_documents({"_id": transaction_id}) == 0:
            raise TransactionNotFoundError()
        raise TransactionAlreadyProcessedError()


async def get_transaction(transaction_id: str) -> Dict[str, Any]:
    tx = await get_transactions_collection().find_one({"_id": transaction_id})
    if not tx:
        raise TransactionNotFoundError()
    return tx


async def get_transactions(
    user_id: Optional[str] = None,
    status: Optional[TransactionStatus] = None,
    limit: int = 100,
) -> List[Dict[str, Any]]:
    """
    Transactions newest first. ``user_id=None`` returns everyone's (admin view).
    """
    query: Dict[str, Any] = {}
    if user_id:
        query["user_id"] = user_id
    if status:
        query["status"] = TransactionStatus(status).value

    cursor = (
        get_transactions_collection()
        .find(query)
        .sort([("created_at", DESCENDING), ("_id", DESCENDING)])
        .limit(limit)
    )
    return await cursor.to_list(length=limit)


# ============================================================
# WALLET SPENDING
# ============================================================

async def _debit_wallet(user_id: str, amount: int, extra_set: Optional[Dict[str, Any]] = None, session=None):
    """
    Takes ``amount`` from the wallet only if the balance covers it.
    """
    update: Dict[str, Any] = {"$inc": {"wallet_balance": -amount}}
    if extra_set:
        update["$set"] = extra_set

    result = await get_users_collection().update_one(
        {"_id": user_id, "wallet_balance": {"$gte": amount}},
        update,
        session=session,
    )
    if result.matched_count == 0:
        if await get_users_collection().count_documents({"_id": user_id}) == 0:
            raise UserNotFoundError()
        raise InsufficientFundsError()


async def buy_subscription_with_wallet(user_id: str, tier: SubscriptionTier) -> Dict[str, Any]:
    """
    Buys a subscription tier from the wallet balance.

    Raises:
        InsufficientFundsError: Balance below the tier price
    """
    tier = SubscriptionTier(tier)
    if tier == SubscriptionTier.FREE:
        raise ValidationError("Cannot buy the free tier")

    price = await settings_service.get_tier_price(tier.value)

    with LogContext(user_id=user_id):

        async def _apply(session) -> Dict[str, Any]:
            now = utc_now()
            await _debit_wallet(
                user_id,
                price,
                extra_set={
                    "subscription_tier": tier.value,
                    "subscription_expires": calculate_subscription_expiry(now, settings.SUBSCRIPTION_DAYS),
                },
                session=session,
            )
            doc = new_transaction_document(
                user_id=user_id,
                amount=price,
                tx_type=TransactionType.PAYMENT,
                description=f"Upgrade to {tier.value.upper()} (Wallet)",
                status=TransactionStatus.SUCCESS,
                method="wallet",
                metadata={"target_tier": tier.value},
                created_at=now,
            )
            await get_transactions_collection().insert_one(doc, session=session)
            return doc

        doc = await run_in_transaction(_apply)
        logger.info(f"Subscription {tier.value} bought with wallet", extra={"transaction_id": doc["_id"]})

        await mail_service.queue_admin_email(
            WALLET_SUBSCRIPTION_EMAIL_SUBJECT.format(tier=tier.value.upper()),
            WALLET_SUBSCRIPTION_EMAIL_HTML.format(user_id=user_id, tier=tier.value, amount=format_price(price)),
        )
        return doc


async def push_listing(listing_id: str, user_id: str) -> Dict[str, Any]:
    """
    Moves a listing back to the top of the feed, paid from the wallet.

    Raises:
        ResourceNotFoundError: Unknown listing
        PermissionDeniedError: Caller is not the seller
        InsufficientFundsError: Balance below the push price
    """
    with LogContext(user_id=user_id, listing_id=listing_id):
        listing = await get_listings_collection().find_one({"_id": listing_id})
        if not listing:
            raise ResourceNotFoundError("Listing not found")
        if listing["seller_id"] != user_id:
            raise PermissionDeniedError("Only the seller can push this listing")

        price = await settings_service.get_push_price()

        async def _apply(session) -> Dict[str, Any]:
            now = utc_now()
            if price > 0:
                await _debit_wallet(user_id, price, session=session)
            await get_listings_collection().update_one(
                {"_id": listing_id},
                {"$set": {"created_at": now, "updated_at": now}},
                session=session,
            )
            doc = new_transaction_document(
                user_id=user_id,
                amount=price,
                tx_type=TransactionType.PAYMENT,
                description=f"Push listing: {listing['title'][:20]}...",
                status=TransactionStatus.SUCCESS,
                method="wallet",
                metadata={"listing_id": listing_id},
                created_at=now,
            )
            await get_transactions_collection().insert_one(doc, session=session)
            return doc

        doc = await run_in_transaction(_apply)
        logger.info(f"Listing pushed for {price}", extra={"transaction_id": doc["_id"]})

        await mail_service.queue_admin_email(
            PUSH_EMAIL_SUBJECT,
            PUSH_EMAIL_HTML.format(user_id=user_id, listing_id=listing_id, amount=format_price(price)),
        )
        return doc
