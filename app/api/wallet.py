"""
app/api/wallet.py

Purpose: Wallet endpoints

- Deposit requests (confirmed by an admin after the bank transfer)
- Subscription purchase from the wallet or by transfer
- Own transaction history
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_session
from app.core.security import AuthSession
from app.db.mongo import to_public
from app.schemas.transaction import DepositRequest, SubscriptionPurchase, Transaction, TransactionList
from app.services import transaction_service, settings_service

router = APIRouter(prefix="/wallet", tags=["Wallet"])


@router.post("/deposits", response_model=Transaction, status_code=201)
async def request_deposit(payload: DepositRequest, session: AuthSession = Depends(get_session)):
    tx = await transaction_service.request_deposit(session.user_id, payload.amount, payload.method)
    return Transaction(**to_public(tx))


@router.post("/subscriptions", response_model=Transaction, status_code=201)
async def buy_subscription(payload: SubscriptionPurchase, session: AuthSession = Depends(get_session)):
    """
    ``method=wallet`` debits the balance immediately; ``method=transfer``
    records a pending payment for an admin to confirm.
    """
    if payload.method == "wallet":
        tx = await transaction_service.buy_subscription_with_wallet(session.user_id, payload.tier)
    else:
        price = await settings_service.get_tier_price(payload.tier.value)
        tx = await transaction_service.request_subscription_transfer(session.user_id, payload.tier, price)
    return Transaction(**to_public(tx))


@router.get("/transactions", response_model=TransactionList)
async def get_my_transactions(session: AuthSession = Depends(get_session)):
    txs = await transaction_service.get_transactions(user_id=session.user_id)
    return TransactionList(transactions=[Transaction(**to_public(t)) for t in txs])
