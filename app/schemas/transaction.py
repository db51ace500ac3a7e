"""
app/schemas/transaction.py

Purpose: Wallet and payment schemas
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime

from app.models.transaction import TransactionStatus, TransactionType
from app.models.user import SubscriptionTier


class DepositRequest(BaseModel):
    amount: int = Field(..., gt=0, description="Amount in VND")
    method: str = Field("bank_transfer", max_length=50)

    class Config:
        json_schema_extra = {
            "example": {"amount": 50000, "method": "bank_transfer"}
        }


class SubscriptionPurchase(BaseModel):
    tier: SubscriptionTier
    method: Literal["wallet", "transfer"] = "wallet"


class Transaction(BaseModel):
    id: str
    user_id: str
    amount: int
    type: TransactionType
    method: Optional[str] = None
    description: str
    status: TransactionStatus
    created_at: datetime
    processed_at: Optional[datetime] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class TransactionList(BaseModel):
    transactions: List[Transaction]
