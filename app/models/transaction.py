"""
app/models/transaction.py

Purpose: Wallet transaction document model

- Status and type enums
- Single source of truth for the approval state machine
  (pending -> success | pending -> failed, terminal afterwards)
- Document factory for new transaction records
"""

from enum import Enum
from typing import Dict, Set, Optional, Any
from datetime import datetime

from app.db.mongo import new_id
from utils.time_utils import utc_now


class TransactionStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


class TransactionType(str, Enum):
    DEPOSIT = "deposit"
    PAYMENT = "payment"
    REFUND = "refund"


# Allowed transitions; anything not listed is rejected
VALID_TRANSITIONS: Dict[TransactionStatus, Set[TransactionStatus]] = {
    TransactionStatus.PENDING: {TransactionStatus.SUCCESS, TransactionStatus.FAILED},
    TransactionStatus.SUCCESS: set(),
    TransactionStatus.FAILED: set(),
}


def is_valid_transition(current: TransactionStatus, target: TransactionStatus) -> bool:
    """
    Checks whether a transaction may move from ``current`` to ``target``.
    """
    return target in VALID_TRANSITIONS.get(current, set())



def new_transaction_document(
    user_id: str,
    amount: int,
    tx_type: TransactionType,
    description: str,
    status: TransactionStatus = TransactionStatus.PENDING,
    method: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
    created_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Builds a transaction record ready for insertion.
    """
    now = created_at or utc_now()
    doc = {
        "_id": new_id(),
        "user_id": user_id,
        "amount": amount,
        "type": tx_type.value,
        "method": method,
        "description": description,
        "status": status.value,
        "created_at": now,
        "metadata": metadata or {},
    }
    if status != TransactionStatus.PENDING:
        doc["processed_at"] = now
    return doc
