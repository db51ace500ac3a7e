"""
app/schemas/settings.py

Purpose: System settings editable from the admin console
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any


class TierConfig(BaseModel):
    name: str
    price: int = Field(..., ge=0)
    max_images: int = Field(..., ge=0)
    posts_per_day: int = Field(..., ge=0)
    auto_approve: bool = False
    features: List[str] = Field(default_factory=list)


class SystemSettings(BaseModel):
    push_price: int = Field(..., ge=0)
    push_discount: float = Field(0, ge=0, le=100)
    tier_discount: float = Field(0, ge=0, le=100)
    tier_configs: Dict[str, TierConfig]
    bank_name: str = ""
    account_number: str = ""
    account_name: str = ""
    beneficiary_qr: Optional[str] = None
    banner_slides: List[Dict[str, Any]] = Field(default_factory=list)
