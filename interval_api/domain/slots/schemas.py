"""Slot domain schemas - Pydantic models for validation"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from ...utils.formatting import ensure_utc

# Matches the Numeric(18, 9) price column; well below the u64 lamport ceiling
PRICE_DECIMALS = 9
MAX_SLOT_PRICE = Decimal("999999999.999999999")


class SlotCreate(BaseModel):
    """Schema for creating a new slot"""

    creatorId: str
    startTime: datetime
    endTime: datetime
    price: Decimal
    meetLink: Optional[str] = None

    @field_validator("creatorId")
    @classmethod
    def validate_creator_id(cls, v):
        if not v or not v.strip():
            raise ValueError("creatorId is required")
        return v.strip()

    @field_validator("price")
    @classmethod
    def validate_price(cls, v):
        if not v.is_finite() or v < 0:
            raise ValueError("price must be a non-negative number")
        if v > MAX_SLOT_PRICE:
            raise ValueError(f"price must be at most {MAX_SLOT_PRICE} SOL")
        if v.normalize().as_tuple().exponent < -PRICE_DECIMALS:
            raise ValueError(f"price must have at most {PRICE_DECIMALS} decimal places")
        return v

    @field_validator("meetLink")
    @classmethod
    def validate_meet_link(cls, v):
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v

    @model_validator(mode="after")
    def validate_time_order(self):
        self.startTime = ensure_utc(self.startTime)
        self.endTime = ensure_utc(self.endTime)
        if self.endTime <= self.startTime:
            raise ValueError("endTime must be after startTime")
        return self


class SlotResponse(BaseModel):
    """Schema for slot response"""

    id: str
    creatorId: str
    startTime: datetime
    endTime: datetime
    price: Decimal
    status: str
    meetLink: Optional[str] = None
