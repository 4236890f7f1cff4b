"""Creator domain schemas - Pydantic models for validation"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class CreatorCreate(BaseModel):
    """Schema for registering a creator profile"""

    wallet: str
    username: str
    profileImageUrl: Optional[str] = None
    bio: Optional[str] = None
    twitterHandle: Optional[str] = None


class CreatorResponse(BaseModel):
    id: str
    wallet: str
    username: str
    profileImageUrl: Optional[str] = None
    bio: Optional[str] = None
    twitterHandle: Optional[str] = None
    createdAt: datetime


class SlotSummary(BaseModel):
    id: str
    price: Decimal
    startTime: datetime
    endTime: datetime


class CreatorListing(BaseModel):
    """Explore-page entry: profile plus its bookable slots, earliest first"""

    id: str
    username: str
    wallet: str
    profileImageUrl: Optional[str] = None
    bio: Optional[str] = None
    firstAvailableSlot: Optional[SlotSummary] = None
    availableSlots: list[SlotSummary] = []
