"""Booking domain schemas"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class BookingAccessResponse(BaseModel):
    """What the private confirmation view may show the payer"""

    id: str
    creator: str
    startTime: datetime
    endTime: datetime
    meetLink: Optional[str] = None
    amountSol: Decimal


class ErrorMessage(BaseModel):
    message: str
