"""Booking router - access-checked confirmation data for the booking page"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ...database import get_db
from ...utils.formatting import ensure_utc
from .access import AccessCredentialIssuer
from .schemas import BookingAccessResponse, ErrorMessage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/booking", tags=["Bookings"])


def get_access_issuer(db: Session = Depends(get_db)) -> AccessCredentialIssuer:
    """Dependency injection for AccessCredentialIssuer"""
    return AccessCredentialIssuer(db)


@router.get(
    "/{booking_id}",
    response_model=BookingAccessResponse,
    responses={401: {"model": ErrorMessage}, 403: {"model": ErrorMessage}},
)
async def get_booking(
    booking_id: str,
    token: Optional[str] = Query(None),
    issuer: AccessCredentialIssuer = Depends(get_access_issuer),
):
    """Meeting details for the holder of the booking's access token"""
    if not token:
        return JSONResponse(
            status_code=401,
            content={"message": "Access required. Use the link from your booking confirmation."},
        )

    booking = issuer.check_access(booking_id, token)
    if booking is None:
        return JSONResponse(status_code=403, content={"message": "Invalid or expired link"})

    return BookingAccessResponse(
        id=booking.id,
        creator=booking.creator.username,
        startTime=ensure_utc(booking.slot.start_time),
        endTime=ensure_utc(booking.slot.end_time),
        meetLink=booking.slot.meet_link,
        amountSol=booking.amount_sol,
    )
