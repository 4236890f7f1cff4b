"""
Access credential issuer

The access token minted at reservation time is the only key to a booking's
private confirmation view. It reaches the payer through the display message
returned with the unsigned transaction and, when an email address was given,
a best-effort confirmation email.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Awaitable, Callable, Optional
from urllib.parse import urlencode

from sqlalchemy.orm import Session

from ...email_service import send_booking_confirmation_email
from ...models import Booking
from ...security_utils import constant_time_compare, mask_sensitive_data
from .repository import BookingRepository
from .reservation import ReservationReceipt

logger = logging.getLogger(__name__)


def build_booking_url(base_url: str, booking_id: str, token: str) -> str:
    """Private confirmation link, e.g. https://host/booking/<id>?token=<token>"""
    return f"{base_url.rstrip('/')}/booking/{booking_id}?{urlencode({'token': token})}"


@dataclass(frozen=True)
class BookingNotification:
    to: str
    booking_id: str
    creator_name: str
    start_time: datetime
    end_time: datetime
    booking_url: str
    meet_link: Optional[str]
    amount_sol: Decimal


class AccessCredentialIssuer:
    """Checks access tokens and delivers them out of band"""

    def __init__(
        self,
        db: Optional[Session] = None,
        send_confirmation: Callable[..., Awaitable[dict]] = send_booking_confirmation_email,
    ):
        self.db = db
        self.repo = BookingRepository()
        self.send_confirmation = send_confirmation

    def check_access(self, booking_id: str, token: Optional[str]) -> Optional[Booking]:
        """
        Return the booking when the token matches exactly, otherwise None.

        An unknown booking and a wrong token are indistinguishable to callers.
        """
        if not booking_id or not token:
            return None
        booking = self.repo.get_booking(self.db, booking_id)
        if booking is None:
            return None
        if not constant_time_compare(booking.access_token, token):
            logger.info(f"🔒 Access denied for booking {booking_id} (token {mask_sensitive_data(token)})")
            return None
        return booking

    def plan_notification(self, receipt: ReservationReceipt, booking_url: str) -> Optional[BookingNotification]:
        """A confirmation email is only sent when the payer supplied an address"""
        if not receipt.details.email:
            return None
        return BookingNotification(
            to=receipt.details.email,
            booking_id=receipt.booking_id,
            creator_name=receipt.creator_username,
            start_time=receipt.start_time,
            end_time=receipt.end_time,
            booking_url=booking_url,
            meet_link=receipt.meet_link,
            amount_sol=receipt.amount_sol,
        )

    async def dispatch(self, notification: BookingNotification) -> bool:
        """
        Send the confirmation email. Never raises: failures are logged only,
        the booking stands regardless.
        """
        try:
            await self.send_confirmation(
                to=notification.to,
                creator_name=notification.creator_name,
                start_time=notification.start_time,
                end_time=notification.end_time,
                booking_url=notification.booking_url,
                meet_link=notification.meet_link,
                amount_sol=notification.amount_sol,
            )
        except Exception as e:
            logger.warning(
                f"⚠️ Confirmation email for booking {notification.booking_id} not sent: {e}"
            )
            return False

        logger.info(f"📧 Confirmation email sent for booking {notification.booking_id}")
        return True
