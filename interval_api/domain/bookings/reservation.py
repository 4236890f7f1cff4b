"""
Reservation engine - the available -> booked state machine

A slot is claimed with a single conditional UPDATE and the booking row is
inserted in the same transaction. Losers of a race see zero rows affected
and get SlotUnavailable; nothing is retried here.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from solders.pubkey import Pubkey
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from ...errors import (
    InvalidPayer,
    InvalidPrice,
    SlotNotFound,
    SlotUnavailable,
    ValidationError,
)
from ...models import SLOT_AVAILABLE
from ...security_utils import generate_secure_token, mask_sensitive_data
from ...utils.formatting import ensure_utc, is_settleable, sol_to_lamports, to_decimal
from .repository import BookingRepository

logger = logging.getLogger(__name__)

# Form limits, in characters; the memo byte budget is enforced separately
FORM_FIELD_LIMITS = {"name": 100, "email": 254, "callFor": 280}


@dataclass(frozen=True)
class BookingDetails:
    """Optional payer-supplied form fields"""

    name: Optional[str] = None
    email: Optional[str] = None
    call_for: Optional[str] = None

    @classmethod
    def from_form(cls, data: Optional[dict]) -> "BookingDetails":
        """
        Keep only non-empty string values, trimmed.

        Raises ValidationError when a value exceeds FORM_FIELD_LIMITS.
        """
        data = data if isinstance(data, dict) else {}

        def pick(key: str) -> Optional[str]:
            value = data.get(key)
            if not isinstance(value, str) or not value.strip():
                return None
            value = value.strip()
            if len(value) > FORM_FIELD_LIMITS[key]:
                raise ValidationError(f'"{key}" must be at most {FORM_FIELD_LIMITS[key]} characters')
            return value

        return cls(name=pick("name"), email=pick("email"), call_for=pick("callFor"))


@dataclass(frozen=True)
class ReservationReceipt:
    """Everything later steps need, captured before the session closes"""

    booking_id: str
    access_token: str
    slot_id: str
    creator_id: str
    creator_username: str
    creator_wallet: str
    payer_wallet: str
    amount_sol: Decimal
    lamports: int
    start_time: datetime
    end_time: datetime
    meet_link: Optional[str]
    details: BookingDetails


def parse_payer(account: Optional[str]) -> Pubkey:
    """Validate a payer address as a Solana public key"""
    if not isinstance(account, str) or not account.strip():
        raise InvalidPayer()
    try:
        return Pubkey.from_string(account.strip())
    except ValueError as e:
        raise InvalidPayer() from e


class ReservationEngine:
    """Atomically reserves slots. Each call opens its own transaction."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory
        self.repo = BookingRepository()

    def reserve(
        self,
        slot_id: str,
        payer: str,
        amount: Decimal,
        details: Optional[BookingDetails] = None,
    ) -> ReservationReceipt:
        """
        Claim a slot for a payer.

        Raises:
            InvalidPayer: payer is not a well-formed address
            InvalidPrice: amount is not a positive lamport count that fits a transfer,
                or no longer matches the slot price
            SlotNotFound: unknown slot
            SlotUnavailable: slot already booked (including a lost race)
        """
        payer_key = parse_payer(payer)
        amount = to_decimal(amount)
        if not is_settleable(amount):
            logger.warning(f"⚠️ Reservation rejected: {amount} SOL cannot be settled in one transfer")
            raise InvalidPrice()
        lamports = sol_to_lamports(amount)
        details = details or BookingDetails()

        with self.session_factory() as db:
            try:
                claimed = self.repo.claim_slot(db, slot_id, amount)
                if claimed != 1:
                    db.rollback()
                    raise self._rejection(db, slot_id, amount)

                # Write lock is held from here until commit
                slot = self.repo.get_slot(db, slot_id)
                token = generate_secure_token()
                booking = self.repo.add_booking(
                    db,
                    slot_id=slot.id,
                    creator_id=slot.creator_id,
                    payer_wallet=str(payer_key),
                    amount_sol=amount,
                    name=details.name,
                    email=details.email,
                    call_for=details.call_for,
                    access_token=token,
                )
                receipt = ReservationReceipt(
                    booking_id=booking.id,
                    access_token=token,
                    slot_id=slot.id,
                    creator_id=slot.creator_id,
                    creator_username=slot.creator.username,
                    creator_wallet=slot.creator.wallet,
                    payer_wallet=str(payer_key),
                    amount_sol=amount,
                    lamports=lamports,
                    start_time=ensure_utc(slot.start_time),
                    end_time=ensure_utc(slot.end_time),
                    meet_link=slot.meet_link,
                    details=details,
                )
                db.commit()
            except IntegrityError as e:
                # Unique slot_id on bookings: another writer got there first
                db.rollback()
                logger.warning(f"⚠️ Booking insert for slot {slot_id} rejected: {e.orig}")
                raise SlotUnavailable() from e

        logger.info(
            f"✅ Reserved slot {receipt.slot_id} as booking {receipt.booking_id} "
            f"for {receipt.payer_wallet} ({receipt.amount_sol} SOL, token {mask_sensitive_data(receipt.access_token)})"
        )
        return receipt

    def _rejection(self, db: Session, slot_id: str, amount: Decimal) -> Exception:
        """Explain why the conditional update matched no rows"""
        slot = self.repo.get_slot(db, slot_id)
        if slot is None:
            logger.info(f"Reservation rejected: slot {slot_id} not found")
            return SlotNotFound()
        if slot.status != SLOT_AVAILABLE:
            logger.info(f"Reservation rejected: slot {slot_id} is {slot.status}")
            return SlotUnavailable()
        logger.warning(f"⚠️ Reservation rejected: slot {slot_id} price {slot.price} != {amount}")
        return InvalidPrice()
