"""Booking repository - Database operations for bookings"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session, joinedload

from ...models import SLOT_AVAILABLE, SLOT_BOOKED, Booking, Slot


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def claim_slot(db: Session, slot_id: str, expected_price: Decimal) -> int:
        """
        Flip a slot from available to booked in one conditional write.

        Returns the number of rows affected: 1 when this caller won the slot,
        0 when the slot is missing, already booked, or its price changed.
        """
        result = db.execute(
            update(Slot)
            .where(
                Slot.id == slot_id,
                Slot.status == SLOT_AVAILABLE,
                Slot.price == expected_price,
            )
            .values(status=SLOT_BOOKED)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    @staticmethod
    def get_slot(db: Session, slot_id: str) -> Optional[Slot]:
        return (
            db.query(Slot)
            .options(joinedload(Slot.creator))
            .filter(Slot.id == slot_id)
            .first()
        )

    @staticmethod
    def add_booking(db: Session, **booking_data) -> Booking:
        """Stage a booking in the caller's transaction"""
        booking = Booking(**booking_data)
        db.add(booking)
        db.flush()
        return booking

    @staticmethod
    def get_booking(db: Session, booking_id: str) -> Optional[Booking]:
        """Get a booking with its slot and creator"""
        return (
            db.query(Booking)
            .options(joinedload(Booking.slot), joinedload(Booking.creator))
            .filter(Booking.id == booking_id)
            .first()
        )
