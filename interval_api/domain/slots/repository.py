"""Slot repository - Database operations for slots"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import SLOT_AVAILABLE, Slot


class SlotRepository:
    """Repository for slot database operations"""

    @staticmethod
    def get_slot_with_creator(db: Session, slot_id: str) -> Optional[Slot]:
        """Get a slot with its creator eagerly loaded"""
        return (
            db.query(Slot)
            .options(joinedload(Slot.creator))
            .filter(Slot.id == slot_id)
            .first()
        )

    @staticmethod
    def list_available_for_creator(db: Session, creator_id: str) -> list[Slot]:
        return (
            db.query(Slot)
            .filter(Slot.creator_id == creator_id, Slot.status == SLOT_AVAILABLE)
            .order_by(Slot.start_time.asc())
            .all()
        )

    @staticmethod
    def create_slot(
        db: Session,
        creator_id: str,
        start_time: datetime,
        end_time: datetime,
        price: Decimal,
        meet_link: Optional[str] = None,
    ) -> Slot:
        """Create a new slot; slots always start out available"""
        slot = Slot(
            creator_id=creator_id,
            start_time=start_time,
            end_time=end_time,
            price=price,
            meet_link=meet_link,
            status=SLOT_AVAILABLE,
        )
        db.add(slot)
        db.commit()
        db.refresh(slot)
        return slot
