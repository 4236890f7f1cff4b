"""Slot service - Business logic for the slot store"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...errors import ValidationError
from ...models import Slot
from ...utils.formatting import ensure_utc
from ..creators.repository import CreatorRepository
from .repository import SlotRepository
from .schemas import SlotCreate, SlotResponse

logger = logging.getLogger(__name__)


class SlotService:
    """Service layer for creating and reading slots"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = SlotRepository()
        self.creators = CreatorRepository()

    def get_slot(self, slot_id: str) -> Optional[Slot]:
        """Slot with creator, or None when unknown"""
        if not slot_id:
            return None
        return self.repo.get_slot_with_creator(self.db, slot_id)

    def create_slot(self, data: SlotCreate) -> Slot:
        """Create a bookable slot for an existing creator"""
        creator = self.creators.get_creator(self.db, data.creatorId)
        if not creator:
            raise ValidationError("Creator not found. Use a valid creator id from the database.")

        try:
            slot = self.repo.create_slot(
                self.db,
                creator_id=creator.id,
                start_time=ensure_utc(data.startTime),
                end_time=ensure_utc(data.endTime),
                price=data.price,
                meet_link=data.meetLink,
            )
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Slot insert rejected for creator {creator.id}: {e.orig}")
            raise ValidationError("Creator not found. Use a valid creator id.") from e

        logger.info(f"🗓️ Created slot {slot.id} for creator {creator.username} at {slot.price} SOL")
        return slot

    @staticmethod
    def to_response(slot: Slot) -> SlotResponse:
        return SlotResponse(
            id=slot.id,
            creatorId=slot.creator_id,
            startTime=ensure_utc(slot.start_time),
            endTime=ensure_utc(slot.end_time),
            price=slot.price,
            status=slot.status,
            meetLink=slot.meet_link,
        )
