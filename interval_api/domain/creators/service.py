"""Creator service - Business logic for creator profiles"""

import logging
from typing import Optional

from solders.pubkey import Pubkey
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...errors import ValidationError
from ...models import Creator
from ...utils.formatting import ensure_utc
from ..slots.repository import SlotRepository
from .repository import CreatorRepository
from .schemas import CreatorCreate, CreatorListing, CreatorResponse, SlotSummary

logger = logging.getLogger(__name__)


class CreatorService:
    """Service layer for registering and listing creators"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CreatorRepository()
        self.slots = SlotRepository()

    def get_by_wallet(self, wallet: str) -> Optional[Creator]:
        if not wallet:
            return None
        return self.repo.get_by_wallet(self.db, wallet)

    def create_creator(self, data: CreatorCreate) -> Creator:
        """
        Register a creator.

        The wallet receives every payment for the creator's slots, so it
        must be a valid Solana address; wallet and username are each unique.
        """
        wallet = (data.wallet or "").strip()
        username = (data.username or "").strip()
        if not wallet:
            raise ValidationError("wallet is required")
        if not username:
            raise ValidationError("username is required")
        try:
            Pubkey.from_string(wallet)
        except ValueError as e:
            raise ValidationError("wallet must be a valid Solana address") from e

        if self.repo.get_by_wallet(self.db, wallet):
            raise ValidationError("A profile already exists for this wallet")
        if self.repo.get_by_username(self.db, username):
            raise ValidationError("Username is already taken")

        try:
            creator = self.repo.create_creator(
                self.db,
                wallet=wallet,
                username=username,
                profile_image_url=(data.profileImageUrl or "").strip() or None,
                bio=data.bio or None,
                twitter_handle=(data.twitterHandle or "").strip() or None,
            )
        except IntegrityError as e:
            # Lost a race with a concurrent registration
            self.db.rollback()
            logger.warning(f"⚠️ Creator insert rejected for {username}: {e.orig}")
            raise ValidationError("A profile already exists for this wallet or username") from e

        logger.info(f"👤 Registered creator {creator.username} ({creator.wallet})")
        return creator

    def list_creators(self) -> list[CreatorListing]:
        listings = []
        for creator in self.repo.list_creators(self.db):
            available = [
                SlotSummary(
                    id=slot.id,
                    price=slot.price,
                    startTime=ensure_utc(slot.start_time),
                    endTime=ensure_utc(slot.end_time),
                )
                for slot in self.slots.list_available_for_creator(self.db, creator.id)
            ]
            listings.append(
                CreatorListing(
                    id=creator.id,
                    username=creator.username,
                    wallet=creator.wallet,
                    profileImageUrl=creator.profile_image_url,
                    bio=creator.bio,
                    firstAvailableSlot=available[0] if available else None,
                    availableSlots=available,
                )
            )
        return listings

    @staticmethod
    def to_response(creator: Creator) -> CreatorResponse:
        return CreatorResponse(
            id=creator.id,
            wallet=creator.wallet,
            username=creator.username,
            profileImageUrl=creator.profile_image_url,
            bio=creator.bio,
            twitterHandle=creator.twitter_handle,
            createdAt=ensure_utc(creator.created_at),
        )
