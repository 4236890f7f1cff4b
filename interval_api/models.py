import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .database import Base

SLOT_AVAILABLE = "available"
SLOT_BOOKED = "booked"


def generate_id():
    """Generate an opaque, unguessable row identifier"""
    return str(uuid.uuid4())


def utcnow():
    return datetime.now(timezone.utc)


class Creator(Base):
    __tablename__ = "creators"

    id = Column(String(36), primary_key=True, default=generate_id)
    wallet = Column(String(64), unique=True, index=True, nullable=False)  # Settlement destination
    username = Column(String(64), unique=True, index=True, nullable=False)
    profile_image_url = Column(String(500), nullable=True)  # https URL or path under PUBLIC_DIR
    bio = Column(Text, nullable=True)
    twitter_handle = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    slots = relationship("Slot", back_populates="creator")


class Slot(Base):
    __tablename__ = "slots"
    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_slots_time_order"),
        CheckConstraint("price >= 0", name="ck_slots_price_non_negative"),
        CheckConstraint(f"status IN ('{SLOT_AVAILABLE}', '{SLOT_BOOKED}')", name="ck_slots_status"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    creator_id = Column(String(36), ForeignKey("creators.id"), index=True, nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    price = Column(Numeric(18, 9), nullable=False)  # Denominated in SOL
    # available -> booked, only through the reservation engine's conditional update
    status = Column(String(20), default=SLOT_AVAILABLE, nullable=False)
    meet_link = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    creator = relationship("Creator", back_populates="slots")
    booking = relationship("Booking", back_populates="slot", uselist=False)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=generate_id)
    # unique: at most one booking per slot even if a write path skips the engine
    slot_id = Column(String(36), ForeignKey("slots.id"), unique=True, nullable=False)
    creator_id = Column(String(36), ForeignKey("creators.id"), index=True, nullable=False)
    payer_wallet = Column(String(64), nullable=False)
    amount_sol = Column(Numeric(18, 9), nullable=False)  # Copied from slot price at booking time
    name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    call_for = Column(Text, nullable=True)
    access_token = Column(String(128), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    slot = relationship("Slot", back_populates="booking")
    creator = relationship("Creator")
