"""
Unit tests for the settlement transaction builder.
"""

import base64
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from solders.hash import Hash
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.system_program import ID as SYSTEM_PROGRAM_ID
from solders.transaction import Transaction

from interval_api.domain.actions.transaction import (
    MEMO_PROGRAM_ID,
    MAX_MEMO_BYTES,
    PACKET_DATA_SIZE,
    TransactionBuilder,
    build_memo,
    build_message,
    ensure_memo_fits,
)
from interval_api.domain.bookings.reservation import FORM_FIELD_LIMITS, BookingDetails, ReservationReceipt
from interval_api.errors import InternalError, ValidationError
from interval_api.services.solana_rpc import Checkpoint
from tests.conftest import new_wallet

BOOKING_URL = "https://interval.example.com/booking/b-1?token=secret-token-value"


def make_receipt(**overrides) -> ReservationReceipt:
    start = datetime(2030, 3, 14, 16, 5, tzinfo=timezone.utc)
    values = dict(
        booking_id="b-1",
        access_token="secret-token-value",
        slot_id="slot-1",
        creator_id="creator-1",
        creator_username="alice",
        creator_wallet=new_wallet(),
        payer_wallet=new_wallet(),
        amount_sol=Decimal("2"),
        lamports=2_000_000_000,
        start_time=start,
        end_time=start + timedelta(minutes=30),
        meet_link="https://meet.example.com/abc",
        details=BookingDetails(name="Ann", email="a@x.com"),
    )
    values.update(overrides)
    return ReservationReceipt(**values)


@pytest.fixture
def checkpoint():
    return Checkpoint(blockhash=str(Hash.default()), last_valid_block_height=1_000_150)


def decode(envelope) -> Transaction:
    return Transaction.from_bytes(base64.b64decode(envelope.transaction))


class TestBuildMemo:
    def test_includes_supplied_fields(self):
        memo = build_memo("slot-1", "alice", BookingDetails(name="Ann", email="a@x.com", call_for="Audit"))
        assert memo == "Book slot slot-1 | Creator: alice | Name: Ann | Email: a@x.com | Purpose: Audit"

    def test_omits_missing_fields(self):
        assert build_memo("slot-1", "alice", BookingDetails()) == "Book slot slot-1 | Creator: alice"

    def test_never_contains_token(self):
        receipt = make_receipt()
        assert receipt.access_token not in build_memo(receipt.slot_id, receipt.creator_username, receipt.details)

    def test_longest_form_fits(self):
        details = BookingDetails(
            name="n" * FORM_FIELD_LIMITS["name"],
            email="e" * FORM_FIELD_LIMITS["email"],
            call_for="c" * FORM_FIELD_LIMITS["callFor"],
        )
        ensure_memo_fits(build_memo("1f0c6a3e-5b7d-4c2a-9e8f-0a1b2c3d4e5f", "a" * 32, details))

    def test_multibyte_text_counts_bytes(self):
        details = BookingDetails(call_for="\U0001F600" * FORM_FIELD_LIMITS["callFor"])
        with pytest.raises(ValidationError) as exc:
            ensure_memo_fits(build_memo("slot-1", "alice", details))
        assert "too long" in exc.value.message


class TestBuildMessage:
    def test_with_meet_link(self):
        message = build_message(make_receipt(), BOOKING_URL)
        assert message == f"Pay 2.00 SOL to book slot with alice. Your meeting link: {BOOKING_URL}"

    def test_without_meet_link(self):
        message = build_message(make_receipt(meet_link=None), BOOKING_URL)
        assert message.endswith(f"Booking details: {BOOKING_URL}")


class TestTransactionBuilder:
    """Tests for the unsigned transfer + memo transaction."""

    def test_instruction_layout(self, checkpoint):
        receipt = make_receipt()
        envelope = TransactionBuilder().build_for_reservation(receipt, checkpoint, BOOKING_URL)

        assert envelope.type == "transaction"
        tx = decode(envelope)
        message = tx.message
        keys = message.account_keys

        # Payer pays the fee and is the only signer
        assert keys[0] == Pubkey.from_string(receipt.payer_wallet)
        assert message.header.num_required_signatures == 1
        assert message.recent_blockhash == Hash.default()

        programs = [keys[ix.program_id_index] for ix in message.instructions]
        assert programs == [SYSTEM_PROGRAM_ID, MEMO_PROGRAM_ID]

    def test_transfer_amount_and_recipient(self, checkpoint):
        receipt = make_receipt(amount_sol=Decimal("0.125"), lamports=125_000_000)
        tx = decode(TransactionBuilder().build_for_reservation(receipt, checkpoint, BOOKING_URL))
        transfer_ix = tx.message.instructions[0]
        keys = tx.message.account_keys

        # SystemInstruction::Transfer is variant 2 followed by the u64 amount
        assert bytes(transfer_ix.data) == (2).to_bytes(4, "little") + (125_000_000).to_bytes(8, "little")
        accounts = [keys[i] for i in bytes(transfer_ix.accounts)]
        assert accounts == [
            Pubkey.from_string(receipt.payer_wallet),
            Pubkey.from_string(receipt.creator_wallet),
        ]

    def test_memo_payload(self, checkpoint):
        receipt = make_receipt()
        tx = decode(TransactionBuilder().build_for_reservation(receipt, checkpoint, BOOKING_URL))
        memo_ix = tx.message.instructions[1]
        expected = build_memo(receipt.slot_id, receipt.creator_username, receipt.details)
        assert bytes(memo_ix.data).decode("utf-8") == expected

    def test_unsigned(self, checkpoint):
        tx = decode(TransactionBuilder().build_for_reservation(make_receipt(), checkpoint, BOOKING_URL))
        assert list(tx.signatures) == [Signature.default()]

    def test_token_only_in_display_message(self, checkpoint):
        receipt = make_receipt()
        envelope = TransactionBuilder().build_for_reservation(receipt, checkpoint, BOOKING_URL)

        assert receipt.access_token.encode() not in base64.b64decode(envelope.transaction)
        assert receipt.access_token in envelope.message

    def test_largest_memo_fits_one_packet(self, checkpoint):
        base = build_memo("slot-1", "alice", BookingDetails(call_for="x"))
        call_for = "x" * (MAX_MEMO_BYTES - len(base) + 1)
        receipt = make_receipt(details=BookingDetails(call_for=call_for))
        memo = build_memo(receipt.slot_id, receipt.creator_username, receipt.details)
        assert len(memo.encode("utf-8")) == MAX_MEMO_BYTES
        ensure_memo_fits(memo)

        envelope = TransactionBuilder().build_for_reservation(receipt, checkpoint, BOOKING_URL)
        assert len(base64.b64decode(envelope.transaction)) <= PACKET_DATA_SIZE

    def test_malformed_creator_wallet(self, checkpoint):
        with pytest.raises(InternalError):
            TransactionBuilder().build_for_reservation(
                make_receipt(creator_wallet="not-a-wallet"), checkpoint, BOOKING_URL
            )
