"""
Transaction builder

Assembles the unsigned settlement transaction (SOL transfer + memo) for the
payer's wallet to sign. No private key is ever held or requested here.
"""

import base64
import logging
from dataclasses import dataclass

from solders.hash import Hash
from solders.instruction import Instruction
from solders.message import Message
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer
from solders.transaction import Transaction

from ...errors import InternalError, ValidationError
from ...services.solana_rpc import Checkpoint
from ...utils.formatting import format_sol_amount
from ..bookings.reservation import BookingDetails, ReservationReceipt
from .schemas import ActionPostResponse

logger = logging.getLogger(__name__)

MEMO_PROGRAM_ID = Pubkey.from_string("MemoSq4gqABAXKb96qnH8TysNcWxMyWCqXgDLGmfcHr")

# Serialized transactions must fit one 1232-byte packet. Signature, keys,
# blockhash and the transfer take about 250 bytes, the memo gets the rest.
PACKET_DATA_SIZE = 1232
MAX_MEMO_BYTES = 900


def build_memo(slot_id: str, creator_username: str, details: BookingDetails) -> str:
    """Human-readable memo; optional fields are appended only when present"""
    parts = [f"Book slot {slot_id}", f"Creator: {creator_username}"]
    if details.name:
        parts.append(f"Name: {details.name}")
    if details.email:
        parts.append(f"Email: {details.email}")
    if details.call_for:
        parts.append(f"Purpose: {details.call_for}")
    return " | ".join(parts)


def ensure_memo_fits(memo: str) -> None:
    """Reject memos that would push the transaction past the packet size"""
    size = len(memo.encode("utf-8"))
    if size > MAX_MEMO_BYTES:
        raise ValidationError(
            f"Booking details are too long ({size} bytes, at most {MAX_MEMO_BYTES} fit in the memo)"
        )


def build_message(receipt: ReservationReceipt, booking_url: str) -> str:
    """Display text shown by the wallet; carries the payer's private booking link"""
    message = (
        f"Pay {format_sol_amount(receipt.amount_sol)} SOL to book slot with "
        f"{receipt.creator_username}."
    )
    if receipt.meet_link:
        return f"{message} Your meeting link: {booking_url}"
    return f"{message} Booking details: {booking_url}"


@dataclass(frozen=True)
class UnsignedSettlement:
    transaction: Transaction
    memo: str

    def serialize(self) -> str:
        return base64.b64encode(bytes(self.transaction)).decode("ascii")


class TransactionBuilder:
    """Builds transfer + memo transactions with the payer as fee payer"""

    def build(
        self,
        payer: Pubkey,
        recipient: Pubkey,
        lamports: int,
        memo: str,
        checkpoint: Checkpoint,
    ) -> UnsignedSettlement:
        transfer_ix = transfer(
            TransferParams(from_pubkey=payer, to_pubkey=recipient, lamports=lamports)
        )
        memo_ix = Instruction(MEMO_PROGRAM_ID, memo.encode("utf-8"), [])
        message = Message.new_with_blockhash(
            [transfer_ix, memo_ix], payer, Hash.from_string(checkpoint.blockhash)
        )
        return UnsignedSettlement(transaction=Transaction.new_unsigned(message), memo=memo)

    def build_for_reservation(
        self,
        receipt: ReservationReceipt,
        checkpoint: Checkpoint,
        booking_url: str,
    ) -> ActionPostResponse:
        """Envelope the wallet expects: base64 transaction plus display message"""
        try:
            payer = Pubkey.from_string(receipt.payer_wallet)
            recipient = Pubkey.from_string(receipt.creator_wallet)
        except ValueError as e:
            logger.error(f"❌ Creator {receipt.creator_id} has a malformed wallet: {receipt.creator_wallet}")
            raise InternalError() from e

        settlement = self.build(
            payer=payer,
            recipient=recipient,
            lamports=receipt.lamports,
            memo=build_memo(receipt.slot_id, receipt.creator_username, receipt.details),
            checkpoint=checkpoint,
        )
        logger.info(
            f"🧾 Built settlement for booking {receipt.booking_id}: {receipt.lamports} lamports "
            f"(valid until block {checkpoint.last_valid_block_height})"
        )
        return ActionPostResponse(
            transaction=settlement.serialize(),
            message=build_message(receipt, booking_url),
        )
