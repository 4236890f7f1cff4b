"""
Booking action handler

One object per request exposing the three protocol verbs:

    describe  (GET)     -> descriptor, always 200
    reserve   (POST)    -> reserve slot, then unsigned transaction
    preflight (OPTIONS) -> 204 with the action header set

Ordering inside reserve is fixed: the reservation commits first, the
checkpoint is fetched afterwards, and the confirmation email is only
handed back to the caller to schedule once the response is ready.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError as SchemaValidationError

from ...errors import BookingError, InternalError, SlotNotFound, SlotUnavailable, ValidationError
from ...models import SLOT_AVAILABLE
from ...services.solana_rpc import SolanaRpcClient
from ..bookings.access import AccessCredentialIssuer, BookingNotification, build_booking_url
from ..bookings.reservation import BookingDetails, ReservationEngine
from ..slots.service import SlotService
from .descriptor import ActionDescriptorService
from .schemas import ActionPostRequest, ActionPostResponse, ActionsManifest, ActionRule
from .settings import ActionSettings, RequestContext
from .transaction import TransactionBuilder, build_memo, ensure_memo_fits

logger = logging.getLogger(__name__)

BOOK_PATH_PATTERN = "/book/*"
BOOK_API_PATH = "/api/action/book"


def build_manifest() -> ActionsManifest:
    return ActionsManifest(rules=[ActionRule(pathPattern=BOOK_PATH_PATTERN, apiPath=BOOK_API_PATH)])


@dataclass
class ReservationOutcome:
    response: ActionPostResponse
    notification: Optional[BookingNotification] = None


class BookingActionHandler:
    def __init__(
        self,
        settings: ActionSettings,
        slots: SlotService,
        engine: ReservationEngine,
        ledger: SolanaRpcClient,
        issuer: AccessCredentialIssuer,
        builder: Optional[TransactionBuilder] = None,
    ):
        self.settings = settings
        self.slots = slots
        self.engine = engine
        self.ledger = ledger
        self.issuer = issuer
        self.builder = builder or TransactionBuilder()
        self.descriptors = ActionDescriptorService(slots, settings)

    # ------------------------------------------------------------------
    # Protocol verbs
    # ------------------------------------------------------------------

    def preflight(self) -> Response:
        return Response(status_code=204, headers=self.settings.headers)

    def describe(self, ctx: RequestContext) -> JSONResponse:
        try:
            descriptor = self.descriptors.describe(ctx)
        except Exception:
            logger.exception(f"❌ Failed to build descriptor for slot {ctx.slot_id}")
            descriptor = self.descriptors.disabled(
                "An unknown error occurred. Please try again.", "Error"
            )
        return JSONResponse(
            content=descriptor.model_dump(exclude_none=True), headers=self.settings.headers
        )

    async def reserve(self, ctx: RequestContext, body: Any) -> ReservationOutcome:
        """
        Validate, reserve and build the unsigned transaction.

        Raises BookingError subclasses; anything unexpected is wrapped in
        InternalError so callers only ever see the taxonomy.
        """
        try:
            return await self._reserve(ctx, body)
        except BookingError:
            raise
        except Exception as e:
            logger.exception(f"❌ Unexpected error booking slot {ctx.slot_id}")
            raise InternalError() from e

    def error_response(self, error: BookingError) -> JSONResponse:
        return JSONResponse(
            status_code=error.status_code,
            content={"message": error.message},
            headers=self.settings.headers,
        )

    def success_response(self, outcome: ReservationOutcome) -> JSONResponse:
        return JSONResponse(
            content=outcome.response.model_dump(exclude_none=True), headers=self.settings.headers
        )

    # ------------------------------------------------------------------

    async def _reserve(self, ctx: RequestContext, body: Any) -> ReservationOutcome:
        request = self._parse_body(body)

        if not ctx.slot_id:
            raise ValidationError("slotId is required")

        slot = self.slots.get_slot(ctx.slot_id)
        if slot is None:
            raise SlotNotFound()
        if slot.status != SLOT_AVAILABLE:
            raise SlotUnavailable()

        details = BookingDetails.from_form(request.data)
        ensure_memo_fits(build_memo(slot.id, slot.creator.username, details))

        receipt = self.engine.reserve(
            slot_id=slot.id,
            payer=request.account,
            amount=slot.price,
            details=details,
        )

        # Reservation is committed; from here on a failure leaves the slot booked
        try:
            checkpoint = await self.ledger.get_latest_blockhash()
            booking_url = build_booking_url(
                self.settings.base_url(ctx.origin), receipt.booking_id, receipt.access_token
            )
            envelope = self.builder.build_for_reservation(receipt, checkpoint, booking_url)
        except Exception:
            logger.warning(
                f"⚠️ Booking {receipt.booking_id} committed but no transaction was returned; "
                f"slot {receipt.slot_id} stays booked"
            )
            raise

        return ReservationOutcome(
            response=envelope,
            notification=self.issuer.plan_notification(receipt, booking_url),
        )

    @staticmethod
    def _parse_body(body: Any) -> ActionPostRequest:
        if not isinstance(body, dict):
            raise ValidationError('Invalid body: "account" (wallet) is required')
        try:
            return ActionPostRequest.model_validate(body)
        except SchemaValidationError as e:
            raise ValidationError('Invalid body: "account" (wallet) is required') from e
