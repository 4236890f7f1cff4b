"""
Action descriptor service

Builds the GET payload a wallet client uses to decide whether and how to
present the booking action. Read-only: nothing here mutates a slot.
"""

import logging
from typing import Optional
from urllib.parse import urlencode

from ...models import SLOT_AVAILABLE, Slot
from ...utils.formatting import format_slot_time, format_sol_amount, is_settleable
from ..slots.service import SlotService
from .schemas import ActionGetResponse, ActionLinks, ActionParameter, LinkedAction
from .settings import ActionSettings, RequestContext

logger = logging.getLogger(__name__)

ACTION_TITLE = "Book meeting slot"
ICON_PROXY_PATH = "/api/action/book/icon"

BOOKING_PARAMETERS = [
    ActionParameter(name="name", label="Your name", type="text", required=True, layout="row"),
    ActionParameter(name="email", label="Email", type="email", required=True, layout="row"),
    ActionParameter(name="callFor", label="What's the call for?", type="textarea", required=False),
]


class ActionDescriptorService:
    """Produces enabled or disabled descriptors for a slot"""

    def __init__(self, slots: SlotService, settings: ActionSettings):
        self.slots = slots
        self.settings = settings

    def disabled(self, description: str, label: str) -> ActionGetResponse:
        return ActionGetResponse(
            icon=self.settings.icon_fallback,
            title=ACTION_TITLE,
            description=description,
            label=label,
            disabled=True,
        )

    def describe(self, ctx: RequestContext) -> ActionGetResponse:
        if not ctx.slot_id:
            return self.disabled("slotId is required in the URL.", "Missing slotId")

        slot = self.slots.get_slot(ctx.slot_id)
        if slot is None:
            return self.disabled("This slot was not found.", "Slot not found")

        if slot.status != SLOT_AVAILABLE:
            return self.disabled(
                f"This slot is no longer available ({slot.status}).", "Slot unavailable"
            )

        if not is_settleable(slot.price):
            logger.warning(f"⚠️ Slot {slot.id} has a price that cannot be settled: {slot.price}")
            return self.disabled("This slot has an invalid price and cannot be booked.", "Invalid price")

        price_label = format_sol_amount(slot.price)
        start = format_slot_time(slot.start_time)
        end = format_slot_time(slot.end_time)
        cta_label = f"Book for {price_label} SOL"

        return ActionGetResponse(
            icon=self.icon_for(slot, ctx),
            title=ACTION_TITLE,
            description=(
                f"Book a call with {slot.creator.username}. {start} – {end}. "
                f"Price: {price_label} SOL."
            ),
            label=cta_label,
            links=ActionLinks(
                actions=[
                    LinkedAction(
                        href=ctx.action_href(self.settings),
                        label=cta_label,
                        parameters=list(BOOKING_PARAMETERS),
                    )
                ]
            ),
        )

    def icon_for(self, slot: Slot, ctx: RequestContext) -> str:
        """
        Creator image over https as-is; any other stored image through the
        same-origin proxy; otherwise the fixed fallback.
        """
        image: Optional[str] = (slot.creator.profile_image_url or "").strip() or None
        if image is None:
            return self.settings.icon_fallback
        if image.startswith("https://"):
            return image
        query = urlencode({"slotId": slot.id})
        return f"{self.settings.base_url(ctx.origin)}{ICON_PROXY_PATH}?{query}"
