"""Action router - discovery manifest, booking action, icon and checkpoint endpoints"""

import logging

import httpx
from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session, sessionmaker

from ...database import get_db, get_session_factory
from ...errors import BookingError, ValidationError
from ...services.solana_rpc import SolanaRpcClient
from ..bookings.access import AccessCredentialIssuer
from ..bookings.reservation import ReservationEngine
from ..slots.service import SlotService
from .handler import BookingActionHandler, build_manifest
from .icon import IconProxy
from .settings import ActionSettings, RequestContext, get_action_settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Actions"])


def get_ledger_client(request: Request) -> SolanaRpcClient:
    """Process-wide ledger client created in the app lifespan"""
    return request.app.state.ledger_client


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_booking_action_handler(
    db: Session = Depends(get_db),
    session_factory: sessionmaker = Depends(get_session_factory),
    ledger: SolanaRpcClient = Depends(get_ledger_client),
    settings: ActionSettings = Depends(get_action_settings),
) -> BookingActionHandler:
    """Dependency injection for BookingActionHandler"""
    return BookingActionHandler(
        settings=settings,
        slots=SlotService(db),
        engine=ReservationEngine(session_factory),
        ledger=ledger,
        issuer=AccessCredentialIssuer(db),
    )


def get_icon_proxy(
    db: Session = Depends(get_db),
    http_client: httpx.AsyncClient = Depends(get_http_client),
    settings: ActionSettings = Depends(get_action_settings),
) -> IconProxy:
    return IconProxy(SlotService(db), http_client, settings)


def request_context(request: Request) -> RequestContext:
    url = request.url
    return RequestContext(
        origin=f"{url.scheme}://{url.netloc}",
        path=url.path,
        query=url.query,
        slot_id=request.query_params.get("slotId") or None,
    )


# ============================================================================
# DISCOVERY
# ============================================================================


@router.get("/actions.json")
async def actions_manifest(settings: ActionSettings = Depends(get_action_settings)):
    """Maps website URLs to action API endpoints for blink clients"""
    return JSONResponse(content=build_manifest().model_dump(), headers=settings.headers)


@router.options("/actions.json")
async def actions_manifest_preflight(settings: ActionSettings = Depends(get_action_settings)):
    return Response(status_code=204, headers=settings.headers)


# ============================================================================
# BOOKING ACTION
# ============================================================================


@router.get("/api/action/book")
async def describe_booking_action(
    request: Request,
    handler: BookingActionHandler = Depends(get_booking_action_handler),
):
    """Descriptor for a slot; always 200 so clients can render the reason"""
    return handler.describe(request_context(request))


@router.options("/api/action/book")
async def booking_action_preflight(
    handler: BookingActionHandler = Depends(get_booking_action_handler),
):
    return handler.preflight()


@router.post("/api/action/book")
async def create_booking_transaction(
    request: Request,
    background_tasks: BackgroundTasks,
    handler: BookingActionHandler = Depends(get_booking_action_handler),
):
    """Reserve the slot and return an unsigned transaction for the payer to sign"""
    try:
        body = await request.json()
    except ValueError:
        return handler.error_response(ValidationError("Invalid JSON body"))
    try:
        outcome = await handler.reserve(request_context(request), body)
    except BookingError as e:
        if e.status_code >= 500:
            logger.error(f"❌ Booking action failed for slot {request.query_params.get('slotId')}: {e.message}")
        else:
            logger.info(f"Booking action rejected for slot {request.query_params.get('slotId')}: {e.message}")
        return handler.error_response(e)

    if outcome.notification is not None:
        # Runs after the response is sent; failures only reach the log
        background_tasks.add_task(handler.issuer.dispatch, outcome.notification)

    return handler.success_response(outcome)


# ============================================================================
# ICON PROXY
# ============================================================================


@router.get("/api/action/book/icon")
async def booking_action_icon(request: Request, proxy: IconProxy = Depends(get_icon_proxy)):
    return await proxy.serve(request.query_params.get("slotId"))


@router.options("/api/action/book/icon")
async def booking_action_icon_preflight(proxy: IconProxy = Depends(get_icon_proxy)):
    return proxy.preflight()


# ============================================================================
# LEDGER CHECKPOINT
# ============================================================================


@router.get("/api/solana/blockhash")
async def latest_blockhash(ledger: SolanaRpcClient = Depends(get_ledger_client)):
    """Live checkpoint from the ledger node"""
    try:
        snapshot = await ledger.get_checkpoint_snapshot()
    except BookingError as e:
        logger.error(f"getLatestBlockhash error: {e.message}")
        return JSONResponse(status_code=500, content={"error": e.message})
    except Exception as e:
        logger.error(f"getLatestBlockhash error: {e}")
        return JSONResponse(status_code=500, content={"error": str(e) or "Failed to get blockhash"})
    return snapshot.to_dict()
