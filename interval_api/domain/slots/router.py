"""Slot router - FastAPI endpoints for the slot store"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.orm import Session

from ...database import get_db
from ...errors import ValidationError, describe_schema_error
from .schemas import SlotCreate
from .service import SlotService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/slot", tags=["Slots"])


def get_slot_service(db: Session = Depends(get_db)) -> SlotService:
    """Dependency injection for SlotService"""
    return SlotService(db)


@router.post("/create")
async def create_slot(request: Request, service: SlotService = Depends(get_slot_service)):
    """Create a bookable slot for a creator"""
    try:
        body = await request.json()
    except ValueError:
        return JSONResponse(status_code=400, content={"error": "Invalid JSON body"})

    try:
        data = SlotCreate.model_validate(body)
        slot = service.create_slot(data)
    except SchemaValidationError as e:
        return JSONResponse(status_code=400, content={"error": describe_schema_error(e)})
    except ValidationError as e:
        return JSONResponse(status_code=400, content={"error": e.message})

    return JSONResponse(content=service.to_response(slot).model_dump(mode="json"))
