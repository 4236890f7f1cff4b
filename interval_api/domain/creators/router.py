"""Creator router - profile registration, lookup and explore listing"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.orm import Session

from ...database import get_db
from ...errors import ValidationError, describe_schema_error
from .schemas import CreatorCreate
from .service import CreatorService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Creators"])


def get_creator_service(db: Session = Depends(get_db)) -> CreatorService:
    """Dependency injection for CreatorService"""
    return CreatorService(db)


@router.get("/creator")
async def get_creator(
    wallet: Optional[str] = Query(None),
    service: CreatorService = Depends(get_creator_service),
):
    """Look up the profile owned by a wallet"""
    if not wallet:
        return JSONResponse(status_code=400, content={"error": "wallet is required"})

    creator = service.get_by_wallet(wallet)
    if creator is None:
        return JSONResponse(status_code=404, content={"error": "Creator not found"})

    return JSONResponse(content=service.to_response(creator).model_dump(mode="json"))


@router.post("/creator")
async def create_creator(request: Request, service: CreatorService = Depends(get_creator_service)):
    """Register a creator profile for a wallet"""
    try:
        body = await request.json()
    except ValueError:
        return JSONResponse(status_code=400, content={"error": "Invalid JSON body"})

    try:
        data = CreatorCreate.model_validate(body)
        creator = service.create_creator(data)
    except SchemaValidationError as e:
        return JSONResponse(status_code=400, content={"error": describe_schema_error(e)})
    except ValidationError as e:
        return JSONResponse(status_code=400, content={"error": e.message})

    return JSONResponse(content=service.to_response(creator).model_dump(mode="json"))


@router.get("/creators")
async def list_creators(service: CreatorService = Depends(get_creator_service)):
    """Creators with their available slots for the explore page"""
    return JSONResponse(content=[c.model_dump(mode="json") for c in service.list_creators()])
