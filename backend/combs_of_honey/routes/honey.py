"""
Combs of Honey — Honey Route Handlers
======================================

What:  Honey records nested under a comb:
       POST   /combs/{comb_id}/honey
       GET    /combs/{comb_id}/honey
       GET    /combs/{comb_id}/honey/{honey_type}
       DELETE /combs/{comb_id}/honey/{honey_type}
How:   Extracts path parameters and body, delegates to HoneyService.

Both GET endpoints count a visit on every record they return; see
services/honey_service.py.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from combs_of_honey.database import get_db_session
from combs_of_honey.routes.combs import CombId
from combs_of_honey.schemas.common import ErrorResponse
from combs_of_honey.schemas.honey import HoneyCreate, HoneyResponse
from combs_of_honey.services.honey_service import honey_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/combs/{comb_id}/honey", tags=["Honey"])


@router.post(
    "",
    status_code=201,
    response_model=HoneyResponse,
    responses={
        201: {"description": "Honey created", "model": HoneyResponse},
        400: {"description": "Malformed body or comb_id", "model": ErrorResponse},
        500: {"description": "Duplicate key, unknown comb or server error", "model": ErrorResponse},
    },
    summary="Add a honey record to a comb",
    description=(
        "Creates a honey record from the JSON body. The comb id in the path "
        "replaces any combId in the body."
    ),
)
async def create_honey(
    comb_id: CombId,
    payload: HoneyCreate,
    db: AsyncSession = Depends(get_db_session),
) -> HoneyResponse:
    return await honey_service.create_honey(db, comb_id, payload)


@router.get(
    "",
    response_model=List[HoneyResponse],
    responses={
        200: {"description": "All honey of the comb, visits already incremented"},
        404: {"description": "The comb has no honey", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List the honey of a comb",
)
async def list_honey(
    comb_id: CombId,
    db: AsyncSession = Depends(get_db_session),
) -> List[HoneyResponse]:
    return await honey_service.list_honey(db, comb_id)


@router.get(
    "/{honey_type}",
    response_model=HoneyResponse,
    responses={
        200: {"description": "The honey record, visits already incremented", "model": HoneyResponse},
        404: {"description": "Honey not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get one honey record by type",
)
async def get_honey(
    comb_id: CombId,
    honey_type: str,
    db: AsyncSession = Depends(get_db_session),
) -> HoneyResponse:
    return await honey_service.get_honey(db, comb_id, honey_type)


@router.delete(
    "/{honey_type}",
    status_code=200,
    response_class=Response,
    responses={
        200: {"description": "Deleted (or did not exist)"},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Delete one honey record by type",
)
async def delete_honey(
    comb_id: CombId,
    honey_type: str,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    """Succeeds with an empty body whether or not a record was removed."""
    await honey_service.delete_honey(db, comb_id, honey_type)
    return Response(status_code=200)
