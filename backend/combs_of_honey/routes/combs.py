"""
Combs of Honey — Comb Route Handlers
=====================================

What:  POST /combs, GET /combs, GET /combs/{comb_id}.
How:   Extracts the path parameter, delegates to CombService, returns JSON.

A non-integer or out-of-range {comb_id} fails FastAPI validation and is answered with
400 by the RequestValidationError handler in main.py.
"""

import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from combs_of_honey.database import get_db_session
from combs_of_honey.schemas.comb import CombResponse
from combs_of_honey.schemas.common import ErrorResponse
from combs_of_honey.services.comb_service import comb_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/combs", tags=["Combs"])

# Ids are signed 64-bit integers in every supported store; anything outside
# that range is rejected as a malformed id.
COMB_ID_MIN = -(2**63)
COMB_ID_MAX = 2**63 - 1
CombId = Annotated[int, Path(ge=COMB_ID_MIN, le=COMB_ID_MAX, description="Comb identifier")]


@router.post(
    "",
    status_code=201,
    response_model=CombResponse,
    responses={
        201: {"description": "Comb created", "model": CombResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create an empty comb",
    description="Creates a comb with a store-assigned id. Any request body is ignored.",
)
async def create_comb(db: AsyncSession = Depends(get_db_session)) -> CombResponse:
    return await comb_service.create_comb(db)


@router.get(
    "",
    response_model=List[CombResponse],
    responses={
        200: {"description": "All combs"},
        404: {"description": "No combs exist", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List all combs",
)
async def list_combs(db: AsyncSession = Depends(get_db_session)) -> List[CombResponse]:
    """
    List every comb in insertion order.

    An empty store answers 404 rather than an empty array.
    """
    return await comb_service.list_combs(db)


@router.get(
    "/{comb_id}",
    response_model=CombResponse,
    responses={
        200: {"description": "The comb", "model": CombResponse},
        400: {"description": "comb_id is not a 64-bit integer", "model": ErrorResponse},
        404: {"description": "Comb not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get a comb by id",
)
async def get_comb(
    comb_id: CombId,
    db: AsyncSession = Depends(get_db_session),
) -> CombResponse:
    return await comb_service.get_comb(db, comb_id)
