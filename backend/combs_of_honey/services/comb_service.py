"""
Combs of Honey — Comb Service
==============================

What:  Create, list and fetch combs.
How:   Each method receives the request's AsyncSession, runs one query inside
       a `db-call` span, and converts the ORM rows into CombResponse models.
Who:   Called by the /combs route handlers.

`honey` on a returned comb is never null. With EMBED_HONEY off (default)
children are not loaded and the list is empty; with it on, reads add a
`selectinload(Comb.honey)` lookup.

There is no update or delete for combs.
"""

import logging
from typing import List, Optional

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from combs_of_honey.config import settings
from combs_of_honey.database import commit_or_raise
from combs_of_honey.exceptions import DatabaseError, NotFoundError
from combs_of_honey.models import Comb
from combs_of_honey.models.comb import utcnow
from combs_of_honey.schemas.comb import CombResponse
from combs_of_honey.services.honey_service import HoneyService
from combs_of_honey.telemetry import db_span

logger = logging.getLogger(__name__)


class CombService:
    """
    Business logic for comb operations.

    Responsibilities:
        - create_comb(): insert an empty comb
        - list_combs(): all live combs, 404 when there are none
        - get_comb(): one comb by primary key, 404 when missing

    Error Handling Strategy:
        Absence of rows raises NotFoundError. Any other failure is logged
        and wrapped in DatabaseError so the client never sees driver details.
    """

    def __init__(self, embed_honey: Optional[bool] = None):
        self.embed_honey = settings.embed_honey if embed_honey is None else embed_honey

    async def create_comb(self, db: AsyncSession) -> CombResponse:
        """
        Insert a new comb stamped with the current time; the store assigns `id`.

        Returns:
            CombResponse with `honey == []` (a new comb has no children)

        Raises:
            DatabaseError: insert or commit failed
        """
        now = utcnow()
        stmt = insert(Comb).values(created_at=now, updated_at=now).returning(Comb)
        try:
            with db_span(str(stmt)):
                result = await db.execute(stmt)
            comb = result.scalar_one()
        except Exception as e:
            logger.error("Database error creating comb: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the comb. Please try again.",
                context={"error_type": type(e).__name__},
            )

        await commit_or_raise(db, comb_id=comb.id)
        logger.info("Comb created: %s", comb.id)
        return self.to_response(comb)

    async def list_combs(self, db: AsyncSession) -> List[CombResponse]:
        """
        Fetch every live comb in insertion (id) order.

        Raises:
            NotFoundError: there are no combs
            DatabaseError: query failed
        """
        query = self._base_query().order_by(Comb.id)
        try:
            with db_span(str(query)):
                result = await db.execute(query)
            combs = list(result.scalars().all())
        except Exception as e:
            logger.error("Database error listing combs: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve combs. Please try again.",
                context={"error_type": type(e).__name__},
            )

        if not combs:
            raise NotFoundError(resource="comb")

        return [self.to_response(comb) for comb in combs]

    async def get_comb(self, db: AsyncSession, comb_id: int) -> CombResponse:
        """
        Retrieve a single comb by id.

        Query plan:
            SELECT * FROM combs WHERE id = :id AND deleted_at IS NULL
            → primary key lookup

        Raises:
            NotFoundError: no live comb with this id
            DatabaseError: query failed
        """
        query = self._base_query().where(Comb.id == comb_id)
        try:
            with db_span(str(query)):
                result = await db.execute(query)
            comb = result.scalar_one_or_none()
        except Exception as e:
            logger.error("Database error fetching comb %s: %s", comb_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the comb. Please try again.",
                context={"comb_id": comb_id, "error_type": type(e).__name__},
            )

        if comb is None:
            raise NotFoundError(resource="comb", resource_id=str(comb_id))

        return self.to_response(comb)

    def _base_query(self):
        query = select(Comb).where(Comb.deleted_at.is_(None))
        if self.embed_honey:
            query = query.options(selectinload(Comb.honey))
        return query

    @staticmethod
    def to_response(comb: Comb) -> CombResponse:
        # Read the collection from the instance dict: an unloaded
        # relationship is absent there, and attribute access would raise.
        loaded_honey = comb.__dict__.get("honey") or []
        return CombResponse(
            id=comb.id,
            created_at=comb.created_at,
            updated_at=comb.updated_at,
            deleted_at=comb.deleted_at,
            honey=[HoneyService.to_response(honey) for honey in loaded_honey],
        )


# ── Singleton Instance ────────────────────────────────────────────────────
comb_service = CombService()
