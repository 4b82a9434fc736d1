"""
Combs of Honey — Honey Service (CRUD + Visit Counting)
=======================================================

What:  Create, read, list and delete honey records of a comb.
How:   Each method receives the request's AsyncSession. Reads of a specific
       honey record also count a visit: every record returned by get/list
       has its `visits` incremented once and committed before the response
       is built, so the response carries the post-increment value.
Who:   Called by the /combs/{comb_id}/honey route handlers.

Visit invariant:
    For every successful get/list call, stored `visits` afterwards equals
    the value before plus the number of times the record appeared in the
    result (once).

Increment strategy (ATOMIC_VISITS):
    True  → UPDATE honey SET visits = visits + 1 ... RETURNING visits
            Concurrent readers never lose counts.
    False → UPDATE honey SET visits = <loaded value + 1> ... RETURNING visits
            Two concurrent reads of the same record can both write v+1.

List failure (ATOMIC_LIST_VISITS):
    If any per-record update fails, the remaining updates are skipped and
    DatabaseError propagates.
    False → each increment is committed as soon as it succeeds, so the
            increments made before the failure are kept.
    True  → the list commits once at the end; a failure rolls back every
            increment of the request.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from combs_of_honey.config import settings
from combs_of_honey.database import commit_or_raise
from combs_of_honey.exceptions import DatabaseError, NotFoundError
from combs_of_honey.models import Honey
from combs_of_honey.schemas.honey import HoneyCreate, HoneyResponse
from combs_of_honey.telemetry import db_span

logger = logging.getLogger(__name__)


class HoneyService:
    """
    Business logic for honey operations.

    Responsibilities:
        - create_honey(): insert a record under the comb from the path
        - list_honey(): all records of a comb, each visit-counted
        - get_honey(): one record by (comb_id, type), visit-counted
        - delete_honey(): remove by (comb_id, type)
    """

    def __init__(
        self,
        atomic_visits: Optional[bool] = None,
        atomic_list_visits: Optional[bool] = None,
    ):
        self.atomic_visits = (
            settings.atomic_visits if atomic_visits is None else atomic_visits
        )
        self.atomic_list_visits = (
            settings.atomic_list_visits if atomic_list_visits is None else atomic_list_visits
        )

    async def create_honey(
        self,
        db: AsyncSession,
        comb_id: int,
        payload: HoneyCreate,
    ) -> HoneyResponse:
        """
        Insert a honey record for `comb_id`.

        The comb id from the path is authoritative; `payload.comb_id` is
        discarded.

        Raises:
            DatabaseError: insert failed, including a duplicate
                (comb_id, type) key or an unknown comb
        """
        stmt = (
            insert(Honey)
            .values(comb_id=comb_id, type=payload.type, visits=payload.visits)
            .returning(Honey)
        )
        try:
            with db_span(str(stmt)):
                result = await db.execute(stmt)
            honey = result.scalar_one()
        except Exception as e:
            logger.error(
                "Database error creating honey %s/%s: %s", comb_id, payload.type, str(e)
            )
            raise DatabaseError(
                message="Could not create the honey record. Please try again.",
                context={
                    "comb_id": comb_id,
                    "type": payload.type,
                    "error_type": type(e).__name__,
                },
            )

        await commit_or_raise(db, comb_id=comb_id, type=payload.type)
        logger.info("Honey created: %s/%s", comb_id, honey.type)
        return self.to_response(honey)

    async def list_honey(self, db: AsyncSession, comb_id: int) -> List[HoneyResponse]:
        """
        Fetch every live honey record of `comb_id` and count a visit on each.

        Raises:
            NotFoundError: the comb has no honey records
            DatabaseError: the query, any visit update or a commit failed
        """
        query = (
            select(Honey)
            .where(Honey.comb_id == comb_id, Honey.deleted_at.is_(None))
            .order_by(Honey.type)
        )
        try:
            with db_span(str(query)):
                result = await db.execute(query)
            records = list(result.scalars().all())
        except Exception as e:
            logger.error("Database error listing honey of comb %s: %s", comb_id, str(e))
            raise DatabaseError(
                message="Could not retrieve honey. Please try again.",
                context={"comb_id": comb_id, "error_type": type(e).__name__},
            )

        if not records:
            raise NotFoundError(resource="honey of comb", resource_id=str(comb_id))

        for honey in records:
            await self._record_visit(db, honey)
            if not self.atomic_list_visits:
                await commit_or_raise(db, comb_id=comb_id, type=honey.type)

        if self.atomic_list_visits:
            await commit_or_raise(db, comb_id=comb_id)

        return [self.to_response(honey) for honey in records]

    async def get_honey(
        self,
        db: AsyncSession,
        comb_id: int,
        honey_type: str,
    ) -> HoneyResponse:
        """
        Fetch one honey record by (comb_id, type) and count a visit on it.

        Raises:
            NotFoundError: no live record with this key
            DatabaseError: the query, the visit update or the commit failed
        """
        query = (
            select(Honey)
            .where(
                Honey.comb_id == comb_id,
                Honey.type == honey_type,
                Honey.deleted_at.is_(None),
            )
            .limit(1)
        )
        try:
            with db_span(str(query)):
                result = await db.execute(query)
            honey = result.scalars().first()
        except Exception as e:
            logger.error(
                "Database error fetching honey %s/%s: %s", comb_id, honey_type, str(e)
            )
            raise DatabaseError(
                message="Could not retrieve the honey record. Please try again.",
                context={
                    "comb_id": comb_id,
                    "type": honey_type,
                    "error_type": type(e).__name__,
                },
            )

        if honey is None:
            raise NotFoundError(resource="honey", resource_id=f"{comb_id}/{honey_type}")

        await self._record_visit(db, honey)
        await commit_or_raise(db, comb_id=comb_id, type=honey_type)
        return self.to_response(honey)

    async def delete_honey(self, db: AsyncSession, comb_id: int, honey_type: str) -> None:
        """
        Delete the record(s) matching (comb_id, type).

        Deleting a key that does not exist is not an error.

        Raises:
            DatabaseError: delete failed
        """
        stmt = (
            delete(Honey)
            .where(Honey.comb_id == comb_id, Honey.type == honey_type)
            .execution_options(synchronize_session=False)
        )
        try:
            with db_span(str(stmt)):
                result = await db.execute(stmt)
        except Exception as e:
            logger.error(
                "Database error deleting honey %s/%s: %s", comb_id, honey_type, str(e)
            )
            raise DatabaseError(
                message="Could not delete the honey record. Please try again.",
                context={
                    "comb_id": comb_id,
                    "type": honey_type,
                    "error_type": type(e).__name__,
                },
            )

        await commit_or_raise(db, comb_id=comb_id, type=honey_type)
        logger.info("Deleted %s honey row(s) for %s/%s", result.rowcount, comb_id, honey_type)

    async def _record_visit(self, db: AsyncSession, honey: Honey) -> None:
        """Increment and persist `honey.visits`; the instance ends up holding the new value."""
        if self.atomic_visits:
            new_visits = Honey.visits + 1
        else:
            new_visits = honey.visits + 1
        stmt = (
            update(Honey)
            .where(Honey.comb_id == honey.comb_id, Honey.type == honey.type)
            .values(visits=new_visits)
            .returning(Honey.visits, Honey.updated_at)
            .execution_options(synchronize_session=False)
        )
        try:
            with db_span(str(stmt)):
                result = await db.execute(stmt)
            visits, updated_at = result.one()
        except Exception as e:
            logger.error(
                "Database error counting visit on honey %s/%s: %s",
                honey.comb_id,
                honey.type,
                str(e),
            )
            raise DatabaseError(
                message="Could not update the honey record. Please try again.",
                context={
                    "comb_id": honey.comb_id,
                    "type": honey.type,
                    "error_type": type(e).__name__,
                },
            )

        set_committed_value(honey, "visits", visits)
        set_committed_value(honey, "updated_at", updated_at)

    @staticmethod
    def to_response(honey: Honey) -> HoneyResponse:
        return HoneyResponse(
            comb_id=honey.comb_id,
            type=honey.type,
            created_at=honey.created_at,
            updated_at=honey.updated_at,
            deleted_at=honey.deleted_at,
            visits=honey.visits,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
honey_service = HoneyService()
