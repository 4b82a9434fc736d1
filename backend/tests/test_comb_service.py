"""
Tests for CombService.

Coverage:
    ✅ create_comb: id from the INSERT ... RETURNING, committed before returning
    ✅ get_comb / list_combs: NotFoundError when nothing matches
    ✅ Query and commit failures wrapped in DatabaseError
    ✅ honey always an empty list unless embedded
    ✅ Optional embedded honey against a real session
    ✅ Comb.honey is never lazy-loaded
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import InvalidRequestError

from combs_of_honey.exceptions import DatabaseError, NotFoundError
from combs_of_honey.models import Comb, Honey
from combs_of_honey.services.comb_service import CombService


def make_comb(comb_id=1):
    now = datetime.now(timezone.utc)
    return Comb(id=comb_id, created_at=now, updated_at=now)


def row_result(comb):
    """Result of a statement returning one comb (or none)."""
    result = MagicMock()
    result.scalar_one.return_value = comb
    result.scalar_one_or_none.return_value = comb
    return result


def rows_result(*combs):
    result = MagicMock()
    result.scalars.return_value.all.return_value = list(combs)
    return result


class TestCombServiceMocked:

    def setup_method(self):
        self.service = CombService(embed_honey=False)

    @pytest.mark.asyncio
    async def test_create_comb(self, mock_db_session):
        mock_db_session.execute.return_value = row_result(make_comb(12))

        result = await self.service.create_comb(mock_db_session)

        assert result.id == 12
        assert result.honey == []
        assert result.deleted_at is None
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_comb_failure(self, mock_db_session):
        mock_db_session.execute.side_effect = Exception("disk full")

        with pytest.raises(DatabaseError):
            await self.service.create_comb(mock_db_session)

        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_comb_commit_failure(self, mock_db_session):
        mock_db_session.execute.return_value = row_result(make_comb(12))
        mock_db_session.commit.side_effect = Exception("database is locked")

        with pytest.raises(DatabaseError) as exc_info:
            await self.service.create_comb(mock_db_session)

        assert exc_info.value.context["comb_id"] == 12

    @pytest.mark.asyncio
    async def test_get_comb_not_found(self, mock_db_session):
        mock_db_session.execute.return_value = row_result(None)

        with pytest.raises(NotFoundError) as exc_info:
            await self.service.get_comb(mock_db_session, 5)

        assert exc_info.value.context["resource_id"] == "5"

    @pytest.mark.asyncio
    async def test_get_comb_returns_empty_honey(self, mock_db_session):
        mock_db_session.execute.return_value = row_result(make_comb(3))

        result = await self.service.get_comb(mock_db_session, 3)

        assert result.id == 3
        assert result.honey == []
        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_list_combs_empty(self, mock_db_session):
        mock_db_session.execute.return_value = rows_result()

        with pytest.raises(NotFoundError):
            await self.service.list_combs(mock_db_session)

    @pytest.mark.asyncio
    async def test_list_combs(self, mock_db_session):
        mock_db_session.execute.return_value = rows_result(make_comb(1), make_comb(2))

        result = await self.service.list_combs(mock_db_session)

        assert [comb.id for comb in result] == [1, 2]

    @pytest.mark.asyncio
    async def test_query_failure(self, mock_db_session):
        mock_db_session.execute.side_effect = Exception("connection reset")

        with pytest.raises(DatabaseError):
            await self.service.get_comb(mock_db_session, 1)

    def test_response_serializes_camel_case(self):
        body = CombService.to_response(make_comb(4)).model_dump(by_alias=True, mode="json")

        assert body["id"] == 4
        assert body["honey"] == []
        assert "createdAt" in body and "deletedAt" in body


class TestCombServiceDatabase:

    @pytest.mark.asyncio
    async def test_embedded_honey_skips_soft_deleted(self, db_session):
        comb = Comb()
        db_session.add(comb)
        await db_session.flush()
        db_session.add(Honey(comb_id=comb.id, type="acacia"))
        db_session.add(
            Honey(comb_id=comb.id, type="clover", deleted_at=datetime.now(timezone.utc))
        )
        await db_session.commit()
        db_session.expunge_all()

        result = await CombService(embed_honey=True).get_comb(db_session, comb.id)

        assert [h.type for h in result.honey] == ["acacia"]
        assert result.honey[0].visits == 0

    @pytest.mark.asyncio
    async def test_without_embedding_honey_is_empty(self, db_session):
        comb = Comb()
        db_session.add(comb)
        await db_session.flush()
        db_session.add(Honey(comb_id=comb.id, type="acacia"))
        await db_session.commit()
        db_session.expunge_all()

        result = await CombService(embed_honey=False).get_comb(db_session, comb.id)

        assert result.honey == []

    @pytest.mark.asyncio
    async def test_create_comb_is_committed(self, db_session, session_factory):
        created = await CombService().create_comb(db_session)

        async with session_factory() as other:
            stored = await other.get(Comb, created.id)

        assert stored is not None
        assert created.honey == []
        assert created.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_unloaded_honey_raises_on_access(self, db_session):
        comb = Comb()
        db_session.add(comb)
        await db_session.commit()
        db_session.expunge_all()

        loaded = await db_session.get(Comb, comb.id)

        with pytest.raises(InvalidRequestError):
            loaded.honey
