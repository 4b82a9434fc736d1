"""
Combs of Honey — Comb SQLAlchemy Model
=======================================

What:  ORM model for the `combs` table, the parent entity.
Who:   Used by CombService for create/read and by Alembic for schema management.

Table Design:
    - id: integer primary key assigned by the store
    - created_at / updated_at: UTC timestamps maintained by the ORM
    - deleted_at: soft-delete marker; NULL for live rows, never set by the API
    - honey: not a column. A view-only collection of the comb's live honey
      rows. Lazy loading raises; a query that wants it uses
      `selectinload(Comb.honey)`.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import TIMESTAMP, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from combs_of_honey.database import Base

if TYPE_CHECKING:
    from combs_of_honey.models.honey import Honey


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Comb(Base):
    """
    A container with zero or more Honey children.

    Lifecycle:
        1. Created empty by POST /combs (no body accepted)
        2. Read by id or listed; never updated or deleted through the API
    """

    __tablename__ = "combs"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=True,
        default=None,
    )

    honey: Mapped[List["Honey"]] = relationship(
        "Honey",
        primaryjoin="and_(Comb.id == Honey.comb_id, Honey.deleted_at.is_(None))",
        order_by="Honey.type",
        lazy="raise",
        viewonly=True,
    )

    def __repr__(self) -> str:
        return f"<Comb(id={self.id}, created_at='{self.created_at}')>"
