"""
Combs of Honey — Honey SQLAlchemy Model
========================================

What:  ORM model for the `honey` table, the child entity of a comb.
Who:   Used by HoneyService for create/read/visit-count/delete.

Table Design:
    - (comb_id, type): composite primary key; one row per honey type per comb
    - comb_id: foreign key to combs.id (no cascade)
    - visits: view counter, starts at 0, incremented by every successful
      read of the row through the API
    - created_at / updated_at / deleted_at: as on combs
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import TIMESTAMP, ForeignKey, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from combs_of_honey.database import Base
from combs_of_honey.models.comb import utcnow


class Honey(Base):
    """
    A honey variant stored in a comb, identified by (comb_id, type).

    Lifecycle:
        1. Created by POST /combs/{comb_id}/honey (visits defaults to 0)
        2. visits += 1 on every GET of the row (single or listed)
        3. Removed by DELETE /combs/{comb_id}/honey/{honey_type}
    """

    __tablename__ = "honey"

    comb_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("combs.id"),
        primary_key=True,
        autoincrement=False,
    )

    type: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
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

    visits: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    def __repr__(self) -> str:
        return (
            f"<Honey(comb_id={self.comb_id}, type='{self.type}', "
            f"visits={self.visits})>"
        )
