"""Create combs and honey tables

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Creates the `combs` table and its child `honey` table.
How:   Portable column types so the same revision runs on SQLite and
       PostgreSQL. See combs_of_honey/models/ for the column documentation.

Rollback: downgrade() drops both tables (destructive — all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create combs, then honey (which references combs.id)."""
    op.create_table(
        "combs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False),
        # Soft-delete marker; NULL for live rows
        sa.Column("deleted_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "honey",
        sa.Column("comb_id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("type", sa.String(255), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("deleted_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column(
            "visits",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
        ),
        # (comb_id, type) identifies a honey record
        sa.PrimaryKeyConstraint("comb_id", "type"),
        sa.ForeignKeyConstraint(["comb_id"], ["combs.id"]),
    )


def downgrade() -> None:
    """Drop honey first (it references combs)."""
    op.drop_table("honey")
    op.drop_table("combs")
