"""create offline kv entry

Revision ID: 5c1e9a7d2b40
Revises:
Create Date: 2026-10-19 09:12:44.318201

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c1e9a7d2b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the table backing the durable key-value store."""
    op.create_table(
        "offline_kv_entry",
        sa.Column("key", sa.Text(), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("key"),
    )


def downgrade() -> None:
    """Drop the key-value table."""
    op.drop_table("offline_kv_entry")
