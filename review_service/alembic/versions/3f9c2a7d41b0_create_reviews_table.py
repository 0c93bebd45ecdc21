"""Initial Alembic migration: create ``reviews`` table and its indexes.

Revision ID: 3f9c2a7d41b0
Revises:
Create Date: 2025-11-07 10:12:41.518204

Rating and status are guarded by CHECK constraints so the table rejects
out-of-range values even when written to outside the service.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "3f9c2a7d41b0"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TABLE_NAME = "reviews"
INDEXED_COLUMNS = ("customer_id", "rating", "status", "created_at")


def upgrade() -> None:
    """Create the ``reviews`` table and an index per filter column."""
    op.create_table(
        TABLE_NAME,
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("customer_id", sa.String(length=255), nullable=False),
        sa.Column("customer_name", sa.String(length=255), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("comment", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name=op.f("ck_reviews_rating")),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')", name=op.f("ck_reviews_status")
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_reviews")),
    )
    for column in INDEXED_COLUMNS:
        op.create_index(op.f(f"ix_reviews_{column}"), TABLE_NAME, [column], unique=False)


def downgrade() -> None:
    """Drop the indexes and then the ``reviews`` table."""
    for column in reversed(INDEXED_COLUMNS):
        op.drop_index(op.f(f"ix_reviews_{column}"), table_name=TABLE_NAME)
    op.drop_table(TABLE_NAME)
