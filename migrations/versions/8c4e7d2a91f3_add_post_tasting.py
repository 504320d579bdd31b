"""add post tasting notes

Revision ID: 8c4e7d2a91f3
Revises: 3b1f2c9d7a10
Create Date: 2026-10-19 14:30:00.000000

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "8c4e7d2a91f3"
down_revision: Union[str, Sequence[str], None] = "3b1f2c9d7a10"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TASTING_COLUMNS = ("color_100", "nose_score_x2", "palate_score_x2", "finish_score_x2")


def upgrade() -> None:
    """Store color and ratings as scaled integers on the post row."""
    with op.batch_alter_table("post") as batch_op:
        for name in TASTING_COLUMNS:
            batch_op.add_column(sa.Column(name, sa.Integer(), nullable=True))
        batch_op.create_check_constraint(
            "ck_post_tasting_complete",
            "(color_100 IS NULL AND nose_score_x2 IS NULL AND palate_score_x2 IS NULL "
            "AND finish_score_x2 IS NULL) OR "
            "(color_100 BETWEEN 0 AND 100 AND nose_score_x2 BETWEEN 0 AND 10 "
            "AND palate_score_x2 BETWEEN 0 AND 10 AND finish_score_x2 BETWEEN 0 AND 10)",
        )


def downgrade() -> None:
    with op.batch_alter_table("post") as batch_op:
        batch_op.drop_constraint("ck_post_tasting_complete", type_="check")
        for name in reversed(TASTING_COLUMNS):
            batch_op.drop_column(name)
