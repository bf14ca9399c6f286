"""Initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2025-11-02 00:00:00
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "rosters",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("chat_id", sa.BigInteger(), nullable=False),
        sa.Column("title", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("last_draw_seed", sa.Integer(), nullable=True),
        sa.Column("last_drawn_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_rosters_chat_id", "rosters", ["chat_id"], unique=True)

    op.create_table(
        "people",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("roster_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("name_key", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["roster_id"], ["rosters.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("roster_id", "name_key", name="uq_people_roster_name_key"),
    )

    op.create_table(
        "restrictions",
        sa.Column("person_id", sa.Integer(), nullable=False),
        sa.Column("restricted_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["person_id"], ["people.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["restricted_id"], ["people.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("person_id", "restricted_id"),
    )


def downgrade() -> None:
    op.drop_table("restrictions")
    op.drop_table("people")
    op.drop_index("ix_rosters_chat_id", table_name="rosters")
    op.drop_table("rosters")
