"""Create users and activities tables

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Creates `users` (accounts) and `activities` (one row per completed
       activity, owned by a user).
How:   activities.username references users.username with ON DELETE CASCADE
       (deleting an account deletes its activities) and ON UPDATE CASCADE
       (renaming an account keeps its activities attached).

Rollback: downgrade() drops both tables; all data is lost.
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
    op.create_table(
        "users",
        sa.Column("username", sa.String(255), nullable=False),
        # bcrypt hash, never the plaintext
        sa.Column("password", sa.String(255), nullable=False),
        sa.PrimaryKeyConstraint("username"),
    )

    op.create_table(
        "activities",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(50), nullable=False),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("date_completed", sa.Date(), nullable=False),
        sa.Column("min_to_complete", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(255), nullable=False),
        sa.ForeignKeyConstraint(
            ["username"],
            ["users.username"],
            ondelete="CASCADE",
            onupdate="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    # Every activity query filters by owner
    op.create_index("idx_activities_username", "activities", ["username"])


def downgrade() -> None:
    op.drop_index("idx_activities_username", table_name="activities")
    op.drop_table("activities")
    op.drop_table("users")
