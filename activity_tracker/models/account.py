"""
Activity Tracker — Account SQLAlchemy Model
=============================================

What:  ORM model for the `users` table.
Who:   Queried by ActivityStore for sign-in, account creation/edit/deletion;
       read by Alembic and create_schema() for the table definition.

Table Design:
    - username is the primary key, so the store itself enforces uniqueness.
      Concurrent creates with the same name fail with a UNIQUE violation,
      which ActivityStore classifies as a UniquenessConflictError.
    - password holds a bcrypt hash ("$2b$10$..."). The salt is embedded in the
      hash, so no separate salt column exists.
"""

from typing import List

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from activity_tracker.database import Base


class Account(Base):
    """A signed-up user. Deleting or renaming one cascades to its activities."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
        comment="Case-sensitive, alphanumeric account name",
    )

    password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash with embedded per-account salt",
    )

    activities: Mapped[List["Activity"]] = relationship(  # noqa: F821
        back_populates="account",
        passive_deletes=True,
        passive_updates=True,
    )

    def __repr__(self) -> str:
        return f"<Account(username='{self.username}')>"
