"""
Activity Tracker — Activity SQLAlchemy Model
==============================================

What:  ORM model for the `activities` table.
Who:   Read and written by ActivityStore; every statement is filtered by the
       owning username.

Table Design:
    - id: integer identity assigned by the store
    - title / category: VARCHAR(50), matching the form's length rule
    - date_completed: DATE; rendered as YYYY-MM-DD in forms, MM/DD/YYYY in lists
    - min_to_complete: INTEGER minutes
    - username: FK → users.username with ON DELETE / ON UPDATE CASCADE, so
      account deletion removes the rows and account renames carry over

    Index on username:
        Every query filters by owner; listing, counting and the existence checks
        all use it.
"""

from datetime import date

from sqlalchemy import Date, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from activity_tracker.database import Base


TITLE_MAX_LENGTH = 50
CATEGORY_MAX_LENGTH = 50


class Activity(Base):
    """A completed task recorded by one account."""

    __tablename__ = "activities"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)

    category: Mapped[str] = mapped_column(String(CATEGORY_MAX_LENGTH), nullable=False)

    date_completed: Mapped[date] = mapped_column(Date, nullable=False)

    min_to_complete: Mapped[int] = mapped_column(Integer, nullable=False)

    username: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("users.username", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False,
    )

    account: Mapped["Account"] = relationship(back_populates="activities")  # noqa: F821

    __table_args__ = (
        Index("idx_activities_username", "username"),
    )

    def __repr__(self) -> str:
        return (
            f"<Activity(id={self.id}, title='{self.title}', "
            f"username='{self.username}')>"
        )
