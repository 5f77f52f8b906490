"""ORM models. Importing this package registers every table on Base.metadata."""

from activity_tracker.models.account import Account
from activity_tracker.models.activity import Activity

__all__ = ["Account", "Activity"]
