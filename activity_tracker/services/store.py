"""
Activity Tracker — Persistence Gateway
========================================

What:  Every durable read and write the application performs, scoped to the
       account signed in on the current request, plus password hashing and
       classification of store failures.
How:   ActivityStore is built per request from the request's AsyncSession and
       RequestContext. Statements are SQLAlchemy expressions, so every value
       is sent as a bound parameter. Each mutating statement is committed on
       its own; no operation spans more than one statement.
Who:   Constructed by the get_store() dependency; called by route handlers.

Failure Translation:
    SQLAlchemyError → rollback, then
        UNIQUE violation  → UniquenessConflictError (handlers recover locally)
        anything else     → DatabaseError (boundary handler, logged)
    Values that cannot be converted to DATE / INTEGER are rejected here with
    DatabaseError, the same outcome as the engine refusing them.

Ordering:
    Sort column and direction are looked up in fixed tables of SQLAlchemy
    expressions. Identifiers cannot be bound as parameters, so nothing from
    the request is ever placed in the ORDER BY clause; unknown keys raise
    InvalidSortError before a statement is built.
"""

import logging
import re
from datetime import date
from typing import Any, List, Optional, Tuple

import bcrypt
from fastapi import Depends
from sqlalchemy import asc, delete, desc, func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from activity_tracker.config import settings
from activity_tracker.context import RequestContext, get_request_context
from activity_tracker.database import get_db_session
from activity_tracker.exceptions import DatabaseError, InvalidSortError, UniquenessConflictError
from activity_tracker.models import Account, Activity
from activity_tracker.schemas.activity import ActivityRecord

logger = logging.getLogger(__name__)

# PostgreSQL: 'duplicate key value violates unique constraint "users_pkey"'
# SQLite:     'UNIQUE constraint failed: users.username'
UNIQUE_VIOLATION_PATTERN = re.compile(
    r"duplicate key value violates unique constraint|UNIQUE constraint failed"
)

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72

SORTABLE_COLUMNS = {
    "title": func.lower(Activity.title),
    "category": func.lower(Activity.category),
    "date_completed": Activity.date_completed,
    "min_to_complete": Activity.min_to_complete,
}

SORT_ORDERS = {
    "ASC": asc,
    "DESC": desc,
}


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


async def hash_password(password: str) -> str:
    """
    Salted one-way hash with a fresh salt per call.

    bcrypt is CPU-bound; it runs in the threadpool so the event loop keeps
    serving other requests meanwhile.
    """
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    hashed = await run_in_threadpool(bcrypt.hashpw, _password_bytes(password), salt)
    return hashed.decode("utf-8")


async def verify_password(password: str, hashed: str) -> bool:
    """Constant-time comparison of `password` against a stored bcrypt hash."""
    try:
        return await run_in_threadpool(
            bcrypt.checkpw, _password_bytes(password), hashed.encode("utf-8")
        )
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def _to_activity_values(date_value: str, minutes: Any) -> Tuple[date, int]:
    """Convert form strings to the DATE / INTEGER column values."""
    try:
        completed = date.fromisoformat(str(date_value).strip())
        minutes_value = int(minutes)
    except (TypeError, ValueError) as e:
        raise DatabaseError(
            message="The activity could not be saved: the date or minutes value is invalid.",
            context={"date": date_value, "min_to_complete": minutes, "error": str(e)},
        )
    return completed, minutes_value


class ActivityStore:
    """
    Account-scoped persistence for activities and accounts.

    All activity statements filter on `username = <signed-in account>`, so an
    id belonging to another account behaves exactly like a missing id.
    """

    def __init__(self, db: AsyncSession, context: RequestContext):
        self.db = db
        self.username = context.username

    # ── Statement execution ───────────────────────────────────────────────

    async def _execute(self, statement, operation: str, commit: bool = False):
        try:
            result = await self.db.execute(statement)
            if commit:
                await self.db.commit()
            return result
        except SQLAlchemyError as e:
            await self.db.rollback()
            if self.is_unique_constraint_violation(e):
                logger.info("Unique constraint violated during %s", operation)
                raise UniquenessConflictError(context={"operation": operation})
            logger.error("Store operation %s failed: %s", operation, str(e))
            raise DatabaseError(
                context={"operation": operation, "error_type": type(e).__name__},
            )

    def is_unique_constraint_violation(self, error: BaseException) -> bool:
        """True if `error` reports a UNIQUE constraint violation."""
        if isinstance(error, UniquenessConflictError):
            return True
        return UNIQUE_VIOLATION_PATTERN.search(str(error)) is not None

    # ── Activities ────────────────────────────────────────────────────────

    async def add_activity(self, title: str, category: str, date_value: str, minutes: str) -> bool:
        completed, minutes_value = _to_activity_values(date_value, minutes)
        result = await self._execute(
            insert(Activity).values(
                title=title,
                category=category,
                date_completed=completed,
                min_to_complete=minutes_value,
                username=self.username,
            ),
            "add_activity",
            commit=True,
        )
        added = result.rowcount == 1
        if added:
            logger.info("Activity added for %s", self.username)
        return added

    async def get_activity(self, activity_id: int) -> Optional[ActivityRecord]:
        result = await self._execute(
            select(Activity).where(
                Activity.id == activity_id,
                Activity.username == self.username,
            ),
            "get_activity",
        )
        activity = result.scalar_one_or_none()
        if activity is None:
            return None
        return ActivityRecord.model_validate(activity)

    async def check_is_valid_activity(self, activity_id: int) -> bool:
        result = await self._execute(
            select(Activity.id).where(
                Activity.id == activity_id,
                Activity.username == self.username,
            ),
            "check_is_valid_activity",
        )
        return result.first() is not None

    async def edit_activity(
        self,
        title: str,
        category: str,
        date_value: str,
        minutes: str,
        activity_id: int,
    ) -> bool:
        """Replace the four editable fields; the owner predicate is part of the UPDATE."""
        completed, minutes_value = _to_activity_values(date_value, minutes)
        result = await self._execute(
            update(Activity)
            .where(
                Activity.id == activity_id,
                Activity.username == self.username,
            )
            .values(
                title=title,
                category=category,
                date_completed=completed,
                min_to_complete=minutes_value,
            )
            .execution_options(synchronize_session=False),
            "edit_activity",
            commit=True,
        )
        return result.rowcount > 0

    async def is_same_activity(
        self,
        title: str,
        category: str,
        date_value: str,
        minutes: str,
        activity_id: int,
    ) -> bool:
        """True if the proposed values equal the stored row, i.e. the edit is a no-op."""
        completed, minutes_value = _to_activity_values(date_value, minutes)
        result = await self._execute(
            select(Activity.id).where(
                Activity.title == title,
                Activity.category == category,
                Activity.date_completed == completed,
                Activity.min_to_complete == minutes_value,
                Activity.id == activity_id,
                Activity.username == self.username,
            ),
            "is_same_activity",
        )
        return result.first() is not None

    async def delete_activity(self, activity_id: int) -> bool:
        result = await self._execute(
            delete(Activity)
            .where(
                Activity.id == activity_id,
                Activity.username == self.username,
            )
            .execution_options(synchronize_session=False),
            "delete_activity",
            commit=True,
        )
        return result.rowcount > 0

    async def load_sorted_activities(self, column: str, direction: str) -> List[ActivityRecord]:
        """
        All activities of the signed-in account in the requested order.

        title and category compare case-insensitively; id breaks ties so equal
        keys keep a stable order between requests.
        """
        if column not in SORTABLE_COLUMNS:
            raise InvalidSortError(column=column)
        if direction not in SORT_ORDERS:
            raise InvalidSortError(column=column, direction=direction)

        order = SORT_ORDERS[direction]
        result = await self._execute(
            select(Activity)
            .where(Activity.username == self.username)
            .order_by(order(SORTABLE_COLUMNS[column]), Activity.id),
            "load_sorted_activities",
        )
        return [ActivityRecord.model_validate(row) for row in result.scalars().all()]

    async def get_activity_count(self) -> int:
        result = await self._execute(
            select(func.count(Activity.id)).where(Activity.username == self.username),
            "get_activity_count",
        )
        return int(result.scalar_one())

    # ── Accounts ──────────────────────────────────────────────────────────

    async def authenticate(self, username: str, password: str) -> bool:
        """True iff `username` exists and `password` verifies against its hash."""
        result = await self._execute(
            select(Account.password).where(Account.username == username),
            "authenticate",
        )
        hashed = result.scalar_one_or_none()
        if hashed is None:
            return False
        return await verify_password(password, hashed)

    async def check_if_username_exists(self, username: str) -> bool:
        result = await self._execute(
            select(Account.username).where(Account.username == username),
            "check_if_username_exists",
        )
        return result.first() is not None

    async def create_account(self, username: str, password: str) -> bool:
        result = await self._execute(
            insert(Account).values(username=username, password=await hash_password(password)),
            "create_account",
            commit=True,
        )
        created = result.rowcount == 1
        if created:
            logger.info("Account created: %s", username)
        return created

    async def update_account(self, new_username: str, new_password: str) -> bool:
        result = await self._execute(
            update(Account)
            .where(Account.username == self.username)
            .values(username=new_username, password=await hash_password(new_password))
            .execution_options(synchronize_session=False),
            "update_account",
            commit=True,
        )
        updated = result.rowcount > 0
        if updated:
            logger.info("Account %s updated (now %s)", self.username, new_username)
            self.username = new_username
        return updated

    async def delete_account(self) -> bool:
        result = await self._execute(
            delete(Account)
            .where(Account.username == self.username)
            .execution_options(synchronize_session=False),
            "delete_account",
            commit=True,
        )
        deleted = result.rowcount > 0
        if deleted:
            logger.info("Account deleted: %s", self.username)
        return deleted

    async def is_same_account(self, username: str, password: str) -> bool:
        """
        True if submitting (username, password) would change nothing.

        The password is re-verified against the stored hash; no plaintext
        credential is kept between requests.
        """
        if username != self.username:
            return False
        return await self.authenticate(username, password)

    def get_account_info(self) -> Tuple[Optional[str], str]:
        """(username, password) for pre-filling the edit form; the password is never cached."""
        return self.username, ""


def get_store(
    db: AsyncSession = Depends(get_db_session),
    context: RequestContext = Depends(get_request_context),
) -> ActivityStore:
    """FastAPI dependency: one ActivityStore per request."""
    return ActivityStore(db, context)
