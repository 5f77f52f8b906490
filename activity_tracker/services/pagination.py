"""
Activity Tracker — Pagination & Sort Policy
=============================================

What:  Page-range arithmetic, page slicing, and the sort-state toggle used by
       the activity list and the sort route.
How:   Pure functions over counts, sequences and an immutable SortState; no
       database or HTTP access, so every rule is unit-testable on its own.
Who:   Called by routes/activities.py; SortState is stored in the session by
       RequestContext.

Rules:
    - 5 activities per page, first page is 1
    - number_of_pages(n) = max(1, ceil(n / 5)), so page 1 exists with 0 activities
    - a page is valid iff it is an integer in [1, number_of_pages]
    - sorting the active column flips direction; a new column starts ascending
"""

import math
import re
from typing import List, Optional, Sequence, TypeVar

from pydantic import BaseModel

from activity_tracker.exceptions import InvalidPageError, InvalidSortError

ACTIVITIES_PER_PAGE = 5
MIN_PAGE_NUM = 1

SORT_ASCENDING = "ASC"
SORT_DESCENDING = "DESC"
SORT_DIRECTIONS = (SORT_ASCENDING, SORT_DESCENDING)

DEFAULT_SORT_COLUMN = "title"
DEFAULT_SORT_ORDER = SORT_ASCENDING
VALID_COLUMN_NAMES = ("title", "category", "date_completed", "min_to_complete")

INTEGER_LITERAL = re.compile(r"-?[0-9]+")

T = TypeVar("T")


class SortState(BaseModel):
    """The (column, direction) pair that orders a user's activity list."""

    column: str = DEFAULT_SORT_COLUMN
    direction: str = DEFAULT_SORT_ORDER

    model_config = {"frozen": True}

    @property
    def ascending(self) -> bool:
        return self.direction == SORT_ASCENDING


def number_of_pages(activity_count: int) -> int:
    """Pages needed for `activity_count` activities; never fewer than one."""
    return max(MIN_PAGE_NUM, math.ceil(activity_count / ACTIVITIES_PER_PAGE))


def page_numbers(pages: int) -> List[int]:
    """Page links for the list view: 1..pages inclusive."""
    return list(range(MIN_PAGE_NUM, pages + 1))


def parse_page_num(raw: str) -> Optional[int]:
    """
    Convert a path segment to a page number.

    Returns None for anything that is not a plain ASCII integer literal: "abc",
    "2.5", "", " 1", "1_0" and non-ASCII digits are all rejected, although
    int() would accept some of them. Range checking is left to
    is_valid_page_num().
    """
    if not isinstance(raw, str) or INTEGER_LITERAL.fullmatch(raw) is None:
        return None
    return int(raw)


def is_valid_page_num(requested_page: object, pages: int) -> bool:
    # bool is an int subclass; True must not pass as page 1
    if not isinstance(requested_page, int) or isinstance(requested_page, bool):
        return False
    return MIN_PAGE_NUM <= requested_page <= pages


def require_valid_page(raw: str, activity_count: int) -> int:
    """
    Parse and range-check a requested page against the number of activities.

    Raises:
        InvalidPageError: non-integer, zero, negative, or past the last page
    """
    pages = number_of_pages(activity_count)
    page = parse_page_num(raw)
    if page is None or not is_valid_page_num(page, pages):
        raise InvalidPageError(page=raw, number_of_pages=pages)
    return page


def paginate(items: Sequence[T], page: int) -> List[T]:
    """Slice the [(page-1)*size, page*size) window out of a sorted sequence."""
    first = (page - 1) * ACTIVITIES_PER_PAGE
    return list(items[first:first + ACTIVITIES_PER_PAGE])


def toggle_sort(current: SortState, column: str) -> SortState:
    """
    Apply a sort request to the current state.

    Same column  → same column, opposite direction.
    New column   → that column, ascending.

    Raises:
        InvalidSortError: `column` is not one of VALID_COLUMN_NAMES
    """
    if column not in VALID_COLUMN_NAMES:
        raise InvalidSortError(column=column)

    if column == current.column:
        flipped = SORT_DESCENDING if current.direction == SORT_ASCENDING else SORT_ASCENDING
        return SortState(column=column, direction=flipped)

    return SortState(column=column, direction=DEFAULT_SORT_ORDER)
