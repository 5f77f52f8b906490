"""
Activity Tracker — Pagination & Sort Policy Unit Tests
========================================================

What we test:
    ✅ number_of_pages is max(1, ceil(n / 5))
    ✅ Page validity: integers in [1, pages] only
    ✅ require_valid_page raises InvalidPageError with the page count
    ✅ Slicing a sorted list into pages of five
    ✅ Sort toggle: same column flips, new column starts ascending
"""

import pytest

from activity_tracker.exceptions import InvalidPageError, InvalidSortError
from activity_tracker.services.pagination import (
    ACTIVITIES_PER_PAGE,
    SortState,
    is_valid_page_num,
    number_of_pages,
    page_numbers,
    paginate,
    parse_page_num,
    require_valid_page,
    toggle_sort,
)


class TestNumberOfPages:

    @pytest.mark.parametrize(
        "count, expected",
        [(0, 1), (1, 1), (5, 1), (6, 2), (10, 2), (11, 3), (23, 5)],
    )
    def test_page_count(self, count, expected):
        assert number_of_pages(count) == expected

    def test_page_one_exists_without_activities(self):
        assert is_valid_page_num(1, number_of_pages(0))
        assert page_numbers(number_of_pages(0)) == [1]

    def test_page_numbers_are_inclusive(self):
        assert page_numbers(3) == [1, 2, 3]


class TestPageValidity:

    @pytest.mark.parametrize("page", [0, -1, 4, 1.0, "1", None, True])
    def test_rejected(self, page):
        assert is_valid_page_num(page, 3) is False

    @pytest.mark.parametrize("page", [1, 2, 3])
    def test_accepted(self, page):
        assert is_valid_page_num(page, 3) is True

    def test_parse_page_num(self):
        assert parse_page_num("2") == 2
        assert parse_page_num("abc") is None
        assert parse_page_num("2.5") is None
        assert parse_page_num("") is None

    @pytest.mark.parametrize("raw", ["1_0", " 1", "1 ", "\u0661", "\uff11"])
    def test_parse_page_num_rejects_loose_int_syntax(self, raw):
        assert parse_page_num(raw) is None

    def test_parse_page_num_keeps_sign(self):
        assert parse_page_num("-2") == -2

    def test_require_valid_page_rejects_underscores(self):
        with pytest.raises(InvalidPageError):
            require_valid_page("1_0", 50)

    def test_require_valid_page_returns_int(self):
        assert require_valid_page("2", 7) == 2

    @pytest.mark.parametrize("raw", ["0", "-3", "3", "x"])
    def test_require_valid_page_raises(self, raw):
        with pytest.raises(InvalidPageError) as exc_info:
            require_valid_page(raw, 7)
        assert exc_info.value.message == "Invalid page number requested."
        assert exc_info.value.context["number_of_pages"] == 2


class TestPaginate:

    def test_slices_window(self):
        items = list(range(12))
        assert paginate(items, 1) == [0, 1, 2, 3, 4]
        assert paginate(items, 2) == [5, 6, 7, 8, 9]
        assert paginate(items, 3) == [10, 11]

    def test_empty(self):
        assert paginate([], 1) == []

    def test_page_size(self):
        assert len(paginate(list(range(100)), 4)) == ACTIVITIES_PER_PAGE


class TestToggleSort:

    def test_default_state(self):
        state = SortState()
        assert state.column == "title"
        assert state.direction == "ASC"
        assert state.ascending

    def test_same_column_flips_direction(self):
        assert toggle_sort(SortState(), "title") == SortState(column="title", direction="DESC")

    def test_flip_back_to_ascending(self):
        state = SortState(column="category", direction="DESC")
        assert toggle_sort(state, "category").direction == "ASC"

    def test_new_column_resets_to_ascending(self):
        state = SortState(column="title", direction="DESC")
        assert toggle_sort(state, "category") == SortState(column="category", direction="ASC")

    def test_unknown_column(self):
        with pytest.raises(InvalidSortError) as exc_info:
            toggle_sort(SortState(), "password")
        assert exc_info.value.message == "Invalid column name."
