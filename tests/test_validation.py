"""
Activity Tracker — Form Validation Unit Tests
===============================================

What we test:
    ✅ Valid activity and account forms produce no messages
    ✅ Title/category are trimmed, then required and length-checked
    ✅ One message per failing field, in rule order
    ✅ Usernames must be ASCII alphanumeric
    ✅ require_valid_form raises with every message and the submitted values
"""

import pytest

from activity_tracker.exceptions import ValidationError
from activity_tracker.services.validation import (
    ACTIVITY_FORM,
    CREATE_ACCOUNT_FORM,
    EDIT_ACCOUNT_FORM,
    require_valid_form,
    validate_form,
)


def _activity(**overrides):
    values = {
        "title": "Run",
        "category": "Fitness",
        "date": "2024-01-01",
        "min_to_complete": "30",
    }
    values.update(overrides)
    return values


class TestActivityForm:

    def test_valid(self):
        cleaned, messages = validate_form(_activity(), ACTIVITY_FORM)
        assert messages == []
        assert cleaned["title"] == "Run"

    def test_trims_title_and_category(self):
        cleaned, messages = validate_form(
            _activity(title="  Run  ", category="\tFitness "),
            ACTIVITY_FORM,
        )
        assert messages == []
        assert cleaned["title"] == "Run"
        assert cleaned["category"] == "Fitness"

    def test_whitespace_title_is_missing(self):
        _, messages = validate_form(_activity(title="   "), ACTIVITY_FORM)
        assert messages == ["The title is required."]

    def test_title_too_long(self):
        _, messages = validate_form(_activity(title="x" * 51), ACTIVITY_FORM)
        assert messages == ["The title must be between 1 and 50 characters."]

    def test_title_at_limit(self):
        _, messages = validate_form(_activity(title="x" * 50), ACTIVITY_FORM)
        assert messages == []

    def test_every_failing_field_reports_once(self):
        _, messages = validate_form(
            {"title": "", "category": "", "date": "", "min_to_complete": ""},
            ACTIVITY_FORM,
        )
        assert messages == [
            "The title is required.",
            "The category is required.",
            "Please enter a date. Date cannot be empty.",
            "Please enter the time spent on this activity. Value cannot be empty",
        ]

    def test_missing_field_counts_as_empty(self):
        values = _activity()
        del values["date"]
        cleaned, messages = validate_form(values, ACTIVITY_FORM)
        assert messages == ["Please enter a date. Date cannot be empty."]
        assert cleaned.get("date", "") == ""


class TestAccountForms:

    def test_valid_create(self):
        cleaned, messages = validate_form(
            {"username": " alice ", "password": "pw1"},
            CREATE_ACCOUNT_FORM,
        )
        assert messages == []
        assert cleaned["username"] == "alice"

    def test_password_is_not_trimmed(self):
        cleaned, _ = validate_form(
            {"username": "alice", "password": " pw1 "},
            CREATE_ACCOUNT_FORM,
        )
        assert cleaned["password"] == " pw1 "

    @pytest.mark.parametrize("username", ["bad name", "ali-ce", "émile", "a_b"])
    def test_non_alphanumeric_username(self, username):
        _, messages = validate_form(
            {"username": username, "password": "pw1"},
            CREATE_ACCOUNT_FORM,
        )
        assert messages == ["Username can only contain alphanumeric characters."]

    def test_empty_username_reports_only_required(self):
        _, messages = validate_form({"username": "", "password": ""}, CREATE_ACCOUNT_FORM)
        assert messages == ["Username cannot be empty.", "Password cannot be empty."]

    def test_edit_form_uses_new_fields(self):
        _, messages = validate_form(
            {"new_username": "Alice2", "new_password": ""},
            EDIT_ACCOUNT_FORM,
        )
        assert messages == ["Password cannot be empty."]


class TestRequireValidForm:

    def test_returns_cleaned_values(self):
        values = require_valid_form(_activity(title=" Run "), ACTIVITY_FORM)
        assert values["title"] == "Run"

    def test_raises_with_messages_and_values(self):
        with pytest.raises(ValidationError) as exc_info:
            require_valid_form(_activity(title=" ", category="Fitness "), ACTIVITY_FORM)

        error = exc_info.value
        assert error.messages == ["The title is required."]
        assert error.values["category"] == "Fitness"
        assert error.values["date"] == "2024-01-01"
        assert "values" not in error.context
