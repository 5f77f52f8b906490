"""
Activity Tracker — Form Validation Rules
==========================================

What:  Declarative field rules for the activity and account forms, plus the
       single runner that evaluates them.
How:   Each form is a tuple of FieldRule entries. validate_form() trims the
       fields marked for trimming, then walks each field's rules in order and
       stops at that field's first failure. Every failing field contributes
       exactly one message.
Who:   Route handlers call require_valid_form() before touching the store; a
       ValidationError means re-render the form and write nothing.

Note:
    date and min_to_complete are only checked for presence here. Malformed
    values are rejected by ActivityStore when they are converted to the
    column types.
"""

import re
from typing import Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel

from activity_tracker.exceptions import ValidationError
from activity_tracker.models.activity import CATEGORY_MAX_LENGTH, TITLE_MAX_LENGTH

REQUIRED = "required"
MAX_LENGTH = "max_length"
PATTERN = "pattern"

ALPHANUMERIC = r"[a-z0-9]+"


class FieldRule(BaseModel):
    """One constraint on one form field and the message shown when it fails."""

    field: str
    kind: str
    message: str
    argument: Optional[int | str] = None

    model_config = {"frozen": True}

    def passes(self, value: str) -> bool:
        if self.kind == REQUIRED:
            return len(value) >= 1
        if self.kind == MAX_LENGTH:
            return len(value) <= int(self.argument)
        if self.kind == PATTERN:
            return re.fullmatch(str(self.argument), value, re.IGNORECASE | re.ASCII) is not None
        raise ValueError(f"Unknown rule kind '{self.kind}'")


class FormRules(BaseModel):
    """The rules of one form plus which of its fields are trimmed first."""

    rules: Tuple[FieldRule, ...]
    trimmed: Tuple[str, ...] = ()

    model_config = {"frozen": True}


def _length_rules(field: str, label: str, max_length: int) -> Tuple[FieldRule, ...]:
    return (
        FieldRule(field=field, kind=REQUIRED, message=f"The {label} is required."),
        FieldRule(
            field=field,
            kind=MAX_LENGTH,
            argument=max_length,
            message=f"The {label} must be between 1 and {max_length} characters.",
        ),
    )


def _account_rules(username_field: str, password_field: str) -> FormRules:
    return FormRules(
        trimmed=(username_field,),
        rules=(
            FieldRule(field=username_field, kind=REQUIRED, message="Username cannot be empty."),
            FieldRule(
                field=username_field,
                kind=PATTERN,
                argument=ALPHANUMERIC,
                message="Username can only contain alphanumeric characters.",
            ),
            FieldRule(field=password_field, kind=REQUIRED, message="Password cannot be empty."),
        ),
    )


# ── Rule Tables ───────────────────────────────────────────────────────────

ACTIVITY_FORM = FormRules(
    trimmed=("title", "category"),
    rules=(
        *_length_rules("title", "title", TITLE_MAX_LENGTH),
        *_length_rules("category", "category", CATEGORY_MAX_LENGTH),
        FieldRule(
            field="date",
            kind=REQUIRED,
            message="Please enter a date. Date cannot be empty.",
        ),
        FieldRule(
            field="min_to_complete",
            kind=REQUIRED,
            message="Please enter the time spent on this activity. Value cannot be empty",
        ),
    ),
)

CREATE_ACCOUNT_FORM = _account_rules("username", "password")

EDIT_ACCOUNT_FORM = _account_rules("new_username", "new_password")


def validate_form(
    values: Mapping[str, Optional[str]],
    form: FormRules,
) -> Tuple[Dict[str, str], List[str]]:
    """
    Evaluate `form` against submitted `values`.

    Returns:
        (cleaned, messages): `cleaned` holds every submitted field, trimmed
        where the form says so and with missing fields as ""; `messages`
        lists one message per failing field, in rule order.
    """
    cleaned: Dict[str, str] = {key: (value or "") for key, value in values.items()}
    for field in form.trimmed:
        cleaned[field] = cleaned.get(field, "").strip()

    messages: List[str] = []
    failed_fields = set()
    for rule in form.rules:
        if rule.field in failed_fields:
            continue
        if not rule.passes(cleaned.get(rule.field, "")):
            failed_fields.add(rule.field)
            messages.append(rule.message)

    return cleaned, messages



def require_valid_form(values: Mapping[str, Optional[str]], form: FormRules) -> Dict[str, str]:
    """
    validate_form() for handlers: return the cleaned values, or raise.

    Raises:
        ValidationError: carrying every message and the cleaned values
    """
    cleaned, messages = validate_form(values, form)
    if messages:
        raise ValidationError(messages, values=cleaned)
    return cleaned
