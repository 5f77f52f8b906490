"""
Activity Tracker — Pydantic View Schemas
==========================================

What:  Pydantic models passed from the store and handlers to the templates.
How:   ActivityRecord is built from ORM rows (from_attributes); the form models
       hold raw submitted strings so a rejected form re-renders exactly what
       the user typed.
"""

from datetime import date

from pydantic import BaseModel, Field


class ActivityRecord(BaseModel):
    """
    One stored activity as shown in the list and the edit form.

    iso_date feeds <input type="date"> (YYYY-MM-DD); display_date is the
    MM/DD/YYYY form used in the activity table.
    """
    id: int
    title: str
    category: str
    date_completed: date
    min_to_complete: int
    username: str

    model_config = {"from_attributes": True}

    @property
    def iso_date(self) -> str:
        return self.date_completed.isoformat()

    @property
    def display_date(self) -> str:
        return self.date_completed.strftime("%m/%d/%Y")


class ActivityForm(BaseModel):
    """Submitted add/edit activity fields, unparsed."""
    title: str = ""
    category: str = ""
    date: str = ""
    min_to_complete: str = ""

    @classmethod
    def from_record(cls, record: ActivityRecord) -> "ActivityForm":
        return cls(
            title=record.title,
            category=record.category,
            date=record.iso_date,
            min_to_complete=str(record.min_to_complete),
        )


class AccountForm(BaseModel):
    """Submitted sign-in / create-account fields."""
    username: str = ""
    password: str = Field(default="", repr=False)


class EditAccountForm(BaseModel):
    """Submitted edit-account fields."""
    new_username: str = ""
    new_password: str = Field(default="", repr=False)


class HealthResponse(BaseModel):
    """GET /health payload."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
