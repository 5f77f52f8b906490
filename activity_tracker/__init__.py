"""
Activity Tracker — Application Package
========================================

What:  A server-rendered web application where signed-in users record
       completed activities (title, category, date, minutes spent) and page
       through them in a sortable table.

Architecture Note:

    ┌─────────────────────────────────────┐
    │     Routes + Views (HTTP, Jinja2)   │  ← forms, redirects, flash
    ├─────────────────────────────────────┤
    │   RequestContext (session state)    │  ← identity, sort, flash
    ├─────────────────────────────────────┤
    │ Services (validation, pagination,   │
    │           ActivityStore)            │  ← rules and persistence
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
