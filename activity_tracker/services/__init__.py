# Services package init
"""
Activity Tracker — Services Layer
===================================

Service Inventory:
    - validation.py: declarative form rules and validate_form()
    - pagination.py: page arithmetic and sort-state toggling
    - store.py:      ActivityStore, the account-scoped persistence gateway,
                     plus bcrypt password hashing

Pagination and validation are pure functions and are unit-tested without a
database; ActivityStore is exercised against SQLite in the tests.
"""
