# Routes package init
"""
Activity Tracker — Route Handlers Package
===========================================

Route Inventory:
    - activities.py: list/page/sort and add/edit/delete of activities
    - users.py:      sign-in/out, create/edit/delete account
    - health.py:     GET /health

Handlers stay thin: read the form, validate, call ActivityStore, then
redirect or render. Fatal conditions are raised, not rendered inline.
"""
