# Middleware package init
"""
Activity Tracker — Middleware Package
=======================================

Middleware Chain (outermost first):
    Request → [Session] → [Request ID] → [Access Log] → Route Handler

    - Session: Starlette SessionMiddleware; decodes the signed cookie into
      request.session and re-signs it on the way out
    - Request ID: correlation ID in a ContextVar and the X-Request-ID header
    - Access Log: one line per request with status and duration
"""
