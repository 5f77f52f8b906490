"""
Activity Tracker — Page Rendering Helpers
===========================================

What:  The two ways a handler can answer: render a Jinja2 template, or
       redirect. Both settle the request's flash messages.
How:   render() hands the template the messages for this page plus the
       session-derived values every page needs (sign-in state, username).
       redirect() moves this response's new messages into the session for the
       next request and answers 302.
"""

from pathlib import Path
from typing import Any

from fastapi import Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from activity_tracker.context import RequestContext

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
STATIC_DIR = Path(__file__).resolve().parent / "static"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render(
    request: Request,
    context: RequestContext,
    template: str,
    status_code: int = 200,
    **values: Any,
) -> Response:
    page = {
        "flash": context.consume_flash(),
        "signed_in": context.signed_in,
        "username": context.username,
    }
    page.update(values)
    return templates.TemplateResponse(request, template, page, status_code=status_code)


def redirect(context: RequestContext, location: str) -> RedirectResponse:
    context.keep_flash_for_redirect()
    return RedirectResponse(url=location, status_code=302)
