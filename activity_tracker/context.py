"""
Activity Tracker — Request Context
====================================

What:  The per-request view of session state: sign-in status, username, sort
       state, the pending post-sign-in redirect path, and flash messages.
How:   Built once per request by the get_request_context() dependency from
       Starlette's session dict, cached on request.state, and passed to route
       handlers, ActivityStore, and the boundary exception handlers.
Who:   Every route; ActivityStore reads `username` to scope its statements.

Flash lifecycle:
    - Messages left in the session by the previous response are popped when
      the context is built, so they are shown at most once.
    - flash() collects messages for the current response.
    - A rendered page shows incoming + new messages and persists nothing.
    - A redirect writes only the new messages back to the session, to be
      popped by the next request.
"""

import logging
from typing import Any, List, MutableMapping, Optional

from fastapi import Request
from pydantic import BaseModel

from activity_tracker.exceptions import AuthenticationRequiredError
from activity_tracker.middleware.request_id import request_id_var
from activity_tracker.services.pagination import SORT_DIRECTIONS, VALID_COLUMN_NAMES, SortState

logger = logging.getLogger(__name__)

# Session keys
SIGNED_IN = "signed_in"
USERNAME = "username"
SORT_COLUMN = "sort_column"
SORT_ASCEND = "sort_ascend"
REQUESTED_PATH = "path"
FLASH = "flash"

INFO = "info"
SUCCESS = "success"
ERROR = "error"


class FlashMessage(BaseModel):
    """A severity-tagged status line shown on one rendered page."""

    category: str
    message: str


class RequestContext:
    """
    Explicit request-scoped state, replacing implicit per-response globals.

    The underlying session mapping is shared by reference, so writes made here
    are what SessionMiddleware serialises into the response cookie.
    """

    def __init__(self, session: MutableMapping[str, Any], request_id: str = ""):
        self.session = session
        self.request_id = request_id
        self._incoming: List[FlashMessage] = [
            FlashMessage(**entry) for entry in session.pop(FLASH, None) or []
        ]
        self._outgoing: List[FlashMessage] = []

    # ── Authentication ────────────────────────────────────────────────────

    @property
    def signed_in(self) -> bool:
        return bool(self.session.get(SIGNED_IN))

    @property
    def username(self) -> Optional[str]:
        return self.session.get(USERNAME)

    def sign_in(self, username: str) -> None:
        self.session[USERNAME] = username
        self.session[SIGNED_IN] = True

    def rename(self, username: str) -> None:
        self.session[USERNAME] = username

    def sign_out(self) -> None:
        """Drop the identity only; sort state survives until the next sign-in."""
        self.session.pop(USERNAME, None)
        self.session.pop(SIGNED_IN, None)

    # ── Redirect-after-sign-in ────────────────────────────────────────────

    def remember_path(self, path: str) -> None:
        self.session[REQUESTED_PATH] = path

    def pop_requested_path(self) -> Optional[str]:
        return self.session.pop(REQUESTED_PATH, None)

    # ── Sort state ────────────────────────────────────────────────────────

    @property
    def sort_state(self) -> SortState:
        column = self.session.get(SORT_COLUMN)
        direction = self.session.get(SORT_ASCEND)
        # A tampered or stale cookie falls back to the defaults
        if column not in VALID_COLUMN_NAMES or direction not in SORT_DIRECTIONS:
            return SortState()
        return SortState(column=column, direction=direction)

    @sort_state.setter
    def sort_state(self, state: SortState) -> None:
        self.session[SORT_COLUMN] = state.column
        self.session[SORT_ASCEND] = state.direction

    # ── Flash messages ────────────────────────────────────────────────────

    def flash(self, category: str, message: str) -> None:
        self._outgoing.append(FlashMessage(category=category, message=message))

    def consume_flash(self) -> List[FlashMessage]:
        """Messages for a page rendered by this response; read once."""
        messages = self._incoming + self._outgoing
        self._incoming = []
        self._outgoing = []
        return messages

    def keep_flash_for_redirect(self) -> None:
        """Carry this response's new messages over to the next request."""
        if self._outgoing:
            self.session[FLASH] = [m.model_dump() for m in self._outgoing]
        self._incoming = []
        self._outgoing = []


def get_request_context(request: Request) -> RequestContext:
    """
    FastAPI dependency returning the request's single RequestContext.

    Cached on request.state so exception handlers see the same instance (and
    therefore the same pending flash messages) as the route that raised.
    """
    context = getattr(request.state, "context", None)
    if context is None:
        context = RequestContext(request.session, request_id=request_id_var.get(""))
        request.state.context = context
    return context


def require_signed_in(request: Request) -> RequestContext:
    """
    Authentication gate for protected routes.

    An anonymous request gets an info flash and is turned away with
    AuthenticationRequiredError (answered with a redirect to the sign-in page).
    GET paths are remembered for the redirect after sign-in; POST-only routes
    are not, since that redirect is itself a GET.
    """
    context = get_request_context(request)
    if not context.signed_in:
        logger.info("Unauthorized %s request for %s", request.method, request.url.path)
        if request.method == "GET":
            target = request.url.path
            if request.url.query:
                target = f"{target}?{request.url.query}"
            context.remember_path(target)
        context.flash(INFO, "Please sign in order to access your profile.")
        raise AuthenticationRequiredError()
    return context
