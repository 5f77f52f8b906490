"""
Activity Tracker — RequestContext Unit Tests
==============================================

What we test:
    ✅ Incoming flash messages are read once
    ✅ Only a redirect carries new messages into the session
    ✅ Sign-out forgets identity but keeps the sort state
    ✅ Tampered sort values fall back to the defaults
"""

from activity_tracker.context import ERROR, INFO, SUCCESS, RequestContext
from activity_tracker.services.pagination import SortState


class TestFlash:

    def test_incoming_messages_are_popped(self):
        session = {"flash": [{"category": "success", "message": "Saved"}]}
        context = RequestContext(session)

        assert "flash" not in session
        messages = context.consume_flash()
        assert [(m.category, m.message) for m in messages] == [("success", "Saved")]
        assert context.consume_flash() == []

    def test_render_shows_new_messages_without_persisting(self):
        session = {}
        context = RequestContext(session)
        context.flash(ERROR, "The title is required.")

        messages = context.consume_flash()
        assert [m.message for m in messages] == ["The title is required."]
        assert "flash" not in session

    def test_redirect_keeps_only_new_messages(self):
        session = {"flash": [{"category": "info", "message": "old"}]}
        context = RequestContext(session)
        context.flash(SUCCESS, "The activity has been added.")

        context.keep_flash_for_redirect()
        assert session["flash"] == [{"category": "success", "message": "The activity has been added."}]

    def test_redirect_without_messages_writes_nothing(self):
        session = {}
        RequestContext(session).keep_flash_for_redirect()
        assert session == {}


class TestIdentityAndSort:

    def test_sign_in_and_out(self):
        session = {}
        context = RequestContext(session)
        context.sign_in("alice")
        assert context.signed_in
        assert context.username == "alice"

        context.sort_state = SortState(column="category", direction="DESC")
        context.sign_out()
        assert not context.signed_in
        assert context.username is None
        assert context.sort_state == SortState(column="category", direction="DESC")

    def test_requested_path_is_one_shot(self):
        context = RequestContext({})
        context.remember_path("/activity/new")
        assert context.pop_requested_path() == "/activity/new"
        assert context.pop_requested_path() is None

    def test_tampered_sort_falls_back(self):
        context = RequestContext({"sort_column": "password; --", "sort_ascend": "ASC"})
        assert context.sort_state == SortState()

        context = RequestContext({"sort_column": "title", "sort_ascend": "sideways"})
        assert context.sort_state == SortState()

    def test_info_level_constant(self):
        context = RequestContext({})
        context.flash(INFO, "Welcome!")
        assert context.consume_flash()[0].category == "info"
