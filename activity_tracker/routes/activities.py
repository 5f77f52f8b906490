"""
Activity Tracker — Activity Route Handlers
============================================

What:  Listing, paging, sorting, adding, editing and deleting the signed-in
       user's activities.
How:   Every route except "/" depends on require_signed_in. Handlers validate
       the form, call ActivityStore, then redirect on success or re-render the
       form with flash errors. Missing or foreign activities, bad page numbers
       and bad sort columns raise and are rendered by the boundary handlers.

Routes:
    GET  /                               → redirect to page 1
    GET  /activities/page/{page_num}     paginated, sorted list
    GET  /activity/new                   add form
    POST /activity/new                   add
    GET  /activities/edit/{activity_id}  edit form, pre-filled
    POST /activities/edit/{activity_id}  edit (no-op detection, ownership check)
    POST /activity/delete/{activity_id}  delete
    GET  /sort/{column}/{page_num}       toggle sort, back to the same page
"""

import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse

from activity_tracker.context import ERROR, INFO, SUCCESS, RequestContext, require_signed_in
from activity_tracker.exceptions import DatabaseError, NotFoundError, ValidationError
from activity_tracker.schemas.activity import ActivityForm
from activity_tracker.services.pagination import (
    INTEGER_LITERAL,
    number_of_pages,
    page_numbers,
    paginate,
    require_valid_page,
    toggle_sort,
)
from activity_tracker.services.store import ActivityStore, get_store
from activity_tracker.services.validation import ACTIVITY_FORM, require_valid_form
from activity_tracker.views import redirect, render

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Activities"])

FIRST_PAGE = "/activities/page/1"


def _activity_id(raw: str) -> int:
    if INTEGER_LITERAL.fullmatch(raw) is None:
        raise NotFoundError(resource="activity", resource_id=raw, message="Activity not found.")
    return int(raw)


def _activity_form(title: str, category: str, date: str, min_to_complete: str) -> ActivityForm:
    values = require_valid_form(
        {
            "title": title,
            "category": category,
            "date": date,
            "min_to_complete": min_to_complete,
        },
        ACTIVITY_FORM,
    )
    return ActivityForm(**values)


@router.get("/")
async def index() -> RedirectResponse:
    # Leaves pending flash messages in the session for the list page
    return RedirectResponse(url=FIRST_PAGE, status_code=302)


@router.get("/activities/page/{page_num}")
async def list_activities(
    request: Request,
    page_num: str,
    context: RequestContext = Depends(require_signed_in),
    store: ActivityStore = Depends(get_store),
):
    sort = context.sort_state
    activities = await store.load_sorted_activities(sort.column, sort.direction)
    current_page = require_valid_page(page_num, len(activities))

    return render(
        request,
        context,
        "activities.html",
        activities=paginate(activities, current_page),
        page_numbers=page_numbers(number_of_pages(len(activities))),
        current_page=current_page,
        sort=sort,
    )


@router.get("/activity/new")
async def new_activity_form(
    request: Request,
    context: RequestContext = Depends(require_signed_in),
):
    return render(request, context, "add-activity.html", form=ActivityForm())


@router.post("/activity/new")
async def add_activity(
    request: Request,
    context: RequestContext = Depends(require_signed_in),
    store: ActivityStore = Depends(get_store),
    title: str = Form(""),
    category: str = Form(""),
    date: str = Form(""),
    min_to_complete: str = Form(""),
):
    try:
        form = _activity_form(title, category, date, min_to_complete)
    except ValidationError as e:
        for message in e.messages:
            context.flash(ERROR, message)
        return render(request, context, "add-activity.html", form=ActivityForm(**e.values))

    added = await store.add_activity(form.title, form.category, form.date, form.min_to_complete)
    if not added:
        raise DatabaseError(message="The activity could not be added.")

    context.flash(SUCCESS, "The activity has been added.")
    return redirect(context, FIRST_PAGE)


@router.get("/activities/edit/{activity_id}")
async def edit_activity_form(
    request: Request,
    activity_id: str,
    context: RequestContext = Depends(require_signed_in),
    store: ActivityStore = Depends(get_store),
):
    activity_pk = _activity_id(activity_id)
    if not await store.check_is_valid_activity(activity_pk):
        raise NotFoundError(resource="activity", resource_id=activity_pk, message="Activity not found.")

    record = await store.get_activity(activity_pk)
    if record is None:
        raise NotFoundError(resource="activity", resource_id=activity_pk, message="Activity not found.")

    return render(
        request,
        context,
        "edit-activity.html",
        form=ActivityForm.from_record(record),
        activity_id=activity_pk,
    )


@router.post("/activities/edit/{activity_id}")
async def edit_activity(
    request: Request,
    activity_id: str,
    context: RequestContext = Depends(require_signed_in),
    store: ActivityStore = Depends(get_store),
    title: str = Form(""),
    category: str = Form(""),
    date: str = Form(""),
    min_to_complete: str = Form(""),
):
    activity_pk = _activity_id(activity_id)
    try:
        form = _activity_form(title, category, date, min_to_complete)
    except ValidationError as e:
        for message in e.messages:
            context.flash(ERROR, message)
        return render(
            request,
            context,
            "edit-activity.html",
            form=ActivityForm(**e.values),
            activity_id=activity_pk,
        )

    changes = (form.title, form.category, form.date, form.min_to_complete, activity_pk)

    if await store.is_same_activity(*changes):
        context.flash(INFO, "No edits were made.")
        return redirect(context, FIRST_PAGE)

    if not await store.check_is_valid_activity(activity_pk):
        raise NotFoundError(resource="activity", resource_id=activity_pk, message="Activity not found.")

    if not await store.edit_activity(*changes):
        raise NotFoundError(resource="activity", resource_id=activity_pk, message="Activity not found.")

    context.flash(SUCCESS, "The activity has been changed.")
    return redirect(context, FIRST_PAGE)


@router.post("/activity/delete/{activity_id}")
async def delete_activity(
    activity_id: str,
    context: RequestContext = Depends(require_signed_in),
    store: ActivityStore = Depends(get_store),
):
    activity_pk = _activity_id(activity_id)
    if not await store.delete_activity(activity_pk):
        raise NotFoundError(
            resource="activity",
            resource_id=activity_pk,
            message="This activity is not found.",
        )

    context.flash(SUCCESS, "The activity has been successfully deleted")
    return redirect(context, FIRST_PAGE)


@router.get("/sort/{column}/{page_num}")
async def sort_activities(
    column: str,
    page_num: str,
    context: RequestContext = Depends(require_signed_in),
    store: ActivityStore = Depends(get_store),
):
    """Apply a sort request, then return to the page the user was on."""
    new_sort = toggle_sort(context.sort_state, column)
    current_page = require_valid_page(page_num, await store.get_activity_count())

    context.sort_state = new_sort
    logger.debug("Sort for %s is now %s %s", context.username, new_sort.column, new_sort.direction)
    return redirect(context, f"/activities/page/{current_page}")
