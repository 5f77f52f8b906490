"""
Activity Tracker — Account Route Handlers
===========================================

What:  Sign-in, sign-out, account creation, editing and deletion.
How:   Credentials are checked through ActivityStore; the signed-in identity
       lives in the session via RequestContext.

Username races:
    Creating an account or renaming one first asks the store whether the
    username exists, then writes. A concurrent request can take the name in
    between; the store then reports a UniquenessConflictError and the handler
    shows the same "username taken" message as the up-front check.

Routes:
    GET  /users/signin          sign-in form
    POST /users/signin          authenticate, then redirect (one-shot return path)
    POST /users/signout         forget identity, keep sort state
    GET  /users/create-account  form
    POST /users/create-account  validate, uniqueness check, create, sign in
    POST /users/delete          delete account (cascades to activities)
    GET  /users/edit-account    form pre-filled with the username
    POST /users/edit-account    validate, no-op detection, update
"""

import logging

from fastapi import APIRouter, Depends, Form, Request

from activity_tracker.context import (
    ERROR,
    INFO,
    SUCCESS,
    RequestContext,
    get_request_context,
    require_signed_in,
)
from activity_tracker.exceptions import (
    DatabaseError,
    NotFoundError,
    UniquenessConflictError,
    ValidationError,
)
from activity_tracker.schemas.activity import AccountForm, EditAccountForm
from activity_tracker.services.store import ActivityStore, get_store
from activity_tracker.services.validation import (
    CREATE_ACCOUNT_FORM,
    EDIT_ACCOUNT_FORM,
    require_valid_form,
)
from activity_tracker.views import redirect, render

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])

SIGNIN_PAGE = "/users/signin"
FIRST_PAGE = "/activities/page/1"

USERNAME_TAKEN = "Sorry, this username is already taken. Please try again."


# ── Sign in / out ─────────────────────────────────────────────────────────

@router.get("/signin")
async def signin_form(
    request: Request,
    context: RequestContext = Depends(get_request_context),
):
    return render(request, context, "signin.html", form=AccountForm())


@router.post("/signin")
async def signin(
    request: Request,
    context: RequestContext = Depends(get_request_context),
    store: ActivityStore = Depends(get_store),
    username: str = Form(""),
    password: str = Form(""),
):
    username = username.strip()

    if not await store.authenticate(username, password):
        logger.info("Failed sign-in for %s", username)
        context.flash(ERROR, "Invalid credentials.")
        return render(request, context, "signin.html", form=AccountForm(username=username))

    context.sign_in(username)
    context.flash(INFO, "Welcome!")
    # A path saved by the auth gate is used once, then forgotten
    return redirect(context, context.pop_requested_path() or FIRST_PAGE)


@router.post("/signout")
async def signout(context: RequestContext = Depends(get_request_context)):
    context.sign_out()
    return redirect(context, SIGNIN_PAGE)


# ── Create ────────────────────────────────────────────────────────────────

@router.get("/create-account")
async def create_account_form(
    request: Request,
    context: RequestContext = Depends(get_request_context),
):
    return render(request, context, "create-account.html", form=AccountForm())


@router.post("/create-account")
async def create_account(
    request: Request,
    context: RequestContext = Depends(get_request_context),
    store: ActivityStore = Depends(get_store),
    username: str = Form(""),
    password: str = Form(""),
):
    def rerender(submitted_username):
        form = AccountForm(username=submitted_username)
        return render(request, context, "create-account.html", form=form)

    try:
        values = require_valid_form({"username": username, "password": password}, CREATE_ACCOUNT_FORM)
    except ValidationError as e:
        for message in e.messages:
            context.flash(ERROR, message)
        return rerender(e.values["username"])

    try:
        if await store.check_if_username_exists(values["username"]):
            context.flash(ERROR, USERNAME_TAKEN)
            return rerender(values["username"])

        if not await store.create_account(values["username"], values["password"]):
            raise DatabaseError(message="Unable to create the account.")
    except UniquenessConflictError:
        logger.info("Username %s was taken concurrently", values["username"])
        context.flash(ERROR, USERNAME_TAKEN)
        return rerender(values["username"])

    context.sign_in(values["username"])
    return render(request, context, "success-create-account.html")


# ── Delete ────────────────────────────────────────────────────────────────

@router.post("/delete")
async def delete_account(
    context: RequestContext = Depends(require_signed_in),
    store: ActivityStore = Depends(get_store),
):
    if not await store.delete_account():
        raise NotFoundError(resource="account", resource_id=context.username)

    context.sign_out()
    context.flash(SUCCESS, "Your account was successfully deleted.")
    return redirect(context, SIGNIN_PAGE)


# ── Edit ──────────────────────────────────────────────────────────────────

@router.get("/edit-account")
async def edit_account_form(
    request: Request,
    context: RequestContext = Depends(require_signed_in),
    store: ActivityStore = Depends(get_store),
):
    username, password = store.get_account_info()
    return render(
        request,
        context,
        "edit-account.html",
        form=EditAccountForm(new_username=username or "", new_password=password),
    )


@router.post("/edit-account")
async def edit_account(
    request: Request,
    context: RequestContext = Depends(require_signed_in),
    store: ActivityStore = Depends(get_store),
    new_username: str = Form(""),
    new_password: str = Form(""),
):
    def rerender(submitted_username):
        form = EditAccountForm(new_username=submitted_username)
        return render(request, context, "edit-account.html", form=form)

    try:
        values = require_valid_form(
            {"new_username": new_username, "new_password": new_password},
            EDIT_ACCOUNT_FORM,
        )
    except ValidationError as e:
        for message in e.messages:
            context.flash(ERROR, message)
        return rerender(e.values["new_username"])

    try:
        if await store.is_same_account(values["new_username"], values["new_password"]):
            context.flash(INFO, "No edits were made.")
            return redirect(context, FIRST_PAGE)

        renaming = values["new_username"] != context.username
        if renaming and await store.check_if_username_exists(values["new_username"]):
            context.flash(ERROR, USERNAME_TAKEN)
            return rerender(values["new_username"])

        if not await store.update_account(values["new_username"], values["new_password"]):
            raise DatabaseError(message="Unable to update the account.")
    except UniquenessConflictError:
        logger.info("Username %s was taken concurrently", values["new_username"])
        context.flash(ERROR, USERNAME_TAKEN)
        return rerender(values["new_username"])

    context.rename(values["new_username"])
    context.flash(SUCCESS, "The account info has been changed.")
    return redirect(context, FIRST_PAGE)
