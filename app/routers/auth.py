"""Auth routes: signup, login, logout and password reset. Session-based auth via cookie."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Form
from fastapi.responses import HTMLResponse, RedirectResponse

from app.core.errors import AuthError, InvalidOrExpiredTokenError
from app.dependencies import get_auth_controller, get_session
from app.services.auth import AuthController
from app.services.sessions import SessionData
from app.templating import render

router = APIRouter()


def _redirect(url) -> RedirectResponse:
    """303 redirect so the browser follows with GET."""
    return RedirectResponse(str(url), status_code=303)


def _fail(session: SessionData, error: AuthError, url) -> RedirectResponse:
    session.set_flash("error", error.message)
    return _redirect(url)


# ---------- signup ----------

@router.get("/signup/", response_class=HTMLResponse)
async def signup_get(request: Request):
    return render(request, "signup.html")


@router.post("/signup/", response_class=RedirectResponse)
async def signup_post(
    request: Request,
    session: Annotated[SessionData, Depends(get_session)],
    auth: Annotated[AuthController, Depends(get_auth_controller)],
    username: Annotated[str, Form()] = "",
    email: Annotated[str, Form()] = "",
    password: Annotated[str, Form()] = "",
    confirm_password: Annotated[str, Form()] = "",
):
    """Create the account, then send the user to the login form."""
    try:
        await auth.register(username, email, password, confirm_password)
    except AuthError as e:
        return _fail(session, e, request.url_for("signup_get"))
    return _redirect(request.url_for("login_get"))


# ---------- login / logout ----------

@router.get("/login/", response_class=HTMLResponse)
async def login_get(request: Request):
    return render(request, "login.html")


@router.post("/login/", response_class=RedirectResponse)
async def login_post(
    request: Request,
    session: Annotated[SessionData, Depends(get_session)],
    auth: Annotated[AuthController, Depends(get_auth_controller)],
    email: Annotated[str, Form()] = "",
    password: Annotated[str, Form()] = "",
    confirm_password: Annotated[str, Form()] = "",
):
    """Authenticate and bind the user to the session; redirect to the secret page."""
    try:
        await auth.login(session, email, password, confirm_password)
    except AuthError as e:
        return _fail(session, e, request.url_for("login_get"))
    return _redirect(request.url_for("secret"))


@router.get("/logout/", response_class=RedirectResponse)
async def logout(
    request: Request,
    session: Annotated[SessionData, Depends(get_session)],
    auth: Annotated[AuthController, Depends(get_auth_controller)],
):
    auth.logout(session)
    return _redirect(request.url_for("home"))


# ---------- password reset ----------

@router.get("/reset-password/", response_class=HTMLResponse)
async def reset_password_get(request: Request):
    return render(request, "reset_password.html")


@router.post("/reset-password/", response_class=RedirectResponse)
async def reset_password_post(
    request: Request,
    session: Annotated[SessionData, Depends(get_session)],
    auth: Annotated[AuthController, Depends(get_auth_controller)],
    email: Annotated[str, Form()] = "",
):
    """Issue a reset token and email the link."""
    try:
        user = await auth.request_reset(email, str(request.base_url))
    except AuthError as e:
        return _fail(session, e, request.url_for("reset_password_get"))

    session.set_flash("success", f"An email has been sent to {user.email} with further instructions")
    return _redirect(request.url_for("reset_password_get"))


@router.get("/reset/{token}/", response_class=HTMLResponse)
async def reset_get(
    request: Request,
    token: str,
    session: Annotated[SessionData, Depends(get_session)],
    auth: Annotated[AuthController, Depends(get_auth_controller)],
):
    """Show the new-password form if the token is still valid."""
    try:
        await auth.validate_reset_token(token)
    except InvalidOrExpiredTokenError as e:
        return _fail(session, e, request.url_for("reset_password_get"))
    return render(request, "reset.html", {"token": token})


@router.post("/reset/{token}/", response_class=RedirectResponse)
async def reset_post(
    request: Request,
    token: str,
    session: Annotated[SessionData, Depends(get_session)],
    auth: Annotated[AuthController, Depends(get_auth_controller)],
    password: Annotated[str, Form()] = "",
    confirm_password: Annotated[str, Form()] = "",
):
    """Set the new password; the token cannot be used again afterwards."""
    try:
        await auth.complete_reset(token, password, confirm_password)
    except InvalidOrExpiredTokenError as e:
        return _fail(session, e, request.url_for("reset_password_get"))
    except AuthError as e:
        return _fail(session, e, request.url_for("reset_get", token=token))

    session.set_flash("success", "Your password has been changed")
    return _redirect(request.url_for("login_get"))
