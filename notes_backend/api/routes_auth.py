import logging

from fastapi import APIRouter, Depends, Form, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from .config import Settings
from .credentials import create_user, verify_credentials
from .deps import AuthResult, authenticate, get_db, get_settings
from .errors import ConflictError
from .notes import seed_demo_note
from .sessions import create_session, delete_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])

MAX_USERNAME_LENGTH = 64


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)


def _auth_error() -> RedirectResponse:
    return _redirect("/?authError=true")


def _logged_in(token: str, settings: Settings) -> RedirectResponse:
    response = _redirect("/dashboard")
    ttl = settings.session_ttl
    response.set_cookie(
        settings.session_cookie_name,
        token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        max_age=int(ttl.total_seconds()) if ttl else None,
    )
    return response


# PUBLIC_INTERFACE
@router.post("/login", summary="Log in with a username and password")
def login(
    username: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Form login. Sets the session cookie and redirects to the dashboard,
    or back to the start page with ``authError=true``.
    """
    user = verify_credentials(db, username, password)
    if user is None:
        logger.info("Failed login for %r", username)
        return _auth_error()
    token = create_session(db, user.id, settings.session_ttl)
    logger.info("User %s logged in", user.username)
    return _logged_in(token, settings)


# PUBLIC_INTERFACE
@router.get("/logout", summary="Log out and clear the session cookie")
def logout(
    auth: AuthResult = Depends(authenticate),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    if not auth.is_authenticated:
        return _redirect("/")
    delete_session(db, auth.session_id)
    response = _redirect("/")
    response.delete_cookie(settings.session_cookie_name)
    return response


# PUBLIC_INTERFACE
@router.post("/signup", summary="Create an account and log in")
def signup(
    username: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Register a new user, seed the demo note and open a session.
    Missing fields or a taken username redirect with ``authError=true``.
    """
    if not username or not password or len(username) > MAX_USERNAME_LENGTH:
        return _auth_error()
    try:
        user = create_user(db, username, password)
    except ConflictError:
        logger.info("Signup rejected, username %r taken", username)
        return _auth_error()
    token = create_session(db, user.id, settings.session_ttl)
    seed_demo_note(db, user.id)
    return _logged_in(token, settings)
