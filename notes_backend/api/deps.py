"""
Request dependencies.

Everything a handler needs (database session, settings, PDF exporter,
the authenticated user) is read from the application that serves the
request and handed over explicitly through ``Depends``.
"""
from dataclasses import dataclass
from typing import Iterator, Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from notes_database.models import User

from .config import Settings
from .errors import UNAUTHORIZED_MESSAGE
from .pdf import PdfExporter
from .sessions import resolve_session


@dataclass(frozen=True)
class AuthResult:
    """Outcome of looking up the session cookie; ``user`` is None when anonymous."""

    user: Optional[User]
    session_id: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


# DATABASE Dependency
def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_pdf_exporter(request: Request) -> PdfExporter:
    return request.app.state.pdf_exporter


# PUBLIC_INTERFACE
def authenticate(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AuthResult:
    """Resolve the session cookie. Never fails; anonymous requests get an empty result."""
    token = request.cookies.get(settings.session_cookie_name)
    user = resolve_session(db, token)
    if user is None:
        return AuthResult(user=None)
    return AuthResult(user=user, session_id=token)


# PUBLIC_INTERFACE
def require_user(auth: AuthResult = Depends(authenticate)) -> AuthResult:
    if not auth.is_authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=UNAUTHORIZED_MESSAGE,
        )
    return auth
