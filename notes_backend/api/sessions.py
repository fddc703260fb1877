"""
Server-side login sessions.

A session is an opaque, URL-safe random token mapped to a user id in the
``sessions`` table. This module knows nothing about cookies; the HTTP layer
decides how tokens travel.
"""
import logging
import secrets
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session

from notes_database.models import Session as LoginSession
from notes_database.models import User, utcnow

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


def _new_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


# PUBLIC_INTERFACE
def create_session(db: Session, user_id: int, ttl: Optional[timedelta] = None) -> str:
    """Persist a fresh token for ``user_id`` and return it."""
    token = _new_token()
    # Collisions are astronomically unlikely, but a live token must never be reused.
    while db.get(LoginSession, token) is not None:
        token = _new_token()
    expires_at = utcnow() + ttl if ttl else None
    db.add(LoginSession(session_id=token, user_id=user_id, expires_at=expires_at))
    db.commit()
    logger.debug("Opened session for user id=%s", user_id)
    return token


# PUBLIC_INTERFACE
def resolve_session(db: Session, token: Optional[str]) -> Optional[User]:
    """
    Look up the user behind a token.

    Missing, unknown or expired tokens, and sessions whose user no longer
    exists, all resolve to None. Expired rows are removed on the way.
    """
    if not token:
        return None
    login_session = db.get(LoginSession, token)
    if login_session is None:
        return None
    if login_session.expires_at is not None and login_session.expires_at <= utcnow():
        user_id = login_session.user_id
        db.delete(login_session)
        db.commit()
        logger.info("Dropped expired session for user id=%s", user_id)
        return None
    return db.get(User, login_session.user_id)


# PUBLIC_INTERFACE
def delete_session(db: Session, token: Optional[str]) -> None:
    """Remove a token. Unknown tokens are ignored."""
    if not token:
        return
    db.query(LoginSession).filter(LoginSession.session_id == token).delete(
        synchronize_session=False
    )
    db.commit()


def delete_expired_sessions(db: Session) -> int:
    count = (
        db.query(LoginSession)
        .filter(LoginSession.expires_at.isnot(None), LoginSession.expires_at <= utcnow())
        .delete(synchronize_session=False)
    )
    db.commit()
    if count:
        logger.info("Purged %d expired sessions", count)
    return count
