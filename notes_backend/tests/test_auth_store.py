from datetime import timedelta

import pytest

from notes_backend.api import credentials, sessions
from notes_backend.api.errors import ConflictError
from notes_database.models import Session as LoginSession
from notes_database.models import User, utcnow


# -------- CREDENTIAL STORE --------
def test_password_is_hashed_with_salt(db_session):
    a = credentials.create_user(db_session, "a", "same-password")
    b = credentials.create_user(db_session, "b", "same-password")
    assert a.password_hash != "same-password"
    assert a.password_hash != b.password_hash
    assert credentials.verify_password("same-password", a.password_hash)
    assert not credentials.verify_password("other", a.password_hash)


def test_duplicate_username_conflicts(db_session):
    credentials.create_user(db_session, "alice", "pw1")
    with pytest.raises(ConflictError):
        credentials.create_user(db_session, "alice", "pw2")
    assert db_session.query(User).count() == 1


def test_unique_constraint_backs_up_precheck(db_session, monkeypatch):
    credentials.create_user(db_session, "alice", "pw1")
    # Simulate a concurrent signup that passed the pre-check
    monkeypatch.setattr(credentials, "get_user_by_username", lambda db, username: None)
    with pytest.raises(ConflictError):
        credentials.create_user(db_session, "alice", "pw2")
    assert db_session.query(User).count() == 1


def test_verify_credentials(db_session):
    user = credentials.create_user(db_session, "alice", "pw1")
    assert credentials.verify_credentials(db_session, "alice", "pw1").id == user.id
    assert credentials.verify_credentials(db_session, "alice", "PW1") is None
    assert credentials.verify_credentials(db_session, "alice", "") is None
    assert credentials.verify_credentials(db_session, "bob", "pw1") is None
    assert credentials.verify_credentials(db_session, "", "") is None


# -------- SESSION MANAGER --------
@pytest.fixture
def user(db_session):
    return credentials.create_user(db_session, "alice", "pw1")


def test_session_round_trip(db_session, user):
    token = sessions.create_session(db_session, user.id)
    assert len(token) >= 40
    assert sessions.resolve_session(db_session, token).id == user.id

    sessions.delete_session(db_session, token)
    assert sessions.resolve_session(db_session, token) is None


def test_tokens_are_unique(db_session, user):
    tokens = {sessions.create_session(db_session, user.id) for _ in range(20)}
    assert len(tokens) == 20


def test_resolve_unknown_or_empty_token(db_session, user):
    assert sessions.resolve_session(db_session, None) is None
    assert sessions.resolve_session(db_session, "") is None
    assert sessions.resolve_session(db_session, "missing") is None


def test_delete_session_is_idempotent(db_session, user):
    token = sessions.create_session(db_session, user.id)
    sessions.delete_session(db_session, token)
    sessions.delete_session(db_session, token)
    sessions.delete_session(db_session, "never-existed")
    sessions.delete_session(db_session, None)
    assert db_session.query(LoginSession).count() == 0


def test_session_without_user_resolves_to_none(db_session, user):
    db_session.add(LoginSession(session_id="orphan", user_id=user.id + 100))
    db_session.commit()
    assert sessions.resolve_session(db_session, "orphan") is None


def test_expired_session_is_dropped(db_session, user):
    token = sessions.create_session(db_session, user.id, ttl=timedelta(days=1))
    assert sessions.resolve_session(db_session, token) is not None

    row = db_session.get(LoginSession, token)
    row.expires_at = utcnow() - timedelta(seconds=1)
    db_session.commit()

    assert sessions.resolve_session(db_session, token) is None
    assert db_session.get(LoginSession, token) is None


def test_session_without_ttl_never_expires(db_session, user):
    token = sessions.create_session(db_session, user.id)
    assert db_session.get(LoginSession, token).expires_at is None


def test_delete_expired_sessions(db_session, user):
    live = sessions.create_session(db_session, user.id, ttl=timedelta(days=1))
    forever = sessions.create_session(db_session, user.id)
    stale = sessions.create_session(db_session, user.id, ttl=timedelta(days=1))
    db_session.get(LoginSession, stale).expires_at = utcnow() - timedelta(days=2)
    db_session.commit()

    assert sessions.delete_expired_sessions(db_session) == 1
    remaining = {row.session_id for row in db_session.query(LoginSession).all()}
    assert remaining == {live, forever}
