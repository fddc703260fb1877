import pytest
from fastapi.testclient import TestClient

from notes_backend.api.config import Settings
from notes_backend.api.deps import get_pdf_exporter
from notes_backend.api.errors import PdfRenderError
from notes_backend.api.main import create_app


class FakePdfExporter:
    """Records what it was asked to render instead of calling xhtml2pdf."""

    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def render(self, html, title="Note"):
        self.calls.append((html, title))
        if self.fail:
            raise PdfRenderError("boom")
        return b"%PDF-1.4 fake"


@pytest.fixture
def settings():
    """Settings pointing at a fresh SQLite in-memory database."""
    return Settings(database_url="sqlite://", log_level="WARNING")


@pytest.fixture
def app(settings):
    """A fully wired app; its tables are created by the lifespan hook."""
    return create_app(settings)


@pytest.fixture
def db_session(app):
    """Provide a SQLAlchemy session bound to the app's database."""
    from notes_database.init_db import init_db

    init_db(app.state.engine)
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client(app):
    """TestClient with its own cookie jar."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def second_client(app):
    """A second browser against the same app and database."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def pdf_exporter(app):
    exporter = FakePdfExporter()
    app.dependency_overrides[get_pdf_exporter] = lambda: exporter
    yield exporter
    app.dependency_overrides.clear()


@pytest.fixture
def user_data():
    """Returns default user data for signup."""
    return {"username": "alice", "password": "pw1"}


@pytest.fixture
def second_user_data():
    """Returns a second user's data."""
    return {"username": "bob", "password": "bobpassword456"}


def signup(client, username, password):
    """Helper for signing up; leaves the session cookie in the client's jar."""
    r = client.post(
        "/signup",
        data={"username": username, "password": password},
        follow_redirects=False,
    )
    assert r.status_code == 302
    assert r.headers["location"] == "/dashboard"
    return r


@pytest.fixture
def auth_client(client, user_data):
    """Client logged in as the default user (owns the demo note)."""
    signup(client, user_data["username"], user_data["password"])
    return client


@pytest.fixture
def second_auth_client(second_client, second_user_data):
    """Client logged in as the second user."""
    signup(second_client, second_user_data["username"], second_user_data["password"])
    return second_client


def create_note(client, title="Title", text="Some *text*"):
    r = client.post("/notes", json={"title": title, "text": text})
    assert r.status_code == 200
    return r.json()


def clear_notes(client):
    """Delete every note the client's user owns, demo note included."""
    page = client.get("/notes", params={"age": "alltime"}).json()
    for note in page["data"]:
        assert client.delete(f"/notes/{note['id']}").status_code == 200
