import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from notes_database.db import create_db_engine, create_session_factory
from notes_database.init_db import init_db

from . import routes_auth, routes_notes
from .config import Settings
from .deps import AuthResult, authenticate
from .errors import AUTH_ERROR_MESSAGE, register_exception_handlers
from .pdf import PdfExporter
from .sessions import delete_expired_sessions

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db(app.state.engine)
    db = app.state.session_factory()
    try:
        delete_expired_sessions(db)
    finally:
        db.close()
    logger.info("Notes backend started")
    yield
    app.state.engine.dispose()
    logger.info("Notes backend stopped")


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None, pdf_exporter: Optional[PdfExporter] = None) -> FastAPI:
    """
    Build a fully wired application.

    The engine, session factory and PDF exporter live on ``app.state`` and
    reach handlers through dependencies, so several apps (e.g. in tests)
    can coexist in one process.
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Markdown Notes Backend API",
        description="Session-authenticated API for personal Markdown notes.",
        version="1.0.0",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "Authentication", "description": "Signup, login and logout"},
            {"name": "Notes", "description": "Create, edit, archive, delete and export notes"},
        ],
    )
    app.state.settings = settings
    app.state.engine = create_db_engine(settings.database_url)
    app.state.session_factory = create_session_factory(app.state.engine)
    app.state.pdf_exporter = pdf_exporter or PdfExporter()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    @app.exception_handler(HTTPException)
    def custom_http_exception_handler(request, exc):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    # Root Health Check
    @app.get("/", summary="Health Check", tags=["General"])
    def index(authError: Optional[str] = None, auth: AuthResult = Depends(authenticate)):
        """Logged-in users go to the dashboard; everyone else gets the health payload."""
        if auth.is_authenticated:
            return RedirectResponse("/dashboard", status_code=status.HTTP_302_FOUND)
        message = AUTH_ERROR_MESSAGE if authError == "true" else authError
        return {"message": "Healthy", "authError": message}

    @app.get("/dashboard", summary="Current user", tags=["General"])
    def dashboard(auth: AuthResult = Depends(authenticate)):
        if not auth.is_authenticated:
            return RedirectResponse("/", status_code=status.HTTP_302_FOUND)
        return {"username": auth.user.username}

    app.include_router(routes_auth.router)
    app.include_router(routes_notes.router)
    return app


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run(
        "notes_backend.api.main:create_app",
        factory=True,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
    )
