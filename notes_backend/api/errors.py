"""
Domain errors and the HTTP handlers that translate them.

Data-layer failures surface to clients as a generic 404 so that
"does not exist" and "not yours" stay indistinguishable. The real cause
is logged.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Invalid request to the server"
PDF_ERROR_MESSAGE = "Server error"
UNAUTHORIZED_MESSAGE = "User is not authorized"
AUTH_ERROR_MESSAGE = "Wrong username or password"


class NotesError(Exception):
    """Base class for errors raised by the notes backend."""


class ConflictError(NotesError):
    """A unique value (e.g. a username) is already taken."""


class NotFoundError(NotesError):
    """No such resource, or it belongs to another user."""


class PdfRenderError(NotesError):
    """The PDF exporter could not produce a document."""


def _not_found(message: str = NOT_FOUND_MESSAGE) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": message})


def not_found_handler(request: Request, exc: NotFoundError):
    logger.info("%s %s -> 404: %s", request.method, request.url.path, exc)
    return _not_found()


def pdf_error_handler(request: Request, exc: PdfRenderError):
    logger.error("PDF export failed for %s: %s", request.url.path, exc)
    return _not_found(PDF_ERROR_MESSAGE)


def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return _not_found()


# PUBLIC_INTERFACE
def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(PdfRenderError, pdf_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
