from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from . import notes
from .config import Settings
from .deps import AuthResult, get_db, get_pdf_exporter, get_settings, require_user
from .errors import NotFoundError
from .pdf import PdfExporter
from .rendering import render_markdown
from .schemas import DeletedOut, NoteCreate, NoteOut, NotePageOut, NoteUpdate

router = APIRouter(prefix="/notes", tags=["Notes"])


def _parse_page(value: Optional[str]) -> int:
    try:
        return max(int(value), 1)
    except (TypeError, ValueError):
        return 1


# PUBLIC_INTERFACE
@router.get("", response_model=NotePageOut, summary="List notes page by page")
def list_notes(
    age: Optional[str] = None,
    search: Optional[str] = None,
    page: Optional[str] = None,
    auth: AuthResult = Depends(require_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    ``age`` is one of 1month, 3months, alltime or archive; anything else
    lists everything. ``search`` matches title or text, case-insensitively.
    """
    result = notes.list_notes(
        db,
        auth.user.id,
        page=_parse_page(page),
        age=age,
        search=search or None,
        page_size=settings.page_size,
    )
    return NotePageOut.from_page(result)


# PUBLIC_INTERFACE
@router.post("", response_model=NoteOut, summary="Create a note")
def create_note(
    note: NoteCreate,
    auth: AuthResult = Depends(require_user),
    db: Session = Depends(get_db),
):
    created = notes.create_note(db, auth.user.id, note.title, note.text)
    return NoteOut.from_note(created)


# PUBLIC_INTERFACE
@router.delete("", response_model=DeletedOut, summary="Delete every archived note")
def delete_archived_notes(
    auth: AuthResult = Depends(require_user),
    db: Session = Depends(get_db),
):
    return DeletedOut(deleted=notes.delete_all_archived(db, auth.user.id))


# PUBLIC_INTERFACE
@router.get("/{note_id}", response_model=NoteOut, summary="Get a single note")
def get_note(
    note_id: int,
    auth: AuthResult = Depends(require_user),
    db: Session = Depends(get_db),
):
    return NoteOut.from_note(notes.get_note(db, auth.user.id, note_id))


# PUBLIC_INTERFACE
@router.put("/{note_id}", response_model=NoteOut, summary="Archive or unarchive a note")
def toggle_archive(
    note_id: int,
    auth: AuthResult = Depends(require_user),
    db: Session = Depends(get_db),
):
    return NoteOut.from_note(notes.toggle_archive(db, auth.user.id, note_id))


# PUBLIC_INTERFACE
@router.patch("/{note_id}", response_model=NoteOut, summary="Edit a note")
def update_note(
    note_id: int,
    note: NoteUpdate,
    auth: AuthResult = Depends(require_user),
    db: Session = Depends(get_db),
):
    updated = notes.update_note(db, auth.user.id, note_id, note.title, note.text)
    return NoteOut.from_note(updated)


# PUBLIC_INTERFACE
@router.delete("/{note_id}", response_model=DeletedOut, summary="Delete a note")
def delete_note(
    note_id: int,
    auth: AuthResult = Depends(require_user),
    db: Session = Depends(get_db),
):
    count = notes.delete_note(db, auth.user.id, note_id)
    if count == 0:
        raise NotFoundError(f"Note {note_id} not found for user {auth.user.id}.")
    return DeletedOut(deleted=count)


# PUBLIC_INTERFACE
@router.get("/{note_id}/pdf", summary="Download a note as PDF", response_class=Response)
def export_pdf(
    note_id: int,
    auth: AuthResult = Depends(require_user),
    db: Session = Depends(get_db),
    exporter: PdfExporter = Depends(get_pdf_exporter),
):
    note = notes.get_note(db, auth.user.id, note_id)
    content = exporter.render(render_markdown(note.text), title=note.title)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=note-{note_id}.pdf"},
    )
