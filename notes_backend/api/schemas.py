from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from notes_database.models import Note

from .notes import NotePage
from .rendering import render_markdown


def as_utc(value: datetime) -> datetime:
    """Columns hold naive UTC; mark it so JSON carries an explicit offset."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Pydantic models for serialization and validation

class NoteBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255, description="Note title")
    text: str = Field(..., min_length=1, max_length=1000, description="Markdown source")


class NoteCreate(NoteBase):
    pass


class NoteUpdate(NoteBase):
    pass


class NoteOut(BaseModel):
    """A note as the frontend sees it, with derived fields filled in at read time."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    legacy_id: int = Field(..., alias="_id")
    title: str
    text: str
    created: datetime
    is_archived: bool = Field(..., alias="isArchived")
    html: str

    @classmethod
    def from_note(cls, note: Note) -> "NoteOut":
        return cls(
            id=note.id,
            legacy_id=note.id,
            title=note.title,
            text=note.text,
            created=as_utc(note.created_at),
            is_archived=bool(note.is_archived),
            html=render_markdown(note.text),
        )


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    per_page: int = Field(..., alias="perPage")
    current_page: int = Field(..., alias="currentPage")
    from_: int = Field(..., alias="from")
    to: int


class NotePageOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: List[NoteOut]
    has_more: bool = Field(..., alias="hasMore")
    pagination: Pagination

    @classmethod
    def from_page(cls, page: NotePage) -> "NotePageOut":
        return cls(
            data=[NoteOut.from_note(note) for note in page.items],
            has_more=page.has_more,
            pagination=Pagination(
                per_page=page.per_page,
                current_page=page.page,
                from_=page.offset,
                to=page.offset + len(page.items),
            ),
        )


class DeletedOut(BaseModel):
    deleted: int
