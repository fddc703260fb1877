"""
Note repository: every query here is scoped by the owner's user id.
"""
import calendar
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import not_, or_, update
from sqlalchemy.orm import Session

from notes_database.models import Note, utcnow

from .errors import NotFoundError

logger = logging.getLogger(__name__)

PAGE_SIZE = 20

# Largest value a 64-bit signed INTEGER column or OFFSET can hold
MAX_ROW_ID = 2**63 - 1

AGE_ALLTIME = "alltime"
AGE_ARCHIVE = "archive"
AGE_MONTHS = {"1month": 1, "3months": 3}

DEMO_TITLE = "Demo"
DEMO_TEXT = """# This is H1

## This is H2 ##

### This is H3

#### This is H4 ####

##### This is H5 #####

###### This is H6

* __Point #1__

    Expanding on the point.

* __Point #2__

    Expanding on the point.

---

__Bold__

**Also bold**

*Italic*

_Also italic_

- Item 1
- Item 2
- Item 3

or

+ Item 1
+ Item 2
+ Item 3

---

1. Item 1
2. Item 2
    1. Sub-item 2.1
3. Item 3
"""


@dataclass
class NotePage:
    items: List[Note]
    has_more: bool
    page: int
    per_page: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


def months_ago(now: datetime, months: int) -> datetime:
    """Same wall-clock time ``months`` calendar months back, clamping the day."""
    month_index = now.month - 1 - months
    year = now.year + month_index // 12
    month = month_index % 12 + 1
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


# PUBLIC_INTERFACE
def resolve_age_filter(age: Optional[str], now: Optional[datetime] = None) -> Tuple[Optional[datetime], bool]:
    """
    Translate an ``age`` listing parameter into (created_after, archived_only).

    Unknown or missing values apply no filter at all, same as "alltime".
    """
    if age == AGE_ARCHIVE:
        return None, True
    if age in AGE_MONTHS:
        return months_ago(now or utcnow(), AGE_MONTHS[age]), False
    return None, False


def _valid_id(note_id: int) -> bool:
    return 0 < note_id <= MAX_ROW_ID


def _like_pattern(term: str) -> str:
    """Substring pattern with LIKE wildcards in ``term`` matched literally."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _owned(db: Session, user_id: int):
    return db.query(Note).filter(Note.user_id == user_id)


# PUBLIC_INTERFACE
def list_notes(
    db: Session,
    user_id: int,
    page: int = 1,
    age: Optional[str] = None,
    search: Optional[str] = None,
    page_size: int = PAGE_SIZE,
    now: Optional[datetime] = None,
) -> NotePage:
    """
    One page of the user's notes in id order.

    One extra row is fetched so ``has_more`` reports whether a further
    page really exists.
    """
    page = max(page or 1, 1)
    if (page - 1) * page_size + page_size + 1 > MAX_ROW_ID:
        # No table can hold that many rows, so the page is empty.
        return NotePage(items=[], has_more=False, page=page, per_page=page_size)
    created_after, archived_only = resolve_age_filter(age, now)

    query = _owned(db, user_id)
    if created_after is not None:
        query = query.filter(Note.created_at >= created_after)
    if archived_only:
        query = query.filter(Note.is_archived.is_(True))
    if search:
        pattern = _like_pattern(search)
        query = query.filter(
            or_(Note.title.ilike(pattern, escape="\\"), Note.text.ilike(pattern, escape="\\"))
        )

    rows = (
        query.order_by(Note.id.asc())
        .offset((page - 1) * page_size)
        .limit(page_size + 1)
        .all()
    )
    return NotePage(
        items=rows[:page_size],
        has_more=len(rows) > page_size,
        page=page,
        per_page=page_size,
    )


# PUBLIC_INTERFACE
def get_note(db: Session, user_id: int, note_id: int) -> Note:
    if not _valid_id(note_id):
        raise NotFoundError(f"Note id {note_id} is out of range.")
    note = _owned(db, user_id).filter(Note.id == note_id).first()
    if note is None:
        raise NotFoundError(f"Note {note_id} not found for user {user_id}.")
    return note


# PUBLIC_INTERFACE
def create_note(db: Session, user_id: int, title: str, text: str) -> Note:
    note = Note(title=title, text=text, user_id=user_id, is_archived=False)
    db.add(note)
    db.commit()
    db.refresh(note)
    return note


def _update_owned(db: Session, user_id: int, note_id: int, **values) -> Note:
    if not _valid_id(note_id):
        raise NotFoundError(f"Note id {note_id} is out of range.")
    stmt = (
        update(Note)
        .where(Note.id == note_id, Note.user_id == user_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    if result.rowcount == 0:
        db.rollback()
        raise NotFoundError(f"Note {note_id} not found for user {user_id}.")
    db.commit()
    return get_note(db, user_id, note_id)


# PUBLIC_INTERFACE
def update_note(db: Session, user_id: int, note_id: int, title: str, text: str) -> Note:
    return _update_owned(db, user_id, note_id, title=title, text=text)


# PUBLIC_INTERFACE
def toggle_archive(db: Session, user_id: int, note_id: int) -> Note:
    """Flip ``is_archived`` with a single UPDATE so concurrent toggles never lose a write."""
    return _update_owned(db, user_id, note_id, is_archived=not_(Note.is_archived))


# PUBLIC_INTERFACE
def delete_note(db: Session, user_id: int, note_id: int) -> int:
    if not _valid_id(note_id):
        return 0
    count = _owned(db, user_id).filter(Note.id == note_id).delete(synchronize_session=False)
    db.commit()
    return count


# PUBLIC_INTERFACE
def delete_all_archived(db: Session, user_id: int) -> int:
    count = (
        _owned(db, user_id)
        .filter(Note.is_archived.is_(True))
        .delete(synchronize_session=False)
    )
    db.commit()
    logger.info("Deleted %d archived notes for user id=%s", count, user_id)
    return count


def seed_demo_note(db: Session, user_id: int) -> Note:
    """The Markdown showcase every new account starts with."""
    return create_note(db, user_id, DEMO_TITLE, DEMO_TEXT)
