from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    false,
)
from sqlalchemy.orm import declarative_base, relationship
from datetime import datetime, timezone

Base = declarative_base()


def utcnow():
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# PUBLIC_INTERFACE
class User(Base):
    """
    SQLAlchemy model for a user of the notes app.
    Usernames are unique at the storage level.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(64), unique=True, index=True, nullable=False)
    password_hash = Column(String(256), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    notes = relationship("Note", back_populates="owner")
    sessions = relationship("Session", back_populates="user")


# PUBLIC_INTERFACE
class Session(Base):
    """
    An opaque login token bound to a user.
    """
    __tablename__ = "sessions"

    session_id = Column(String(64), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    # NULL means the session lives until logout
    expires_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="sessions")


# PUBLIC_INTERFACE
class Note(Base):
    """
    SQLAlchemy model for a Markdown note.
    """
    __tablename__ = "notes"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    text = Column(String(1000), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    is_archived = Column(Boolean, default=False, server_default=false(), nullable=False)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    owner = relationship("User", back_populates="notes")
