import logging
from typing import Optional

from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from notes_database.models import User

from .errors import ConflictError

logger = logging.getLogger(__name__)

# Salted, adaptive hashing; old hashes are upgraded on successful login.
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    return pwd_context.verify(plain_password, password_hash)


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


# PUBLIC_INTERFACE
def create_user(db: Session, username: str, password: str) -> User:
    """
    Create a user with a hashed password.

    The pre-check gives the common case a clean error; the unique
    constraint on ``users.username`` settles concurrent signups.
    """
    if get_user_by_username(db, username):
        raise ConflictError(f"Username {username!r} already taken.")
    user = User(username=username, password_hash=hash_password(password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(f"Username {username!r} already taken.") from exc
    db.refresh(user)
    logger.info("Created user %s (id=%s)", user.username, user.id)
    return user


# PUBLIC_INTERFACE
def verify_credentials(db: Session, username: str, password: str) -> Optional[User]:
    """Return the user when the password matches, otherwise None."""
    if not username or not password:
        return None
    user = get_user_by_username(db, username)
    if user is None:
        return None
    valid, new_hash = pwd_context.verify_and_update(password, user.password_hash)
    if not valid:
        return None
    if new_hash:
        user.password_hash = new_hash
        db.commit()
    return user
