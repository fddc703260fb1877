import os
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List, Optional

from dotenv import load_dotenv

from notes_database.db import get_database_url


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# PUBLIC_INTERFACE
@dataclass
class Settings:
    """Runtime configuration, normally read from the environment / .env file."""

    database_url: str
    session_cookie_name: str = "sessionId"
    session_ttl_days: int = 30
    cookie_secure: bool = False
    page_size: int = 20
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @property
    def session_ttl(self) -> Optional[timedelta]:
        """None when sessions should live until logout."""
        if self.session_ttl_days <= 0:
            return None
        return timedelta(days=self.session_ttl_days)

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            database_url=get_database_url(),
            session_cookie_name=os.getenv("SESSION_COOKIE_NAME", "sessionId"),
            session_ttl_days=int(os.getenv("SESSION_TTL_DAYS", "30")),
            cookie_secure=_env_bool("COOKIE_SECURE", False),
            page_size=int(os.getenv("NOTES_PAGE_SIZE", "20")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )
