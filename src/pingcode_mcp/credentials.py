"""On-disk PingCode session credentials.

Credentials are the session cookies of a logged-in browser, stored as JSON
in the data directory with owner-only permissions.
"""
import json
import logging
import os
import time
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger("pingcode-mcp.credentials")

# A usable session carries at least one cookie whose name contains one of these
SESSION_COOKIE_MARKERS = ("pingcode", "session", "token")


class CookieData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    value: str
    domain: str = ""
    path: str = "/"
    expires: Optional[float] = None
    http_only: Optional[bool] = Field(None, alias="httpOnly")
    secure: Optional[bool] = None
    same_site: Optional[str] = Field(None, alias="sameSite")


class CurrentUser(BaseModel):
    id: str
    name: str


class Credentials(BaseModel):
    cookies: list[CookieData] = Field(default_factory=list)
    domain: str
    saved_at: int
    # Milliseconds since the epoch
    expires_at: Optional[int] = None
    user: Optional[CurrentUser] = None

    def is_valid(self, now_ms: Optional[int] = None) -> bool:
        """Check that a session cookie is present and not expired."""
        if not self.cookies:
            return False
        if not any(
            marker in cookie.name.lower()
            for cookie in self.cookies
            for marker in SESSION_COOKIE_MARKERS
        ):
            return False
        now_ms = int(time.time() * 1000) if now_ms is None else now_ms
        if self.expires_at and now_ms > self.expires_at:
            return False
        return True

    def cookie_header(self) -> str:
        return "; ".join(f"{c.name}={c.value}" for c in self.cookies)


def parse_cookie_header(header: str, domain: str) -> list[CookieData]:
    """Split a ``name=value; name2=value2`` header into cookies."""
    cookies = []
    for part in header.split(";"):
        name, sep, value = part.strip().partition("=")
        if sep and name:
            cookies.append(CookieData(name=name.strip(), value=value.strip(), domain=domain))
    return cookies


class CredentialStore:
    """Load, save and clear the credentials file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Optional[Credentials]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return Credentials.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable credentials file {self.path}: {e}")
            return None

    def save(self, credentials: Credentials) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
        # Owner-only from creation; fchmod also tightens a pre-existing file
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        os.fchmod(fd, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(credentials.model_dump_json(indent=2, by_alias=True, exclude_none=True))
        logger.info(f"Saved credentials to {self.path}")

    def clear(self) -> bool:
        """Delete the credentials file. Returns False if there was none."""
        if not self.path.exists():
            return False
        self.path.unlink()
        logger.info(f"Removed credentials file {self.path}")
        return True
