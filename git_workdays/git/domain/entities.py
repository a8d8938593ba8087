"""Git domain entities."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Commit:
    """Commit entity retained by a history walk."""

    hash: str
    author: str | None
    author_email: str | None
    timestamp: datetime
    message: str
    files_changed: tuple[str, ...]
    repo_path: str
    remote_url: str | None = None
