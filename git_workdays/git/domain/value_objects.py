"""Value objects for Git domain."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class FileChangeType(str, Enum):
    """Type of file change between two trees."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    TYPE_CHANGED = "type_changed"
    UNMERGED = "unmerged"


@dataclass(frozen=True)
class CommitInfo:
    """Information about a commit as read from the repository backend.

    Attributes:
        hash: Full commit hash
        parent_hashes: Parent hashes, first parent first
        author: Author display name, None when the commit has none
        author_email: Author email, None when the commit has none
        date: Commit time as a timezone-aware instant
        message: Full commit message
    """

    hash: str
    parent_hashes: tuple[str, ...]
    author: str | None
    author_email: str | None
    date: datetime
    message: str

    @property
    def first_parent(self) -> str | None:
        """Hash of the first parent, None for root commits."""
        return self.parent_hashes[0] if self.parent_hashes else None


@dataclass(frozen=True)
class TreeChange:
    """One delta of a tree-to-tree diff."""

    change_type: FileChangeType
    old_path: str | None
    new_path: str | None
    new_blob_id: str | None = None  # None for deletions

    @property
    def path(self) -> str | None:
        """Post-change path, falling back to the pre-change path for deletions."""
        return self.new_path or self.old_path


@dataclass(frozen=True)
class FileDiff:
    """Diff of a single file within a commit."""

    path: str
    additions: int
    deletions: int
    diff: str


@dataclass(frozen=True)
class DiffLimits:
    """Caps applied when extracting file diffs from a commit.

    Attributes:
        max_file_size_kb: Files whose post-change size exceeds this many KiB are skipped
        max_files: Maximum number of retained files per commit
    """

    max_file_size_kb: int = 100
    max_files: int = 20

    def __post_init__(self) -> None:
        """Validate the limits."""
        if self.max_file_size_kb < 0:
            raise ValueError(f"max_file_size_kb must be >= 0, got {self.max_file_size_kb}")
        if self.max_files < 0:
            raise ValueError(f"max_files must be >= 0, got {self.max_files}")

    @property
    def max_file_size_bytes(self) -> int:
        """Size cap in bytes."""
        return self.max_file_size_kb * 1024


@dataclass(frozen=True)
class AuthorFilter:
    """Case-insensitive substring filter on author name or email.

    An empty filter matches every author.
    """

    terms: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_terms(cls, terms: list[str] | tuple[str, ...] | None) -> "AuthorFilter":
        """
        Build a filter from user-supplied terms.

        Args:
            terms: Filter terms; None or empty matches every author

        Returns:
            AuthorFilter holding the terms
        """
        return cls(terms=tuple(terms or ()))

    @property
    def is_active(self) -> bool:
        """Whether any term restricts the authors."""
        return bool(self.terms)

    def matches(self, author: str | None, author_email: str | None) -> bool:
        """
        Check whether a commit author passes the filter.

        Args:
            author: Author display name, if known
            author_email: Author email, if known

        Returns:
            True if any term is a case-insensitive substring of the name or email
        """
        if not self.terms:
            return True
        name = (author or "").lower()
        email = (author_email or "").lower()
        return any(term.lower() in name or term.lower() in email for term in self.terms)
