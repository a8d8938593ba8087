"""Repository interfaces for Git operations."""

from abc import ABC, abstractmethod
from collections.abc import Generator
from pathlib import Path

from git_workdays.git.domain.value_objects import CommitInfo, TreeChange


class GitRepository(ABC):
    """Interface for Git repository operations.

    Every method takes the repository path and opens it afresh, so
    implementations hold no per-repository state between calls.
    """

    @abstractmethod
    def open_repository(self, repo_path: Path) -> Path:
        """
        Check that a repository exists at the given path.

        Args:
            repo_path: Path to the git repository

        Returns:
            The repository path, resolved

        Raises:
            RepositoryOpenError: If the path is not a readable repository
        """
        ...

    @abstractmethod
    def get_remote_url(self, repo_path: Path, remote_name: str = "origin") -> str | None:
        """
        Get the URL of a named remote.

        Args:
            repo_path: Path to the git repository
            remote_name: Name of the remote

        Returns:
            The remote URL, or None if the remote does not exist or cannot be read
        """
        ...

    @abstractmethod
    def resolve_head(self, repo_path: Path) -> str:
        """
        Resolve the current HEAD reference to a commit hash.

        Args:
            repo_path: Path to the git repository

        Returns:
            Hash of the commit HEAD points at

        Raises:
            TraversalError: If HEAD cannot be resolved
        """
        ...

    @abstractmethod
    def walk_commits(self, repo_path: Path, start: str) -> Generator[CommitInfo, None, None]:
        """
        Walk the commit graph backward from a starting commit.

        Commits are yielded in revision-walk order, newest first. Closing the
        generator early releases the walk.

        Args:
            repo_path: Path to the git repository
            start: Hash of the commit to start from

        Yields:
            CommitInfo for each reachable commit

        Raises:
            TraversalError: If the walk fails or yields a malformed entry
        """
        ...

    @abstractmethod
    def resolve_commit(self, repo_path: Path, commit_id: str) -> CommitInfo:
        """
        Resolve a commit identifier.

        Args:
            repo_path: Path to the git repository
            commit_id: Full or abbreviated hexadecimal commit hash

        Returns:
            CommitInfo for the commit

        Raises:
            InvalidCommitIdError: If the identifier is not a hexadecimal hash
            CommitNotFoundError: If no such commit exists
        """
        ...

    @abstractmethod
    def diff_trees(self, repo_path: Path, old_commit: str, new_commit: str) -> tuple[TreeChange, ...]:
        """
        Compute the tree-level difference between two commits.

        Args:
            repo_path: Path to the git repository
            old_commit: Hash of the baseline commit
            new_commit: Hash of the changed commit

        Returns:
            Tuple of changes in tree-diff order

        Raises:
            TreeResolutionError: If either tree cannot be resolved
            DiffComputationError: If the diff cannot be computed
        """
        ...

    @abstractmethod
    def get_blob_sizes(self, repo_path: Path, blob_ids: tuple[str, ...]) -> dict[str, int]:
        """
        Get the size in bytes of each blob.

        Args:
            repo_path: Path to the git repository
            blob_ids: Hashes of the blobs

        Returns:
            Mapping of blob hash to size; absent or null blobs map to 0

        Raises:
            DiffComputationError: If the sizes cannot be read
        """
        ...

    @abstractmethod
    def get_file_patch(
        self, repo_path: Path, old_commit: str, new_commit: str, file_path: str
    ) -> bytes:
        """
        Get the line-level patch for one file between two commits.

        Args:
            repo_path: Path to the git repository
            old_commit: Hash of the baseline commit
            new_commit: Hash of the changed commit
            file_path: Path to the file relative to repository root

        Returns:
            Raw unified-diff output for the file

        Raises:
            DiffComputationError: If the patch cannot be computed
        """
        ...

    @abstractmethod
    def get_config_value(self, key: str, repo_path: Path | None = None) -> str | None:
        """
        Read a git configuration value.

        Args:
            key: Configuration key, e.g. "user.name"
            repo_path: Repository whose local configuration applies, if any

        Returns:
            The value, or None if unset or unreadable
        """
        ...
