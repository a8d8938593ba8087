"""Concrete implementation of Git repository operations."""

import logging
import re
import subprocess
from collections.abc import Generator
from datetime import datetime, timezone
from pathlib import Path

from git_workdays.git.domain.exceptions import (
    CommitNotFoundError,
    DiffComputationError,
    InvalidCommitIdError,
    RepositoryOpenError,
    TraversalError,
    TreeResolutionError,
)
from git_workdays.git.domain.value_objects import CommitInfo, FileChangeType, TreeChange
from git_workdays.git.repositories.interfaces import GitRepository

logger = logging.getLogger(__name__)

# hash | parents | author name | author email | committer time | raw message
_LOG_FORMAT = "%H%x1f%P%x1f%an%x1f%ae%x1f%ct%x1f%B"
_LOG_FIELD_COUNT = 6
_LOG_OPTIONS = ("-z", "--no-color", "--no-show-signature", f"--format={_LOG_FORMAT}")

_OID_RE = re.compile(r"^[0-9a-f]{40}([0-9a-f]{24})?$")
_COMMIT_ID_RE = re.compile(r"^[0-9a-fA-F]{4,64}$")

_READ_CHUNK_BYTES = 64 * 1024


def _stderr_text(error: subprocess.CalledProcessError) -> str:
    stderr = error.stderr
    if isinstance(stderr, bytes):
        stderr = stderr.decode("utf-8", errors="replace")
    return (stderr or str(error)).strip()


class GitRepositoryImpl(GitRepository):
    """Concrete implementation of Git repository operations using git commands."""

    def __init__(self, git_binary: str = "git") -> None:
        """
        Initialize GitRepositoryImpl.

        Args:
            git_binary: Name or path of the git executable
        """
        self._git_binary = git_binary

    def _git(self, repo_path: Path | None, *args: str) -> list[str]:
        cmd = [self._git_binary, "--literal-pathspecs"]
        if repo_path is not None:
            cmd += ["-C", str(repo_path)]
        return cmd + list(args)

    def _run(
        self, repo_path: Path | None, *args: str, input_bytes: bytes | None = None
    ) -> bytes:
        result = subprocess.run(
            self._git(repo_path, *args),
            input=input_bytes,
            capture_output=True,
            check=True,
        )
        return result.stdout

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
        if not repo_path.is_dir():
            raise RepositoryOpenError(
                f"Failed to open repository: {repo_path}: not a directory"
            )
        try:
            self._run(repo_path, "rev-parse", "--git-dir")
        except subprocess.CalledProcessError as e:
            raise RepositoryOpenError(
                f"Failed to open repository: {repo_path}: {_stderr_text(e)}"
            ) from e
        except OSError as e:
            raise RepositoryOpenError(f"Failed to open repository: {repo_path}: {e}") from e
        return repo_path.resolve()

    def get_remote_url(self, repo_path: Path, remote_name: str = "origin") -> str | None:
        """
        Get the URL of a named remote.

        Args:
            repo_path: Path to the git repository
            remote_name: Name of the remote

        Returns:
            The remote URL, or None if the remote does not exist or cannot be read
        """
        try:
            output = self._run(repo_path, "remote", "get-url", remote_name)
        except (subprocess.CalledProcessError, OSError) as e:
            logger.debug("No URL for remote %r in %s: %s", remote_name, repo_path, e)
            return None
        url = output.decode("utf-8", errors="replace").strip()
        return url or None

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
        try:
            output = self._run(repo_path, "rev-parse", "--verify", "HEAD^{commit}")
        except subprocess.CalledProcessError as e:
            raise TraversalError(f"Failed to find HEAD: {_stderr_text(e)}") from e
        except OSError as e:
            raise TraversalError(f"Failed to find HEAD: {e}") from e
        return output.decode("ascii").strip()

    def walk_commits(self, repo_path: Path, start: str) -> Generator[CommitInfo, None, None]:
        """
        Walk the commit graph backward from a starting commit.

        The log is streamed so that a caller stopping early does not pay for
        the rest of the history; closing the iterator kills the git process.

        Args:
            repo_path: Path to the git repository
            start: Hash of the commit to start from

        Yields:
            CommitInfo for each reachable commit

        Raises:
            TraversalError: If the walk fails or yields a malformed entry
        """
        cmd = self._git(repo_path, "log", *_LOG_OPTIONS, start, "--")
        try:
            proc = subprocess.Popen(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
        except OSError as e:
            raise TraversalError(f"Failed to walk commits: {e}") from e

        completed = False
        try:
            stdout = proc.stdout
            if stdout is None:
                raise TraversalError("Failed to walk commits: no output stream")
            pending = b""
            while True:
                chunk = stdout.read(_READ_CHUNK_BYTES)
                if not chunk:
                    break
                pending += chunk
                *records, pending = pending.split(b"\0")
                for record in records:
                    yield self._parse_log_record(record)
            if pending:
                yield self._parse_log_record(pending)
            completed = True
        finally:
            if not completed and proc.poll() is None:
                proc.kill()
            stderr = proc.stderr.read() if proc.stderr else b""
            proc.wait()
            if proc.stdout:
                proc.stdout.close()
            if proc.stderr:
                proc.stderr.close()

        if proc.returncode != 0:
            raise TraversalError(
                "Failed to walk commits: "
                f"{stderr.decode('utf-8', errors='replace').strip() or proc.returncode}"
            )

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
        if not _COMMIT_ID_RE.match(commit_id):
            raise InvalidCommitIdError(f"Invalid commit hash: {commit_id!r}")
        try:
            output = self._run(
                repo_path,
                "log",
                "-1",
                *_LOG_OPTIONS,
                f"{commit_id}^{{commit}}",
                "--",
            )
        except subprocess.CalledProcessError as e:
            raise CommitNotFoundError(
                f"Commit not found: {commit_id}: {_stderr_text(e)}"
            ) from e
        except OSError as e:
            raise CommitNotFoundError(f"Commit not found: {commit_id}: {e}") from e

        record = output.rstrip(b"\0")
        if not record:
            raise CommitNotFoundError(f"Commit not found: {commit_id}")
        try:
            return self._parse_log_record(record)
        except TraversalError as e:
            raise CommitNotFoundError(f"Commit not found: {commit_id}: {e}") from e

    def diff_trees(self, repo_path: Path, old_commit: str, new_commit: str) -> tuple[TreeChange, ...]:
        """
        Compute the tree-level difference between two commits.

        Rename detection is disabled: a renamed file appears as a deletion of
        the old path followed by an addition of the new one.

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
        try:
            trees = self._run(
                repo_path, "rev-parse", f"{old_commit}^{{tree}}", f"{new_commit}^{{tree}}"
            )
        except subprocess.CalledProcessError as e:
            raise TreeResolutionError(f"Failed to get commit tree: {_stderr_text(e)}") from e
        except OSError as e:
            raise TreeResolutionError(f"Failed to get commit tree: {e}") from e
        old_tree, new_tree = trees.decode("ascii").split()

        try:
            output = self._run(
                repo_path, "diff-tree", "-r", "-z", "--raw", "--no-renames", old_tree, new_tree
            )
        except subprocess.CalledProcessError as e:
            raise DiffComputationError(f"Failed to compute diff: {_stderr_text(e)}") from e
        except OSError as e:
            raise DiffComputationError(f"Failed to compute diff: {e}") from e

        return self._parse_raw_diff(output)

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
        sizes = {blob_id: 0 for blob_id in blob_ids}
        wanted = [blob_id for blob_id in sizes if blob_id.strip("0")]
        if not wanted:
            return sizes
        try:
            output = self._run(
                repo_path,
                "cat-file",
                "--batch-check=%(objectname) %(objectsize)",
                input_bytes="".join(f"{blob_id}\n" for blob_id in wanted).encode("ascii"),
            )
        except subprocess.CalledProcessError as e:
            raise DiffComputationError(f"Failed to read file sizes: {_stderr_text(e)}") from e
        except OSError as e:
            raise DiffComputationError(f"Failed to read file sizes: {e}") from e

        for line in output.decode("utf-8", errors="replace").splitlines():
            parts = line.split()
            # Submodule entries point at commits outside this repository: "<id> missing"
            if len(parts) == 2 and parts[1].isdigit():
                sizes[parts[0]] = int(parts[1])
        return sizes

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
        try:
            return self._run(
                repo_path,
                "diff-tree",
                "-r",
                "-p",
                "--no-renames",
                "--no-color",
                "--no-ext-diff",
                old_commit,
                new_commit,
                "--",
                file_path,
            )
        except subprocess.CalledProcessError as e:
            raise DiffComputationError(
                f"Failed to compute diff for {file_path}: {_stderr_text(e)}"
            ) from e
        except OSError as e:
            raise DiffComputationError(f"Failed to compute diff for {file_path}: {e}") from e

    def get_config_value(self, key: str, repo_path: Path | None = None) -> str | None:
        """
        Read a git configuration value.

        Args:
            key: Configuration key, e.g. "user.name"
            repo_path: Repository whose local configuration applies, if any

        Returns:
            The value, or None if unset or unreadable
        """
        try:
            result = subprocess.run(
                self._git(repo_path, "config", "--get", key),
                capture_output=True,
                check=False,
            )
        except OSError as e:
            logger.debug("Could not read git config %s: %s", key, e)
            return None
        if result.returncode != 0:
            return None
        value = result.stdout.decode("utf-8", errors="replace").strip()
        return value or None

    @staticmethod
    def _parse_log_record(record: bytes) -> CommitInfo:
        """Parse one NUL-terminated `git log` record into a CommitInfo."""
        fields = record.decode("utf-8", errors="replace").split("\x1f", _LOG_FIELD_COUNT - 1)
        if len(fields) != _LOG_FIELD_COUNT:
            raise TraversalError(f"Invalid OID: malformed log entry {record[:80]!r}")

        commit_hash, parents, author, author_email, timestamp, message = fields
        if not _OID_RE.match(commit_hash):
            raise TraversalError(f"Invalid OID: {commit_hash!r}")
        try:
            commit_date = datetime.fromtimestamp(int(timestamp), tz=timezone.utc)
        except (ValueError, OverflowError, OSError) as e:
            raise TraversalError(
                f"Invalid OID: bad timestamp {timestamp!r} for {commit_hash}"
            ) from e

        return CommitInfo(
            hash=commit_hash,
            parent_hashes=tuple(parents.split()),
            author=author or None,
            author_email=author_email or None,
            date=commit_date,
            message=message,
        )

    @staticmethod
    def _parse_raw_diff(output: bytes) -> tuple[TreeChange, ...]:
        """Parse `git diff-tree -z --raw --no-renames` output."""
        tokens = output.split(b"\0")
        changes: list[TreeChange] = []
        index = 0
        while index < len(tokens):
            meta = tokens[index]
            if not meta.startswith(b":"):
                index += 1
                continue
            path = tokens[index + 1].decode("utf-8", errors="surrogateescape")
            index += 2

            # ":<old mode> <new mode> <old blob> <new blob> <status>"
            _, _, _, new_blob, status = meta[1:].decode("ascii").split(" ")
            change_type = GitRepositoryImpl._parse_status_to_change_type(status)
            changes.append(
                TreeChange(
                    change_type=change_type,
                    old_path=None if change_type is FileChangeType.ADDED else path,
                    new_path=None if change_type is FileChangeType.DELETED else path,
                    new_blob_id=None if change_type is FileChangeType.DELETED else new_blob,
                )
            )
        return tuple(changes)

    @staticmethod
    def _parse_status_to_change_type(status: str) -> FileChangeType:
        """Parse git status code to FileChangeType."""
        status_code = status[0] if status else ""
        match status_code:
            case "A":
                return FileChangeType.ADDED
            case "M":
                return FileChangeType.MODIFIED
            case "D":
                return FileChangeType.DELETED
            case "T":
                return FileChangeType.TYPE_CHANGED
            case "U":
                return FileChangeType.UNMERGED
            case _:
                return FileChangeType.MODIFIED  # Default fallback
