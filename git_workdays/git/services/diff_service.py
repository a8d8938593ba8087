"""Service for extracting bounded per-file diffs from a single commit."""

import logging
from pathlib import Path

from git_workdays.git.domain.value_objects import DiffLimits, FileDiff
from git_workdays.git.repositories.interfaces import GitRepository
from git_workdays.git.services.path_filter_service import PathFilterService

logger = logging.getLogger(__name__)


def classify_patch_lines(patch: bytes) -> tuple[int, int, str]:
    """
    Count and re-emit the hunk lines of a single-file unified diff.

    Lines before the first hunk header are file headers and are skipped.
    Only the first file block is read: a path given to git also matches a
    directory of the same name, so a later "diff --git" header belongs to
    another change.
    Inside hunks, "+", "-" and " " lines are kept with their marker and
    trailing whitespace stripped; every other line (hunk headers, "\\ No
    newline at end of file") is dropped. Lines that are not valid UTF-8 are
    counted but their text is omitted.

    Args:
        patch: Raw unified-diff output for one file

    Returns:
        Tuple of (additions, deletions, diff text)
    """
    additions = 0
    deletions = 0
    emitted: list[str] = []
    in_hunk = False
    seen_header = False

    for raw_line in patch.split(b"\n"):
        if raw_line.startswith(b"diff --git "):
            if seen_header:
                break
            seen_header = True
            continue
        if raw_line.startswith(b"@@"):
            in_hunk = True
            continue
        if not in_hunk or not raw_line:
            continue

        marker = raw_line[:1]
        if marker == b"+":
            additions += 1
        elif marker == b"-":
            deletions += 1
        elif marker != b" ":
            continue

        try:
            content = raw_line[1:].decode("utf-8")
        except UnicodeDecodeError:
            continue
        emitted.append(f"{marker.decode('ascii')}{content.rstrip()}\n")

    return additions, deletions, "".join(emitted)


class DiffService:
    """Service for producing file diffs of a commit against its first parent."""

    def __init__(
        self,
        git_repository: GitRepository,
        path_filter: PathFilterService | None = None,
    ) -> None:
        """
        Initialize DiffService.

        Args:
            git_repository: Repository implementation for Git operations
            path_filter: Classifier deciding which paths are left out
        """
        self._git_repository = git_repository
        self._path_filter = path_filter or PathFilterService()

    def diff_commit(
        self, repo_path: Path, commit_id: str, limits: DiffLimits | None = None
    ) -> list[FileDiff]:
        """
        Get the filtered file diffs of a commit.

        Changes are visited in tree-diff order. Ignored paths and files larger
        than the size cap are skipped without counting toward the file cap;
        a retained file whose diff has no line content counts but is dropped.

        Args:
            repo_path: Path to the git repository
            commit_id: Hash of the commit
            limits: Size and count caps, defaults to DiffLimits()

        Returns:
            List of FileDiff, empty for root commits

        Raises:
            RepositoryOpenError: If the repository cannot be opened
            InvalidCommitIdError: If the commit hash is malformed
            CommitNotFoundError: If the commit does not exist
            TreeResolutionError: If a commit tree cannot be resolved
            DiffComputationError: If the diff cannot be computed
        """
        limits = limits or DiffLimits()
        repo_path = self._git_repository.open_repository(repo_path)
        commit = self._git_repository.resolve_commit(repo_path, commit_id)

        parent = commit.first_parent
        if parent is None:
            logger.debug("Commit %s has no parent, nothing to diff", commit.hash)
            return []

        changes = self._git_repository.diff_trees(repo_path, parent, commit.hash)
        sizes = self._git_repository.get_blob_sizes(
            repo_path,
            tuple(change.new_blob_id for change in changes if change.new_blob_id),
        )

        diffs: list[FileDiff] = []
        retained = 0
        for change in changes:
            if retained >= limits.max_files:
                break

            path = change.path
            if path is None:
                continue
            if self._path_filter.should_ignore(path):
                logger.debug("Skipping ignored path %s", path)
                continue
            size = sizes.get(change.new_blob_id, 0) if change.new_blob_id else 0
            if size > limits.max_file_size_bytes:
                logger.debug("Skipping %s: %d bytes over size cap", path, size)
                continue

            retained += 1
            patch = self._git_repository.get_file_patch(repo_path, parent, commit.hash, path)
            additions, deletions, diff_text = classify_patch_lines(patch)
            if not diff_text:
                continue

            diffs.append(
                FileDiff(path=path, additions=additions, deletions=deletions, diff=diff_text)
            )

        return diffs
