"""Service for walking recent repository history."""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

from git_workdays.git.domain.entities import Commit
from git_workdays.git.domain.value_objects import AuthorFilter, CommitInfo
from git_workdays.git.repositories.interfaces import GitRepository

logger = logging.getLogger(__name__)

HISTORY_HORIZON_DAYS = 90


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class HistoryService:
    """Service for collecting the commits of a repository's recent history."""

    def __init__(
        self,
        git_repository: GitRepository,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """
        Initialize HistoryService.

        Args:
            git_repository: Repository implementation for Git operations
            clock: Returns the current time as a timezone-aware datetime
        """
        self._git_repository = git_repository
        self._clock = clock

    def collect_commits(
        self, repo_path: Path, author_filters: list[str] | None = None
    ) -> list[Commit]:
        """
        Collect commits reachable from HEAD within the history horizon.

        The walk stops at the first commit older than the horizon. It trusts
        the revision-walk order and does not re-sort, so with clock-skewed or
        heavily merged histories a newer commit behind an older one is not
        reached.

        Args:
            repo_path: Path to the git repository
            author_filters: Case-insensitive substrings of author name or email;
                           empty or None keeps every author

        Returns:
            Commits in walk order, newest first

        Raises:
            RepositoryOpenError: If the repository cannot be opened
            TraversalError: If HEAD cannot be resolved or the walk fails
            CommitNotFoundError: If a walked commit cannot be resolved
            TreeResolutionError: If a commit tree cannot be resolved
            DiffComputationError: If the changed files cannot be computed
        """
        author_filter = AuthorFilter.from_terms(author_filters)
        opened_path = self._git_repository.open_repository(repo_path)
        repo_location = str(repo_path)

        remote_url = self._git_repository.get_remote_url(opened_path)
        logger.info(
            "Analyzing repository: %s (remote: %s, filtering: %s)",
            repo_location,
            remote_url or "none",
            author_filter.is_active,
        )

        head = self._git_repository.resolve_head(opened_path)
        horizon = self._clock() - timedelta(days=HISTORY_HORIZON_DAYS)

        commits: list[Commit] = []
        walk = self._git_repository.walk_commits(opened_path, head)
        try:
            for info in walk:
                if info.date < horizon:
                    logger.debug(
                        "Reached history horizon at %s (%s)", info.hash, info.date.isoformat()
                    )
                    break

                if not author_filter.matches(info.author, info.author_email):
                    continue

                commits.append(
                    Commit(
                        hash=info.hash,
                        author=info.author,
                        author_email=info.author_email,
                        timestamp=info.date,
                        message=info.message,
                        files_changed=self._changed_files(opened_path, info),
                        repo_path=repo_location,
                        remote_url=remote_url,
                    )
                )
        finally:
            walk.close()

        logger.info("Found %d commits for repository: %s", len(commits), repo_location)
        if not commits:
            logger.warning("No commits found in repository: %s", repo_location)
        return commits

    def _changed_files(self, repo_path: Path, info: CommitInfo) -> tuple[str, ...]:
        parent = info.first_parent
        if parent is None:
            return ()
        changes = self._git_repository.diff_trees(repo_path, parent, info.hash)
        return tuple(change.path for change in changes if change.path is not None)
