"""Entry points exposed to applications.

Each call builds its own services and opens the repository afresh, so calls
for different repositories or commits can run concurrently without sharing
any state.
"""

import logging
from pathlib import Path

from git_workdays.git.domain.value_objects import DiffLimits, FileDiff
from git_workdays.git.repositories.implementations import GitRepositoryImpl
from git_workdays.git.repositories.interfaces import GitRepository
from git_workdays.git.services.diff_service import DiffService
from git_workdays.git.services.history_service import HistoryService
from git_workdays.workdays.domain.entities import WorkDay
from git_workdays.workdays.services.aggregation_service import group_by_day

logger = logging.getLogger(__name__)


def analyze(
    repo_path: str | Path,
    author_filters: list[str] | None = None,
    git_repository: GitRepository | None = None,
) -> list[WorkDay]:
    """
    Summarize the last 90 days of a repository's history into work days.

    Args:
        repo_path: Path to the git repository
        author_filters: Case-insensitive substrings of author name or email;
                       empty or None keeps every author
        git_repository: Repository backend, defaults to GitRepositoryImpl()

    Returns:
        Work days sorted newest first; empty if no commit was retained

    Raises:
        GitWorkdaysError: If the repository cannot be read or walked
    """
    history_service = HistoryService(git_repository or GitRepositoryImpl())
    commits = history_service.collect_commits(Path(repo_path), author_filters)
    if not commits:
        return []

    work_days = group_by_day(commits)
    logger.info("Grouped into %d work days for repository: %s", len(work_days), repo_path)
    return work_days


def get_work_days(
    repo_path: str | Path, git_repository: GitRepository | None = None
) -> list[WorkDay]:
    """Summarize a repository's recent history for all authors."""
    return analyze(repo_path, [], git_repository)


def diff_for_commit(
    repo_path: str | Path,
    commit_id: str,
    max_file_size_kb: int,
    max_files: int,
    git_repository: GitRepository | None = None,
) -> list[FileDiff]:
    """
    Preview the file diffs of a single commit.

    Args:
        repo_path: Path to the git repository
        commit_id: Hash of the commit
        max_file_size_kb: Files larger than this many KiB after the change are skipped
        max_files: Maximum number of files to keep
        git_repository: Repository backend, defaults to GitRepositoryImpl()

    Returns:
        File diffs in tree-diff order

    Raises:
        ValueError: If a limit is negative
        GitWorkdaysError: If the commit cannot be resolved or diffed
    """
    limits = DiffLimits(max_file_size_kb=max_file_size_kb, max_files=max_files)
    diff_service = DiffService(git_repository or GitRepositoryImpl())
    return diff_service.diff_commit(Path(repo_path), commit_id, limits)
