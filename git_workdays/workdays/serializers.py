"""Render work days and diffs as JSON-ready dictionaries."""

from typing import Any

from git_workdays.git.domain.entities import Commit
from git_workdays.git.domain.value_objects import FileDiff
from git_workdays.workdays.domain.entities import WorkDay


def commit_to_dict(commit: Commit) -> dict[str, Any]:
    """Render a commit; the timestamp is in epoch milliseconds."""
    return {
        "hash": commit.hash,
        "author": commit.author,
        "authorEmail": commit.author_email,
        "timestamp": int(commit.timestamp.timestamp() * 1000),
        "message": commit.message,
        "filesChanged": list(commit.files_changed),
        "repoPath": commit.repo_path,
        "remoteUrl": commit.remote_url,
    }


def work_day_to_dict(work_day: WorkDay) -> dict[str, Any]:
    """Render a work day with its commits."""
    return {
        "date": work_day.date,
        "commits": [commit_to_dict(commit) for commit in work_day.commits],
        "totalCommits": work_day.total_commits,
        "firstCommitTime": work_day.first_commit_time,
        "lastCommitTime": work_day.last_commit_time,
    }


def file_diff_to_dict(file_diff: FileDiff) -> dict[str, Any]:
    """Render one file diff."""
    return {
        "path": file_diff.path,
        "additions": file_diff.additions,
        "deletions": file_diff.deletions,
        "diff": file_diff.diff,
    }
