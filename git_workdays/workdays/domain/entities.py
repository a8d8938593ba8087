"""Work-day domain entities."""

from dataclasses import dataclass

from git_workdays.git.domain.entities import Commit


@dataclass(frozen=True)
class WorkDay:
    """All retained commits sharing one calendar date.

    Attributes:
        date: The date as "YYYY-MM-DD"
        commits: Commits of that date in walk order, newest first
        total_commits: Number of commits
        first_commit_time: "HH:MM" of the first commit in the list, the latest of the day
        last_commit_time: "HH:MM" of the last commit in the list, the earliest of the day
    """

    date: str
    commits: tuple[Commit, ...]
    total_commits: int
    first_commit_time: str | None
    last_commit_time: str | None
