"""Service for grouping commits into work days."""

from git_workdays.git.domain.entities import Commit
from git_workdays.workdays.domain.entities import WorkDay

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"


def group_by_day(commits: list[Commit]) -> list[WorkDay]:
    """
    Group commits by the calendar date of their timestamp.

    Commits keep their incoming order within a day. Because that order is
    newest first, first_commit_time is the latest commit of the day and
    last_commit_time the earliest.

    Args:
        commits: Commits in walk order, newest first

    Returns:
        Work days sorted by date, newest day first
    """
    grouped: dict[str, list[Commit]] = {}
    for commit in commits:
        grouped.setdefault(commit.timestamp.strftime(DATE_FORMAT), []).append(commit)

    work_days = [
        WorkDay(
            date=date,
            commits=tuple(day_commits),
            total_commits=len(day_commits),
            first_commit_time=day_commits[0].timestamp.strftime(TIME_FORMAT),
            last_commit_time=day_commits[-1].timestamp.strftime(TIME_FORMAT),
        )
        for date, day_commits in grouped.items()
    ]
    work_days.sort(key=lambda work_day: work_day.date, reverse=True)
    return work_days
