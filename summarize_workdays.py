#!/usr/bin/env python3
"""
Script to summarize a git repository's recent history into work days:
- analyze: group the last 90 days of commits by calendar date
- diff: preview the filtered file diffs of a single commit

Author filters default to GIT_WORKDAYS_AUTHORS, then to the local git
identity (user.name / user.email).
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from git_workdays.api import analyze, diff_for_commit
from git_workdays.config import Settings
from git_workdays.git.domain.exceptions import GitWorkdaysError
from git_workdays.git.domain.value_objects import FileDiff
from git_workdays.git.repositories.implementations import GitRepositoryImpl
from git_workdays.git.services.identity_service import IdentityService
from git_workdays.workdays.domain.entities import WorkDay
from git_workdays.workdays.serializers import file_diff_to_dict, work_day_to_dict


def resolve_author_filters(
    args: argparse.Namespace, settings: Settings, git_repo: GitRepositoryImpl
) -> list[str]:
    """
    Decide which author filters apply to an analyze run.

    Args:
        args: Parsed command-line arguments
        settings: Loaded settings
        git_repo: Repository implementation used to read the git identity

    Returns:
        Filter terms; empty means every author is kept
    """
    if args.all_authors:
        return []
    if args.author:
        return list(args.author)
    if settings.authors:
        return list(settings.authors)
    if settings.use_git_identity:
        return IdentityService(git_repo).get_git_identity(args.repo_path)
    return []


def format_work_days(work_days: list[WorkDay]) -> str:
    """Render work days as plain text, newest day first."""
    if not work_days:
        return "No commits in the last 90 days."

    lines: list[str] = []
    for work_day in work_days:
        noun = "commit" if work_day.total_commits == 1 else "commits"
        lines.append(
            f"{work_day.date}  {work_day.total_commits} {noun}  "
            f"{work_day.last_commit_time}-{work_day.first_commit_time}"
        )
        for commit in work_day.commits:
            subject = commit.message.strip().splitlines()[0] if commit.message.strip() else ""
            lines.append(
                f"  {commit.hash[:8]}  {commit.author or 'Unknown'}  {subject} "
                f"({len(commit.files_changed)} files)"
            )
    return "\n".join(lines)


def format_file_diffs(file_diffs: list[FileDiff]) -> str:
    """Render file diffs as plain text."""
    if not file_diffs:
        return "No file diffs."

    sections: list[str] = []
    for file_diff in file_diffs:
        header = f"=== {file_diff.path} (+{file_diff.additions} -{file_diff.deletions})"
        sections.append(f"{header}\n{file_diff.diff}")
    return "\n".join(sections).rstrip("\n")


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Summarize recent git history into work days for time tracking"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze", help="Group the last 90 days of commits by calendar date"
    )
    analyze_parser.add_argument(
        "repo_path",
        type=Path,
        help="Path to the git repository directory",
    )
    analyze_parser.add_argument(
        "--author",
        "-a",
        action="append",
        default=None,
        help="Keep commits whose author name or email contains this text (repeatable)",
    )
    analyze_parser.add_argument(
        "--all-authors",
        action="store_true",
        help="Keep commits from every author",
    )
    analyze_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON",
    )

    diff_parser = subparsers.add_parser("diff", help="Preview the file diffs of one commit")
    diff_parser.add_argument(
        "repo_path",
        type=Path,
        help="Path to the git repository directory",
    )
    diff_parser.add_argument(
        "commit",
        type=str,
        help="Hash of the commit",
    )
    diff_parser.add_argument(
        "--max-file-size-kb",
        type=int,
        default=settings.max_file_size_kb,
        help=f"Skip files larger than this after the change (default: {settings.max_file_size_kb})",
    )
    diff_parser.add_argument(
        "--max-files",
        type=int,
        default=settings.max_files,
        help=f"Maximum number of files to show (default: {settings.max_files})",
    )
    diff_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main function to parse arguments and print work days or commit diffs."""
    try:
        settings = Settings.from_env()
    except ValueError as e:
        print(f"✗ Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    parser = build_parser(settings)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    git_repo = GitRepositoryImpl(git_binary=settings.git_binary)

    try:
        if args.command == "analyze":
            authors = resolve_author_filters(args, settings, git_repo)
            work_days = analyze(args.repo_path, authors, git_repository=git_repo)
            if args.json:
                print(json.dumps([work_day_to_dict(day) for day in work_days], indent=2))
            else:
                if authors:
                    print(f"Authors: {', '.join(authors)}")
                print(format_work_days(work_days))
        else:
            file_diffs = diff_for_commit(
                args.repo_path,
                args.commit,
                max_file_size_kb=args.max_file_size_kb,
                max_files=args.max_files,
                git_repository=git_repo,
            )
            if args.json:
                print(json.dumps([file_diff_to_dict(diff) for diff in file_diffs], indent=2))
            else:
                print(format_file_diffs(file_diffs))
    except (GitWorkdaysError, ValueError) as e:
        print(f"✗ {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
