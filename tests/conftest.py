"""Shared fixtures: throw-away git repositories with controlled dates."""

import os
import subprocess
from collections.abc import Generator
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from git_workdays.git.domain.exceptions import CommitNotFoundError
from git_workdays.git.domain.value_objects import CommitInfo, TreeChange
from git_workdays.git.repositories.interfaces import GitRepository

ALICE = ("Alice Smith", "alice@example.com")
BOB = ("Bob Jones", "bob@example.org")


def days_ago(days: float, hour: int = 12, minute: int = 0) -> datetime:
    """A UTC instant `days` before now, pinned to the given time of day."""
    moment = datetime.now(timezone.utc) - timedelta(days=days)
    return moment.replace(hour=hour, minute=minute, second=0, microsecond=0)


class RepoBuilder:
    """Builds commits in a real git repository."""

    def __init__(self, path: Path) -> None:
        self.path = path
        path.mkdir(parents=True, exist_ok=True)
        self.git("init", "-q")

    def git(self, *args: str, env: dict[str, str] | None = None) -> str:
        result = subprocess.run(
            ["git", "-C", str(self.path), *args],
            capture_output=True,
            text=True,
            check=True,
            env={**os.environ, **(env or {})},
        )
        return result.stdout.strip()

    def write(self, files: dict[str, str | bytes | None]) -> None:
        for name, content in files.items():
            target = self.path / name
            if content is None:
                target.unlink()
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                target.write_bytes(content)
            else:
                target.write_text(content, encoding="utf-8")

    def commit(
        self,
        message: str,
        files: dict[str, str | bytes | None] | None = None,
        when: datetime | None = None,
        author: tuple[str, str] = ALICE,
    ) -> str:
        """Write files (None deletes), stage everything and commit."""
        self.write(files or {})
        self.git("add", "-A")
        stamp = f"{int((when or days_ago(1)).timestamp())} +0000"
        self.git(
            "commit",
            "-q",
            "--allow-empty",
            "-m",
            message,
            env={
                "GIT_AUTHOR_NAME": author[0],
                "GIT_AUTHOR_EMAIL": author[1],
                "GIT_AUTHOR_DATE": stamp,
                "GIT_COMMITTER_NAME": author[0],
                "GIT_COMMITTER_EMAIL": author[1],
                "GIT_COMMITTER_DATE": stamp,
            },
        )
        return self.git("rev-parse", "HEAD")


@pytest.fixture(autouse=True)
def isolated_git_env(tmp_path_factory, monkeypatch):
    """Keep the user's git and app configuration out of the tests."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(home.parent))
    for name in list(os.environ):
        if name.startswith("GIT_WORKDAYS_") or name.startswith("GIT_AUTHOR_") or name.startswith(
            "GIT_COMMITTER_"
        ):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def repo(tmp_path) -> RepoBuilder:
    return RepoBuilder(tmp_path / "repo")


def make_info(
    sha_char: str,
    when: datetime,
    author: tuple[str | None, str | None] = ALICE,
    parents: tuple[str, ...] = (),
    message: str = "work",
) -> CommitInfo:
    return CommitInfo(
        hash=sha_char * 40,
        parent_hashes=parents,
        author=author[0],
        author_email=author[1],
        date=when,
        message=message,
    )


class FakeGitRepository(GitRepository):
    """In-memory backend yielding commits in a fixed walk order."""

    def __init__(
        self,
        commits: list[CommitInfo],
        changes: dict[str, tuple[TreeChange, ...]] | None = None,
        remote_url: str | None = None,
    ) -> None:
        self.commits = commits
        self.changes = changes or {}
        self.remote_url = remote_url
        self.walked: list[str] = []
        self.walk_closed = False
        self.opened: list[Path] = []

    def open_repository(self, repo_path: Path) -> Path:
        self.opened.append(repo_path)
        return repo_path

    def get_remote_url(self, repo_path: Path, remote_name: str = "origin") -> str | None:
        return self.remote_url

    def resolve_head(self, repo_path: Path) -> str:
        return self.commits[0].hash

    def walk_commits(self, repo_path: Path, start: str) -> Generator[CommitInfo, None, None]:
        try:
            for info in self.commits:
                self.walked.append(info.hash)
                yield info
        finally:
            self.walk_closed = True

    def resolve_commit(self, repo_path: Path, commit_id: str) -> CommitInfo:
        for info in self.commits:
            if info.hash == commit_id:
                return info
        raise CommitNotFoundError(f"Commit not found: {commit_id}")

    def diff_trees(self, repo_path: Path, old_commit: str, new_commit: str) -> tuple[TreeChange, ...]:
        return self.changes.get(new_commit, ())

    def get_blob_sizes(self, repo_path: Path, blob_ids: tuple[str, ...]) -> dict[str, int]:
        return {blob_id: 10 for blob_id in blob_ids}

    def get_file_patch(
        self, repo_path: Path, old_commit: str, new_commit: str, file_path: str
    ) -> bytes:
        return f"@@ -0,0 +1 @@\n+{file_path}\n".encode()

    def get_config_value(self, key: str, repo_path: Path | None = None) -> str | None:
        return None
