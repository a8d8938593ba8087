"""Tests for the history walker."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from git_workdays.git.domain.exceptions import (
    DiffComputationError,
    RepositoryOpenError,
    TraversalError,
)
from git_workdays.git.domain.value_objects import FileChangeType, TreeChange
from git_workdays.git.repositories.implementations import GitRepositoryImpl
from git_workdays.git.services.history_service import HISTORY_HORIZON_DAYS, HistoryService
from tests.conftest import ALICE, BOB, FakeGitRepository, days_ago, make_info

NOW = datetime(2026, 6, 30, 12, 0, tzinfo=timezone.utc)


def fake_service(fake: FakeGitRepository) -> HistoryService:
    return HistoryService(fake, clock=lambda: NOW)


class TestHorizon:
    """Tests for the early exit at the history horizon."""

    def test_stops_at_first_commit_past_horizon(self):
        """An old commit ends the walk even when newer ones follow it."""
        fake = FakeGitRepository(
            [
                make_info("a", NOW - timedelta(days=1)),
                make_info("b", NOW - timedelta(days=HISTORY_HORIZON_DAYS, seconds=1)),
                make_info("c", NOW - timedelta(days=2)),
            ]
        )

        commits = fake_service(fake).collect_commits(Path("/repo"))

        assert [commit.hash for commit in commits] == ["a" * 40]
        assert fake.walked == ["a" * 40, "b" * 40]
        assert fake.walk_closed is True

    def test_filtered_out_commit_does_not_stop_walk(self):
        """Author filtering skips a commit and keeps walking."""
        fake = FakeGitRepository(
            [
                make_info("a", NOW - timedelta(days=1), author=BOB),
                make_info("b", NOW - timedelta(days=2), author=ALICE),
                make_info("c", NOW - timedelta(days=100), author=ALICE),
                make_info("d", NOW - timedelta(days=3), author=ALICE),
            ]
        )

        commits = fake_service(fake).collect_commits(Path("/repo"), ["alice"])

        assert [commit.hash for commit in commits] == ["b" * 40]
        assert "d" * 40 not in fake.walked

    def test_commit_exactly_at_horizon_is_kept(self):
        """Only commits strictly older than the horizon stop the walk."""
        fake = FakeGitRepository([make_info("a", NOW - timedelta(days=HISTORY_HORIZON_DAYS))])

        assert len(fake_service(fake).collect_commits(Path("/repo"))) == 1

    def test_all_commits_past_horizon(self):
        """No retained commit gives an empty list, not an error."""
        fake = FakeGitRepository([make_info("a", NOW - timedelta(days=365))])

        assert fake_service(fake).collect_commits(Path("/repo")) == []


class TestCommitRecords:
    """Tests for the Commit records built during the walk."""

    def test_records_carry_repository_and_remote(self):
        """Every commit shares the repository location and remote URL."""
        fake = FakeGitRepository(
            [make_info("a", NOW - timedelta(days=1)), make_info("b", NOW - timedelta(days=2))],
            remote_url="git@example.com:team/app.git",
        )

        commits = fake_service(fake).collect_commits(Path("/work/app"))

        assert {commit.repo_path for commit in commits} == {"/work/app"}
        assert {commit.remote_url for commit in commits} == {"git@example.com:team/app.git"}

    def test_files_changed_from_first_parent_diff(self):
        """Changed paths come from the first-parent tree diff, deletions included."""
        head = make_info("a", NOW - timedelta(days=1), parents=("b" * 40, "c" * 40))
        changes = {
            head.hash: (
                TreeChange(FileChangeType.MODIFIED, "src/app.py", "src/app.py", "1" * 40),
                TreeChange(FileChangeType.DELETED, "old.py", None, None),
                TreeChange(FileChangeType.ADDED, None, "node_modules/x.js", "2" * 40),
            )
        }
        fake = FakeGitRepository([head], changes=changes)

        commit = fake_service(fake).collect_commits(Path("/repo"))[0]

        # No content filtering for the changed-file list
        assert commit.files_changed == ("src/app.py", "old.py", "node_modules/x.js")

    def test_walk_closed_when_a_commit_fails(self):
        """An error while building a commit still releases the walk."""
        head = make_info("a", NOW - timedelta(days=1), parents=("b" * 40,))

        class FailingDiffRepository(FakeGitRepository):
            def diff_trees(self, repo_path, old_commit, new_commit):
                raise DiffComputationError("Failed to compute diff: broken")

        fake = FailingDiffRepository([head])

        with pytest.raises(DiffComputationError):
            fake_service(fake).collect_commits(Path("/repo"))
        assert fake.walk_closed is True

    def test_missing_author_is_none(self):
        """Unknown author data stays None rather than a placeholder."""
        fake = FakeGitRepository([make_info("a", NOW - timedelta(days=1), author=(None, None))])

        commit = fake_service(fake).collect_commits(Path("/repo"))[0]

        assert commit.author is None
        assert commit.author_email is None

    def test_repository_opened_on_every_call(self):
        """Each call opens the repository itself."""
        fake = FakeGitRepository([make_info("a", NOW - timedelta(days=1))])
        service = fake_service(fake)

        service.collect_commits(Path("/repo"))
        service.collect_commits(Path("/repo"))

        assert fake.opened == [Path("/repo"), Path("/repo")]


class TestCollectCommitsWithGit:
    """Tests against real repositories."""

    @pytest.fixture
    def service(self) -> HistoryService:
        return HistoryService(GitRepositoryImpl())

    def test_linear_history(self, repo, service):
        """All N commits inside the horizon are returned newest first."""
        hashes = [
            repo.commit(f"commit {index}", {f"file{index}.py": f"v = {index}\n"}, when=days_ago(10 - index))
            for index in range(5)
        ]

        commits = service.collect_commits(repo.path)

        assert [commit.hash for commit in commits] == list(reversed(hashes))
        assert commits[-1].files_changed == ()
        assert commits[0].files_changed == ("file4.py",)
        assert commits[0].message.startswith("commit 4")
        assert commits[0].author == ALICE[0]
        assert commits[0].author_email == ALICE[1]
        assert commits[0].timestamp.tzinfo is not None

    def test_horizon_with_git(self, repo, service):
        """Commits older than 90 days are not returned."""
        repo.commit("ancient", {"a.py": "1\n"}, when=days_ago(200))
        repo.commit("old", {"a.py": "2\n"}, when=days_ago(120))
        recent = repo.commit("recent", {"a.py": "3\n"}, when=days_ago(5))

        assert [commit.hash for commit in service.collect_commits(repo.path)] == [recent]

    def test_author_filter_with_git(self, repo, service):
        """Author filters match name or email, case-insensitively."""
        repo.commit("alice 1", {"a.py": "1\n"}, when=days_ago(5), author=ALICE)
        bob = repo.commit("bob 1", {"b.py": "1\n"}, when=days_ago(4), author=BOB)
        alice = repo.commit("alice 2", {"a.py": "2\n"}, when=days_ago(3), author=ALICE)

        by_email = service.collect_commits(repo.path, ["EXAMPLE.ORG"])
        by_name = service.collect_commits(repo.path, ["smith"])
        both = service.collect_commits(repo.path, ["bob", "alice"])

        assert [commit.hash for commit in by_email] == [bob]
        assert [commit.hash for commit in by_name][0] == alice
        assert len(by_name) == 2
        assert len(both) == 3

    def test_remote_url(self, repo, service):
        """The origin URL is attached when the remote exists."""
        repo.commit("init", {"a.py": "1\n"}, when=days_ago(2))
        assert service.collect_commits(repo.path)[0].remote_url is None

        repo.git("remote", "add", "origin", "https://example.com/team/app.git")
        assert service.collect_commits(repo.path)[0].remote_url == "https://example.com/team/app.git"

    def test_not_a_repository(self, tmp_path, service):
        plain = tmp_path / "plain"
        plain.mkdir()
        with pytest.raises(RepositoryOpenError, match="Failed to open repository"):
            service.collect_commits(plain)

    def test_repository_without_commits(self, repo, service):
        """An empty repository has no HEAD to walk from."""
        with pytest.raises(TraversalError, match="Failed to find HEAD"):
            service.collect_commits(repo.path)
