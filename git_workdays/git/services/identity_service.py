"""Service for reading the local git identity."""

from pathlib import Path

from git_workdays.git.repositories.interfaces import GitRepository


class IdentityService:
    """Service for looking up who the local git user is."""

    IDENTITY_KEYS: tuple[str, ...] = ("user.name", "user.email")

    def __init__(self, git_repository: GitRepository) -> None:
        """
        Initialize IdentityService.

        Args:
            git_repository: Repository implementation for Git operations
        """
        self._git_repository = git_repository

    def get_git_identity(self, repo_path: Path | None = None) -> list[str]:
        """
        Get the configured user name and email, usable as author filters.

        Args:
            repo_path: Repository whose local configuration applies; None reads
                      only the global and system configuration

        Returns:
            The non-empty values among user.name and user.email, in that order
        """
        identity: list[str] = []
        for key in self.IDENTITY_KEYS:
            value = self._git_repository.get_config_value(key, repo_path)
            if value:
                identity.append(value)
        return identity
