"""Settings loaded from the environment and an optional .env file."""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

ENV_PREFIX = "GIT_WORKDAYS_"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


def _load_env_file() -> None:
    """Load environment variables from .env file."""
    # Try to find .env file in project root (parent of git_workdays package)
    project_root = Path(__file__).parent.parent
    env_file = project_root / ".env"
    if env_file.exists():
        load_dotenv(env_file)
    else:
        # Fallback: search from the current directory upward
        load_dotenv(find_dotenv(usecwd=True))


def _parse_bool(name: str, value: str) -> bool:
    """
    Read a boolean setting.

    Environment values are strings, and a misspelled flag such as "ture"
    must fail instead of reading as false.

    Raises:
        ValueError: If the value is not a recognised boolean
    """
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {name}: {value!r}")


def _parse_int(name: str, value: str) -> int:
    """
    Read an integer setting, naming the variable in the error.

    Raises:
        ValueError: If the value is not an integer
    """
    try:
        return int(value.strip())
    except ValueError:
        raise ValueError(f"Invalid integer for {name}: {value!r}") from None


@dataclass(frozen=True)
class Settings:
    """Runtime settings.

    Attributes:
        authors: Author filter terms applied when analyzing
        use_git_identity: Fall back to the local git identity when no authors are set
        max_file_size_kb: Default size cap for diff previews
        max_files: Default file cap for diff previews
        git_binary: git executable to run
        log_level: Name of the logging level for the command line
    """

    authors: tuple[str, ...] = field(default_factory=tuple)
    use_git_identity: bool = True
    max_file_size_kb: int = 100
    max_files: int = 20
    git_binary: str = "git"
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        """Validate the settings."""
        if self.max_file_size_kb < 0:
            raise ValueError(f"max_file_size_kb must be >= 0, got {self.max_file_size_kb}")
        if self.max_files < 0:
            raise ValueError(f"max_files must be >= 0, got {self.max_files}")
        if not self.git_binary:
            raise ValueError("git_binary cannot be empty")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level!r}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Variables to read; defaults to os.environ after loading .env

        Returns:
            Settings with defaults for unset variables

        Raises:
            ValueError: If a variable holds an invalid value
        """
        if environ is None:
            _load_env_file()
            environ = os.environ

        defaults = cls()
        authors_raw = environ.get(f"{ENV_PREFIX}AUTHORS", "")
        authors = tuple(term.strip() for term in authors_raw.split(",") if term.strip())

        use_git_identity = defaults.use_git_identity
        if f"{ENV_PREFIX}USE_GIT_IDENTITY" in environ:
            use_git_identity = _parse_bool(
                f"{ENV_PREFIX}USE_GIT_IDENTITY", environ[f"{ENV_PREFIX}USE_GIT_IDENTITY"]
            )

        max_file_size_kb = defaults.max_file_size_kb
        if f"{ENV_PREFIX}MAX_FILE_SIZE_KB" in environ:
            max_file_size_kb = _parse_int(
                f"{ENV_PREFIX}MAX_FILE_SIZE_KB", environ[f"{ENV_PREFIX}MAX_FILE_SIZE_KB"]
            )

        max_files = defaults.max_files
        if f"{ENV_PREFIX}MAX_FILES" in environ:
            max_files = _parse_int(f"{ENV_PREFIX}MAX_FILES", environ[f"{ENV_PREFIX}MAX_FILES"])

        return cls(
            authors=authors,
            use_git_identity=use_git_identity,
            max_file_size_kb=max_file_size_kb,
            max_files=max_files,
            git_binary=environ.get(f"{ENV_PREFIX}GIT_BINARY", defaults.git_binary).strip()
            or defaults.git_binary,
            log_level=environ.get(f"{ENV_PREFIX}LOG_LEVEL", defaults.log_level).strip().upper()
            or defaults.log_level,
        )
