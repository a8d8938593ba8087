"""Service for filtering generated and vendored files out of diffs."""

from collections.abc import Iterable


class PathFilterService:
    """Service for detecting paths that should not appear in diff output."""

    # Suffixes of minified, binary, media, archive, font and lock files
    IGNORED_EXTENSIONS: frozenset[str] = frozenset(
        {
            ".min.js",
            ".min.css",
            ".map",
            ".png",
            ".jpg",
            ".jpeg",
            ".gif",
            ".ico",
            ".svg",
            ".woff",
            ".woff2",
            ".ttf",
            ".eot",
            ".pdf",
            ".zip",
            ".gz",
            ".tar",
            ".mp4",
            ".mp3",
            ".wav",
            ".avi",
            ".mov",
            ".webm",
            ".lock",
            ".sum",
        }
    )

    # Dependency, build, VCS and virtualenv directories; matched case-sensitively
    IGNORED_PATH_MARKERS: frozenset[str] = frozenset(
        {
            "node_modules/",
            "dist/",
            "build/",
            "target/",
            ".git/",
            "vendor/",
            "__pycache__/",
            ".venv/",
            "venv/",
        }
    )

    def __init__(
        self,
        extra_extensions: Iterable[str] = (),
        extra_path_markers: Iterable[str] = (),
    ) -> None:
        """
        Initialize PathFilterService.

        Args:
            extra_extensions: Suffixes to ignore on top of IGNORED_EXTENSIONS
            extra_path_markers: Path substrings to ignore on top of IGNORED_PATH_MARKERS
        """
        self._extensions = tuple(
            sorted(self.IGNORED_EXTENSIONS | {ext.lower() for ext in extra_extensions})
        )
        self._path_markers = tuple(sorted(self.IGNORED_PATH_MARKERS | set(extra_path_markers)))

    def should_ignore(self, file_path: str) -> bool:
        """
        Check whether a file should be left out of diff output.

        Multi-part suffixes such as ".min.js" are matched against the end of
        the lowercased path, so "app.MIN.JS" is ignored as well.

        Args:
            file_path: Path to the file relative to repository root

        Returns:
            True if the file is ignored, False otherwise
        """
        if file_path.lower().endswith(self._extensions):
            return True

        return any(marker in file_path for marker in self._path_markers)


_default_filter = PathFilterService()


def should_ignore(file_path: str) -> bool:
    """Check a path against the built-in denylists."""
    return _default_filter.should_ignore(file_path)
