"""Errors raised by repository analysis.

Resource-access errors mean the repository or an identifier could not be
used at all. Graph-integrity errors mean an object expected in the commit
graph could not be resolved while working through it.
"""


class GitWorkdaysError(RuntimeError):
    """Base class for analysis failures."""


class ResourceAccessError(GitWorkdaysError):
    """The repository or an identifier is unusable."""


class RepositoryOpenError(ResourceAccessError):
    """The repository could not be opened."""


class InvalidCommitIdError(ResourceAccessError):
    """A commit identifier is malformed."""


class GraphIntegrityError(GitWorkdaysError):
    """An object in the commit graph could not be resolved."""


class CommitNotFoundError(GraphIntegrityError):
    """A commit does not exist in the repository."""


class TreeResolutionError(GraphIntegrityError):
    """A parent commit or tree could not be resolved."""


class DiffComputationError(GraphIntegrityError):
    """A tree-to-tree diff or patch could not be computed."""


class TraversalError(GraphIntegrityError):
    """The revision walk could not be started or continued."""
