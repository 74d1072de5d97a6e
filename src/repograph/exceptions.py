"""Exception hierarchy for RepoGraph.

Extractors never raise on malformed source text and unresolved references are
dropped silently, so these cover only the failures a caller must see.
"""


class RepoGraphError(Exception):
    """Base class for all RepoGraph errors."""


class InvalidRepositoryError(RepoGraphError, ValueError):
    """The repository identifier is empty or malformed."""


class RepositoryNotFoundError(RepoGraphError):
    """The source collaborator does not know the requested owner/repo."""


class SourceError(RepoGraphError):
    """Repository metadata or tree retrieval failed."""


class AnalysisError(RepoGraphError):
    """An unexpected failure inside the analysis pipeline."""
