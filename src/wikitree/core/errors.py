"""Error taxonomy for content and index operations."""


class ContentError(Exception):
    """Base class for all content store errors."""


class PathEscapesRoot(ContentError):
    """Resolved path is not contained in the content root."""


class ForbiddenPath(ContentError):
    """Path falls under a read- or write-forbidden prefix."""


class NotFound(ContentError):
    """Document does not exist."""


class AlreadyExists(ContentError):
    """Document already exists and cannot be created again."""


class MalformedIndex(ContentError):
    """Index artifact could not be parsed into a navigation tree."""


class IOFailure(ContentError):
    """Filesystem operation failed."""
