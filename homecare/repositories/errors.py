class RuleViolationError(Exception):
    """A business rule rejected the request. Safe to show to the caller."""


class ConflictError(RuleViolationError):
    """The request clashes with an identity that already exists."""


class NotFoundError(Exception):
    """The target row does not exist."""


class StorageError(Exception):
    """The database failed for a reason the caller cannot fix."""
