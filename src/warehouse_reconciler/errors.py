"""Error taxonomy for reconciliation operations.

Every reconciler operation stops at the first error and raises one of
these.  Nothing here is retried internally -- retry policy belongs to the
caller.

Usage:
    from warehouse_reconciler.errors import NotFoundError, AmbiguityError

    try:
        reconciler.read(data)
    except NotFoundError:
        # remote object is gone -- prune it from state
        ...
"""


class ReconcilerError(Exception):
    """Base exception for all reconciler errors."""


class NotFoundError(ReconcilerError):
    """Raised when an object must exist but the catalog lists none.

    Example:
        >>> str(NotFoundError("Database", "REPORTS"))
        'Database REPORTS does not exist'
    """

    def __init__(self, kind: str, identity: str):
        self.kind = kind
        self.identity = identity
        super().__init__(f"{kind} {identity} does not exist")


class AmbiguityError(ReconcilerError):
    """Raised when more than one catalog object matches a name filter.

    This happens when quoted, case-sensitive identifiers (``"foo"`` and
    ``"FOO"``) collide under upper-case normalization.  It is always fatal.
    """

    def __init__(self, statement: str, row_count: int):
        self.statement = statement
        self.row_count = row_count
        super().__init__(f'More than 1 row returned for "{statement}" ({row_count} rows)')


class ConflictError(ReconcilerError):
    """Raised when a rename or create target already exists.

    Examples:
        >>> str(ConflictError("DB.B", source="DB.A"))
        'Cannot rename DB.A to DB.B, DB.B already exists'
        >>> str(ConflictError("REPORTS"))
        'Cannot create REPORTS, REPORTS already exists'
    """

    def __init__(self, target: str, source: str | None = None):
        self.source = source
        self.target = target
        if source:
            message = f"Cannot rename {source} to {target}, {target} already exists"
        else:
            message = f"Cannot create {target}, {target} already exists"
        super().__init__(message)


class DriverError(ReconcilerError):
    """Raised when statement execution or the connection fails.

    The driver exception is kept as ``__cause__``.
    """

    def __init__(self, message: str, statement: str | None = None):
        self.statement = statement
        super().__init__(message)


class ValidationError(ReconcilerError):
    """Raised for desired-state problems detectable before any statement runs."""


class ProfileNotFoundError(ReconcilerError):
    """Raised when no connection profile or DSN is configured."""
