"""Existence oracle: does exactly one catalog object match a name?

Before any object is read, renamed, altered or dropped we want to know
that one and only one object exists.  Identifiers are case-insensitive
unless double-quoted, so it is possible to issue

    create database "foo";
    create database "FOO";

and get two rows back from

    show databases like 'foo';

Zero rows means absent, one row means unique, more than one row is an
``AmbiguityError`` -- never resolved silently.

Usage:
    from warehouse_reconciler.catalog.existence import Existence, Scope, exists

    if exists(client, "TABLES", "events", Scope("analytics", "public")) is Existence.UNIQUE:
        ...
"""

import logging
from dataclasses import dataclass
from enum import Enum

from warehouse_reconciler.adapters.base import CatalogClient
from warehouse_reconciler.catalog.identifiers import like_pattern, render_qualified
from warehouse_reconciler.errors import AmbiguityError, NotFoundError

logger = logging.getLogger(__name__)

# SHOW object types that accept an IN clause
_SCOPED_TYPES = {"SCHEMAS", "TABLES", "VIEWS", "PIPES", "STAGES"}


class Existence(str, Enum):
    """Outcome of an existence check (ambiguity is raised, not returned)."""

    ABSENT = "absent"
    UNIQUE = "unique"


@dataclass(frozen=True)
class Scope:
    """Namespace that qualifies a name lookup.

    ``Scope()`` is account-wide, ``Scope("DB")`` a database and
    ``Scope("DB", "SCHEMA")`` a schema.

    Example:
        >>> Scope("analytics", "public").in_clause()
        ' IN SCHEMA ANALYTICS.PUBLIC'
    """

    database: str | None = None
    schema: str | None = None

    def in_clause(self) -> str:
        """Render the ``IN ...`` clause (empty for account scope)."""
        if self.database and self.schema:
            return f" IN SCHEMA {render_qualified(self.database, self.schema)}"
        if self.database:
            return f" IN DATABASE {render_qualified(self.database)}"
        return ""

    def qualify(self, name: str) -> str:
        """Dot-join the scope segments with *name* (for messages)."""
        segments = [s for s in (self.database, self.schema) if s]
        return ".".join([*segments, name]).upper()


ACCOUNT = Scope()


def show_statement(object_type: str, name: str, scope: Scope = ACCOUNT) -> str:
    """Build the ``SHOW <type> LIKE '<name>' [IN ...]`` listing statement.

    Examples:
        >>> show_statement("DATABASES", "reports")
        "SHOW DATABASES LIKE 'REPORTS'"
        >>> show_statement("PIPES", "loader", Scope("db", "raw"))
        "SHOW PIPES LIKE 'LOADER' IN SCHEMA DB.RAW"
    """
    object_type = object_type.upper()
    statement = f"SHOW {object_type} LIKE {like_pattern(name)}"
    if object_type in _SCOPED_TYPES:
        statement += scope.in_clause()
    return statement


def lookup(
    client: CatalogClient,
    object_type: str,
    name: str,
    scope: Scope = ACCOUNT,
) -> list[tuple]:
    """Run the listing statement and return its rows (zero or one).

    Raises:
        AmbiguityError: If more than one row matched.
        DriverError: If the listing statement failed.
    """
    statement = show_statement(object_type, name, scope)
    rows = client.query(statement)
    if len(rows) > 1:
        logger.warning(f"Ambiguous lookup: {statement} returned {len(rows)} rows")
        raise AmbiguityError(statement, len(rows))
    return rows


def exists(
    client: CatalogClient,
    object_type: str,
    name: str,
    scope: Scope = ACCOUNT,
) -> Existence:
    """Classify how many catalog objects match *name* within *scope*.

    Args:
        client: Catalog client.
        object_type: Plural SHOW object type (``DATABASES``, ``TABLES``...).
        name: Object name (normalized before matching).
        scope: Enclosing namespace.

    Returns:
        ``Existence.ABSENT`` or ``Existence.UNIQUE``.

    Raises:
        AmbiguityError: If more than one object matched.
        DriverError: If the listing statement failed.
    """
    rows = lookup(client, object_type, name, scope)
    return Existence.UNIQUE if rows else Existence.ABSENT


def require(
    client: CatalogClient,
    object_type: str,
    name: str,
    scope: Scope = ACCOUNT,
    kind: str = "Object",
) -> tuple:
    """Return the single matching row or raise ``NotFoundError``."""
    rows = lookup(client, object_type, name, scope)
    if not rows:
        raise NotFoundError(kind, scope.qualify(name))
    return rows[0]
