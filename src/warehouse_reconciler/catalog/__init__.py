"""Catalog read side: identifiers, existence oracle, snapshot rows, readers.

Usage:
    from warehouse_reconciler.catalog import Existence, Scope, exists, readers

    if exists(client, "DATABASES", "reports") is Existence.UNIQUE:
        row = readers.show_database(client, "reports")
"""

from warehouse_reconciler.catalog import readers
from warehouse_reconciler.catalog.existence import ACCOUNT, Existence, Scope, exists, lookup, require
from warehouse_reconciler.catalog.identifiers import (
    normalize,
    qualified_name,
    quote_identifier,
    render_qualified,
    split_identity,
    string_literal,
)

__all__ = [
    "ACCOUNT",
    "Existence",
    "Scope",
    "exists",
    "lookup",
    "require",
    "readers",
    "normalize",
    "qualified_name",
    "quote_identifier",
    "render_qualified",
    "split_identity",
    "string_literal",
]
