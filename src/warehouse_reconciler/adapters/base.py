"""Catalog client protocol definition.

Defines the ``CatalogClient`` Protocol that the reconcilers, readers and
the existence oracle execute statements through.  The client is passed
explicitly to every call -- there is no module-level connection.

All methods are synchronous and block for the duration of the round trip.
Timeouts and cancellation belong to whoever configured the client.

Usage:
    from warehouse_reconciler.adapters.base import CatalogClient

    def drop_role(client: CatalogClient, name: str) -> None:
        rows = client.query("SHOW ROLES LIKE 'ANALYST'")
        if rows:
            client.execute("DROP ROLE ANALYST")
"""

from typing import Any, Protocol


class CatalogClient(Protocol):
    """Execution interface that all catalog adapters must implement.

    Implementations raise ``warehouse_reconciler.errors.DriverError`` for
    any execution or connection failure.
    """

    def execute(self, sql: str, params: dict[str, Any] | None = None) -> int:
        """Execute a single DDL/DCL statement.

        Args:
            sql: Statement text.
            params: Optional dict of named bind parameters.

        Returns:
            Number of rows affected (``-1`` when the driver does not report
            a count).

        Raises:
            DriverError: If the statement fails.

        Example:
            client.execute("ALTER DATABASE REPORTS SET COMMENT = 'prod'")
        """
        ...

    def query(self, sql: str, params: dict[str, Any] | None = None) -> list[tuple]:
        """Run a statement that returns rows.

        Args:
            sql: Statement text (``SHOW``, ``DESC`` or ``SELECT``).
            params: Optional dict of named bind parameters.

        Returns:
            Rows as tuples in the column order of the result set.  Empty
            list if nothing matched.

        Raises:
            DriverError: If the statement fails.

        Example:
            rows = client.query("SHOW DATABASES LIKE 'REPORTS'")
        """
        ...

    def close(self) -> None:
        """Release the underlying connection pool."""
        ...
