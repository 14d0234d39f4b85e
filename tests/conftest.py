"""Shared test fixtures: an in-memory catalog client.

``FakeCatalogClient`` answers ``query`` calls from substring rules and
records every statement, so tests can assert on the exact SQL issued
without a warehouse.
"""

from typing import Any

import pytest

from warehouse_reconciler.errors import DriverError


class FakeCatalogClient:
    """Records statements and answers queries from registered rules.

    Rules are ``(fragment, rows)`` pairs checked in registration order;
    the first rule whose fragment occurs in the query text wins.  Queries
    matching no rule return no rows.

    ``fail_on`` fragments make ``execute`` raise ``DriverError`` for any
    statement containing them (the statement is still recorded in
    ``attempted`` but not in ``executed``).
    """

    def __init__(self) -> None:
        self.rules: list[tuple[str, list[tuple]]] = []
        self.fail_on: list[str] = []
        self.executed: list[str] = []
        self.attempted: list[str] = []
        self.queries: list[tuple[str, dict[str, Any] | None]] = []
        self.closed = False

    def on(self, fragment: str, *rows: tuple) -> "FakeCatalogClient":
        self.rules.append((fragment, list(rows)))
        return self

    def execute(self, sql: str, params: dict[str, Any] | None = None) -> int:
        self.attempted.append(sql)
        for fragment in self.fail_on:
            if fragment in sql:
                raise DriverError(f"SQL compilation error near {fragment}", statement=sql)
        self.executed.append(sql)
        return 1

    def query(self, sql: str, params: dict[str, Any] | None = None) -> list[tuple]:
        self.queries.append((sql, params))
        for fragment, rows in self.rules:
            if fragment in sql:
                return list(rows)
        return []

    def close(self) -> None:
        self.closed = True

    @property
    def query_texts(self) -> list[str]:
        return [sql for sql, _ in self.queries]


@pytest.fixture
def client() -> FakeCatalogClient:
    return FakeCatalogClient()
