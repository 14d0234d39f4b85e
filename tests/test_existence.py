"""Tests for the existence oracle."""

import pytest

from warehouse_reconciler.catalog.existence import (
    ACCOUNT,
    Existence,
    Scope,
    exists,
    lookup,
    require,
    show_statement,
)
from warehouse_reconciler.errors import AmbiguityError, NotFoundError


class TestShowStatement:
    """Test the listing statement the oracle issues."""

    def test_account_level_has_no_in_clause(self) -> None:
        """Databases, users and roles are listed account-wide."""
        assert show_statement("DATABASES", "reports") == "SHOW DATABASES LIKE 'REPORTS'"
        assert show_statement("roles", "analyst") == "SHOW ROLES LIKE 'ANALYST'"

    def test_schema_scope_in_database(self) -> None:
        """Schemas are listed inside their database."""
        statement = show_statement("SCHEMAS", "raw", Scope("analytics"))
        assert statement == "SHOW SCHEMAS LIKE 'RAW' IN DATABASE ANALYTICS"

    def test_object_scope_in_schema(self) -> None:
        """Tables, views, pipes and stages are listed inside their schema."""
        statement = show_statement("TABLES", "events", Scope("analytics", "public"))
        assert statement == "SHOW TABLES LIKE 'EVENTS' IN SCHEMA ANALYTICS.PUBLIC"

    def test_account_types_ignore_scope(self) -> None:
        """An IN clause is never attached to account-level types."""
        assert show_statement("USERS", "jdoe", Scope("db")) == "SHOW USERS LIKE 'JDOE'"

    def test_scope_qualify(self) -> None:
        """Scope.qualify builds the dotted name used in messages."""
        assert Scope("db", "s").qualify("t") == "DB.S.T"
        assert ACCOUNT.qualify("reports") == "REPORTS"


class TestExists:
    """Test zero / one / many classification."""

    def test_absent(self, client) -> None:
        """Zero rows means absent."""
        assert exists(client, "DATABASES", "reports") is Existence.ABSENT

    def test_unique(self, client) -> None:
        """One row means unique."""
        client.on("SHOW DATABASES", (None, "REPORTS"))
        assert exists(client, "DATABASES", "reports") is Existence.UNIQUE

    def test_ambiguous_raises(self, client) -> None:
        """Two rows (quoted "foo" and "FOO") raise AmbiguityError."""
        client.on("SHOW DATABASES", (None, "foo"), (None, "FOO"))
        with pytest.raises(AmbiguityError) as exc_info:
            exists(client, "DATABASES", "foo")
        assert exc_info.value.row_count == 2
        assert "SHOW DATABASES LIKE 'FOO'" in str(exc_info.value)

    def test_lookup_returns_rows(self, client) -> None:
        """lookup returns the single matching row."""
        client.on("SHOW ROLES", (None, "ANALYST"))
        assert lookup(client, "ROLES", "analyst") == [(None, "ANALYST")]


class TestRequire:
    """Test the presence requirement used before reads and drops."""

    def test_returns_row(self, client) -> None:
        """The single matching row is returned."""
        client.on("SHOW SCHEMAS", (None, "RAW"))
        assert require(client, "SCHEMAS", "raw", Scope("db"), kind="Schema") == (None, "RAW")

    def test_absent_raises_not_found(self, client) -> None:
        """Zero rows raise NotFoundError naming the qualified object."""
        with pytest.raises(NotFoundError, match="Table DB.S.T does not exist"):
            require(client, "TABLES", "t", Scope("db", "s"), kind="Table")

    def test_ambiguous_raises(self, client) -> None:
        """Ambiguity wins over presence."""
        client.on("SHOW TABLES", (None, "t"), (None, "T"))
        with pytest.raises(AmbiguityError):
            require(client, "TABLES", "t", Scope("db", "s"))
