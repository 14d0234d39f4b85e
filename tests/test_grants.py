"""Tests for table and view grant reconcilers."""

import pytest

from catalog_rows import grant_row, schema_row
from warehouse_reconciler.errors import NotFoundError, ValidationError
from warehouse_reconciler.reconcilers import TableGrantReconciler, ViewGrantReconciler, get_reconciler
from warehouse_reconciler.state import ResourceData, TableGrantState, ViewGrantState


class TestGrantCreate:
    """Test granting privileges."""

    def test_single_table(self, client) -> None:
        """One GRANT lists every privilege; the identity encodes them."""
        desired = TableGrantState(
            database="db", schema="s", table="events", privileges=["select", "insert"], grantee_role="analyst"
        )
        data = TableGrantReconciler(client).create(ResourceData(TableGrantState, desired=desired))
        assert client.executed == ["GRANT SELECT, INSERT ON TABLE DB.S.EVENTS TO ROLE ANALYST"]
        assert data.get_id() == "ANALYST.DB.S.EVENTS.SELECT.INSERT"
        assert data.get_state("grantee_role") == "ANALYST"

    def test_all_views_to_share(self, client) -> None:
        """ALL expands to every view in the schema."""
        desired = ViewGrantState(database="db", schema="s", view="all", privileges=["select"], grantee_share="partner")
        ViewGrantReconciler(client).create(ResourceData(ViewGrantState, desired=desired))
        assert client.executed == ["GRANT SELECT ON ALL VIEWS IN DB.S TO SHARE PARTNER"]


class TestGrantRead:
    """Test reading grants back."""

    def test_read_infers_role(self, client) -> None:
        """Without recorded state the grantee type comes from SHOW GRANTS."""
        client.on("SHOW TABLES", (None, "EVENTS"))
        client.on(
            "SHOW GRANTS ON TABLE DB.S.EVENTS",
            grant_row("SELECT", "TABLE", "DB.S.EVENTS", "ANALYST"),
            grant_row("INSERT", "TABLE", "DB.S.EVENTS", "ANALYST"),
        )
        data = TableGrantReconciler(client).import_("analyst.db.s.events.select")

        assert data.get_id() == "ANALYST.DB.S.EVENTS.SELECT"
        assert data.state == {
            "database": "DB",
            "schema_name": "S",
            "table": "EVENTS",
            "privileges": ["SELECT", "INSERT"],
            "grantee_role": "ANALYST",
            "grantee_share": "",
        }

    def test_read_all_uses_grants_to_grantee(self, client) -> None:
        """ALL is read from the grantee's grants within the schema."""
        client.on("SHOW SCHEMAS", schema_row("S", "DB"))
        client.on(
            "SHOW GRANTS TO ROLE ANALYST",
            grant_row("SELECT", "TABLE", "DB.S.A", "ANALYST"),
            grant_row("SELECT", "TABLE", "DB.S.B", "ANALYST"),
        )
        data = ResourceData(TableGrantState, state={"grantee_role": "ANALYST"}, id="ANALYST.DB.S.ALL.SELECT")
        TableGrantReconciler(client).read(data)
        assert data.get_state("table") == "ALL"
        assert data.get_state("privileges") == ["SELECT"]

    def test_read_missing_grant(self, client) -> None:
        """Nothing granted means the grant is gone."""
        client.on("SHOW VIEWS", (None, "V"))
        with pytest.raises(NotFoundError, match="View grant PARTNER.DB.S.V does not exist"):
            ViewGrantReconciler(client).read(ResourceData(ViewGrantState, id="PARTNER.DB.S.V.SELECT"))


class TestGrantUpdateAndDelete:
    """Test update rejection and revocation."""

    def test_update_not_supported(self, client) -> None:
        """Privilege changes are delete-then-create."""
        with pytest.raises(ValidationError, match="ForceNew"):
            TableGrantReconciler(client).update(ResourceData(TableGrantState, id="A.DB.S.T.SELECT"))

    def test_revoke_from_share(self, client) -> None:
        """REVOKE names the grantee type recorded in state."""
        client.on("SHOW VIEWS", (None, "V"))
        client.on("SHOW GRANTS ON VIEW", grant_row("SELECT", "VIEW", "DB.S.V", "PARTNER", granted_to="SHARE"))
        data = ResourceData(ViewGrantState, state={"grantee_share": "PARTNER"}, id="PARTNER.DB.S.V.SELECT")

        ViewGrantReconciler(client).delete(data)

        assert client.executed == ["REVOKE SELECT ON VIEW DB.S.V FROM SHARE PARTNER"]
        assert data.get_id() == ""

    def test_revoke_all(self, client) -> None:
        """Revoking ALL uses the schema-wide form."""
        client.on("SHOW SCHEMAS", schema_row("S", "DB"))
        client.on(
            "SHOW GRANTS TO ROLE ANALYST",
            grant_row("SELECT", "TABLE", "DB.S.A", "ANALYST"),
            grant_row("INSERT", "TABLE", "DB.S.A", "ANALYST"),
        )
        data = ResourceData(TableGrantState, state={"grantee_role": "ANALYST"}, id="ANALYST.DB.S.ALL.SELECT.INSERT")

        TableGrantReconciler(client).delete(data)

        assert client.executed == ["REVOKE SELECT, INSERT ON ALL TABLES IN DB.S FROM ROLE ANALYST"]

    def test_revoke_unknown_privilege(self, client) -> None:
        """Unknown privileges in the identity fail before any statement."""
        with pytest.raises(ValidationError, match="Unsupported VIEW privileges"):
            ViewGrantReconciler(client).delete(ResourceData(ViewGrantState, id="R.DB.S.V.INSERT"))
        assert client.queries == []

    def test_revoke_missing_grant(self, client) -> None:
        """A grant that is already gone raises without a REVOKE."""
        client.on("SHOW TABLES", (None, "EVENTS"))
        with pytest.raises(NotFoundError):
            TableGrantReconciler(client).delete(ResourceData(TableGrantState, id="ANALYST.DB.S.EVENTS.SELECT"))
        assert client.executed == []

    def test_registry_kinds(self, client) -> None:
        """Grant kinds are registered under their own names."""
        assert isinstance(get_reconciler("table_grant", client), TableGrantReconciler)
        assert isinstance(get_reconciler("view_grant", client), ViewGrantReconciler)
