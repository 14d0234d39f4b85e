"""Tests for the warehouse-reconciler CLI."""

import io
import json
import textwrap
from pathlib import Path
from unittest.mock import patch

import pytest
from rich.console import Console

from catalog_rows import database_row, user_property, user_row
from warehouse_reconciler import cli
from warehouse_reconciler.cli import main


@pytest.fixture
def output():
    """Capture CLI output on a wide console."""
    buffer = io.StringIO()
    with patch.object(cli, "console", Console(file=buffer, width=200, color_system=None)):
        yield buffer


@pytest.fixture
def fake(client):
    with patch("warehouse_reconciler.cli.get_client", return_value=client) as get_client:
        client.get_client = get_client
        yield client


def _attrs(tmp_path: Path, attrs: dict) -> str:
    path = tmp_path / "attrs.json"
    path.write_text(json.dumps(attrs))
    return str(path)


class TestKinds:
    """Test the declared surface listing."""

    def test_lists_all_kinds(self, output) -> None:
        """Every registered kind is listed."""
        assert main(["kinds"]) == 0
        text = output.getvalue()
        for kind in ("database", "schema", "table", "view", "pipe", "stage", "user", "role", "table_grant", "view_grant"):
            assert kind in text

    def test_one_kind_attributes(self, output) -> None:
        """A kind's attributes show presence, mutability and normalization."""
        assert main(["kinds", "user"]) == 0
        text = output.getvalue()
        assert "rsa_public_key" in text
        assert "fingerprint" in text
        assert "required" in text

    def test_unknown_kind(self, output) -> None:
        """Unknown kinds exit 1."""
        assert main(["kinds", "warehouse"]) == 1
        assert "Unknown kind" in output.getvalue()


class TestProfiles:
    """Test the profile listing."""

    def test_lists_profiles(self, output, tmp_path: Path) -> None:
        """Profiles and pool settings are printed."""
        config = tmp_path / "warehouse.toml"
        config.write_text(textwrap.dedent("""\
            [profiles.prod]
            url = "snowflake://me@acme"
            description = "Production"
        """))
        assert main(["--config", str(config), "profiles"]) == 0
        text = output.getvalue()
        assert "prod" in text
        assert "Production" in text
        assert "size=2" in text

    def test_missing_config(self, output, tmp_path: Path) -> None:
        """A missing warehouse.toml exits 1."""
        assert main(["--config", str(tmp_path / "none.toml"), "profiles"]) == 1
        assert "Warehouse config not found" in output.getvalue()


class TestReadCommands:
    """Test show and import."""

    def test_show(self, output, fake) -> None:
        """show prints the recorded state."""
        fake.on("SHOW DATABASES", database_row("REPORTS", comment="prod"))
        assert main(["--profile", "prod", "show", "database", "reports"]) == 0
        assert "REPORTS" in output.getvalue()
        assert "prod" in output.getvalue()
        fake.get_client.assert_called_once_with("prod", None)

    def test_show_absent_exits_1(self, output, fake) -> None:
        """Reconciler errors are printed and exit 1."""
        assert main(["show", "database", "reports"]) == 1
        assert "Database REPORTS does not exist" in output.getvalue()

    def test_import_masks_sensitive_values(self, output, fake) -> None:
        """Sensitive attributes are masked in JSON output."""
        fake.on("SHOW USERS", user_row("JDOE"))
        fake.on("DESC USER", user_property("NAME", "JDOE"), user_property("RSA_PUBLIC_KEY_FP", "SHA256:abc="))
        assert main(["import", "user", "jdoe"]) == 0
        text = output.getvalue()
        assert '"id": "JDOE"' in text
        assert "SHA256:abc=" not in text
        assert "********" in text


class TestMutatingCommands:
    """Test create, update and delete with and without --confirm."""

    def test_create_preview(self, output, fake, tmp_path: Path) -> None:
        """Without --confirm the statement is printed, not executed."""
        attrs = _attrs(tmp_path, {"name": "reports", "retention_time": 5})
        assert main(["create", "database", "--attrs", attrs]) == 0
        assert "CREATE DATABASE REPORTS DATA_RETENTION_TIME_IN_DAYS = 5" in output.getvalue()
        assert fake.executed == []

    def test_create_confirm(self, output, fake, tmp_path: Path) -> None:
        """With --confirm the object is created."""
        attrs = _attrs(tmp_path, {"name": "reports", "retention_time": 5})
        assert main(["create", "database", "--attrs", attrs, "--confirm"]) == 0
        assert fake.executed == ["CREATE DATABASE REPORTS DATA_RETENTION_TIME_IN_DAYS = 5"]
        assert "Created REPORTS" in output.getvalue()

    def test_create_hides_secret_statement(self, output, fake, tmp_path: Path) -> None:
        """Statements carrying credentials are not printed."""
        attrs = _attrs(
            tmp_path,
            {"name": "landing", "database": "db", "credentials": {"aws_secret_key": "hunter2"}},
        )
        assert main(["create", "stage", "--attrs", attrs]) == 0
        assert "hunter2" not in output.getvalue()

    def test_create_invalid_attributes(self, output, fake, tmp_path: Path) -> None:
        """Invalid attribute files exit 1 before any statement runs."""
        attrs = _attrs(tmp_path, {"name": "reports", "retention_time": 500})
        assert main(["create", "database", "--attrs", attrs]) == 1
        assert "Invalid database attributes" in output.getvalue()
        assert fake.executed == []

    def test_missing_attrs_file(self, output, fake, tmp_path: Path) -> None:
        """A missing attribute file exits 1."""
        assert main(["create", "role", "--attrs", str(tmp_path / "none.json")]) == 1
        assert "Attribute file not found" in output.getvalue()

    def test_update_preview_and_confirm(self, output, fake, tmp_path: Path) -> None:
        """update lists pending changes and applies them with --confirm."""
        fake.on("SHOW DATABASES", database_row("REPORTS", retention_time="5"))
        attrs = _attrs(tmp_path, {"name": "reports", "retention_time": 5, "comment": "prod"})

        assert main(["update", "database", "REPORTS", "--attrs", attrs]) == 0
        assert "comment" in output.getvalue()
        assert fake.executed == []

        assert main(["update", "database", "REPORTS", "--attrs", attrs, "--confirm"]) == 0
        assert fake.executed == ["ALTER DATABASE REPORTS SET COMMENT = 'prod'"]

    def test_update_no_changes(self, output, fake, tmp_path: Path) -> None:
        """An up-to-date object reports no changes."""
        fake.on("SHOW DATABASES", database_row("REPORTS", retention_time="5"))
        attrs = _attrs(tmp_path, {"name": "reports", "retention_time": 5})
        assert main(["update", "database", "REPORTS", "--attrs", attrs]) == 0
        assert "No changes" in output.getvalue()

    def test_delete_preview_and_confirm(self, output, fake) -> None:
        """delete drops only with --confirm."""
        fake.on("SHOW ROLES", ("x", "ANALYST"))
        assert main(["delete", "role", "analyst"]) == 0
        assert fake.executed == []

        assert main(["delete", "role", "analyst", "--confirm"]) == 0
        assert fake.executed == ["DROP ROLE ANALYST"]
