"""Tests for schema, table, view, pipe and stage reconcilers."""

import pytest

from catalog_rows import (
    column_row,
    info_table_row,
    info_view_row,
    pipe_row,
    schema_row,
    stage_property,
)
from warehouse_reconciler.errors import NotFoundError, ValidationError
from warehouse_reconciler.reconcilers import (
    PipeReconciler,
    SchemaDataSource,
    SchemaReconciler,
    StageReconciler,
    TableReconciler,
    ViewReconciler,
)
from warehouse_reconciler.state import (
    PipeState,
    ResourceData,
    SchemaState,
    StageState,
    TableState,
    ViewState,
)

# ============================================================================
# Schemas
# ============================================================================

SCHEMA_RECORDED = {"name": "RAW", "database": "ANALYTICS", "comment": "", "transient": False, "retention_time": 1}


class TestSchemaReconciler:
    """Test schema lifecycle."""

    def test_create(self, client) -> None:
        """Existence is checked inside the database before CREATE."""
        data = SchemaReconciler(client).create(
            ResourceData(SchemaState, desired=SchemaState(name="raw", database="analytics"))
        )
        assert client.query_texts == ["SHOW SCHEMAS LIKE 'RAW' IN DATABASE ANALYTICS"]
        assert client.executed == ["CREATE SCHEMA ANALYTICS.RAW DATA_RETENTION_TIME_IN_DAYS = 1"]
        assert data.get_id() == "ANALYTICS.RAW"

    def test_rename_checks_new_name(self, client) -> None:
        """The rename pre-check looks up the target name, not the source."""
        client.on("LIKE 'RAW'", schema_row("RAW", "ANALYTICS"))
        data = ResourceData(
            SchemaState,
            desired=SchemaState(name="staging", database="analytics"),
            state=SCHEMA_RECORDED,
            id="ANALYTICS.RAW",
        )

        SchemaReconciler(client).update(data)

        assert "SHOW SCHEMAS LIKE 'STAGING' IN DATABASE ANALYTICS" in client.query_texts
        assert client.executed == ["ALTER SCHEMA ANALYTICS.RAW RENAME TO ANALYTICS.STAGING"]
        assert data.get_id() == "ANALYTICS.STAGING"

    def test_retention_update(self, client) -> None:
        """Retention changes issue SET DATA_RETENTION_TIME_IN_DAYS."""
        client.on("SHOW SCHEMAS", schema_row("RAW", "ANALYTICS"))
        data = ResourceData(
            SchemaState,
            desired=SchemaState(name="raw", database="analytics", retention_time=7),
            state=SCHEMA_RECORDED,
            id="ANALYTICS.RAW",
        )
        SchemaReconciler(client).update(data)
        assert client.executed == ["ALTER SCHEMA ANALYTICS.RAW SET DATA_RETENTION_TIME_IN_DAYS = 7"]

    def test_moving_database_is_force_new(self, client) -> None:
        """Changing the database cannot be applied in place."""
        data = ResourceData(
            SchemaState,
            desired=SchemaState(name="raw", database="other"),
            state=SCHEMA_RECORDED,
            id="ANALYTICS.RAW",
        )
        with pytest.raises(ValidationError, match="database"):
            SchemaReconciler(client).update(data)
        assert client.executed == []

    def test_data_source(self, client) -> None:
        """The data source derives the identity and reads the schema."""
        client.on("SHOW SCHEMAS", schema_row("RAW", "ANALYTICS", comment="landing"))
        data = SchemaDataSource(client).read("analytics", "raw")
        assert data.get_id() == "ANALYTICS.RAW"
        assert data.get_state("comment") == "landing"
        assert client.executed == []

    def test_data_source_absent(self, client) -> None:
        """A missing schema is NotFoundError."""
        with pytest.raises(NotFoundError, match="Schema ANALYTICS.RAW does not exist"):
            SchemaDataSource(client).read("analytics", "raw")


# ============================================================================
# Tables
# ============================================================================


def _table(**overrides) -> TableState:
    attrs = {
        "name": "events",
        "database": "analytics",
        "schema": "public",
        "columns": [{"name": "id", "type": "number(38,0)"}, {"name": "v", "type": "varchar"}],
    }
    return TableState.from_attributes({**attrs, **overrides})


class TestTableReconciler:
    """Test table lifecycle."""

    def test_create(self, client) -> None:
        """Create renders the column list and records DB.SCHEMA.NAME."""
        data = TableReconciler(client).create(ResourceData(TableState, desired=_table()))
        assert client.query_texts == ["SHOW TABLES LIKE 'EVENTS' IN SCHEMA ANALYTICS.PUBLIC"]
        assert client.executed == ["CREATE TABLE ANALYTICS.PUBLIC.EVENTS (ID NUMBER(38,0), V VARCHAR)"]
        assert data.get_id() == "ANALYTICS.PUBLIC.EVENTS"

    def test_read_combines_info_schema_and_columns(self, client) -> None:
        """Read merges the information-schema row with DESC TABLE."""
        client.on("SHOW TABLES", (None, "EVENTS"))
        client.on("INFORMATION_SCHEMA.TABLES", info_table_row("ANALYTICS", "PUBLIC", "EVENTS", comment="raw"))
        client.on("DESC TABLE", column_row("ID", "NUMBER(38,0)"), column_row("V", "VARCHAR"))

        data = TableReconciler(client).import_("analytics.public.events")

        assert data.get_state("columns") == [
            {"name": "ID", "type": "NUMBER(38,0)"},
            {"name": "V", "type": "VARCHAR"},
        ]
        assert data.get_state("schema_name") == "PUBLIC"
        assert data.get_state("comment") == "raw"

    def test_rename_then_comment(self, client) -> None:
        """Rename runs first; the comment addresses the new name."""
        client.on("LIKE 'EVENTS'", (None, "EVENTS"))
        recorded = _table().normalized()
        data = ResourceData(
            TableState,
            desired=_table(name="clicks", comment="clickstream"),
            state=recorded,
            id="ANALYTICS.PUBLIC.EVENTS",
        )

        TableReconciler(client).update(data)

        assert client.executed == [
            "ALTER TABLE ANALYTICS.PUBLIC.EVENTS RENAME TO ANALYTICS.PUBLIC.CLICKS",
            "ALTER TABLE ANALYTICS.PUBLIC.CLICKS SET COMMENT = 'clickstream'",
        ]

    def test_column_change_is_force_new(self, client) -> None:
        """Column changes require replacement."""
        data = ResourceData(
            TableState,
            desired=_table(columns=[{"name": "id", "type": "varchar"}]),
            state=_table().normalized(),
            id="ANALYTICS.PUBLIC.EVENTS",
        )
        with pytest.raises(ValidationError, match="columns"):
            TableReconciler(client).update(data)


# ============================================================================
# Views
# ============================================================================


class TestViewReconciler:
    """Test view lifecycle."""

    def test_create_strips_inline_prefix(self, client) -> None:
        """A declared create-view prefix is replaced by the rendered one."""
        desired = ViewState(
            name="active",
            database="db",
            schema="s",
            view_definition="create or replace view db.s.active as\nselect * from t where active",
        )
        ViewReconciler(client).create(ResourceData(ViewState, desired=desired))
        assert client.executed == ["CREATE VIEW DB.S.ACTIVE AS\nselect * from t where active"]

    def test_read_strips_prefix(self, client) -> None:
        """The information schema stores the full CREATE text."""
        client.on("SHOW VIEWS", (None, "ACTIVE"))
        client.on(
            "INFORMATION_SCHEMA.VIEWS",
            info_view_row("DB", "S", "ACTIVE", "create secure view DB.S.ACTIVE as select 1", is_secure="YES"),
        )
        data = ViewReconciler(client).import_("db.s.active")
        assert data.get_state("view_definition") == "select 1"
        assert data.get_state("secure") is True

    def test_update_not_supported(self, client) -> None:
        """Every view attribute is ForceNew."""
        data = ResourceData(ViewState, desired=ViewState(name="v", database="d", schema="s", view_definition="select 1"))
        with pytest.raises(ValidationError, match="ForceNew"):
            ViewReconciler(client).update(data)
        assert client.queries == []

    def test_delete(self, client) -> None:
        """Delete re-verifies and drops the view."""
        client.on("SHOW VIEWS", (None, "ACTIVE"))
        ViewReconciler(client).delete(ResourceData(ViewState, id="DB.S.ACTIVE"))
        assert client.executed == ["DROP VIEW DB.S.ACTIVE"]


# ============================================================================
# Pipes
# ============================================================================

COPY = "COPY INTO DB.RAW.EVENTS FROM @DB.RAW.LANDING"


def _pipe(**overrides) -> PipeState:
    return PipeState.from_attributes(
        {"name": "loader", "database": "db", "schema": "raw", "copy_statement": COPY, **overrides}
    )


class TestPipeReconciler:
    """Test pipe lifecycle."""

    def test_create(self, client) -> None:
        """Create renders the COPY statement after AS."""
        PipeReconciler(client).create(ResourceData(PipeState, desired=_pipe(comment="events")))
        assert client.executed == [f"CREATE PIPE DB.RAW.LOADER COMMENT = 'events' AS {COPY}"]

    def test_read_auto_ingest_from_channel(self, client) -> None:
        """A notification channel means auto-ingest is on."""
        client.on("SHOW PIPES", pipe_row("LOADER", "DB", "RAW", COPY, notification_channel="arn:aws:sqs:q"))
        data = PipeReconciler(client).import_("db.raw.loader")
        assert data.get_state("auto_ingest") is True
        assert data.get_state("notification_channel") == "arn:aws:sqs:q"
        assert data.get_state("copy_statement") == COPY

    def test_comment_update(self, client) -> None:
        """Only the comment is mutable."""
        client.on("SHOW PIPES", pipe_row("LOADER", "DB", "RAW", COPY))
        data = ResourceData(
            PipeState,
            desired=_pipe(comment="events"),
            state=_pipe().normalized(),
            id="DB.RAW.LOADER",
        )
        PipeReconciler(client).update(data)
        assert client.executed == ["ALTER PIPE DB.RAW.LOADER SET COMMENT = 'events'"]

    def test_copy_change_is_force_new(self, client) -> None:
        """A different COPY statement requires replacement."""
        data = ResourceData(
            PipeState,
            desired=_pipe(copy_statement="COPY INTO DB.RAW.OTHER FROM @DB.RAW.LANDING"),
            state=_pipe().normalized(),
            id="DB.RAW.LOADER",
        )
        with pytest.raises(ValidationError, match="copy_statement"):
            PipeReconciler(client).update(data)


# ============================================================================
# Stages
# ============================================================================


class TestStageReconciler:
    """Test stage lifecycle."""

    def test_create_checks_existence(self, client) -> None:
        """Create checks the stage name inside its schema first."""
        desired = StageState(name="landing", database="db", url="s3://bucket/", aws_role="arn:aws:iam::1:role/x")
        data = StageReconciler(client).create(ResourceData(StageState, desired=desired))
        assert client.query_texts == ["SHOW STAGES LIKE 'LANDING' IN SCHEMA DB.PUBLIC"]
        assert client.executed == [
            "CREATE STAGE DB.PUBLIC.LANDING URL = 's3://bucket/' CREDENTIALS = (AWS_ROLE = 'arn:aws:iam::1:role/x')"
        ]
        assert data.get_id() == "DB.PUBLIC.LANDING"

    def test_read_leaves_credentials_untouched(self, client) -> None:
        """Credentials are never read back."""
        client.on("SHOW STAGES", (None, "LANDING"))
        client.on(
            "DESC STAGE",
            stage_property("URL", '["s3://bucket/"]'),
            stage_property("SNOWFLAKE_IAM_USER", "arn:aws:iam::9:user/sf", parent="STAGE_CREDENTIALS"),
        )
        data = ResourceData(StageState, state={"credentials": {"AWS_KEY_ID": "AKIA"}}, id="DB.PUBLIC.LANDING")

        StageReconciler(client).read(data)

        assert data.get_state("url") == "s3://bucket/"
        assert data.get_state("snowflake_iam_user") == "arn:aws:iam::9:user/sf"
        assert data.get_state("credentials") == {"AWS_KEY_ID": "AKIA"}

    def test_update_not_supported(self, client) -> None:
        """Every stage attribute is ForceNew."""
        data = ResourceData(StageState, desired=StageState(name="landing", database="db"), id="DB.PUBLIC.LANDING")
        with pytest.raises(ValidationError, match="ForceNew"):
            StageReconciler(client).update(data)

    def test_delete_absent(self, client) -> None:
        """Delete re-verifies existence like every other kind."""
        with pytest.raises(NotFoundError, match="Stage DB.PUBLIC.LANDING does not exist"):
            StageReconciler(client).delete(ResourceData(StageState, id="DB.PUBLIC.LANDING"))
        assert client.executed == []
