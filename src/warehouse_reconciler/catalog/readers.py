"""Catalog readers: live object state as typed snapshots.

This module reads remote catalog objects:
- Listing commands: databases, schemas, tables, pipes, roles (``SHOW ...``)
- Information schema: tables and views (bound-parameter ``SELECT``)
- Description commands: table columns, user and stage properties (``DESC ...``)
- Grant listings (``SHOW GRANTS ON ...`` / ``SHOW GRANTS TO ...``)

Every reader first asks the existence oracle for exactly one match and
raises ``NotFoundError`` when the object is absent.  The client is passed
explicitly to every function.

Usage:
    from warehouse_reconciler.catalog import readers

    row = readers.show_database(client, "reports")
    print(row.comment, row.retention_time)
"""

import logging
from collections.abc import Callable
from typing import Any

from warehouse_reconciler.adapters.base import CatalogClient
from warehouse_reconciler.catalog.existence import ACCOUNT, Scope, require
from warehouse_reconciler.catalog.identifiers import normalize, qualified_name, render_qualified
from warehouse_reconciler.catalog.models import (
    DatabaseRow,
    GrantRow,
    GrantSnapshot,
    InfoSchemaTableRow,
    InfoSchemaViewRow,
    PipeRow,
    RoleRow,
    SchemaRow,
    StageProperties,
    StagePropertyRow,
    TableColumnRow,
    TableRow,
    UserProperties,
    UserPropertyRow,
)
from warehouse_reconciler.errors import DriverError, NotFoundError

logger = logging.getLogger(__name__)


# ============================================================================
# Property tables
# ============================================================================


def _text(value: Any) -> str:
    """DESC output spells unset values as ``null``."""
    if value is None or value == "null":
        return ""
    return str(value)


def _flag(value: Any) -> bool:
    return _text(value).strip().lower() == "true"


def _stage_url(value: Any) -> str:
    # DESC STAGE renders URL as ["s3://bucket/path/"]
    return _text(value).strip('[" ]')


PropertyTable = dict[str, tuple[str, Callable[[Any], Any]]]

# DESC USER property -> (UserProperties field, converter)
USER_PROPERTIES: PropertyTable = {
    "NAME": ("name", _text),
    "COMMENT": ("comment", _text),
    "LOGIN_NAME": ("login_name", _text),
    "DISPLAY_NAME": ("display_name", _text),
    "FIRST_NAME": ("first_name", _text),
    "MIDDLE_NAME": ("middle_name", _text),
    "LAST_NAME": ("last_name", _text),
    "EMAIL": ("email", _text),
    "MUST_CHANGE_PASSWORD": ("must_change_password", _flag),
    "DISABLED": ("disabled", _flag),
    "SNOWFLAKE_LOCK": ("snowflake_lock", _flag),
    "DAYS_TO_EXPIRY": ("days_to_expiry", _text),
    "MINS_TO_UNLOCK": ("mins_to_unlock", _text),
    "DEFAULT_WAREHOUSE": ("default_warehouse", _text),
    "DEFAULT_NAMESPACE": ("default_namespace", _text),
    "DEFAULT_ROLE": ("default_role", _text),
    "EXT_AUTHN_DUO": ("ext_authn_duo", _flag),
    "EXT_AUTHN_UID": ("ext_authn_uid", _text),
    "MINS_TO_BYPASS_MFA": ("mins_to_bypass_mfa", _text),
    "MINS_TO_BYPASS_NETWORK_POLICY": ("mins_to_bypass_network_policy", _text),
    "RSA_PUBLIC_KEY_FP": ("rsa_public_key_fp", _text),
    "RSA_PUBLIC_KEY_2_FP": ("rsa_public_key_2_fp", _text),
}

# DESC STAGE property -> (StageProperties field, converter)
STAGE_PROPERTIES: PropertyTable = {
    "URL": ("url", _stage_url),
    "AWS_ROLE": ("aws_role", _text),
    "AWS_EXTERNAL_ID": ("aws_external_id", _text),
    "SNOWFLAKE_IAM_USER": ("snowflake_iam_user", _text),
}


def fold_properties(pairs: list[tuple[str, Any]], table: PropertyTable) -> dict[str, Any]:
    """Map ``(property, value)`` pairs onto field values via *table*.

    Properties missing from *table* are ignored.

    Example:
        >>> fold_properties([("EMAIL", "a@b.c"), ("PASSWORD", "***")], USER_PROPERTIES)
        {'email': 'a@b.c'}
    """
    values: dict[str, Any] = {}
    for prop, value in pairs:
        entry = table.get(normalize(prop))
        if entry is None:
            continue
        field, convert = entry
        values[field] = convert(value)
    return values


# ============================================================================
# Listing readers
# ============================================================================


def show_database(client: CatalogClient, name: str) -> DatabaseRow:
    """Read one database from ``SHOW DATABASES``.

    Raises:
        NotFoundError: If no database matches.
        AmbiguityError: If more than one database matches.
    """
    row = require(client, "DATABASES", name, ACCOUNT, kind="Database")
    return DatabaseRow.from_row(row)


def show_schema(client: CatalogClient, database: str, name: str) -> SchemaRow:
    """Read one schema from ``SHOW SCHEMAS IN DATABASE <db>``."""
    row = require(client, "SCHEMAS", name, Scope(database), kind="Schema")
    return SchemaRow.from_row(row)


def show_table(client: CatalogClient, database: str, schema: str, name: str) -> TableRow:
    """Read one table from ``SHOW TABLES IN SCHEMA <db>.<schema>``."""
    row = require(client, "TABLES", name, Scope(database, schema), kind="Table")
    return TableRow.from_row(row)


def show_pipe(client: CatalogClient, database: str, schema: str, name: str) -> PipeRow:
    """Read one pipe from ``SHOW PIPES IN SCHEMA <db>.<schema>``."""
    row = require(client, "PIPES", name, Scope(database, schema), kind="Pipe")
    return PipeRow.from_row(row)


def show_role(client: CatalogClient, name: str) -> RoleRow:
    """Read one role from ``SHOW ROLES``."""
    row = require(client, "ROLES", name, ACCOUNT, kind="Role")
    return RoleRow.from_row(row)


# ============================================================================
# Information-schema readers
# ============================================================================


def read_table(client: CatalogClient, database: str, schema: str, name: str) -> InfoSchemaTableRow:
    """Read one table from ``<db>.INFORMATION_SCHEMA.TABLES``.

    Args:
        client: Catalog client.
        database: Database name.
        schema: Schema name.
        name: Table name.

    Returns:
        InfoSchemaTableRow for the table.

    Raises:
        NotFoundError: If the table is absent (from the oracle, or if the
            information schema has not caught up yet).
        AmbiguityError: If more than one table matches.
    """
    require(client, "TABLES", name, Scope(database, schema), kind="Table")

    query = f"""
        SELECT
            table_catalog,
            table_schema,
            table_name,
            table_owner,
            table_type,
            is_transient,
            clustering_key,
            row_count,
            bytes,
            retention_time,
            created,
            last_altered,
            comment
        FROM {render_qualified(database, "INFORMATION_SCHEMA", "TABLES")}
        WHERE table_name = :table_name
          AND table_schema = :table_schema
    """
    rows = client.query(query, {"table_name": normalize(name), "table_schema": normalize(schema)})
    if not rows:
        raise NotFoundError("Table", qualified_name(database, schema, name))
    return InfoSchemaTableRow.from_row(rows[0])


def read_view(client: CatalogClient, database: str, schema: str, name: str) -> InfoSchemaViewRow:
    """Read one view from ``<db>.INFORMATION_SCHEMA.VIEWS``."""
    require(client, "VIEWS", name, Scope(database, schema), kind="View")

    query = f"""
        SELECT
            table_catalog,
            table_schema,
            table_name,
            table_owner,
            view_definition,
            check_option,
            is_updatable,
            insertable_into,
            is_secure,
            created,
            last_altered,
            comment
        FROM {render_qualified(database, "INFORMATION_SCHEMA", "VIEWS")}
        WHERE table_name = :table_name
          AND table_schema = :table_schema
    """
    rows = client.query(query, {"table_name": normalize(name), "table_schema": normalize(schema)})
    if not rows:
        raise NotFoundError("View", qualified_name(database, schema, name))
    return InfoSchemaViewRow.from_row(rows[0])


# ============================================================================
# Description readers
# ============================================================================


def desc_table(client: CatalogClient, database: str, schema: str, name: str) -> list[TableColumnRow]:
    """Read the column list of one table from ``DESC TABLE``, in column order."""
    require(client, "TABLES", name, Scope(database, schema), kind="Table")
    rows = client.query(f"DESC TABLE {render_qualified(database, schema, name)}")
    return [TableColumnRow.from_row(row) for row in rows]


def desc_user(client: CatalogClient, name: str) -> UserProperties:
    """Read one user from ``DESC USER`` and fold its properties.

    Properties not listed in ``USER_PROPERTIES`` are dropped.
    """
    require(client, "USERS", name, ACCOUNT, kind="User")
    rows = client.query(f"DESC USER {render_qualified(name)}")
    pairs = [(r.property, r.value) for r in map(UserPropertyRow.from_row, rows)]
    return UserProperties(**fold_properties(pairs, USER_PROPERTIES))


def desc_stage(client: CatalogClient, database: str, schema: str, name: str) -> StageProperties:
    """Read one stage from ``DESC STAGE`` and fold its properties.

    Properties not listed in ``STAGE_PROPERTIES`` are dropped.
    """
    require(client, "STAGES", name, Scope(database, schema), kind="Stage")
    rows = client.query(f"DESC STAGE {render_qualified(database, schema, name)}")
    pairs = [(r.property, r.property_value) for r in map(StagePropertyRow.from_row, rows)]
    return StageProperties(**fold_properties(pairs, STAGE_PROPERTIES))


# ============================================================================
# Grant readers
# ============================================================================


def _securable_name(name: str) -> str:
    """Normalize a fully qualified name from SHOW GRANTS (drops quoting)."""
    return name.replace('"', "").upper()


def show_grants(
    client: CatalogClient,
    object_type: str,
    grantee: str,
    database: str,
    schema: str,
    object_name: str,
    grantee_type: str = "",
) -> GrantSnapshot:
    """Read the privileges *grantee* holds on a table or view.

    For a single object this lists ``SHOW GRANTS ON <TYPE> db.schema.object``
    and keeps rows for the grantee.  For the literal object name ``ALL`` it
    lists ``SHOW GRANTS TO ROLE|SHARE grantee`` and keeps rows for objects
    of *object_type* inside ``db.schema``.

    Args:
        client: Catalog client.
        object_type: ``TABLE`` or ``VIEW``.
        grantee: Role or share name.
        database: Database name.
        schema: Schema name.
        object_name: Object name, or ``ALL``.
        grantee_type: ``ROLE`` or ``SHARE``; empty when unknown (import).

    Returns:
        GrantSnapshot with privileges in listing order, without duplicates.

    Raises:
        NotFoundError: If the securable is absent or the grantee holds no
            matching privilege.
        AmbiguityError: If the securable name is ambiguous.
    """
    object_type = normalize(object_type)
    grantee = normalize(grantee)
    grantee_type = normalize(grantee_type)
    object_name = normalize(object_name)
    plural = f"{object_type}S"

    if object_name == "ALL":
        require(client, "SCHEMAS", schema, Scope(database), kind="Schema")
        prefix = f"{qualified_name(database, schema)}."
        # An unknown grantee type (import) is looked up as a role, then a share.
        keywords = (grantee_type,) if grantee_type else ("ROLE", "SHARE")
        failures: list[DriverError] = []
        matches: list[GrantRow] = []
        for keyword in keywords:
            try:
                rows = client.query(f"SHOW GRANTS TO {keyword} {render_qualified(grantee)}")
            except DriverError as e:
                logger.debug(f"SHOW GRANTS TO {keyword} {grantee} failed: {e}")
                failures.append(e)
                continue
            matches = [
                g
                for g in map(GrantRow.from_row, rows)
                if normalize(g.granted_on) == object_type and _securable_name(g.name).startswith(prefix)
            ]
            if matches:
                grantee_type = keyword
                break
        if len(failures) == len(keywords):
            raise failures[-1]
    else:
        require(client, plural, object_name, Scope(database, schema), kind=object_type.title())
        rows = client.query(
            f"SHOW GRANTS ON {object_type} {render_qualified(database, schema, object_name)}"
        )
        matches = [
            g
            for g in map(GrantRow.from_row, rows)
            if normalize(g.grantee_name) == grantee
            and (not grantee_type or normalize(g.granted_to) == grantee_type)
        ]
        if matches and not grantee_type:
            grantee_type = normalize(matches[0].granted_to)

    privileges: list[str] = []
    for g in matches:
        privilege = normalize(g.privilege)
        if privilege not in privileges:
            privileges.append(privilege)

    if not privileges:
        raise NotFoundError(
            f"{object_type.title()} grant",
            qualified_name(grantee, database, schema, object_name),
        )

    logger.debug(f"{grantee} holds {privileges} on {object_type} {database}.{schema}.{object_name}")
    return GrantSnapshot(
        grantee=grantee,
        grantee_type=grantee_type,
        database=normalize(database),
        schema_name=normalize(schema),
        object_name=object_name,
        privileges=privileges,
    )


