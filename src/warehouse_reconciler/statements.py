"""Statement builders: desired state to DDL/DCL text.

Pure functions of their arguments.  Nothing here executes a statement or
looks at remote state.

Identifiers go through ``quote_identifier`` / ``render_qualified`` and
values through ``string_literal``; the only pass-through text is a view's
query body and a pipe's ``COPY INTO`` statement, both validated by their
state models.

Optional clauses are appended only when the attribute is set:

    >>> create_database(DatabaseState(name="reports", retention_time=5))
    'CREATE DATABASE REPORTS DATA_RETENTION_TIME_IN_DAYS = 5'

Usage:
    from warehouse_reconciler import statements

    sql = statements.set_property("DATABASE", ["REPORTS"], "COMMENT", "prod")
    # ALTER DATABASE REPORTS SET COMMENT = 'prod'
"""

from collections.abc import Sequence

from warehouse_reconciler.catalog.identifiers import normalize, quote_identifier, render_qualified, string_literal
from warehouse_reconciler.state.models import (
    DatabaseState,
    GrantState,
    PipeState,
    RoleState,
    SchemaState,
    StageState,
    TableState,
    UserState,
    ViewState,
)


def _comment_clause(comment: str) -> str:
    return f" COMMENT = {string_literal(comment)}" if comment else ""


def _render_value(value: str | bool | int) -> str:
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, int):
        return str(value)
    return string_literal(value)


# ============================================================================
# Generic ALTER / DROP
# ============================================================================


def rename_object(object_type: str, old: Sequence[str], new: Sequence[str]) -> str:
    """``ALTER <TYPE> <old> RENAME TO <new>``.

    Example:
        >>> rename_object("SCHEMA", ["DB", "RAW"], ["DB", "STAGING"])
        'ALTER SCHEMA DB.RAW RENAME TO DB.STAGING'
    """
    return f"ALTER {object_type} {render_qualified(*old)} RENAME TO {render_qualified(*new)}"


def set_property(object_type: str, target: Sequence[str], prop: str, value: str | bool | int) -> str:
    """``ALTER <TYPE> <target> SET <PROP> = <value>``, or ``UNSET`` for ``""``.

    Examples:
        >>> set_property("DATABASE", ["REPORTS"], "COMMENT", "prod")
        "ALTER DATABASE REPORTS SET COMMENT = 'prod'"
        >>> set_property("ROLE", ["ANALYST"], "COMMENT", "")
        'ALTER ROLE ANALYST UNSET COMMENT'
        >>> set_property("USER", ["JDOE"], "DISABLED", True)
        'ALTER USER JDOE SET DISABLED = TRUE'
    """
    prefix = f"ALTER {object_type} {render_qualified(*target)}"
    if isinstance(value, str) and value == "":
        return f"{prefix} UNSET {prop}"
    return f"{prefix} SET {prop} = {_render_value(value)}"


def drop_object(object_type: str, target: Sequence[str]) -> str:
    """``DROP <TYPE> <target>``."""
    return f"DROP {object_type} {render_qualified(*target)}"


# ============================================================================
# Databases and schemas
# ============================================================================


def create_database(state: DatabaseState) -> str:
    keyword = "TRANSIENT DATABASE" if state.transient else "DATABASE"
    statement = f"CREATE {keyword} {render_qualified(state.name)}"
    statement += f" DATA_RETENTION_TIME_IN_DAYS = {state.retention_time}"
    return statement + _comment_clause(state.comment)


def create_schema(state: SchemaState) -> str:
    """Render ``CREATE [TRANSIENT] SCHEMA``.

    Example:
        >>> create_schema(SchemaState(name="raw", database="db", transient=True, comment="x"))
        "CREATE TRANSIENT SCHEMA DB.RAW DATA_RETENTION_TIME_IN_DAYS = 1 COMMENT = 'x'"
    """
    keyword = "TRANSIENT SCHEMA" if state.transient else "SCHEMA"
    statement = f"CREATE {keyword} {render_qualified(state.database, state.name)}"
    statement += f" DATA_RETENTION_TIME_IN_DAYS = {state.retention_time}"
    return statement + _comment_clause(state.comment)


# ============================================================================
# Tables and views
# ============================================================================


def create_table(state: TableState) -> str:
    """Render ``CREATE TABLE`` with the comma-joined column list.

    Example:
        >>> create_table(TableState(name="t", database="d", schema="s",
        ...     columns=[{"name": "id", "type": "number(38,0)"}, {"name": "v", "type": "varchar"}]))
        'CREATE TABLE D.S.T (ID NUMBER(38,0), V VARCHAR)'
    """
    columns = ", ".join(f"{quote_identifier(c.name)} {c.type}" for c in state.columns)
    statement = (
        f"CREATE TABLE {render_qualified(state.database, state.schema_name, state.name)} ({columns})"
    )
    return statement + _comment_clause(state.comment)


def create_view(state: ViewState) -> str:
    """Render ``CREATE [SECURE] VIEW ... AS`` followed by the query body."""
    keyword = "SECURE VIEW" if state.secure else "VIEW"
    target = render_qualified(state.database, state.schema_name, state.name)
    return f"CREATE {keyword} {target}{_comment_clause(state.comment)} AS\n{state.view_definition}"


# ============================================================================
# Pipes and stages
# ============================================================================


def create_pipe(state: PipeState) -> str:
    """Render ``CREATE PIPE ... AS COPY INTO ...``.

    Example:
        >>> create_pipe(PipeState(name="p", database="d", schema="s", copy_statement="copy into t from @st"))
        'CREATE PIPE D.S.P AS copy into t from @st'
    """
    statement = f"CREATE PIPE {render_qualified(state.database, state.schema_name, state.name)}"
    if state.auto_ingest:
        statement += " AUTO_INGEST = TRUE"
    statement += _comment_clause(state.comment)
    return f"{statement} AS {state.copy_statement}"


def create_stage(state: StageState) -> str:
    """Render ``CREATE STAGE`` with optional URL, credentials and comment.

    Credentials render as ``CREDENTIALS = (KEY = 'value' ...)``; an AWS role
    renders as ``CREDENTIALS = (AWS_ROLE = '...')``.
    """
    statement = f"CREATE STAGE {render_qualified(state.database, state.schema_name, state.name)}"
    if state.url:
        statement += f" URL = {string_literal(state.url)}"
    if state.credentials:
        pairs = " ".join(f"{key} = {string_literal(value)}" for key, value in state.credentials.items())
        statement += f" CREDENTIALS = ({pairs})"
    elif state.aws_role:
        statement += f" CREDENTIALS = (AWS_ROLE = {string_literal(state.aws_role)})"
    return statement + _comment_clause(state.comment)


# ============================================================================
# Users and roles
# ============================================================================

# Create-time user properties, in clause order
_USER_CREATE_PROPERTIES = (
    ("login_name", "LOGIN_NAME"),
    ("display_name", "DISPLAY_NAME"),
    ("email", "EMAIL"),
    ("must_change_password", "MUST_CHANGE_PASSWORD"),
    ("disabled", "DISABLED"),
    ("default_role", "DEFAULT_ROLE"),
    ("default_warehouse", "DEFAULT_WAREHOUSE"),
    ("rsa_public_key", "RSA_PUBLIC_KEY"),
    ("comment", "COMMENT"),
)


def create_user(state: UserState) -> str:
    """Render ``CREATE USER`` with every non-empty property.

    Example:
        >>> create_user(UserState(name="jdoe", email="j@x.io", must_change_password=True))
        "CREATE USER JDOE EMAIL = 'j@x.io' MUST_CHANGE_PASSWORD = TRUE"
    """
    statement = f"CREATE USER {render_qualified(state.name)}"
    for attr, prop in _USER_CREATE_PROPERTIES:
        value = getattr(state, attr)
        if value:
            statement += f" {prop} = {_render_value(value)}"
    return statement


def create_role(state: RoleState) -> str:
    return f"CREATE ROLE {render_qualified(state.name)}" + _comment_clause(state.comment)


# ============================================================================
# Grants
# ============================================================================


def grant_target(object_type: str, database: str, schema: str, object_name: str) -> str:
    """Render the ``ON ...`` clause of a grant or revoke.

    The literal object name ``ALL`` means every object of the kind in the
    schema.

    Examples:
        >>> grant_target("TABLE", "db", "s", "events")
        'ON TABLE DB.S.EVENTS'
        >>> grant_target("VIEW", "db", "s", "all")
        'ON ALL VIEWS IN DB.S'
    """
    object_type = normalize(object_type)
    if normalize(object_name) == "ALL":
        return f"ON ALL {object_type}S IN {render_qualified(database, schema)}"
    return f"ON {object_type} {render_qualified(database, schema, object_name)}"


def _privilege_list(privileges: Sequence[str]) -> str:
    return ", ".join(normalize(p) for p in privileges)


def grant_privileges(state: GrantState) -> str:
    """``GRANT p1, p2 ON <target> TO ROLE|SHARE <grantee>``."""
    target = grant_target(state.object_type, state.database, state.schema_name, state.object_name)
    return (
        f"GRANT {_privilege_list(state.privileges)} {target} "
        f"TO {state.grantee_type} {render_qualified(state.grantee)}"
    )


def revoke_privileges(
    object_type: str,
    grantee_type: str,
    grantee: str,
    database: str,
    schema: str,
    object_name: str,
    privileges: Sequence[str],
) -> str:
    """``REVOKE p1, p2 ON <target> FROM ROLE|SHARE <grantee>``.

    Example:
        >>> revoke_privileges("TABLE", "ROLE", "analyst", "db", "s", "all", ["select", "insert"])
        'REVOKE SELECT, INSERT ON ALL TABLES IN DB.S FROM ROLE ANALYST'
    """
    target = grant_target(object_type, database, schema, object_name)
    return (
        f"REVOKE {_privilege_list(privileges)} {target} "
        f"FROM {normalize(grantee_type)} {render_qualified(grantee)}"
    )
