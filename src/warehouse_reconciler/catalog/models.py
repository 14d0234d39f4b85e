"""Pydantic models for remote catalog snapshots.

This module contains read-side models:
- Listing rows: DatabaseRow, SchemaRow, TableRow, PipeRow, RoleRow, GrantRow
- Information-schema rows: InfoSchemaTableRow, InfoSchemaViewRow
- Description rows: TableColumnRow, UserPropertyRow, StagePropertyRow
- Structured description results: UserProperties, StageProperties
- Grant snapshot: GrantSnapshot

Row models declare their fields in the exact column order of the command
they are scanned from; ``from_row`` zips a result tuple onto that order.
"""

from typing import Any, Self

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from warehouse_reconciler.errors import DriverError


# ============================================================================
# Row scanning
# ============================================================================


class SnapshotRow(BaseModel):
    """Base class for one row of a listing or description command.

    Extra trailing columns are ignored so newer server versions that append
    columns keep scanning correctly.  ``NULL`` in a ``str`` column scans as
    an empty string.

    Example:
        >>> PipeRow.from_row((None, "LOADER", "DB", "RAW", "COPY INTO t", "SYSADMIN", None, None)).comment
        ''
    """

    @field_validator("*", mode="before")
    @classmethod
    def _null_to_empty(cls, value: Any, info: ValidationInfo) -> Any:
        field = cls.model_fields.get(info.field_name or "")
        if value is None and field is not None and field.annotation is str:
            return ""
        return value

    @classmethod
    def from_row(cls, row: tuple) -> Self:
        """Scan a result tuple in declared column order.

        Raises:
            DriverError: If the row has fewer columns than declared.
        """
        names = list(cls.model_fields)
        if len(row) < len(names):
            raise DriverError(
                f"{cls.__name__} expects {len(names)} columns, got {len(row)}"
            )
        return cls(**dict(zip(names, row)))


# ============================================================================
# Listing rows (SHOW ...)
# ============================================================================


class DatabaseRow(SnapshotRow):
    """Row of ``SHOW DATABASES``."""

    created_on: Any = None
    name: str
    is_default: str = ""
    is_current: str = ""
    origin: str = ""
    owner: str = ""
    comment: str = ""
    options: str = ""  # TRANSIENT or empty
    retention_time: str = ""


class SchemaRow(SnapshotRow):
    """Row of ``SHOW SCHEMAS``."""

    created_on: Any = None
    name: str
    is_default: str = ""
    is_current: str = ""
    database_name: str = ""
    owner: str = ""
    comment: str = ""
    options: str = ""
    retention_time: str = ""


class TableRow(SnapshotRow):
    """Row of ``SHOW TABLES``."""

    created_on: Any = None
    name: str
    database_name: str = ""
    schema_name: str = ""
    kind: str = ""  # TABLE, TRANSIENT, TEMPORARY
    comment: str = ""
    cluster_by: str = ""
    rows: int | None = None
    bytes: int | None = None
    owner: str = ""
    retention_time: str = ""


class PipeRow(SnapshotRow):
    """Row of ``SHOW PIPES``."""

    created_on: Any = None
    name: str
    database_name: str = ""
    schema_name: str = ""
    definition: str = ""
    owner: str = ""
    notification_channel: str = ""
    comment: str = ""


class RoleRow(SnapshotRow):
    """Row of ``SHOW ROLES``."""

    created_on: Any = None
    name: str
    is_default: str = ""
    is_current: str = ""
    is_inherited: str = ""
    assigned_to_users: int | None = None
    granted_to_roles: int | None = None
    granted_roles: int | None = None
    owner: str = ""
    comment: str = ""


class GrantRow(SnapshotRow):
    """Row of ``SHOW GRANTS ON ...`` / ``SHOW GRANTS TO ...``."""

    created_on: Any = None
    privilege: str
    granted_on: str = ""  # TABLE, VIEW, ...
    name: str = ""  # fully qualified securable name
    granted_to: str = ""  # ROLE or SHARE
    grantee_name: str = ""
    grant_option: str = ""
    granted_by: str = ""


# ============================================================================
# Information-schema rows
# ============================================================================


class InfoSchemaTableRow(SnapshotRow):
    """Selected columns of ``<db>.INFORMATION_SCHEMA.TABLES``."""

    table_catalog: str
    table_schema: str
    table_name: str
    table_owner: str = ""
    table_type: str = ""
    is_transient: str = ""
    clustering_key: str = ""
    row_count: int | None = None
    bytes: int | None = None
    retention_time: int | None = None
    created: Any = None
    last_altered: Any = None
    comment: str = ""


class InfoSchemaViewRow(SnapshotRow):
    """Selected columns of ``<db>.INFORMATION_SCHEMA.VIEWS``."""

    table_catalog: str
    table_schema: str
    table_name: str
    table_owner: str = ""
    view_definition: str = ""
    check_option: str = ""
    is_updatable: str = ""
    insertable_into: str = ""
    is_secure: str = ""  # YES / NO
    created: Any = None
    last_altered: Any = None
    comment: str = ""


# ============================================================================
# Description rows (DESC ...)
# ============================================================================


class TableColumnRow(SnapshotRow):
    """Row of ``DESC TABLE``: one column of the table."""

    name: str
    type: str
    kind: str = ""
    null: str = ""  # Y / N
    default: str | None = None
    primary_key: str = ""
    unique_key: str = ""
    check: str | None = None
    expression: str | None = None
    comment: str | None = None


class UserPropertyRow(SnapshotRow):
    """Row of ``DESC USER``: one property."""

    property: str
    value: str = ""
    default: str = ""
    description: str = ""


class StagePropertyRow(SnapshotRow):
    """Row of ``DESC STAGE``: one property."""

    parent_property: str = ""
    property: str
    property_type: str = ""
    property_value: str = ""
    property_default: str = ""


# ============================================================================
# Structured description results
# ============================================================================


class UserProperties(BaseModel):
    """``DESC USER`` output folded into fields.

    Unmapped properties are dropped; see ``USER_PROPERTIES`` in
    ``warehouse_reconciler.catalog.readers``.
    """

    name: str = ""
    comment: str = ""
    login_name: str = ""
    display_name: str = ""
    first_name: str = ""
    middle_name: str = ""
    last_name: str = ""
    email: str = ""
    must_change_password: bool = False
    disabled: bool = False
    snowflake_lock: bool = False
    days_to_expiry: str = ""
    mins_to_unlock: str = ""
    default_warehouse: str = ""
    default_namespace: str = ""
    default_role: str = ""
    ext_authn_duo: bool = False
    ext_authn_uid: str = ""
    mins_to_bypass_mfa: str = ""
    mins_to_bypass_network_policy: str = ""
    rsa_public_key_fp: str = ""
    rsa_public_key_2_fp: str = ""


class StageProperties(BaseModel):
    """``DESC STAGE`` output folded into fields."""

    url: str = ""
    aws_role: str = ""
    aws_external_id: str = ""
    snowflake_iam_user: str = ""


class GrantSnapshot(BaseModel):
    """Privileges one grantee holds on one securable (or on ALL of a kind)."""

    grantee: str
    grantee_type: str = ""  # ROLE or SHARE
    database: str
    schema_name: str
    object_name: str
    privileges: list[str] = Field(default_factory=list)
