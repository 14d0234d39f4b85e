"""Pydantic models for declared desired state, one per object kind.

Each field carries its own metadata in ``json_schema_extra``:

- ``force_new``: a change cannot be applied in place (delete-then-create)
- ``computed``: filled in from the catalog, never declared
- ``normalize``: name of the function in ``NORMALIZERS`` applied before
  values are compared or stored
- ``sensitive``: never logged or displayed

Invalid attribute bags raise ``warehouse_reconciler.errors.ValidationError``
through ``ResourceState.from_attributes`` before any statement is built.

Usage:
    from warehouse_reconciler.state.models import DatabaseState

    state = DatabaseState.from_attributes({"name": "reports", "retention_time": 5})
    state.identity()   # 'REPORTS'
"""

import base64
import binascii
import hashlib
import re
from collections.abc import Callable
from typing import Annotated, Any, ClassVar, Self

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from warehouse_reconciler.catalog.identifiers import normalize, qualified_name, split_identity
from warehouse_reconciler.errors import ValidationError

Upper = Annotated[str, AfterValidator(normalize)]


# ============================================================================
# Normalization
# ============================================================================


def rsa_fingerprint(key: str) -> str:
    """Return the ``SHA256:<base64>`` fingerprint of an RSA public key.

    Values that already are fingerprints are returned unchanged, so the
    function can be applied to both declared keys and read-back state.

    Raises:
        ValueError: If *key* is not valid base64.

    Example:
        >>> rsa_fingerprint("SHA256:abc=")
        'SHA256:abc='
    """
    key = (key or "").strip()
    if not key or key.startswith("SHA256:"):
        return key
    body = "".join(line for line in key.splitlines() if not line.startswith("-----"))
    try:
        der = base64.b64decode(body, validate=True)
    except binascii.Error as e:
        raise ValueError(f"rsa_public_key is not valid base64: {e}") from e
    return "SHA256:" + base64.b64encode(hashlib.sha256(der).digest()).decode()


def _lower(value: str) -> str:
    return value.strip().lower()


def _trim(value: str) -> str:
    return value.strip()


NORMALIZERS: dict[str, Callable[[str], str]] = {
    "upper": normalize,
    "lower": _lower,
    "trim": _trim,
    "fingerprint": rsa_fingerprint,
}


def normalize_value(normalizer: str | None, value: Any) -> Any:
    """Apply a named normalizer to a scalar, list or mapping value."""
    if normalizer is None or value is None:
        return value
    func = NORMALIZERS[normalizer]
    if isinstance(value, str):
        return func(value)
    if isinstance(value, list):
        return [normalize_value(normalizer, v) for v in value]
    return value


def attribute(
    default: Any = ...,
    *,
    force_new: bool = False,
    computed: bool = False,
    normalize: str | None = None,
    sensitive: bool = False,
    description: str = "",
    **kwargs: Any,
) -> Any:
    """Declare a desired-state field with reconciliation metadata.

    Args:
        default: Default value (``...`` for required).
        force_new: Changing the value requires delete-then-create.
        computed: Value is read from the catalog, not declared.
        normalize: Key into ``NORMALIZERS``.
        sensitive: Value is never logged or displayed.
        description: Human-readable description for the schema surface.
        **kwargs: Passed to ``pydantic.Field`` (``alias``, ``ge``...).
    """
    extra = {
        "force_new": force_new,
        "computed": computed,
        "normalize": normalize,
        "sensitive": sensitive,
    }
    if "default_factory" not in kwargs:
        kwargs["default"] = default
    return Field(description=description, json_schema_extra=extra, **kwargs)


def field_metadata(model: type[BaseModel], field_name: str) -> dict[str, Any]:
    """Return the reconciliation metadata of one field."""
    extra = model.model_fields[field_name].json_schema_extra
    return dict(extra) if isinstance(extra, dict) else {}


# ============================================================================
# Base
# ============================================================================


class ResourceState(BaseModel):
    """Base class for one kind's desired state.

    Subclasses set ``kind`` and ``identity_fields``: the fields whose
    normalized values, dot-joined, form the durable identity.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    kind: ClassVar[str] = ""
    identity_fields: ClassVar[tuple[str, ...]] = ("name",)

    @classmethod
    def from_attributes(cls, attributes: dict[str, Any]) -> Self:
        """Validate an attribute bag.

        Raises:
            ValidationError: If attributes are missing, mistyped or
                contradict each other.
        """
        try:
            return cls.model_validate(attributes)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid {cls.kind} attributes: {e}") from e

    @classmethod
    def identity_attributes(cls, identity: str) -> dict[str, Any]:
        """Split a durable identity back into identity field values.

        Example:
            >>> SchemaState.identity_attributes("analytics.raw")
            {'database': 'ANALYTICS', 'name': 'RAW'}
        """
        segments = split_identity(identity, len(cls.identity_fields), cls.kind)
        return dict(zip(cls.identity_fields, segments))

    def identity(self) -> str:
        """Durable identity: normalized identity fields, dot-joined."""
        return qualified_name(*(getattr(self, f) for f in self.identity_fields))

    def normalized(self) -> dict[str, Any]:
        """All field values after their declared normalization."""
        values = self.model_dump()
        return {
            name: normalize_value(field_metadata(type(self), name).get("normalize"), value)
            for name, value in values.items()
        }


# ============================================================================
# Databases and schemas
# ============================================================================


class DatabaseState(ResourceState):
    """Desired state of a database (identity ``NAME``)."""

    kind: ClassVar[str] = "database"

    name: Upper = attribute(normalize="upper")
    comment: str = attribute("")
    transient: bool = attribute(False, force_new=True)
    retention_time: int = attribute(0, ge=0, le=90, description="DATA_RETENTION_TIME_IN_DAYS")
    owner: str = attribute("", computed=True, normalize="upper")

    @model_validator(mode="before")
    @classmethod
    def _ignore_parent_database(cls, data: Any) -> Any:
        # A database has no parent; a shared attribute bag may still carry one.
        if isinstance(data, dict) and "database" in data:
            return {key: value for key, value in data.items() if key != "database"}
        return data


class SchemaState(ResourceState):
    """Desired state of a schema (identity ``DB.NAME``)."""

    kind: ClassVar[str] = "schema"
    identity_fields: ClassVar[tuple[str, ...]] = ("database", "name")

    name: Upper = attribute(normalize="upper")
    database: Upper = attribute(force_new=True, normalize="upper")
    comment: str = attribute("")
    transient: bool = attribute(False, force_new=True)
    retention_time: int = attribute(1, ge=0, le=90, description="DATA_RETENTION_TIME_IN_DAYS")
    owner: str = attribute("", computed=True, normalize="upper")


# ============================================================================
# Tables and views
# ============================================================================

# Column type grammar: NUMBER, NUMBER(38,0), VARCHAR(16777216), DOUBLE PRECISION
_COLUMN_TYPE = re.compile(r"^[A-Z][A-Z0-9_]*(?: [A-Z][A-Z0-9_]*)*(?:\(\s*\d+\s*(?:,\s*\d+\s*)?\))?$")


class Column(BaseModel):
    """One table column: name and data type, both upper-cased."""

    name: Upper
    type: Upper

    @field_validator("type")
    @classmethod
    def _check_type(cls, value: str) -> str:
        if not _COLUMN_TYPE.match(value):
            raise ValueError(f"Unsupported column type {value!r}")
        return value


class TableState(ResourceState):
    """Desired state of a table (identity ``DB.SCHEMA.NAME``)."""

    kind: ClassVar[str] = "table"
    identity_fields: ClassVar[tuple[str, ...]] = ("database", "schema_name", "name")

    name: Upper = attribute(normalize="upper")
    database: Upper = attribute(force_new=True, normalize="upper")
    schema_name: Upper = attribute(force_new=True, normalize="upper", alias="schema")
    columns: list[Column] = attribute(force_new=True, min_length=1)
    comment: str = attribute("")
    owner: str = attribute("", computed=True, normalize="upper")


# CREATE [OR REPLACE] [SECURE] [RECURSIVE] VIEW [IF NOT EXISTS] <name> [(cols)] AS
VIEW_PREFIX = re.compile(
    r"^\s*create\s+(?:or\s+replace\s+)?(?:secure\s+)?(?:recursive\s+)?view\s+"
    r"(?:if\s+not\s+exists\s+)?(?P<name>[^\s(]+)\s*(?:\([^)]*\)\s*)?as\s+",
    re.IGNORECASE,
)


def split_view_definition(definition: str) -> tuple[list[str] | None, str]:
    """Separate an inline ``create view <name> as`` prefix from the body.

    Returns:
        Tuple of (declared name segments or ``None``, query body).

    Example:
        >>> split_view_definition("create view db.s.v as\\nselect 1")
        (['DB', 'S', 'V'], 'select 1')
    """
    match = VIEW_PREFIX.match(definition)
    if match is None:
        return None, definition.strip()
    segments = [s.strip('"').upper() for s in match.group("name").split(".")]
    return segments, definition[match.end():].strip()


class ViewState(ResourceState):
    """Desired state of a view (identity ``DB.SCHEMA.NAME``).

    ``view_definition`` may start with ``create [or replace] view <name> as``;
    the prefix is stripped, and ``<name>`` must name this same view.
    """

    kind: ClassVar[str] = "view"
    identity_fields: ClassVar[tuple[str, ...]] = ("database", "schema_name", "name")

    name: Upper = attribute(force_new=True, normalize="upper")
    database: Upper = attribute(force_new=True, normalize="upper")
    schema_name: Upper = attribute(force_new=True, normalize="upper", alias="schema")
    view_definition: str = attribute(force_new=True, normalize="trim")
    comment: str = attribute("", force_new=True)
    secure: bool = attribute(False, force_new=True)

    @model_validator(mode="after")
    def _strip_prefix(self) -> Self:
        declared, body = split_view_definition(self.view_definition)
        if declared is not None:
            target = [self.database, self.schema_name, self.name]
            if len(declared) > 3 or declared != target[-len(declared):]:
                raise ValueError(
                    f"view_definition creates {'.'.join(declared)}, "
                    f"expected {'.'.join(target)}"
                )
        if not body:
            raise ValueError("view_definition must not be empty")
        self.view_definition = body
        return self


# ============================================================================
# Pipes and stages
# ============================================================================

_COPY_INTO = re.compile(r"^COPY\s+INTO\s", re.IGNORECASE)


class PipeState(ResourceState):
    """Desired state of a pipe (identity ``DB.SCHEMA.NAME``)."""

    kind: ClassVar[str] = "pipe"
    identity_fields: ClassVar[tuple[str, ...]] = ("database", "schema_name", "name")

    name: Upper = attribute(force_new=True, normalize="upper")
    database: Upper = attribute(force_new=True, normalize="upper")
    schema_name: Upper = attribute(force_new=True, normalize="upper", alias="schema")
    copy_statement: str = attribute(force_new=True, normalize="trim")
    auto_ingest: bool = attribute(False, force_new=True)
    comment: str = attribute("")
    notification_channel: str = attribute("", computed=True)
    owner: str = attribute("", computed=True, normalize="upper")

    @field_validator("copy_statement")
    @classmethod
    def _check_copy(cls, value: str) -> str:
        value = value.strip()
        if not _COPY_INTO.match(value):
            raise ValueError("copy_statement must start with COPY INTO")
        return value


_CREDENTIAL_KEY = re.compile(r"^[A-Z][A-Z0-9_]*$")


class StageState(ResourceState):
    """Desired state of an (external) stage (identity ``DB.SCHEMA.NAME``)."""

    kind: ClassVar[str] = "stage"
    identity_fields: ClassVar[tuple[str, ...]] = ("database", "schema_name", "name")

    name: Upper = attribute(force_new=True, normalize="upper")
    database: Upper = attribute(force_new=True, normalize="upper")
    schema_name: Upper = attribute("PUBLIC", force_new=True, normalize="upper", alias="schema")
    url: str = attribute("", force_new=True, normalize="lower")
    credentials: dict[str, str] = attribute(default_factory=dict, force_new=True, sensitive=True)
    aws_role: str = attribute("", force_new=True)
    comment: str = attribute("", force_new=True)
    aws_external_id: str = attribute("", computed=True)
    snowflake_iam_user: str = attribute("", computed=True)

    @field_validator("url")
    @classmethod
    def _lower_url(cls, value: str) -> str:
        return _lower(value)

    @field_validator("credentials")
    @classmethod
    def _check_credentials(cls, value: dict[str, str]) -> dict[str, str]:
        checked: dict[str, str] = {}
        for key, secret in value.items():
            key = normalize(key)
            if not _CREDENTIAL_KEY.match(key):
                raise ValueError(f"Invalid credential key {key!r}")
            checked[key] = secret
        return checked

    @model_validator(mode="after")
    def _check_conflicts(self) -> Self:
        if self.credentials and self.aws_role:
            raise ValueError("credentials and aws_role are mutually exclusive")
        return self


# ============================================================================
# Users and roles
# ============================================================================


class UserState(ResourceState):
    """Desired state of a user (identity ``NAME``).

    ``rsa_public_key`` holds the declared key; it is compared and stored by
    its ``SHA256:`` fingerprint.
    """

    kind: ClassVar[str] = "user"

    name: Upper = attribute(normalize="upper")
    login_name: Upper = attribute("", normalize="upper")
    email: str = attribute("")
    display_name: str = attribute("")
    comment: str = attribute("")
    must_change_password: bool = attribute(False)
    disabled: bool = attribute(False)
    default_role: Upper = attribute("", normalize="upper")
    default_warehouse: Upper = attribute("", normalize="upper")
    rsa_public_key: str = attribute("", normalize="fingerprint", sensitive=True)

    @field_validator("rsa_public_key")
    @classmethod
    def _check_key(cls, value: str) -> str:
        rsa_fingerprint(value)
        return value.strip()


class RoleState(ResourceState):
    """Desired state of a role (identity ``NAME``)."""

    kind: ClassVar[str] = "role"

    name: Upper = attribute(normalize="upper")
    comment: str = attribute("")


# ============================================================================
# Grants
# ============================================================================

TABLE_PRIVILEGES = ("SELECT", "INSERT", "UPDATE", "DELETE", "TRUNCATE", "REFERENCES", "REBUILD", "OWNERSHIP")
VIEW_PRIVILEGES = ("SELECT", "REFERENCES", "OWNERSHIP")


class GrantState(ResourceState):
    """Privileges granted to one role or share on a table or view.

    Identity: ``GRANTEE.DB.SCHEMA.OBJECT.PRIV[.PRIV...]``.  The object name
    ``ALL`` targets every object of the kind in the schema.  Every field is
    ForceNew: privilege changes are delete-then-create.
    """

    object_type: ClassVar[str] = ""
    object_field: ClassVar[str] = ""
    privilege_set: ClassVar[tuple[str, ...]] = ()

    database: Upper = attribute(force_new=True, normalize="upper")
    schema_name: Upper = attribute(force_new=True, normalize="upper", alias="schema")
    privileges: list[Upper] = attribute(force_new=True, normalize="upper", min_length=1)
    grantee_role: Upper = attribute("", force_new=True, normalize="upper")
    grantee_share: Upper = attribute("", force_new=True, normalize="upper")

    @model_validator(mode="after")
    def _check_grant(self) -> Self:
        if bool(self.grantee_role) == bool(self.grantee_share):
            raise ValueError("exactly one of grantee_role or grantee_share is required")
        unknown = [p for p in self.privileges if p not in self.privilege_set]
        if unknown:
            raise ValueError(
                f"Unsupported {self.object_type} privileges {unknown}; "
                f"expected any of {list(self.privilege_set)}"
            )
        if len(set(self.privileges)) != len(self.privileges):
            raise ValueError(f"Duplicate privileges in {self.privileges}")
        return self

    @property
    def object_name(self) -> str:
        return getattr(self, self.object_field)

    @property
    def grantee(self) -> str:
        return self.grantee_role or self.grantee_share

    @property
    def grantee_type(self) -> str:
        return "ROLE" if self.grantee_role else "SHARE"

    def identity(self) -> str:
        return qualified_name(
            self.grantee, self.database, self.schema_name, self.object_name, *self.privileges
        )

    @classmethod
    def identity_attributes(cls, identity: str) -> dict[str, Any]:
        """Split a grant identity; the grantee type is not encoded in it.

        Example:
            >>> TableGrantState.identity_attributes("analyst.db.s.all.select")
            {'grantee': 'ANALYST', 'database': 'DB', 'schema_name': 'S', 'table': 'ALL', 'privileges': ['SELECT']}
        """
        segments = [normalize(s) for s in (identity or "").split(".")]
        if len(segments) < 5 or not all(segments):
            raise ValidationError(
                f"Invalid {cls.kind} id {identity!r}: expected GRANTEE.DB.SCHEMA.OBJECT.PRIV[.PRIV...]"
            )
        grantee, database, schema, obj, *privileges = segments
        return {
            "grantee": grantee,
            "database": database,
            "schema_name": schema,
            cls.object_field: obj,
            "privileges": privileges,
        }


class TableGrantState(GrantState):
    """Grant on one table, or on ALL tables of a schema."""

    kind: ClassVar[str] = "table_grant"
    object_type: ClassVar[str] = "TABLE"
    object_field: ClassVar[str] = "table"
    privilege_set: ClassVar[tuple[str, ...]] = TABLE_PRIVILEGES

    table: Upper = attribute(force_new=True, normalize="upper")


class ViewGrantState(GrantState):
    """Grant on one view, or on ALL views of a schema."""

    kind: ClassVar[str] = "view_grant"
    object_type: ClassVar[str] = "VIEW"
    object_field: ClassVar[str] = "view"
    privilege_set: ClassVar[tuple[str, ...]] = VIEW_PRIVILEGES

    view: Upper = attribute(force_new=True, normalize="upper")
