"""Identifier normalization and SQL text escaping.

Unquoted identifiers are case-insensitive in the catalog, so every name
segment is upper-cased before it is used either as a lookup key or as part
of a resource identity.  Identities are dot-joined normalized segments:

    NAME
    DB.NAME
    DB.SCHEMA.NAME
    GRANTEE.DB.SCHEMA.OBJECT.PRIV[.PRIV...]

Rendering into SQL text goes through ``quote_identifier`` and
``string_literal`` -- values are never interpolated raw.

Known hazard: quoted identifiers ``"foo"`` and ``"FOO"`` are distinct
remote objects that collapse to the same normalized name.  The existence
oracle reports that collision as an ``AmbiguityError``.
"""

import re

from warehouse_reconciler.errors import ValidationError

# Unquoted identifier grammar (after upper-casing)
_BARE_IDENTIFIER = re.compile(r"^[A-Z_][A-Z0-9_$]*$")


def normalize(name: str) -> str:
    """Canonicalize a single identifier segment.

    Examples:
        >>> normalize(" reports ")
        'REPORTS'
        >>> normalize("Analytics")
        'ANALYTICS'
    """
    return (name or "").strip().upper()


def qualified_name(*segments: str) -> str:
    """Build a normalized, dot-joined composite identifier.

    Raises:
        ValidationError: If any segment is empty or contains a dot.

    Example:
        >>> qualified_name("analytics", "public", "events")
        'ANALYTICS.PUBLIC.EVENTS'
    """
    parts: list[str] = []
    for segment in segments:
        value = normalize(segment)
        if not value:
            raise ValidationError(f"Empty identifier segment in {segments!r}")
        if "." in value:
            raise ValidationError(f"Identifier segment {value!r} must not contain '.'")
        parts.append(value)
    return ".".join(parts)


def split_identity(identity: str, parts: int, kind: str) -> list[str]:
    """Split a durable identity into exactly *parts* normalized segments.

    Raises:
        ValidationError: If the identity has the wrong number of segments.

    Example:
        >>> split_identity("analytics.public", 2, "schema")
        ['ANALYTICS', 'PUBLIC']
    """
    segments = [normalize(s) for s in (identity or "").split(".")]
    if len(segments) != parts or not all(segments):
        raise ValidationError(
            f"Invalid {kind} id {identity!r}: expected {parts} dot-separated segments"
        )
    return segments


def quote_identifier(name: str) -> str:
    """Render one identifier segment for SQL text.

    Bare when it matches the unquoted grammar, double-quoted otherwise.

    Examples:
        >>> quote_identifier("reports")
        'REPORTS'
        >>> quote_identifier("my db")
        '"MY DB"'
    """
    value = normalize(name)
    if not value:
        raise ValidationError("Identifier must not be empty")
    if _BARE_IDENTIFIER.match(value):
        return value
    return '"' + value.replace('"', '""') + '"'


def render_qualified(*segments: str) -> str:
    """Render a composite identifier for SQL text, quoting each segment.

    Example:
        >>> render_qualified("analytics", "public", "events")
        'ANALYTICS.PUBLIC.EVENTS'
    """
    return ".".join(quote_identifier(s) for s in segments)


def string_literal(value: str) -> str:
    """Render a single-quoted string literal.

    Example:
        >>> string_literal("it's")
        "'it\\\\'s'"
    """
    escaped = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def like_pattern(name: str) -> str:
    """Render an exact-match LIKE pattern literal for ``SHOW ... LIKE``.

    ``_`` and ``%`` are escaped so the pattern matches only *name*
    (case-insensitively, as SHOW LIKE always does).

    Example:
        >>> like_pattern("my_db")
        "'MY\\\\\\\\_DB'"
    """
    value = normalize(name).replace("\\", "\\\\")
    value = value.replace("_", "\\_").replace("%", "\\%")
    return string_literal(value)
