"""Desired-state records, the shared ResourceData contract and the schema surface.

Usage:
    from warehouse_reconciler.state import DatabaseState, ResourceData
"""

from warehouse_reconciler.state.data import ResourceData
from warehouse_reconciler.state.models import (
    Column,
    DatabaseState,
    GrantState,
    PipeState,
    ResourceState,
    RoleState,
    SchemaState,
    StageState,
    TableGrantState,
    TableState,
    UserState,
    ViewGrantState,
    ViewState,
    rsa_fingerprint,
)
from warehouse_reconciler.state.surface import AttributeSpec, describe

__all__ = [
    "AttributeSpec",
    "Column",
    "DatabaseState",
    "GrantState",
    "PipeState",
    "ResourceData",
    "ResourceState",
    "RoleState",
    "SchemaState",
    "StageState",
    "TableGrantState",
    "TableState",
    "UserState",
    "ViewGrantState",
    "ViewState",
    "describe",
    "rsa_fingerprint",
]
