"""warehouse-reconciler: declarative reconciliation of warehouse catalog objects.

Creates, reads, updates, deletes and imports databases, schemas, tables,
views, pipes, stages, users, roles and table/view grants by comparing
declared state against the live catalog and issuing SQL statements over
an explicit catalog client.

Usage:
    from warehouse_reconciler import DatabaseState, ResourceData, get_client, get_reconciler

    client = get_client("prod")
    reconciler = get_reconciler("database", client)
    desired = DatabaseState.from_attributes({"name": "reports", "retention_time": 5})
    data = reconciler.create(ResourceData(DatabaseState, desired=desired))
"""

__version__ = "0.1.0"

# Adapters
from warehouse_reconciler.adapters.base import CatalogClient
from warehouse_reconciler.adapters.snowflake import SnowflakeCatalogClient

# Catalog
from warehouse_reconciler.catalog.existence import Existence, Scope, exists

# Config
from warehouse_reconciler.config.loader import load_config
from warehouse_reconciler.config.models import ConnectionProfile, WarehouseConfig

# Errors
from warehouse_reconciler.errors import (
    AmbiguityError,
    ConflictError,
    DriverError,
    NotFoundError,
    ProfileNotFoundError,
    ReconcilerError,
    ValidationError,
)

# Factory
from warehouse_reconciler.factory import get_client, resolve_connection

# Reconcilers
from warehouse_reconciler.reconcilers import RECONCILERS, Reconciler, SchemaDataSource, get_reconciler

# State
from warehouse_reconciler.state import (
    DatabaseState,
    PipeState,
    ResourceData,
    RoleState,
    SchemaState,
    StageState,
    TableGrantState,
    TableState,
    UserState,
    ViewGrantState,
    ViewState,
    describe,
)

__all__ = [
    # Adapters
    "CatalogClient",
    "SnowflakeCatalogClient",
    # Catalog
    "Existence",
    "Scope",
    "exists",
    # Config
    "load_config",
    "ConnectionProfile",
    "WarehouseConfig",
    # Errors
    "ReconcilerError",
    "NotFoundError",
    "AmbiguityError",
    "ConflictError",
    "DriverError",
    "ValidationError",
    "ProfileNotFoundError",
    # Factory
    "get_client",
    "resolve_connection",
    # Reconcilers
    "RECONCILERS",
    "Reconciler",
    "SchemaDataSource",
    "get_reconciler",
    # State
    "ResourceData",
    "DatabaseState",
    "SchemaState",
    "TableState",
    "ViewState",
    "PipeState",
    "StageState",
    "UserState",
    "RoleState",
    "TableGrantState",
    "ViewGrantState",
    "describe",
]
