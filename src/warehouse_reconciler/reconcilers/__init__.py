"""Reconcilers per object kind, plus the kind registry.

Usage:
    from warehouse_reconciler.reconcilers import get_reconciler

    reconciler = get_reconciler("role", client)
    data = reconciler.import_("analyst")
"""

from warehouse_reconciler.adapters.base import CatalogClient
from warehouse_reconciler.errors import ValidationError
from warehouse_reconciler.reconcilers.base import Reconciler
from warehouse_reconciler.reconcilers.database import DatabaseReconciler
from warehouse_reconciler.reconcilers.grants import (
    GrantReconciler,
    TableGrantReconciler,
    ViewGrantReconciler,
)
from warehouse_reconciler.reconcilers.pipe import PipeReconciler
from warehouse_reconciler.reconcilers.role import RoleReconciler
from warehouse_reconciler.reconcilers.schema import SchemaDataSource, SchemaReconciler
from warehouse_reconciler.reconcilers.stage import StageReconciler
from warehouse_reconciler.reconcilers.table import TableReconciler
from warehouse_reconciler.reconcilers.user import UserReconciler
from warehouse_reconciler.reconcilers.view import ViewReconciler

RECONCILERS: dict[str, type[Reconciler]] = {
    cls.model.kind: cls
    for cls in (
        DatabaseReconciler,
        SchemaReconciler,
        TableReconciler,
        ViewReconciler,
        PipeReconciler,
        StageReconciler,
        UserReconciler,
        RoleReconciler,
        TableGrantReconciler,
        ViewGrantReconciler,
    )
}


def get_reconciler(kind: str, client: CatalogClient) -> Reconciler:
    """Return the reconciler for *kind* bound to *client*.

    Raises:
        ValidationError: If *kind* is unknown.
    """
    try:
        cls = RECONCILERS[kind.strip().lower()]
    except KeyError:
        raise ValidationError(
            f"Unknown kind {kind!r}. Available: {', '.join(RECONCILERS)}"
        ) from None
    return cls(client)


__all__ = [
    "RECONCILERS",
    "DatabaseReconciler",
    "GrantReconciler",
    "PipeReconciler",
    "Reconciler",
    "RoleReconciler",
    "SchemaDataSource",
    "SchemaReconciler",
    "StageReconciler",
    "TableGrantReconciler",
    "TableReconciler",
    "UserReconciler",
    "ViewGrantReconciler",
    "ViewReconciler",
    "get_reconciler",
]
