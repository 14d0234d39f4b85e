"""Database reconciler (identity ``NAME``)."""

from typing import Any

from warehouse_reconciler import statements
from warehouse_reconciler.catalog import readers
from warehouse_reconciler.reconcilers.base import Reconciler
from warehouse_reconciler.state.data import ResourceData
from warehouse_reconciler.state.models import DatabaseState


def parse_retention(value: Any) -> int:
    """SHOW output reports retention days as text; empty means 0."""
    text = str(value or "").strip()
    return int(text) if text else 0


class DatabaseReconciler(Reconciler):
    """Databases: rename, comment and retention time are mutable."""

    model = DatabaseState
    object_type = "DATABASE"
    show_type = "DATABASES"
    update_order = ("name", "comment", "retention_time")
    properties = {
        "comment": "COMMENT",
        "retention_time": "DATA_RETENTION_TIME_IN_DAYS",
    }

    def create_statement(self, desired: DatabaseState) -> str:
        return statements.create_database(desired)

    def fetch(self, segments: list[str], data: ResourceData) -> dict[str, Any]:
        row = readers.show_database(self.client, segments[0])
        return {
            "name": row.name,
            "comment": row.comment,
            "transient": "TRANSIENT" in row.options.upper(),
            "retention_time": parse_retention(row.retention_time),
            "owner": row.owner,
        }
