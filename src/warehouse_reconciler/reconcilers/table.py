"""Table reconciler (identity ``DB.SCHEMA.NAME``).

Reads combine the information-schema row with ``DESC TABLE`` columns.
"""

from typing import Any

from warehouse_reconciler import statements
from warehouse_reconciler.catalog import readers
from warehouse_reconciler.reconcilers.base import Reconciler
from warehouse_reconciler.state.data import ResourceData
from warehouse_reconciler.state.models import TableState


class TableReconciler(Reconciler):
    """Tables: rename and comment are mutable; columns are ForceNew."""

    model = TableState
    object_type = "TABLE"
    show_type = "TABLES"
    update_order = ("name", "comment")
    properties = {"comment": "COMMENT"}

    def create_statement(self, desired: TableState) -> str:
        return statements.create_table(desired)

    def fetch(self, segments: list[str], data: ResourceData) -> dict[str, Any]:
        database, schema, name = segments
        info = readers.read_table(self.client, database, schema, name)
        columns = readers.desc_table(self.client, database, schema, name)
        return {
            "name": info.table_name,
            "database": info.table_catalog,
            "schema_name": info.table_schema,
            "columns": [{"name": c.name.upper(), "type": c.type.upper()} for c in columns],
            "comment": info.comment,
            "owner": info.table_owner,
        }
