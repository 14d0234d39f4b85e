"""Pipe reconciler (identity ``DB.SCHEMA.NAME``); only the comment is mutable."""

from typing import Any

from warehouse_reconciler import statements
from warehouse_reconciler.catalog import readers
from warehouse_reconciler.reconcilers.base import Reconciler
from warehouse_reconciler.state.data import ResourceData
from warehouse_reconciler.state.models import PipeState


class PipeReconciler(Reconciler):
    model = PipeState
    object_type = "PIPE"
    show_type = "PIPES"
    update_order = ("comment",)
    properties = {"comment": "COMMENT"}

    def create_statement(self, desired: PipeState) -> str:
        return statements.create_pipe(desired)

    def fetch(self, segments: list[str], data: ResourceData) -> dict[str, Any]:
        database, schema, name = segments
        row = readers.show_pipe(self.client, database, schema, name)
        return {
            "name": row.name,
            "database": row.database_name or database,
            "schema_name": row.schema_name or schema,
            "copy_statement": row.definition.strip(),
            "auto_ingest": bool(row.notification_channel),
            "comment": row.comment,
            "notification_channel": row.notification_channel,
            "owner": row.owner,
        }
