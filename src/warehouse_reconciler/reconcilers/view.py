"""View reconciler (identity ``DB.SCHEMA.NAME``); every attribute is ForceNew."""

from typing import Any

from warehouse_reconciler import statements
from warehouse_reconciler.catalog import readers
from warehouse_reconciler.reconcilers.base import Reconciler
from warehouse_reconciler.state.data import ResourceData
from warehouse_reconciler.state.models import ViewState, split_view_definition


class ViewReconciler(Reconciler):
    model = ViewState
    object_type = "VIEW"
    show_type = "VIEWS"

    def create_statement(self, desired: ViewState) -> str:
        return statements.create_view(desired)

    def fetch(self, segments: list[str], data: ResourceData) -> dict[str, Any]:
        database, schema, name = segments
        info = readers.read_view(self.client, database, schema, name)
        # the information schema returns the full CREATE VIEW text
        _, body = split_view_definition(info.view_definition)
        return {
            "name": info.table_name,
            "database": info.table_catalog,
            "schema_name": info.table_schema,
            "view_definition": body,
            "comment": info.comment,
            "secure": info.is_secure.upper() == "YES",
        }
