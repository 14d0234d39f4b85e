"""Schema reconciler (identity ``DB.NAME``) and the read-only schema data source."""

from typing import Any

from warehouse_reconciler import statements
from warehouse_reconciler.adapters.base import CatalogClient
from warehouse_reconciler.catalog import readers
from warehouse_reconciler.catalog.identifiers import qualified_name
from warehouse_reconciler.reconcilers.base import Reconciler
from warehouse_reconciler.reconcilers.database import parse_retention
from warehouse_reconciler.state.data import ResourceData
from warehouse_reconciler.state.models import SchemaState


class SchemaReconciler(Reconciler):
    """Schemas: rename (within the database), comment and retention time."""

    model = SchemaState
    object_type = "SCHEMA"
    show_type = "SCHEMAS"
    update_order = ("name", "comment", "retention_time")
    properties = {
        "comment": "COMMENT",
        "retention_time": "DATA_RETENTION_TIME_IN_DAYS",
    }

    def create_statement(self, desired: SchemaState) -> str:
        return statements.create_schema(desired)

    def fetch(self, segments: list[str], data: ResourceData) -> dict[str, Any]:
        database, name = segments
        row = readers.show_schema(self.client, database, name)
        return {
            "name": row.name,
            "database": row.database_name or database,
            "comment": row.comment,
            "transient": "TRANSIENT" in row.options.upper(),
            "retention_time": parse_retention(row.retention_time),
            "owner": row.owner,
        }


class SchemaDataSource:
    """Look up an existing schema by database and name, without managing it.

    Example:
        data = SchemaDataSource(client).read("analytics", "raw")
        data.get_id()   # 'ANALYTICS.RAW'
    """

    def __init__(self, client: CatalogClient):
        self.client = client

    def read(self, database: str, schema: str) -> ResourceData:
        """Read the schema and derive its identity.

        Raises:
            NotFoundError: If the schema does not exist.
            AmbiguityError: If the name matches several schemas.
        """
        data = ResourceData(SchemaState, id=qualified_name(database, schema))
        return SchemaReconciler(self.client).read(data)
