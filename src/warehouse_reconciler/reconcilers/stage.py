"""Stage reconciler (identity ``DB.SCHEMA.NAME``); every attribute is ForceNew.

Credentials are write-only: ``DESC STAGE`` never returns them, so reads
leave the recorded value untouched.
"""

from typing import Any

from warehouse_reconciler import statements
from warehouse_reconciler.catalog import readers
from warehouse_reconciler.reconcilers.base import Reconciler
from warehouse_reconciler.state.data import ResourceData
from warehouse_reconciler.state.models import StageState


class StageReconciler(Reconciler):
    model = StageState
    object_type = "STAGE"
    show_type = "STAGES"

    def create_statement(self, desired: StageState) -> str:
        return statements.create_stage(desired)

    def fetch(self, segments: list[str], data: ResourceData) -> dict[str, Any]:
        database, schema, name = segments
        props = readers.desc_stage(self.client, database, schema, name)
        return {
            "name": name,
            "database": database,
            "schema_name": schema,
            "url": props.url,
            "aws_role": props.aws_role,
            "aws_external_id": props.aws_external_id,
            "snowflake_iam_user": props.snowflake_iam_user,
        }
