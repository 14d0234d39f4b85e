"""Role reconciler (identity ``NAME``)."""

from typing import Any

from warehouse_reconciler import statements
from warehouse_reconciler.catalog import readers
from warehouse_reconciler.reconcilers.base import Reconciler
from warehouse_reconciler.state.data import ResourceData
from warehouse_reconciler.state.models import RoleState


class RoleReconciler(Reconciler):
    """Roles: rename, then comment (``UNSET COMMENT`` when cleared)."""

    model = RoleState
    object_type = "ROLE"
    show_type = "ROLES"
    update_order = ("name", "comment")
    properties = {"comment": "COMMENT"}

    def create_statement(self, desired: RoleState) -> str:
        return statements.create_role(desired)

    def fetch(self, segments: list[str], data: ResourceData) -> dict[str, Any]:
        row = readers.show_role(self.client, segments[0])
        return {"name": row.name, "comment": row.comment}
