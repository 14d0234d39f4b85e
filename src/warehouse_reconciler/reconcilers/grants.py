"""Grant reconcilers: privileges on tables and views for a role or share.

Identity: ``GRANTEE.DB.SCHEMA.OBJECT.PRIV[.PRIV...]``.  Create issues one
``GRANT`` listing every privilege, delete one ``REVOKE``; there is no
update, privilege-set changes are delete-then-create.  The object name
``ALL`` targets every object of the kind in the schema.

The identity does not say whether the grantee is a role or a share.  The
recorded ``grantee_role`` / ``grantee_share`` decides when present;
otherwise the ``granted_to`` column of ``SHOW GRANTS`` does.
"""

import logging
from typing import Any, ClassVar

from warehouse_reconciler import statements
from warehouse_reconciler.catalog import readers
from warehouse_reconciler.catalog.models import GrantSnapshot
from warehouse_reconciler.errors import NotFoundError, ValidationError
from warehouse_reconciler.reconcilers.base import Reconciler
from warehouse_reconciler.state.data import ResourceData
from warehouse_reconciler.state.models import GrantState, TableGrantState, ViewGrantState

logger = logging.getLogger(__name__)


class GrantReconciler(Reconciler):
    """Shared lifecycle for table and view grants."""

    model: ClassVar[type[GrantState]] = GrantState

    def _identity(self, data: ResourceData) -> dict[str, Any]:
        return self.model.identity_attributes(data.get_id())

    @staticmethod
    def _grantee_type(data: ResourceData) -> str:
        if data.state.get("grantee_role"):
            return "ROLE"
        if data.state.get("grantee_share"):
            return "SHARE"
        if data.desired is not None:
            return data.desired.grantee_type
        return ""

    def _snapshot(self, data: ResourceData, attrs: dict[str, Any]) -> GrantSnapshot:
        return readers.show_grants(
            self.client,
            self.model.object_type,
            attrs["grantee"],
            attrs["database"],
            attrs["schema_name"],
            attrs[self.model.object_field],
            grantee_type=self._grantee_type(data),
        )

    def create_statement(self, desired: GrantState) -> str:
        return statements.grant_privileges(desired)

    def create(self, data: ResourceData) -> ResourceData:
        """Grant every declared privilege in one statement.

        Raises:
            DriverError: If the grant statement fails.
        """
        desired = self._desired(data)
        self.client.execute(self.create_statement(desired))
        data.set_id(desired.identity())
        data.commit()
        logger.info(f"Created {self.kind} {data.get_id()}")
        return data

    def read(self, data: ResourceData) -> ResourceData:
        """Refresh privileges held by the grantee on the securable.

        Raises:
            NotFoundError: If the securable is gone or nothing is granted.
        """
        attrs = self._identity(data)
        try:
            snapshot = self._snapshot(data, attrs)
        except NotFoundError:
            logger.info(f"{self.kind} {data.get_id()} not found, pruning")
            raise
        is_role = snapshot.grantee_type == "ROLE"
        data.set("database", snapshot.database)
        data.set("schema_name", snapshot.schema_name)
        data.set(self.model.object_field, snapshot.object_name)
        data.set("privileges", snapshot.privileges)
        data.set("grantee_role", snapshot.grantee if is_role else "")
        data.set("grantee_share", "" if is_role else snapshot.grantee)
        return data

    def update(self, data: ResourceData) -> ResourceData:
        raise ValidationError(f"{self.kind} attributes are ForceNew; update is not supported")

    def delete(self, data: ResourceData) -> None:
        """Revoke the privileges named in the identity in one statement.

        Raises:
            ValidationError: If the identity names an unknown privilege.
            NotFoundError: If the securable is gone or nothing is granted.
            DriverError: If the revoke statement fails.
        """
        attrs = self._identity(data)
        unknown = [p for p in attrs["privileges"] if p not in self.model.privilege_set]
        if unknown:
            raise ValidationError(f"Unsupported {self.model.object_type} privileges {unknown}")

        snapshot = self._snapshot(data, attrs)
        self.client.execute(
            statements.revoke_privileges(
                self.model.object_type,
                snapshot.grantee_type,
                attrs["grantee"],
                attrs["database"],
                attrs["schema_name"],
                attrs[self.model.object_field],
                attrs["privileges"],
            )
        )
        logger.info(f"Deleted {self.kind} {data.get_id()}")
        data.set_id("")


class TableGrantReconciler(GrantReconciler):
    model = TableGrantState


class ViewGrantReconciler(GrantReconciler):
    model = ViewGrantState
