"""Reconciler base class: create / read / update / delete / import.

A reconciler combines the existence oracle, the catalog readers and the
statement builders for one object kind.  Subclasses declare:

- ``model``: desired-state model (kind and identity fields come from it)
- ``object_type`` / ``show_type``: ``DATABASE`` / ``DATABASES``
- ``update_order``: attributes applied by ``update``, in order (empty when
  every attribute is ForceNew)
- ``properties``: attribute -> SQL property keyword for ``SET`` / ``UNSET``

and implement ``create_statement`` and ``fetch``.

Every operation stops at the first error.  ``update`` re-verifies that the
object exists exactly once, renames first (pre-checking the target name),
then issues one ALTER per changed attribute and checkpoints each with
``ResourceData.set_partial``.  Nothing is rolled back.

Usage:
    from warehouse_reconciler.reconcilers import get_reconciler

    reconciler = get_reconciler("database", client)
    data = reconciler.create(ResourceData(DatabaseState, desired=state))
"""

import logging
from typing import Any, ClassVar

from warehouse_reconciler import statements
from warehouse_reconciler.adapters.base import CatalogClient
from warehouse_reconciler.catalog.existence import Existence, Scope, exists, require
from warehouse_reconciler.catalog.identifiers import normalize, qualified_name, split_identity
from warehouse_reconciler.errors import ConflictError, NotFoundError, ReconcilerError, ValidationError
from warehouse_reconciler.state.data import ResourceData
from warehouse_reconciler.state.models import ResourceState, field_metadata

logger = logging.getLogger(__name__)


class Reconciler:
    """Lifecycle operations for one object kind over an explicit client.

    Args:
        client: Catalog client every statement is executed through.
    """

    model: ClassVar[type[ResourceState]] = ResourceState
    object_type: ClassVar[str] = ""
    show_type: ClassVar[str] = ""
    update_order: ClassVar[tuple[str, ...]] = ()
    properties: ClassVar[dict[str, str]] = {}

    def __init__(self, client: CatalogClient):
        self.client = client

    @property
    def kind(self) -> str:
        return self.model.kind

    @property
    def label(self) -> str:
        return self.model.kind.replace("_", " ").capitalize()

    # ------------------------------------------------------------------------
    # Per-kind hooks
    # ------------------------------------------------------------------------

    def create_statement(self, desired: Any) -> str:
        raise NotImplementedError

    def fetch(self, segments: list[str], data: ResourceData) -> dict[str, Any]:
        """Read the live object at *segments* into attribute values."""
        raise NotImplementedError

    def alter_statement(self, segments: list[str], attr: str, value: Any) -> str:
        return statements.set_property(self.object_type, segments, self.properties[attr], value)

    # ------------------------------------------------------------------------
    # Identity helpers
    # ------------------------------------------------------------------------

    def segments(self, identity: str) -> list[str]:
        return split_identity(identity, len(self.model.identity_fields), self.kind)

    def require_unique(self, segments: list[str]) -> tuple:
        """Existence oracle for the object at *segments*: one row or an error."""
        *scope, name = segments
        return require(self.client, self.show_type, name, Scope(*scope), kind=self.label)

    def _desired(self, data: ResourceData) -> Any:
        if data.desired is None:
            raise ValidationError(f"{self.kind} {data.get_id() or '<new>'} has no desired state")
        return data.desired

    # ------------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------------

    def create(self, data: ResourceData) -> ResourceData:
        """Create the object and record its identity.

        Raises:
            ConflictError: If an object with the same name already exists.
            AmbiguityError: If the name already matches several objects.
            DriverError: If the create statement fails.
        """
        desired = self._desired(data)
        identity = desired.identity()
        *scope, name = self.segments(identity)
        if exists(self.client, self.show_type, name, Scope(*scope)) is Existence.UNIQUE:
            raise ConflictError(identity)

        self.client.execute(self.create_statement(desired))
        data.set_id(identity)
        data.commit()
        logger.info(f"Created {self.kind} {identity}")
        return data

    def read(self, data: ResourceData) -> ResourceData:
        """Refresh recorded state from the catalog.

        Raises:
            NotFoundError: If the object is gone (the host prunes it).
            AmbiguityError: If the identity matches several objects.
        """
        segments = self.segments(data.get_id())
        try:
            values = self.fetch(segments, data)
        except NotFoundError:
            logger.info(f"{self.kind} {data.get_id()} not found, pruning")
            raise
        for attr, value in values.items():
            data.set(attr, value)
        return data

    def update(self, data: ResourceData) -> ResourceData:
        """Apply changed mutable attributes one statement at a time.

        Raises:
            ValidationError: If the kind has no mutable attributes, or a
                ForceNew attribute changed.
            NotFoundError: If the object is gone.
            ConflictError: If the rename target already exists.
            AmbiguityError: If the identity or rename target is ambiguous.
            DriverError: If a statement fails; earlier steps stay applied
                and are listed in ``data.applied``.
        """
        if not self.update_order:
            raise ValidationError(f"{self.kind} attributes are ForceNew; update is not supported")
        self._desired(data)

        force_new = [
            attr
            for attr in self.model.model_fields
            if attr in data.state
            and field_metadata(self.model, attr).get("force_new")
            and data.has_changed(attr)
        ]
        if force_new:
            raise ValidationError(f"{self.kind} {data.get_id()}: {force_new} require replacement")

        segments = self.segments(data.get_id())
        self.require_unique(segments)

        try:
            for attr in self.update_order:
                if attr == "name":
                    # The identity is authoritative; recorded state may lack the name.
                    changed = normalize(data.get("name")) != segments[-1]
                else:
                    changed = data.has_changed(attr)
                if not changed:
                    continue
                if attr == "name":
                    segments = self._rename(data, segments)
                else:
                    self.client.execute(self.alter_statement(segments, attr, data.get(attr)))
                data.set_partial(attr)
        except ReconcilerError:
            logger.warning(f"Update of {self.kind} {data.get_id()} stopped; applied {data.applied}")
            raise
        return data

    def _rename(self, data: ResourceData, segments: list[str]) -> list[str]:
        *scope, _ = segments
        new_segments = [*scope, normalize(data.get("name"))]
        source, target = qualified_name(*segments), qualified_name(*new_segments)
        if exists(self.client, self.show_type, new_segments[-1], Scope(*scope)) is Existence.UNIQUE:
            raise ConflictError(target, source=source)

        self.client.execute(statements.rename_object(self.object_type, segments, new_segments))
        data.set_id(target)
        logger.info(f"Renamed {self.kind} {source} to {target}")
        return new_segments

    def delete(self, data: ResourceData) -> None:
        """Drop the object after re-verifying it exists exactly once.

        Raises:
            NotFoundError: If the object is already gone (no DROP is sent).
            AmbiguityError: If the identity matches several objects.
            DriverError: If the drop statement fails.
        """
        segments = self.segments(data.get_id())
        self.require_unique(segments)
        self.client.execute(statements.drop_object(self.object_type, segments))
        logger.info(f"Deleted {self.kind} {data.get_id()}")
        data.set_id("")

    def import_(self, identity: str) -> ResourceData:
        """Adopt an existing object by identity (upper-cased), then read it."""
        data = ResourceData(self.model, id=identity.strip().upper())
        return self.read(data)
