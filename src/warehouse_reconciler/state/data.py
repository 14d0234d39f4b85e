"""ResourceData: the attribute bag shared by the host and the reconcilers.

A ``ResourceData`` holds three things for one object:

- ``desired``: the validated desired-state model (``None`` for read/import)
- ``state``: the last recorded state (normalized values keyed by field)
- the durable identity (``get_id`` / ``set_id``)

``has_changed`` compares recorded state against desired values after each
field's normalization.  During an update every successfully applied step
calls ``set_partial``, which checkpoints that one field into ``state`` and
appends it to ``applied``; a failure mid-sequence leaves earlier
checkpoints in place.

Usage:
    data = ResourceData(DatabaseState, desired=new_state, state=old_values, id="REPORTS")
    if data.has_changed("comment"):
        ...
        data.set_partial("comment")
"""

from typing import Any

from warehouse_reconciler.state.models import ResourceState, field_metadata, normalize_value


class ResourceData:
    """Desired and recorded state of one object plus its identity.

    Args:
        model: Desired-state model class of the object kind.
        desired: Desired state (``None`` when only reading).
        state: Previously recorded attribute values.
        id: Durable identity (empty before create).
    """

    def __init__(
        self,
        model: type[ResourceState],
        desired: ResourceState | None = None,
        state: dict[str, Any] | None = None,
        id: str = "",
    ):
        self.model = model
        self.desired = desired
        self.state: dict[str, Any] = {}
        self.applied: list[str] = []
        self._id = id
        for attr, value in (state or {}).items():
            self.set(attr, value)

    # ------------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------------

    def get_id(self) -> str:
        return self._id

    def set_id(self, id: str) -> None:
        """Record the durable identity (empty string marks the object gone)."""
        self._id = id

    # ------------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------------

    def _normalize(self, attr: str, value: Any) -> Any:
        if attr not in self.model.model_fields:
            raise KeyError(f"{self.model.kind} has no attribute {attr!r}")
        return normalize_value(field_metadata(self.model, attr).get("normalize"), value)

    def get(self, attr: str) -> Any:
        """Desired value of *attr*, falling back to the recorded state."""
        if self.desired is not None:
            return getattr(self.desired, attr)
        return self.state.get(attr)

    def get_state(self, attr: str) -> Any:
        return self.state.get(attr)

    def set(self, attr: str, value: Any) -> None:
        """Record an observed value (normalized)."""
        self.state[attr] = self._normalize(attr, value)

    def has_changed(self, attr: str) -> bool:
        """True when the desired value differs from the recorded one.

        Without a desired state nothing has changed.

        Example:
            data = ResourceData(RoleState, RoleState(name="x"), {"name": "X"})
            data.has_changed("name")  # False
        """
        if self.desired is None:
            return False
        desired = self._normalize(attr, _plain(getattr(self.desired, attr)))
        return desired != self.state.get(attr)

    def changed(self) -> list[str]:
        """All attributes whose desired value differs, in field order."""
        return [attr for attr in self.model.model_fields if self.has_changed(attr)]

    def set_partial(self, attr: str) -> None:
        """Checkpoint one applied change into the recorded state."""
        if self.desired is not None:
            self.set(attr, _plain(getattr(self.desired, attr)))
        self.applied.append(attr)

    def commit(self) -> None:
        """Record the whole desired state (after a successful create)."""
        if self.desired is not None:
            self.state = self.desired.normalized()

    def to_dict(self) -> dict[str, Any]:
        """Recorded state plus identity, for display and host hand-off."""
        return {"id": self._id, **self.state}

    def __repr__(self) -> str:
        return f"ResourceData(kind={self.model.kind!r}, id={self._id!r})"


def _plain(value: Any) -> Any:
    """Dump nested models (table columns) to plain dicts for comparison."""
    if isinstance(value, list):
        return [_plain(v) for v in value]
    if hasattr(value, "model_dump"):
        return value.model_dump()
    return value
