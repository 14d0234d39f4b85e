"""Declared schema surface: the attributes each object kind recognizes.

Derived from the desired-state models, so the surface and the validation
rules cannot drift apart.

Usage:
    from warehouse_reconciler.state.surface import describe

    for attr in describe(DatabaseState):
        print(attr.name, attr.required, attr.force_new)
"""

from typing import Any

from pydantic import BaseModel

from warehouse_reconciler.state.models import ResourceState, field_metadata


class AttributeSpec(BaseModel):
    """One recognized attribute of an object kind."""

    name: str
    type: str
    required: bool = False
    computed: bool = False
    force_new: bool = False
    default: Any = None
    normalize: str | None = None
    sensitive: bool = False
    description: str = ""

    @property
    def presence(self) -> str:
        """``required``, ``optional`` or ``computed``."""
        if self.computed:
            return "computed"
        return "required" if self.required else "optional"

    @property
    def mutability(self) -> str:
        return "ForceNew" if self.force_new else "mutable"


def _type_name(annotation: Any) -> str:
    """Short display name: ``str``, ``list[str]``, ``dict[str, str]``."""
    if hasattr(annotation, "__metadata__"):
        # Annotated[str, ...]
        return _type_name(annotation.__origin__)
    origin = getattr(annotation, "__origin__", None)
    args = getattr(annotation, "__args__", None)
    if origin is not None and args:
        inner = ", ".join(_type_name(a) for a in args)
        return f"{getattr(origin, '__name__', str(origin))}[{inner}]"
    return getattr(annotation, "__name__", str(annotation))


def describe(model: type[ResourceState]) -> list[AttributeSpec]:
    """List the attributes of one kind in declaration order.

    The host-facing name is the field alias when one is set (``schema``).
    """
    specs: list[AttributeSpec] = []
    for field_name, info in model.model_fields.items():
        meta = field_metadata(model, field_name)
        required = info.is_required()
        default = None
        if not required:
            default = info.get_default(call_default_factory=True)
        specs.append(
            AttributeSpec(
                name=info.alias or field_name,
                type=_type_name(info.annotation),
                required=required,
                computed=bool(meta.get("computed")),
                force_new=bool(meta.get("force_new")),
                default=default,
                normalize=meta.get("normalize"),
                sensitive=bool(meta.get("sensitive")),
                description=info.description or "",
            )
        )
    return specs
