"""Function-parameter schemas.

A schema describes the shape of an argument the model may pass when it calls
one of your functions. It is a tree of four node kinds:

- ``PrimitiveSchema``: a scalar such as ``"string"`` or ``"integer"``
- ``EnumSchema``: a scalar restricted to ``allowed_values``
- ``ObjectSchema``: named child nodes under ``properties``
- ``ArraySchema``: a homogeneous list whose element shape is ``items``

Nodes are immutable, so a tree can only be built bottom-up. The type names
are passed through untouched; the remote service is the authority on which
ones it accepts.

Example:
    params = object_of(
        {
            "city": string("City name, e.g. Paris"),
            "unit": enum_of(["celsius", "fahrenheit"], "Temperature unit"),
        },
        required=["city"],
    )
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from gemwire.errors import SchemaError


def _check_type(type_: str) -> None:
    if not isinstance(type_, str) or not type_.strip():
        raise SchemaError(
            "Schema type must be a non-empty string",
            hint="Use a type name such as 'string', 'integer' or 'object'.",
        )


@dataclass(frozen=True)
class PrimitiveSchema:
    """A scalar parameter."""

    type: str
    description: str | None = None

    def __post_init__(self) -> None:
        _check_type(self.type)


@dataclass(frozen=True)
class EnumSchema:
    """A scalar parameter limited to a fixed set of values."""

    type: str
    description: str | None
    allowed_values: tuple[str, ...]

    def __post_init__(self) -> None:
        _check_type(self.type)
        values = tuple(self.allowed_values)
        if not values:
            raise SchemaError(
                "EnumSchema requires at least one allowed value",
                hint="Use PrimitiveSchema for an unrestricted value.",
            )
        object.__setattr__(self, "allowed_values", values)


@dataclass(frozen=True)
class ObjectSchema:
    """A structured parameter with named properties."""

    type: str
    description: str | None
    properties: Mapping[str, SchemaNode]
    #: Property names the model must always supply.
    required: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        _check_type(self.type)
        if not isinstance(self.properties, Mapping):
            raise SchemaError("ObjectSchema.properties must be a mapping")
        props = dict(self.properties)
        for name, child in props.items():
            if not isinstance(child, _NODE_TYPES):
                raise SchemaError(
                    f"Property {name!r} is a {type(child).__name__}, not a schema node"
                )
        object.__setattr__(self, "properties", props)

        if self.required is not None:
            required = tuple(self.required)
            unknown = [name for name in required if name not in props]
            if unknown:
                raise SchemaError(
                    f"Required properties not declared: {', '.join(unknown)}",
                    hint="Every name in required must be a key of properties.",
                )
            object.__setattr__(self, "required", required)


@dataclass(frozen=True)
class ArraySchema:
    """A list parameter whose elements all share one shape."""

    type: str
    description: str | None
    items: SchemaNode

    def __post_init__(self) -> None:
        _check_type(self.type)
        if not isinstance(self.items, _NODE_TYPES):
            raise SchemaError("ArraySchema.items must be a single schema node")


SchemaNode = PrimitiveSchema | EnumSchema | ObjectSchema | ArraySchema
_NODE_TYPES = (PrimitiveSchema, EnumSchema, ObjectSchema, ArraySchema)


def schema_to_wire(node: SchemaNode) -> dict[str, Any]:
    """Render a schema tree as the flat JSON object the API expects.

    Raises:
        SchemaError: If the tree refers back to one of its own ancestors.
    """
    return _to_wire(node, ())


def _to_wire(node: SchemaNode, path: tuple[int, ...]) -> dict[str, Any]:
    if id(node) in path:
        raise SchemaError(
            "Schema is self-referential",
            hint="The API only accepts trees; build a separate node for each use.",
        )
    path = (*path, id(node))

    out: dict[str, Any] = {"type": node.type}
    if node.description is not None:
        out["description"] = node.description

    match node:
        case PrimitiveSchema():
            pass
        case EnumSchema(allowed_values=values):
            out["enum"] = list(values)
        case ObjectSchema(properties=props, required=required):
            out["properties"] = {
                name: _to_wire(child, path) for name, child in props.items()
            }
            if required is not None:
                out["required"] = list(required)
        case ArraySchema(items=items):
            out["items"] = _to_wire(items, path)
        case _:
            raise SchemaError(f"Not a schema node: {type(node).__name__}")
    return out


def schema_from_wire(data: Mapping[str, Any]) -> SchemaNode:
    """Rebuild a schema tree from its wire form.

    The node kind is inferred from which shape key is present.
    """
    if not isinstance(data, Mapping):
        raise SchemaError(f"Expected a JSON object, got {type(data).__name__}")

    type_ = data.get("type", "")
    description = data.get("description")

    if "enum" in data:
        return EnumSchema(type_, description, tuple(data["enum"]))
    if "properties" in data:
        props = data["properties"]
        if not isinstance(props, Mapping):
            raise SchemaError("'properties' must be a JSON object")
        required = data.get("required")
        return ObjectSchema(
            type_,
            description,
            {name: schema_from_wire(child) for name, child in props.items()},
            tuple(required) if required is not None else None,
        )
    if "items" in data:
        return ArraySchema(type_, description, schema_from_wire(data["items"]))
    return PrimitiveSchema(type_, description)


# --- Convenience constructors ---


def string(description: str | None = None) -> PrimitiveSchema:
    return PrimitiveSchema("string", description)


def integer(description: str | None = None) -> PrimitiveSchema:
    return PrimitiveSchema("integer", description)


def number(description: str | None = None) -> PrimitiveSchema:
    return PrimitiveSchema("number", description)


def boolean(description: str | None = None) -> PrimitiveSchema:
    return PrimitiveSchema("boolean", description)


def enum_of(
    values: Sequence[str], description: str | None = None, *, type: str = "string"
) -> EnumSchema:
    return EnumSchema(type, description, tuple(values))


def array_of(items: SchemaNode, description: str | None = None) -> ArraySchema:
    return ArraySchema("array", description, items)


def object_of(
    properties: Mapping[str, SchemaNode],
    description: str | None = None,
    *,
    required: Sequence[str] | None = None,
) -> ObjectSchema:
    return ObjectSchema(
        "object",
        description,
        properties,
        tuple(required) if required is not None else None,
    )
