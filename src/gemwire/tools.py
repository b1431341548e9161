"""Tool declarations and the tool-invocation policy."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Literal

from gemwire.errors import ConfigurationError, SchemaError
from gemwire.schema import ObjectSchema, schema_to_wire

ToolMode = Literal["AUTO", "ANY", "NONE"]
_TOOL_MODES: frozenset[str] = frozenset({"AUTO", "ANY", "NONE"})


@dataclass(frozen=True)
class FunctionDeclaration:
    """A function the model may ask you to call.

    The model never runs anything itself: when it decides to use the
    function, the response carries a ``functionCall`` part with the name and
    arguments, and invoking it is up to you.
    """

    name: str
    description: str
    parameters: ObjectSchema

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise SchemaError("FunctionDeclaration.name must be a non-empty string")
        if not isinstance(self.parameters, ObjectSchema):
            raise SchemaError(
                "FunctionDeclaration.parameters must be an ObjectSchema",
                hint="Wrap the arguments in object_of({...}).",
            )

    def to_wire(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": schema_to_wire(self.parameters),
        }


@dataclass(frozen=True)
class Tool:
    """A group of function declarations sent under ``tools``."""

    function_declarations: tuple[FunctionDeclaration, ...]

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "function_declarations", tuple(self.function_declarations)
        )

    def to_wire(self) -> dict[str, Any]:
        return {
            "function_declarations": [
                fn.to_wire() for fn in self.function_declarations
            ]
        }


@dataclass(frozen=True)
class ToolConfig:
    """Policy for whether, and which, declared functions the model may call.

    - ``AUTO``: the model decides between text and a function call
    - ``ANY``: the model must call one of the functions
    - ``NONE``: function calling is disabled for this request

    ``allowed_function_names`` narrows ``ANY`` to a subset of the declared
    functions. Each name must also be declared in a ``Tool`` on the same
    request.
    """

    mode: ToolMode = "AUTO"
    allowed_function_names: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        if self.mode not in _TOOL_MODES:
            raise ConfigurationError(
                f"Unknown tool mode: {self.mode!r}",
                hint="Use 'AUTO', 'ANY' or 'NONE'.",
            )
        if self.allowed_function_names is not None:
            if isinstance(self.allowed_function_names, str):
                raise ConfigurationError(
                    "allowed_function_names must be a sequence of names, not a string"
                )
            object.__setattr__(
                self, "allowed_function_names", tuple(self.allowed_function_names)
            )

    def to_wire(self) -> dict[str, Any]:
        calling: dict[str, Any] = {"mode": self.mode}
        if self.allowed_function_names is not None:
            calling["allowed_function_names"] = list(self.allowed_function_names)
        return {"function_calling_config": calling}


def tool(*functions: FunctionDeclaration) -> Tool:
    """Bundle function declarations into a single ``Tool``."""
    return Tool(functions)


def declared_names(tools: Sequence[Tool]) -> list[str]:
    """Return every declared function name, in declaration order."""
    return [fn.name for t in tools for fn in t.function_declarations]
