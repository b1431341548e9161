"""Exception hierarchy for gemwire."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from collections.abc import Iterator

FailureKind = Literal["transport", "status", "decode", "empty"]


class GemwireError(Exception):
    """Base exception for all gemwire errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(GemwireError):
    """Configuration or request-shape validation failed."""


class SchemaError(GemwireError):
    """A function-parameter schema is malformed."""


class APIError(GemwireError):
    """A call to the remote API did not produce a usable result.

    ``kind`` classifies where the call broke down:

    - ``"transport"``: connection, timeout or other HTTP client failure
    - ``"status"``: the service answered with a non-2xx status
    - ``"decode"``: the body was not JSON or did not match the response type
    - ``"empty"``: the body decoded to ``null`` or an empty object
    """

    def __init__(
        self,
        message: str,
        *,
        kind: FailureKind,
        hint: str | None = None,
        status_code: int | None = None,
        verb: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.kind = kind
        self.status_code = status_code
        self.verb = verb


def _walk_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Depth-first walk over *exc*, its causes and contexts. Each exception once."""
    visited: set[int] = set()
    pending: list[BaseException] = [exc]
    while pending:
        current = pending.pop()
        if id(current) in visited:
            continue
        visited.add(id(current))
        yield current
        # Explicit causes are visited before implicit contexts.
        for linked in (current.__context__, current.__cause__):
            if linked is not None:
                pending.append(linked)
