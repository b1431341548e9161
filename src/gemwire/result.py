"""Typed call outcomes.

``TransportExecutor.dispatch`` returns one of these instead of raising, so
failure handling shows up in the signature rather than in a broad
try/except at every call site.
"""

from __future__ import annotations

import dataclasses
from typing import Generic, TypeVar, Union

from gemwire.errors import APIError

T = TypeVar("T")


@dataclasses.dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    """A call that produced a decoded response."""

    value: T

    @property
    def ok(self) -> bool:
        return True

    def value_or_none(self) -> T | None:
        return self.value


@dataclasses.dataclass(frozen=True, slots=True)
class Failure:
    """A call that failed; ``error.kind`` says where."""

    error: APIError

    @property
    def ok(self) -> bool:
        return False

    def value_or_none(self) -> None:
        return None


Outcome = Union[Success[T], Failure]
