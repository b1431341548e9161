"""Shared plumbing for model objects."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from gemwire.bridge import CompletionBridge
from gemwire.config import Config
from gemwire.transport import TransportExecutor

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Awaitable, Callable

    import httpx

    from gemwire.sink import LogSink


class ModelClient:
    """Base for objects bound to one remote model.

    Subclasses set ``default_model`` and, where the model family is only
    published under a pinned name, ``default_release``.
    """

    default_model: ClassVar[str]
    default_release: ClassVar[str | None] = None

    def __init__(
        self,
        config: Config | None = None,
        *,
        model: str | None = None,
        release: str | None = None,
        client: httpx.AsyncClient | None = None,
        sink: LogSink | None = None,
    ) -> None:
        self.config = config if config is not None else Config()
        self.executor = TransportExecutor(
            self.config,
            model or self.default_model,
            release=release if release is not None else self.default_release,
            client=client,
            sink=sink,
        )

    @property
    def model(self) -> str:
        return self.executor.model

    @property
    def model_id(self) -> str:
        return self.executor.model_id

    def bridge(
        self,
        call: Awaitable[Any],
        on_success: Callable[[Any], None] | None = None,
        on_failure: Callable[[BaseException], None] | None = None,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> CompletionBridge[Any]:
        """Wrap one of this model's calls for poll-driven consumption."""
        return CompletionBridge(call, on_success, on_failure, loop=loop)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model_id={self.model_id!r}, config={self.config})"
