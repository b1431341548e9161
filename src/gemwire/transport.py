"""HTTP transport: endpoint construction, dispatch, decoding and failure mapping.

Executors without an injected client share one ``httpx.AsyncClient`` per
event loop. A client holds no per-call state (each call supplies its own body
and reads its own response), so concurrent calls on it are independent and
may finish in any order. Pooled connections belong to the loop that opened
them, which is why clients are never shared across loops.

Code that drives its own loops (``asyncio.run`` per call, for example) should
``await aclose_shared_client()`` before the loop ends. ``CompletionBridge``
does this for the private loops it owns.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any, TypeVar
import weakref

import httpx
from pydantic import BaseModel, ValidationError

from gemwire._http import JSON_HEADERS, RELEASE_PATTERN
from gemwire.config import API_KEY_ENV_VAR
from gemwire.errors import (
    APIError,
    ConfigurationError,
    FailureKind,
    _walk_exception_chain,
)
from gemwire.models import Response
from gemwire.payload import encode_payload
from gemwire.result import Failure, Outcome, Success
from gemwire.sink import LogSink, get_sink

if TYPE_CHECKING:
    from gemwire.config import Config

log = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

_loop_clients: weakref.WeakKeyDictionary[
    asyncio.AbstractEventLoop, httpx.AsyncClient
] = weakref.WeakKeyDictionary()


def get_shared_client() -> httpx.AsyncClient:
    """Return the running loop's HTTP client, creating it on first use."""
    loop = asyncio.get_running_loop()
    client = _loop_clients.get(loop)
    if client is None or client.is_closed:
        client = httpx.AsyncClient()
        _loop_clients[loop] = client
    return client


async def aclose_shared_client() -> None:
    """Close the running loop's HTTP client. A new one is created on next use.

    Clients of other loops are left alone; each must be closed on its own loop.
    """
    client = _loop_clients.pop(asyncio.get_running_loop(), None)
    if client is not None:
        await client.aclose()


def extract_status_code(exc: BaseException) -> int | None:
    """Walk the exception chain to find an HTTP status code."""
    for e in _walk_exception_chain(exc):
        response = getattr(e, "response", None)
        value = getattr(response, "status_code", None)
        if isinstance(value, int) and 100 <= value <= 599:
            return value
    return None


def _remote_error_message(response: httpx.Response) -> str:
    """Pull ``error.message`` out of a Google API error body, if present."""
    try:
        body = response.json()
    except ValueError:
        return response.text.strip()
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    return response.text.strip()


def _auth_hint(status_code: int | None, cause_message: str) -> str | None:
    """Generate a hint for auth errors where naming the env var is useful."""
    cause_lower = cause_message.lower()
    if status_code in {401, 403} or (
        status_code == 400 and ("api key" in cause_lower or "api_key" in cause_lower)
    ):
        return (
            f"Check credentials/permissions (try setting {API_KEY_ENV_VAR} "
            "or Config.api_key)."
        )
    return None


class TransportExecutor:
    """Sends assembled payloads for one model and decodes the replies.

    ``dispatch`` returns a typed ``Outcome``. ``send`` is the fail-soft form
    used by the model verbs: it returns the decoded response or ``None``.
    Neither raises for transport, status or decode failures; each failure is
    reported to the log sink exactly once.
    """

    def __init__(
        self,
        config: Config,
        model: str,
        *,
        release: str | None = None,
        client: httpx.AsyncClient | None = None,
        sink: LogSink | None = None,
    ) -> None:
        if not isinstance(model, str) or not model.strip():
            raise ConfigurationError("model must be a non-empty string")
        if release is not None and not RELEASE_PATTERN.match(release):
            raise ConfigurationError(
                f"Invalid release suffix: {release!r}",
                hint="Use '-latest', a pinned revision like '-001', or '' for stable.",
            )
        self.config = config
        self.model = model.removeprefix("models/")
        self.release = config.release if release is None else release
        self._client = client
        self._sink = sink

    @property
    def model_id(self) -> str:
        """Fully-qualified model identifier, e.g. ``models/gemini-1.5-flash-latest``."""
        return f"models/{self.model}{self.release}"

    @property
    def sink(self) -> LogSink:
        return self._sink if self._sink is not None else get_sink()

    def endpoint(self, verb: str) -> str:
        """Endpoint URL for *verb*, without the API key."""
        return f"{self.config.base_url}/{self.config.version}/{self.model_id}:{verb}"

    async def dispatch(
        self,
        verb: str,
        payload: dict[str, Any] | BaseModel,
        response_type: type[T],
    ) -> Outcome[T]:
        """POST *payload* to *verb* and decode the body as *response_type*."""
        if isinstance(payload, BaseModel):
            payload = payload.model_dump(mode="json", by_alias=True, exclude_none=True)
        body = encode_payload(payload)
        url = self.endpoint(verb)
        client = self._client if self._client is not None else get_shared_client()

        self.sink.log(f"Request {verb}: {body.decode('utf-8')}")
        log.debug("POST %s (%d bytes)", url, len(body))

        try:
            http_response = await client.post(
                url,
                params={"key": self.config.api_key or ""},
                content=body,
                headers=JSON_HEADERS,
                timeout=self.config.timeout_s,
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            return self._fail(
                "transport",
                f"{verb} request failed: {type(e).__name__}: {e}",
                verb=verb,
                status_code=extract_status_code(e),
                cause=e,
            )

        if not http_response.is_success:
            remote = _remote_error_message(http_response)
            return self._fail(
                "status",
                f"{verb} failed (status={http_response.status_code}): {remote}",
                verb=verb,
                status_code=http_response.status_code,
                hint=_auth_hint(http_response.status_code, remote),
            )

        return self._decode(verb, http_response, response_type)

    async def send(
        self,
        verb: str,
        payload: dict[str, Any] | BaseModel,
        response_type: type[T],
    ) -> T | None:
        """Like ``dispatch``, but return ``None`` on failure.

        Callers must check for ``None``; the reason has already been logged.
        """
        outcome = await self.dispatch(verb, payload, response_type)
        return outcome.value_or_none()

    def _decode(
        self, verb: str, http_response: httpx.Response, response_type: type[T]
    ) -> Outcome[T]:
        raw = http_response.text
        try:
            data = json.loads(raw)
        except ValueError as e:
            return self._fail(
                "decode", f"{verb} returned malformed JSON: {e}", verb=verb, cause=e
            )

        if data is None or data == {}:
            return self._fail(
                "empty", f"{verb} response decoded to an empty result", verb=verb
            )

        try:
            decoded = response_type.model_validate(data)
        except ValidationError as e:
            return self._fail(
                "decode",
                f"{verb} response does not match {response_type.__name__}: {e}",
                verb=verb,
                cause=e,
            )

        if isinstance(decoded, Response):
            self._log_parts(decoded)
        self.sink.log(f"Deserialized Response: {raw}")
        return Success(decoded)

    def _log_parts(self, response: Response) -> None:
        for part in response.iter_parts():
            if part.text:
                self.sink.log(f"Response Text: {part.text}")
            elif part.function_call is not None:
                self.sink.log(f"Function: {part.function_call.name}")

    def _fail(
        self,
        kind: FailureKind,
        message: str,
        *,
        verb: str,
        status_code: int | None = None,
        hint: str | None = None,
        cause: BaseException | None = None,
    ) -> Failure:
        err = APIError(
            message, kind=kind, hint=hint, status_code=status_code, verb=verb
        )
        if cause is not None:
            err.__cause__ = cause
        self.sink.error(f"Request Error: {message}")
        return Failure(err)
