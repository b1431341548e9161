"""Test helpers (small, reusable doubles).

Keep this file tiny and purpose-built: a recording sink and a fake HTTP
transport cover almost every test.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from typing import Any

import httpx


@dataclass
class RecordingSink:
    """LogSink that records every message by channel."""

    logs: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)
    lines: list[str] = field(default_factory=list)
    _pending: list[str] = field(default_factory=list)

    def log(self, message: str) -> None:
        self.logs.append(message)

    def write(self, message: str) -> None:
        self._pending.append(message)

    def write_line(self, message: str) -> None:
        self.lines.append("".join((*self._pending, message)))
        self._pending.clear()

    def warning(self, message: str) -> None:
        self.warnings.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)

    def fail(self, message: str) -> None:
        self.failures.append(message)

    def assert_(self, condition: bool, message: str) -> None:
        if not condition:
            self.errors.append(message)

    def write_if(self, condition: bool, message: str) -> None:
        if condition:
            self.write(message)

    def write_line_if(self, condition: bool, message: str) -> None:
        if condition:
            self.write_line(message)


@dataclass
class FakeServer:
    """Scripted stand-in for the remote API, mounted via ``httpx.MockTransport``.

    Each request pops the next scripted reply (a ``(status, body)`` pair or
    an exception to raise). The last reply repeats once the script runs out.
    """

    replies: list[tuple[int, Any] | BaseException] = field(default_factory=list)
    requests: list[httpx.Request] = field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, BaseException):
            raise reply
        status, body = reply
        if isinstance(body, (dict, list)):
            return httpx.Response(status, json=body)
        return httpx.Response(status, text=body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    @property
    def last_body(self) -> Any:
        return json.loads(self.requests[-1].content)


def text_response(*texts: str, finish_reason: str = "STOP") -> dict[str, Any]:
    """A minimal generateContent reply with one candidate."""
    return {
        "candidates": [
            {
                "content": {"role": "model", "parts": [{"text": t} for t in texts]},
                "finishReason": finish_reason,
                "index": 0,
                "safetyRatings": [
                    {
                        "category": "HARM_CATEGORY_HARASSMENT",
                        "probability": "NEGLIGIBLE",
                    }
                ],
            }
        ],
        "usageMetadata": {
            "promptTokenCount": 3,
            "candidatesTokenCount": 5,
            "totalTokenCount": 8,
        },
    }


def function_call_response(name: str, args: dict[str, Any]) -> dict[str, Any]:
    return {
        "candidates": [
            {
                "content": {
                    "role": "model",
                    "parts": [{"functionCall": {"name": name, "args": args}}],
                },
                "finishReason": "STOP",
                "index": 0,
            }
        ]
    }
