"""Request-body assembly.

``assemble`` is a pure function from a message body plus optional
cross-cutting settings to the ordered wire dict. Every optional setting has
exactly two states: ``None`` (unset, key omitted) or a value (key emitted,
even if the value is an empty sequence). Key order is fixed:

    safety_settings, system_instruction, contents, tools, tool_config
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
import json
from typing import TYPE_CHECKING, Any

from gemwire.errors import ConfigurationError
from gemwire.models import (
    BatchEmbeddingRequest,
    Content,
    EmbeddingRequest,
    Part,
    SafetySetting,
    SystemInstruction,
)

if TYPE_CHECKING:
    from gemwire.tools import Tool, ToolConfig

Payload = dict[str, Any]


def assemble(
    contents: Content | Sequence[Content],
    *,
    safety_settings: Sequence[SafetySetting] | None = None,
    system_instruction: SystemInstruction | None = None,
    tool_config: ToolConfig | None = None,
    tools: Sequence[Tool] | None = None,
) -> Payload:
    """Build a ``generateContent`` body.

    Args:
        contents: A single ``Content`` (single-turn) or a chronological
            sequence of ``Content`` turns (multi-turn). Roles are sent exactly
            as given.
        safety_settings: Per-category thresholds.
        system_instruction: Standing instruction for the model.
        tool_config: Function-calling policy.
        tools: Declared tools. ``[]`` is sent as ``"tools": []``.

    Returns:
        Ordered dict with only the keys whose source value was set.
    """
    payload: Payload = {}
    if safety_settings is not None:
        payload["safety_settings"] = [s.to_wire() for s in safety_settings]
    if system_instruction is not None:
        payload["system_instruction"] = system_instruction.to_wire()
    payload["contents"] = _contents_to_wire(contents)
    if tools is not None:
        payload["tools"] = [t.to_wire() for t in tools]
    if tool_config is not None:
        payload["tool_config"] = tool_config.to_wire()
    return payload


def _contents_to_wire(
    contents: Content | Sequence[Content],
) -> dict[str, Any] | list[dict[str, Any]]:
    if isinstance(contents, Content):
        return contents.to_wire()
    if isinstance(contents, (str, bytes)) or not isinstance(contents, Sequence):
        raise ConfigurationError(
            f"contents must be a Content or a sequence of Content, got {type(contents).__name__}",
            hint="Wrap plain text with Content.from_text(...).",
        )
    turns: list[dict[str, Any]] = []
    for i, turn in enumerate(contents):
        if not isinstance(turn, Content):
            raise ConfigurationError(
                f"contents[{i}] is a {type(turn).__name__}, expected Content"
            )
        turns.append(turn.to_wire())
    return turns


def embedding_request(model: str, text: str) -> EmbeddingRequest:
    """Build an ``embedContent`` body for one text (role absent)."""
    return EmbeddingRequest(model=model, content=Content(parts=[Part(text=text)]))


def batch_embedding_request(
    model: str, texts: Iterable[str | None]
) -> BatchEmbeddingRequest:
    """Build a ``batchEmbedContents`` body. Empty and ``None`` texts are skipped."""
    return BatchEmbeddingRequest(
        requests=[embedding_request(model, text) for text in texts if text]
    )


def encode_payload(payload: Payload) -> bytes:
    """Encode a payload as compact UTF-8 JSON."""
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode(
        "utf-8"
    )
