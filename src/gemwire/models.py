"""Wire records shared by requests and responses.

Field declaration order is the serialization order. Optional fields default
to ``None`` and are dropped on output (``exclude_none``), so an unset value
never reaches the wire as ``null``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class HarmCategory(StrEnum):
    """Harm categories, mirroring the upstream taxonomy.

    Only four members are accepted by Gemini models:
    ``HARM_CATEGORY_HARASSMENT``, ``HARM_CATEGORY_HATE_SPEECH``,
    ``HARM_CATEGORY_SEXUALLY_EXPLICIT`` and ``HARM_CATEGORY_DANGEROUS_CONTENT``
    (see ``SUPPORTED_HARM_CATEGORIES``). The remaining legacy members exist so
    that responses and older settings decode; sending them in a
    ``SafetySetting`` makes the service reject the request.
    """

    HARM_CATEGORY_UNSPECIFIED = "HARM_CATEGORY_UNSPECIFIED"
    # Legacy members, not accepted by Gemini models.
    HARM_CATEGORY_DEROGATORY = "HARM_CATEGORY_DEROGATORY"
    HARM_CATEGORY_TOXICITY = "HARM_CATEGORY_TOXICITY"
    HARM_CATEGORY_VIOLENCE = "HARM_CATEGORY_VIOLENCE"
    HARM_CATEGORY_SEXUAL = "HARM_CATEGORY_SEXUAL"
    HARM_CATEGORY_MEDICAL = "HARM_CATEGORY_MEDICAL"
    HARM_CATEGORY_DANGEROUS = "HARM_CATEGORY_DANGEROUS"
    HARM_CATEGORY_HARASSMENT = "HARM_CATEGORY_HARASSMENT"
    HARM_CATEGORY_HATE_SPEECH = "HARM_CATEGORY_HATE_SPEECH"
    HARM_CATEGORY_SEXUALLY_EXPLICIT = "HARM_CATEGORY_SEXUALLY_EXPLICIT"
    HARM_CATEGORY_DANGEROUS_CONTENT = "HARM_CATEGORY_DANGEROUS_CONTENT"


SUPPORTED_HARM_CATEGORIES: frozenset[HarmCategory] = frozenset(
    {
        HarmCategory.HARM_CATEGORY_HARASSMENT,
        HarmCategory.HARM_CATEGORY_HATE_SPEECH,
        HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
        HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
    }
)


class HarmBlockThreshold(StrEnum):
    """Blocking threshold applied to a harm category."""

    HARM_BLOCK_THRESHOLD_UNSPECIFIED = "HARM_BLOCK_THRESHOLD_UNSPECIFIED"
    BLOCK_LOW_AND_ABOVE = "BLOCK_LOW_AND_ABOVE"
    BLOCK_MEDIUM_AND_ABOVE = "BLOCK_MEDIUM_AND_ABOVE"
    BLOCK_ONLY_HIGH = "BLOCK_ONLY_HIGH"
    BLOCK_NONE = "BLOCK_NONE"


class Probability(StrEnum):
    """Probability that a response falls into a harm category."""

    HARM_PROBABILITY_UNSPECIFIED = "HARM_PROBABILITY_UNSPECIFIED"
    NEGLIGIBLE = "NEGLIGIBLE"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    EXTREME = "EXTREME"


class WireModel(BaseModel):
    """Base for immutable wire records."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict[str, Any]:
        """Dump using wire names, omitting unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# Content
# =============================================================================


class FunctionCall(WireModel):
    """Arguments the model wants passed to one of your functions.

    This is data only; gemwire never invokes anything.
    """

    name: str
    args: dict[str, Any] | None = None


class Part(WireModel):
    """One fragment of a turn: either text or a function call, never both."""

    text: str | None = None
    function_call: FunctionCall | None = Field(default=None, alias="functionCall")

    @model_validator(mode="after")
    def _exactly_one_variant(self) -> Part:
        populated = (self.text is not None) + (self.function_call is not None)
        if populated != 1:
            raise ValueError("Part must carry exactly one of text or functionCall")
        return self

    @classmethod
    def from_text(cls, text: str) -> Part:
        return cls(text=text)


class Content(WireModel):
    """A role-tagged, ordered sequence of parts."""

    role: str | None = None
    parts: list[Part] = Field(default_factory=list)

    @classmethod
    def from_text(cls, text: str, role: str | None = "user") -> Content:
        return cls(role=role, parts=[Part(text=text)])

    @property
    def text(self) -> str:
        """Concatenated text of all text parts."""
        return "".join(p.text for p in self.parts if p.text is not None)


class SafetySetting(WireModel):
    """Threshold for one harm category.

    Only categories in ``SUPPORTED_HARM_CATEGORIES`` are accepted by the
    service; nothing here prevents sending the others.
    """

    category: HarmCategory
    threshold: HarmBlockThreshold

    @property
    def is_supported(self) -> bool:
        return self.category in SUPPORTED_HARM_CATEGORIES


class SystemInstruction(WireModel):
    """Standing instruction placed ahead of the conversation."""

    parts: Part

    @classmethod
    def from_text(cls, text: str) -> SystemInstruction:
        return cls(parts=Part(text=text))


# =============================================================================
# Embedding requests
# =============================================================================


class EmbeddingRequest(WireModel):
    """Body of a single ``embedContent`` call."""

    model: str
    content: Content


class BatchEmbeddingRequest(WireModel):
    """Body of a ``batchEmbedContents`` call.

    Only ``requests`` appears at the top level; ``model`` and ``content``
    live on each item.
    """

    requests: list[EmbeddingRequest]


# =============================================================================
# Responses
# =============================================================================


class SafetyRating(WireModel):
    """Per-category rating attached to a candidate.

    Categories newer than ``HarmCategory`` decode as plain strings rather than
    failing the whole response.
    """

    category: HarmCategory | str = Field(union_mode="left_to_right")
    probability: Probability


class UsageMetadata(WireModel):
    prompt_token_count: int = Field(default=0, alias="promptTokenCount")
    candidates_token_count: int = Field(default=0, alias="candidatesTokenCount")
    total_token_count: int = Field(default=0, alias="totalTokenCount")


class Candidate(WireModel):
    """One generated alternative."""

    content: Content | None = None
    finish_reason: str | None = Field(default=None, alias="finishReason")
    index: int = 0
    safety_ratings: list[SafetyRating] = Field(
        default_factory=list, alias="safetyRatings"
    )


class Response(WireModel):
    """Decoded ``generateContent`` response."""

    candidates: list[Candidate] = Field(default_factory=list)
    usage_metadata: UsageMetadata | None = Field(default=None, alias="usageMetadata")

    def iter_parts(self) -> list[Part]:
        """All parts of all candidates, in order."""
        return [
            part
            for candidate in self.candidates
            if candidate.content is not None
            for part in candidate.content.parts
        ]

    @property
    def text(self) -> str:
        """Text of the first candidate, or ``""`` when there is none."""
        if not self.candidates or self.candidates[0].content is None:
            return ""
        return self.candidates[0].content.text

    @property
    def function_calls(self) -> list[FunctionCall]:
        """Function calls requested by the first candidate."""
        if not self.candidates or self.candidates[0].content is None:
            return []
        return [
            p.function_call
            for p in self.candidates[0].content.parts
            if p.function_call is not None
        ]


class Embedding(WireModel):
    values: list[float]


class EmbeddingResponse(WireModel):
    """Decoded embedding response.

    A single ``embedContent`` call fills ``embedding``; ``batchEmbedContents``
    fills ``embeddings``. The other field stays ``None``.
    """

    embedding: Embedding | None = None
    embeddings: list[Embedding] | None = None

    @model_validator(mode="after")
    def _single_or_batch(self) -> EmbeddingResponse:
        if self.embedding is not None and self.embeddings is not None:
            raise ValueError("response carries both embedding and embeddings")
        return self
