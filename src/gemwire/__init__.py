"""gemwire: a typed client for the Gemini generative-language REST API.

Public API:
    - GenerativeModel / GeminiFlash / GeminiPro: single-turn and chat generation
    - EmbeddingModel: single and batch text embedding
    - Config: endpoint and API key configuration
    - CompletionBridge: poll-driven consumption for frame-stepped hosts
    - schema / tools: function declarations for tool calling
    - set_sink(): route gemwire's log output to your own sink
"""

from __future__ import annotations

import logging

from gemwire.bridge import CompletionBridge
from gemwire.config import Config
from gemwire.embedding import EmbeddingModel
from gemwire.errors import APIError, ConfigurationError, GemwireError, SchemaError
from gemwire.generative import GeminiFlash, GeminiPro, GenerativeModel
from gemwire.models import (
    SUPPORTED_HARM_CATEGORIES,
    Candidate,
    Content,
    Embedding,
    EmbeddingResponse,
    FunctionCall,
    HarmBlockThreshold,
    HarmCategory,
    Part,
    Probability,
    Response,
    SafetyRating,
    SafetySetting,
    SystemInstruction,
    UsageMetadata,
)
from gemwire.payload import assemble
from gemwire.result import Failure, Outcome, Success
from gemwire.schema import (
    ArraySchema,
    EnumSchema,
    ObjectSchema,
    PrimitiveSchema,
    SchemaNode,
)
from gemwire.sink import LoggingSink, LogSink, get_sink, reset_sink, set_sink
from gemwire.tools import FunctionDeclaration, Tool, ToolConfig, tool

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("gemwire")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("gemwire").addHandler(logging.NullHandler())

__all__ = [
    "SUPPORTED_HARM_CATEGORIES",
    "APIError",
    "ArraySchema",
    "Candidate",
    "CompletionBridge",
    "Config",
    "ConfigurationError",
    "Content",
    "Embedding",
    "EmbeddingModel",
    "EmbeddingResponse",
    "EnumSchema",
    "Failure",
    "FunctionCall",
    "FunctionDeclaration",
    "GeminiFlash",
    "GeminiPro",
    "GemwireError",
    "GenerativeModel",
    "HarmBlockThreshold",
    "HarmCategory",
    "LogSink",
    "LoggingSink",
    "ObjectSchema",
    "Outcome",
    "Part",
    "PrimitiveSchema",
    "Probability",
    "Response",
    "SafetyRating",
    "SafetySetting",
    "SchemaError",
    "SchemaNode",
    "Success",
    "SystemInstruction",
    "Tool",
    "ToolConfig",
    "UsageMetadata",
    "assemble",
    "get_sink",
    "reset_sink",
    "set_sink",
    "tool",
]
