"""Endpoint constants: host, API versions, release suffixes, verbs and model names."""

from __future__ import annotations

import re
from typing import Final, Literal

DEFAULT_BASE_URL: Final[str] = "https://generativelanguage.googleapis.com"

ApiVersion = Literal["v1", "v1beta"]
API_VERSIONS: frozenset[str] = frozenset({"v1", "v1beta"})
DEFAULT_VERSION: Final[ApiVersion] = "v1beta"

#: ``-latest``, a pinned ``-NNN`` revision, or ``""`` for the stable alias.
RELEASE_PATTERN = re.compile(r"^(?:-latest|-\d{3}|)$")
DEFAULT_RELEASE: Final[str] = "-latest"

Verb = Literal["generateContent", "embedContent", "batchEmbedContents"]
GENERATE_CONTENT: Final[Verb] = "generateContent"
EMBED_CONTENT: Final[Verb] = "embedContent"
BATCH_EMBED_CONTENTS: Final[Verb] = "batchEmbedContents"

JSON_HEADERS: Final[dict[str, str]] = {"Content-Type": "application/json"}

GEMINI_FLASH: Final[str] = "gemini-1.5-flash"
GEMINI_PRO: Final[str] = "gemini-1.5-pro"
TEXT_EMBEDDING: Final[str] = "text-embedding-004"
