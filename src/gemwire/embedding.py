"""Text embedding models."""

from __future__ import annotations

from typing import TYPE_CHECKING

from gemwire._http import BATCH_EMBED_CONTENTS, EMBED_CONTENT, TEXT_EMBEDDING
from gemwire.base import ModelClient
from gemwire.errors import ConfigurationError
from gemwire.models import EmbeddingResponse
from gemwire.payload import batch_embedding_request, embedding_request

if TYPE_CHECKING:
    from collections.abc import Iterable


class EmbeddingModel(ModelClient):
    """A text embedding model.

    Embedding models are published under pinned names, so the release suffix
    defaults to ``""`` whatever the config says.

        embedder = EmbeddingModel()
        single = await embedder.embed("hello")          # single.embedding
        batch = await embedder.batch_embed(["a", "b"])  # batch.embeddings
    """

    default_model = TEXT_EMBEDDING
    default_release = ""

    async def embed(self, text: str) -> EmbeddingResponse | None:
        """Embed one text. ``embedding`` is populated on success."""
        if not isinstance(text, str) or not text.strip():
            raise ConfigurationError(
                "text is empty or whitespace-only",
                hint="Embedding requires a non-empty string.",
            )
        body = embedding_request(self.model_id, text)
        return await self.executor.send(EMBED_CONTENT, body, EmbeddingResponse)

    async def batch_embed(self, texts: Iterable[str | None]) -> EmbeddingResponse | None:
        """Embed many texts in one call. ``embeddings`` is populated on success.

        Empty and ``None`` entries are skipped, so the result lines up with the
        non-empty inputs only.
        """
        if isinstance(texts, str):
            raise ConfigurationError(
                "texts must be an iterable of strings, not a single string",
                hint="Use embed() for one text.",
            )
        body = batch_embedding_request(self.model_id, texts)
        if not body.requests:
            raise ConfigurationError(
                "batch_embed requires at least one non-empty text",
            )
        return await self.executor.send(BATCH_EMBED_CONTENTS, body, EmbeddingResponse)
