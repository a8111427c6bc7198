"""
Embedding generation for tab titles.

Wraps an embedding backend so that every title yields either a unit-length
vector or an EmbeddingFailure. Backend errors never escape: a tab that cannot
be embedded simply drops out of embedding-based matching.
"""

import asyncio
from typing import Union

from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from tab_topics.agents.backends import EmbeddingBackend
from tab_topics.agents.models import Tab
from tab_topics.agents.tab_selection import resolve_tab_title
from tab_topics.config import get_logger
from tab_topics.errors import EmbeddingFailure
from tab_topics.similarity import average_vector, l2_normalize

logger = get_logger(__name__)

EmbeddingResult = Union[list[float], EmbeddingFailure]


def is_embedding(result: EmbeddingResult) -> bool:
    """True if the result is a usable vector rather than a failure."""
    return isinstance(result, list) and len(result) > 0


class EmbeddingProvider:
    """
    Turns titles into normalized embeddings with bounded concurrency.

    Attributes:
        backend: Model backend producing raw vectors
        batch_size: Number of titles embedded concurrently
        embed_urls: Append the URL to the title before embedding
        max_attempts: Attempts per title before giving up
    """

    def __init__(
        self,
        backend: EmbeddingBackend,
        batch_size: int = 5,
        embed_urls: bool = False,
        max_attempts: int = 2,
    ):
        self.backend = backend
        self.batch_size = max(1, batch_size)
        self.embed_urls = embed_urls
        self.max_attempts = max(1, max_attempts)

    async def embed(self, text: str) -> EmbeddingResult:
        """
        Embed a single text.

        Multi-vector (per-token) output is mean-pooled, then L2-normalized.

        Args:
            text: Text to embed (typically a tab title)

        Returns:
            Normalized embedding, or EmbeddingFailure if the backend raised,
            returned nothing, or returned a zero vector
        """
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_attempts),
                wait=wait_exponential(multiplier=0.5, min=0.5, max=2),
                reraise=True,
            ):
                with attempt:
                    raw = await self.backend.embed(text)
        except Exception as e:
            logger.warning(f"Embedding failed for '{text[:50]}': {e}")
            return EmbeddingFailure(text=text, reason=str(e) or type(e).__name__)

        # Some backends wrap the result one level deeper ([[...]] or [[[...]]])
        if isinstance(raw, list) and len(raw) == 1 and isinstance(raw[0], list):
            raw = raw[0]
        if not isinstance(raw, list) or not raw:
            logger.warning(f"Embedding backend returned no vector for '{text[:50]}'")
            return EmbeddingFailure(text=text, reason="empty embedding")

        try:
            normalized = l2_normalize(average_vector(raw))
        except (ValueError, TypeError) as e:
            # Ragged token vectors or non-numeric entries
            logger.warning(f"Embedding backend returned a malformed vector for '{text[:50]}': {e}")
            return EmbeddingFailure(text=text, reason="malformed embedding")
        if normalized is None:
            logger.warning(f"Embedding backend returned a zero vector for '{text[:50]}'")
            return EmbeddingFailure(text=text, reason="zero-norm embedding")
        return normalized

    async def embed_batch(
        self, texts: list[str], batch_size: int | None = None
    ) -> list[EmbeddingResult]:
        """
        Embed many texts, a chunk at a time.

        Each chunk is embedded concurrently and awaited completely before the
        next chunk starts, which caps in-flight backend calls at batch_size.

        Args:
            texts: Texts to embed
            batch_size: Override for the configured chunk size

        Returns:
            Results in the same order as the input
        """
        size = max(1, batch_size or self.batch_size)
        results: list[EmbeddingResult] = []
        for start in range(0, len(texts), size):
            chunk = texts[start:start + size]
            results.extend(await asyncio.gather(*(self.embed(text) for text in chunk)))

        failed = sum(1 for r in results if not is_embedding(r))
        if failed:
            logger.info(f"Embedded {len(results) - failed}/{len(results)} texts ({failed} failed)")
        return results

    def text_for_tab(self, tab: Tab) -> str:
        """Get the text that represents a tab for embedding."""
        title = resolve_tab_title(tab)
        if self.embed_urls and tab.url:
            return f"{title} {tab.url}"
        return title

    async def embed_tabs(self, tabs: list[Tab]) -> list[EmbeddingResult]:
        """Embed a list of tabs in one batched call."""
        return await self.embed_batch([self.text_for_tab(tab) for tab in tabs])
