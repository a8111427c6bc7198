"""
Model backends for the local pipeline.

Both backends talk to an OpenAI-compatible API. Pointing ``openai_base_url``
at an on-device server (llama.cpp, Ollama, LM Studio, ...) keeps every title
on the machine; leaving it unset uses the hosted OpenAI API.
"""

from typing import Optional, Protocol

from openai import AsyncOpenAI

from tab_topics.config import Settings


class EmbeddingBackend(Protocol):
    """Anything that turns text into a vector (or per-token vectors)."""

    async def embed(self, text: str) -> list[float] | list[list[float]]:
        ...


class TextGenerationBackend(Protocol):
    """Anything that completes a prompt into short text."""

    async def generate(self, prompt: str, max_tokens: int, temperature: float) -> str:
        ...


def create_openai_client(settings: Settings) -> AsyncOpenAI:
    """
    Build the async OpenAI client from settings.

    Local OpenAI-compatible servers ignore the key, so a placeholder is used
    when only a base URL is configured.
    """
    api_key = settings.openai_api_key
    if not api_key and settings.openai_base_url:
        api_key = "local"
    return AsyncOpenAI(
        api_key=api_key,
        base_url=settings.openai_base_url,
        timeout=settings.model_timeout,
    )


class OpenAIEmbeddingBackend:
    """Embedding backend using the embeddings endpoint."""

    def __init__(self, client: AsyncOpenAI, model: str = "text-embedding-3-small"):
        """
        Initialize the backend.

        Args:
            client: Async OpenAI client
            model: Embedding model name
        """
        self.client = client
        self.model = model

    async def embed(self, text: str) -> list[float]:
        response = await self.client.embeddings.create(model=self.model, input=text)
        return response.data[0].embedding


class OpenAITextGenerator:
    """Text-generation backend using chat completions."""

    def __init__(self, client: AsyncOpenAI, model: str = "gpt-4o-mini"):
        self.client = client
        self.model = model

    async def generate(self, prompt: str, max_tokens: int, temperature: float) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=max_tokens,
            temperature=temperature,
        )
        content: Optional[str] = response.choices[0].message.content
        return content or ""
