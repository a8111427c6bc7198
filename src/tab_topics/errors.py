"""
Error taxonomy for the topic-assignment pipeline.

Run-wide failures are exceptions that the orchestrator catches and turns into
sentinel topics. Per-item failures are plain values returned in place of a
result, so callers have to handle them explicitly.
"""

from pydantic import BaseModel


class TabTopicsError(Exception):
    """Base class for all pipeline exceptions."""


class ConfigurationError(TabTopicsError):
    """A required setting (such as an API key) is missing."""


class RemoteClassifierError(TabTopicsError):
    """The remote classification call failed or returned nothing usable."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class EmbeddingFailure(BaseModel):
    """A title that could not be embedded.

    Attributes:
        text: The text that was sent to the embedding backend
        reason: Human-readable cause, used for logging
    """

    text: str
    reason: str


class NamingFailure(BaseModel):
    """A cluster whose label could not be generated."""

    reason: str
