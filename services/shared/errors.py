"""Error taxonomy for toolscout.

Each component documents how it reacts to a failed external call through a
``failure_policy`` class attribute holding one of the ``FailurePolicy`` values:

- the page fetcher degrades to a placeholder document,
- the summary and embedding caches propagate and let the caller substitute,
- the search engine zeroes the score of an individual candidate.
"""

from enum import Enum
from typing import Optional


class FailurePolicy(str, Enum):
    """How a component reacts when its external call fails."""
    DEGRADE_TO_PLACEHOLDER = "degrade_to_placeholder"
    PROPAGATE_AND_LET_CALLER_SUBSTITUTE = "propagate_and_let_caller_substitute"
    ZERO_SCORE_PER_CANDIDATE = "zero_score_per_candidate"


class ToolScoutError(Exception):
    """Base class for all toolscout errors."""
    pass


class InvalidURL(ToolScoutError):
    """Raised when a URL cannot be normalized into an absolute http(s) URL."""

    def __init__(self, url: str, reason: Optional[str] = None):
        self.url = url
        self.reason = reason
        message = f"Invalid URL format: {url}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class FetchError(ToolScoutError):
    """Raised when a page fetch returns a non-2xx status."""

    def __init__(self, url: str, status: int):
        self.url = url
        self.status = status
        super().__init__(f"Website returned error status: {status} for {url}")


class InferenceError(ToolScoutError):
    """Raised when the generative-text service fails or answers malformed JSON."""
    pass


class InferenceTimeout(InferenceError):
    """Raised when the generative-text service does not answer in time."""
    pass


class EmbeddingError(ToolScoutError):
    """Raised when the embedding service fails or answers malformed JSON."""
    pass


class EmbeddingTimeout(EmbeddingError):
    """Raised when the embedding service does not answer in time."""
    pass


class SearchError(ToolScoutError):
    """Raised when a search query itself cannot be embedded."""
    pass


class DuplicateToolError(ToolScoutError):
    """Raised when a URL is already registered in the catalog."""

    def __init__(self, url: str, existing_name: str, message: Optional[str] = None):
        self.url = url
        self.existing_name = existing_name
        super().__init__(message or f'This tool already exists as "{existing_name}"')


class ToolNotFoundError(ToolScoutError):
    """Raised when a catalog record does not exist."""

    def __init__(self, tool_id: int):
        self.tool_id = tool_id
        super().__init__(f"Tool not found: {tool_id}")
