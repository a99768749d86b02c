"""Shared models, errors and caches used across toolscout components."""

from .cache import CacheEntry, CacheStats, TTLCache
from .errors import (
    FailurePolicy,
    ToolScoutError,
    InvalidURL,
    FetchError,
    InferenceError,
    InferenceTimeout,
    EmbeddingError,
    EmbeddingTimeout,
    SearchError,
    DuplicateToolError,
    ToolNotFoundError
)
from .models import (
    SENTINEL_CATEGORY,
    ExtractedContent,
    Document,
    Analysis,
    Tool,
    ToolCreate,
    ScoredTool,
    normalize_categories
)

__all__ = [
    # Cache
    'CacheEntry',
    'CacheStats',
    'TTLCache',

    # Errors
    'FailurePolicy',
    'ToolScoutError',
    'InvalidURL',
    'FetchError',
    'InferenceError',
    'InferenceTimeout',
    'EmbeddingError',
    'EmbeddingTimeout',
    'SearchError',
    'DuplicateToolError',
    'ToolNotFoundError',

    # Models
    'SENTINEL_CATEGORY',
    'ExtractedContent',
    'Document',
    'Analysis',
    'Tool',
    'ToolCreate',
    'ScoredTool',
    'normalize_categories'
]
