"""Pipelines package for toolscout.

Provides page fetching, URL normalization and HTML text extraction.
"""

from .extractor import extract, collapse_whitespace, CONTENT_SELECTORS
from .fetcher import (
    PageFetcher,
    normalize_url,
    fallback_title,
    DEFAULT_HEADERS
)

__all__ = [
    # Extractor
    'extract',
    'collapse_whitespace',
    'CONTENT_SELECTORS',

    # Fetcher
    'PageFetcher',
    'normalize_url',
    'fallback_title',
    'DEFAULT_HEADERS'
]
