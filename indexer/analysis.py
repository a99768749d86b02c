"""Tool analysis for toolscout.

Builds the summarization prompt, parses the model's free-text answer into an
``Analysis`` and caches successful inferences per URL for a day.

``AnalysisCache`` propagates inference failures so that its stored state only
reflects genuine successes. ``ToolAnalyzer`` is the caller that catches them
and substitutes a degraded analysis built from already-known fields.
"""

import re
import time
import logging
from typing import Callable, List, Optional

from services.shared.cache import TTLCache
from services.shared.errors import FailurePolicy, InferenceError
from services.shared.models import Analysis, Document, SENTINEL_CATEGORY
from .ollama_client import OllamaClient

logger = logging.getLogger(__name__)

NO_DESCRIPTION = "No description available"
NO_CONTENT = "No content available"

CATEGORY_VOCABULARY = (
    "development", "productivity", "automation", "collaboration", "design",
    "analytics", "security", "communication", "cloud", "database", "testing",
    "monitoring", "documentation", "devops", "ai", "other",
)

PROMPT_TEMPLATE = """
You are analyzing a tool/website. Based on this content, provide a summary and categorization:

Title: {title}
URL: {url}
Description: {description}
Content: {content}

Respond in this exact format:

SUMMARY: Write a concise 100-word summary of what this tool does, its key features, and why it's useful.

CATEGORIES: List 3-5 relevant categories as comma-separated values. Choose from: {vocabulary}.

Example categories response:
CATEGORIES: development, collaboration, automation

Keep it simple and focused on the tool's main purpose.
"""

SUMMARY_RE = re.compile(r'SUMMARY:\s*([\s\S]*?)(?=CATEGORIES:|$)', re.IGNORECASE)

# Tried in order; the first pattern yielding at least one usable item wins
CATEGORY_PATTERNS = [
    re.compile(r'CATEGORIES:\s*(.*?)(?:\n|$)', re.IGNORECASE),
    re.compile(r'\[(.*?)\]'),
    re.compile(r'([\w\s,-]+)(?:\n|$)'),
]

_ITEM_SPLIT_RE = re.compile(r'[,\n]')
_ALPHA_WORD_RE = re.compile(r'^[A-Za-z]+$')


def build_prompt(doc: Document, text_chars: int = 2000) -> str:
    """Fill the summarization template with the document's fields."""
    content = doc.text[:text_chars] if doc.text else NO_CONTENT
    return PROMPT_TEMPLATE.format(
        title=doc.title,
        url=doc.url,
        description=doc.description,
        content=content,
        vocabulary=", ".join(CATEGORY_VOCABULARY)
    )


def extract_summary(response: str) -> str:
    """Text after ``SUMMARY:`` up to ``CATEGORIES:`` or the end; empty if absent."""
    match = SUMMARY_RE.search(response or '')
    return match.group(1).strip() if match else ''


def _split_items(raw: str) -> List[str]:
    items = (item.strip() for item in _ITEM_SPLIT_RE.split(raw))
    return [item for item in items if len(item) > 1]


def _pattern_strategy(pattern: re.Pattern) -> Callable[[str], Optional[List[str]]]:
    def strategy(response: str) -> Optional[List[str]]:
        match = pattern.search(response)
        if not match or not match.group(1):
            return None
        return _split_items(match.group(1))
    return strategy


def keyword_categories(response: str, count: int = 3) -> Optional[List[str]]:
    """Improvise categories from the first alphabetic words longer than 5 characters."""
    words = [w for w in response.split() if len(w) > 5 and _ALPHA_WORD_RE.match(w)]
    return words[:count] or None


CATEGORY_STRATEGIES: List[Callable[[str], Optional[List[str]]]] = [
    *(_pattern_strategy(p) for p in CATEGORY_PATTERNS),
    keyword_categories,
]


def extract_categories(response: str) -> List[str]:
    """Parse category labels out of a model answer.

    The first strategy that matches decides, even when every item it found
    is filtered out; None means no match. Never returns an empty list.
    """
    response = response or ''
    for strategy in CATEGORY_STRATEGIES:
        categories = strategy(response)
        if categories is not None:
            return categories or [SENTINEL_CATEGORY]
    return [SENTINEL_CATEGORY]


def degraded_analysis(doc: Document) -> Analysis:
    """Minimal analysis built from fields already known without inference."""
    return Analysis(
        summary=doc.description or doc.title or NO_DESCRIPTION,
        categories=(SENTINEL_CATEGORY,)
    )


class AnalysisCache:
    """Summary inference behind a per-URL cache."""

    failure_policy = FailurePolicy.PROPAGATE_AND_LET_CALLER_SUBSTITUTE

    def __init__(self,
                 client: OllamaClient,
                 cache_ttl: float = 86400.0,
                 cache: Optional[TTLCache] = None,
                 prompt_text_chars: int = 2000,
                 clock: Callable[[], float] = time.monotonic):
        self.client = client
        self.cache = cache if cache is not None else TTLCache(cache_ttl, name="analysis_cache", clock=clock)
        self.prompt_text_chars = prompt_text_chars

    async def analyze(self, doc: Document) -> Analysis:
        """Return the cached analysis for ``doc.url`` or run inference.

        Documents without a URL are never cached.

        Raises:
            InferenceError: if the model call fails; nothing is cached
        """
        if not doc.url:
            return await self._infer(doc)
        return await self.cache.get_or_load(doc.url, lambda: self._infer(doc))

    async def _infer(self, doc: Document) -> Analysis:
        prompt = build_prompt(doc, self.prompt_text_chars)
        response = await self.client.generate(prompt)

        summary = extract_summary(response)
        if not summary:
            logger.debug(f"No SUMMARY marker in model answer for {doc.url}")
            summary = doc.description or doc.title or NO_DESCRIPTION

        analysis = Analysis(summary=summary, categories=tuple(extract_categories(response)))
        logger.info(f"Analyzed {doc.url}: categories={list(analysis.categories)}")
        return analysis

    def clear_cache(self) -> None:
        """Empty the analysis cache."""
        self.cache.clear()


class ToolAnalyzer:
    """Analysis entry point that never raises for inference failures."""

    failure_policy = FailurePolicy.DEGRADE_TO_PLACEHOLDER

    def __init__(self, cache: AnalysisCache):
        self.cache = cache

    async def analyze(self, doc: Document) -> Analysis:
        """Analyze ``doc``, substituting a degraded analysis if inference fails."""
        try:
            return await self.cache.analyze(doc)
        except InferenceError as e:
            logger.warning(f"Analysis failed for {doc.url}: {e}, using basic analysis")
            return degraded_analysis(doc)

    def clear_cache(self) -> None:
        """Empty the underlying analysis cache."""
        self.cache.clear_cache()
