"""Shared domain models for toolscout."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, Field, field_validator

SENTINEL_CATEGORY = "uncategorized"


@dataclass(frozen=True)
class ExtractedContent:
    """Title, description and prioritized text pulled out of raw markup."""
    title: str = ""
    description: str = ""
    text: str = ""


@dataclass(frozen=True)
class Document:
    """Textual profile of a fetched page.

    ``degraded`` marks documents synthesized after a failed fetch; their
    ``text`` carries a diagnostic placeholder instead of page content.
    """
    title: str
    description: str
    text: str
    url: str
    degraded: bool = False

    @property
    def has_content(self) -> bool:
        """Whether the document carries enough real text to be summarized."""
        return not self.degraded and len(self.text) > 50


@dataclass(frozen=True)
class Analysis:
    """Summary and categories inferred for a document."""
    summary: str
    categories: Tuple[str, ...] = field(default=(SENTINEL_CATEGORY,))

    def __post_init__(self):
        cleaned = tuple(c.strip() for c in self.categories if c and c.strip())
        object.__setattr__(self, "categories", cleaned or (SENTINEL_CATEGORY,))

    def to_dict(self) -> Dict[str, Any]:
        return {"summary": self.summary, "categories": list(self.categories)}


def normalize_categories(categories: Any) -> List[str]:
    """Coerce catalog input into a non-empty list of trimmed strings."""
    if not isinstance(categories, (list, tuple)):
        return [SENTINEL_CATEGORY]
    cleaned = [str(c).strip() for c in categories if c is not None and str(c).strip()]
    return cleaned or [SENTINEL_CATEGORY]


class ToolCreate(BaseModel):
    """Payload for creating or updating a catalog record."""
    name: str = Field(default="", description="Display name")
    url: str = Field(default="", description="Canonical tool URL")
    summary: str = Field(default="", description="Short description")
    categories: List[str] = Field(default=None, validate_default=True, description="Category labels")

    @field_validator("categories", mode="before")
    @classmethod
    def _coerce_categories(cls, value: Any) -> List[str]:
        return normalize_categories(value)


class Tool(BaseModel):
    """Catalog record as seen by the core."""
    id: Optional[Union[int, str]] = None
    name: str
    url: str
    summary: str = ""
    categories: List[str] = Field(default_factory=lambda: [SENTINEL_CATEGORY])
    embedding: Optional[List[float]] = None

    @field_validator("categories", mode="before")
    @classmethod
    def _coerce_categories(cls, value: Any) -> List[str]:
        return normalize_categories(value)


class ScoredTool(Tool):
    """Search result: a tool plus its similarity to the query."""
    score: float = 0.0

    @classmethod
    def from_tool(cls, tool: Tool, score: float) -> "ScoredTool":
        return cls(**tool.model_dump(), score=score)
