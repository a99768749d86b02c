"""Service configuration for toolscout.

Settings come from three layers, later layers winning: built-in defaults, an
optional YAML file, and environment variables.
"""

import os
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# Environment variable -> config field
ENV_OVERRIDES = {
    'OLLAMA_API': 'ollama_generate_url',
    'OLLAMA_EMBEDDINGS_API': 'ollama_embeddings_url',
    'OLLAMA_MODEL': 'generate_model',
    'OLLAMA_EMBEDDING_MODEL': 'embedding_model',
    'TOOLSCOUT_FETCH_TIMEOUT': 'fetch_timeout',
    'TOOLSCOUT_INFERENCE_TIMEOUT': 'inference_timeout',
    'TOOLSCOUT_EMBEDDING_TIMEOUT': 'embedding_timeout',
    'TOOLSCOUT_FETCH_TTL': 'fetch_cache_ttl',
    'TOOLSCOUT_ANALYSIS_TTL': 'analysis_cache_ttl',
    'TOOLSCOUT_EMBEDDING_TTL': 'embedding_cache_ttl',
    'TOOLSCOUT_SEARCH_BATCH_SIZE': 'search_batch_size',
    'TOOLSCOUT_SEARCH_LIMIT': 'search_limit',
    'TOOLSCOUT_PROMPT_TEXT_CHARS': 'prompt_text_chars',
    'TOOLSCOUT_EMBEDDING_KEY_PREFIX': 'embedding_key_prefix_chars',
    'TOOLSCOUT_DB_PATH': 'db_path',
    'TOOLSCOUT_LOG_LEVEL': 'log_level',
    'TOOLSCOUT_LOG_JSON': 'log_json',
    'TOOLSCOUT_LOG_FILE': 'log_file',
}


class ServiceConfig(BaseModel):
    """Runtime configuration."""

    # Inference endpoints
    ollama_generate_url: str = Field(default="http://localhost:11434/api/generate",
                                     description="Generative-text endpoint")
    ollama_embeddings_url: str = Field(default="http://localhost:11434/api/embeddings",
                                       description="Embedding endpoint")
    generate_model: str = Field(default="gemma3:12b", description="Summary model")
    embedding_model: str = Field(default="nomic-embed-text", description="Embedding model")

    # Per-call timeouts (seconds), independent of cache TTLs
    fetch_timeout: float = Field(default=15.0, gt=0)
    inference_timeout: float = Field(default=30.0, gt=0)
    embedding_timeout: float = Field(default=10.0, gt=0)

    # Cache TTLs (seconds)
    fetch_cache_ttl: float = Field(default=3600.0, gt=0)
    analysis_cache_ttl: float = Field(default=86400.0, gt=0)
    embedding_cache_ttl: float = Field(default=86400.0, gt=0)

    # Search
    search_batch_size: int = Field(default=5, ge=1)
    search_limit: int = Field(default=10, ge=1)

    # Analysis
    prompt_text_chars: int = Field(default=2000, ge=1)
    embedding_key_prefix_chars: Optional[int] = Field(
        default=None, ge=1, description="Key embeddings by text prefix instead of a full fingerprint")

    # Storage
    db_path: str = Field(default="toolscout.db", description="SQLite catalog path")

    # Logging
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)
    log_file: Optional[str] = Field(default=None)

    @classmethod
    def from_env(cls, base: Optional[Dict[str, Any]] = None) -> 'ServiceConfig':
        """Create configuration from environment variables over ``base`` values."""
        values = dict(base or {})
        for env_name, field_name in ENV_OVERRIDES.items():
            raw = os.getenv(env_name)
            if raw is None or raw == '':
                continue
            values[field_name] = raw
        return cls(**values)

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> 'ServiceConfig':
        """Load YAML file settings (if any), then apply environment overrides."""
        path = config_path or os.getenv('TOOLSCOUT_CONFIG')
        file_values: Dict[str, Any] = {}

        if path:
            if Path(path).exists():
                with open(path, 'r', encoding='utf-8') as f:
                    file_values = yaml.safe_load(f) or {}
                if not isinstance(file_values, dict):
                    raise ValueError(f"Config file {path} must contain a mapping")
                logger.info(f"Loaded configuration from {path}")
            else:
                logger.warning(f"Config file not found at {path}, using defaults")

        return cls.from_env(base=file_values)
