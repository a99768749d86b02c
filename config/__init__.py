"""Configuration module for toolscout.

Provides service configuration for inference endpoints, timeouts, cache TTLs,
search and storage.
"""

from .settings import ServiceConfig, ENV_OVERRIDES

__all__ = [
    'ServiceConfig',
    'ENV_OVERRIDES'
]
