"""Observability package for toolscout."""

from .logging import setup_logging, configure_logging, JSONFormatter, ColoredFormatter

__all__ = [
    'setup_logging',
    'configure_logging',
    'JSONFormatter',
    'ColoredFormatter'
]
