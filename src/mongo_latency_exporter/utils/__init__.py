"""
Utilities package initialization.

Exports:
- setup_logging: Process-wide structlog/stdlib logging configuration.
- get_logger: Contextual structured logger factory.
"""

from .logging import ContextualLogger, get_logger, setup_logging

__all__ = ["ContextualLogger", "get_logger", "setup_logging"]
