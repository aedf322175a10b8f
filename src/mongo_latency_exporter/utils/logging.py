"""
Logging utilities for the MongoDB latency exporter
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any

import structlog
from pythonjsonlogger import jsonlogger

from ..config.settings import Settings
from ..config.settings import settings as default_settings


def setup_logging(app_settings: Settings | None = None):
    """Setup structured logging for the exporter process"""
    settings = app_settings or default_settings
    level = getattr(logging, settings.log_level.value)

    # Clear any existing handlers
    logging.getLogger().handlers.clear()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    if settings.is_development():
        # Human-readable format for development
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
    else:
        formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s"
        )

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if settings.is_production():
        log_file = Path("logs") / "mongo_latency_exporter.log"
        log_file.parent.mkdir(exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
        )
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Driver internals are noisy at INFO
    logging.getLogger("pymongo").setLevel(logging.WARNING)

    structlog.get_logger(__name__).info(
        "Logging configured successfully",
        log_level=settings.log_level.value,
        environment=settings.environment.value,
    )


class ContextualLogger:
    """Logger with contextual information"""

    def __init__(self, name: str, context: dict[str, Any] | None = None):
        self.name = name
        self.logger = structlog.get_logger(name)
        self.context = context or {}

    def bind(self, **kwargs) -> "ContextualLogger":
        """Bind additional context to the logger"""
        new_context = {**self.context, **kwargs}
        return ContextualLogger(self.name, new_context)

    def debug(self, message: str, **kwargs):
        """Log debug message"""
        self.logger.debug(message, **{**self.context, **kwargs})

    def info(self, message: str, **kwargs):
        """Log info message"""
        self.logger.info(message, **{**self.context, **kwargs})

    def warning(self, message: str, **kwargs):
        """Log warning message"""
        self.logger.warning(message, **{**self.context, **kwargs})

    def error(self, message: str, **kwargs):
        """Log error message"""
        self.logger.error(message, **{**self.context, **kwargs})


def get_logger(name: str, context: dict[str, Any] | None = None) -> ContextualLogger:
    """Get a contextual logger instance"""
    return ContextualLogger(name, context)
