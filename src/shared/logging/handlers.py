# Path: src/shared/logging/handlers.py
import logging
import logging.handlers
from pathlib import Path
import sys
from typing import List
from .config import LogConfig
from .formatters import JsonFormatter, ConsoleFormatter
from .filters import SensitiveDataFilter


class LogHandlerFactory:
    """Factory for creating log handlers."""

    @staticmethod
    def create_console_handler(config: LogConfig) -> logging.Handler:
        """Colorized stdout handler."""
        handler = logging.StreamHandler(stream=sys.stdout)
        handler.setLevel(config.level)
        handler.setFormatter(ConsoleFormatter())
        return handler

    @staticmethod
    def create_file_handler(config: LogConfig) -> logging.Handler:
        """Rotating JSON-lines file handler."""
        Path(config.file_path).parent.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            filename=config.file_path,
            maxBytes=config.max_file_size,
            backupCount=config.backup_count,
            encoding="utf-8"
        )
        handler.setLevel(config.level)
        handler.setFormatter(JsonFormatter())
        return handler

    @classmethod
    def get_handlers(cls, config: LogConfig) -> List[logging.Handler]:
        """
        Get all enabled handlers.

        Every handler masks sensitive context fields before formatting, so
        phone numbers and codes never reach stdout or the log file in clear.
        """
        handlers = []
        if config.enable_console:
            handlers.append(cls.create_console_handler(config))
        if config.enable_file:
            handlers.append(cls.create_file_handler(config))
        sensitive_filter = SensitiveDataFilter()
        for handler in handlers:
            handler.addFilter(sensitive_filter)
        return handlers
