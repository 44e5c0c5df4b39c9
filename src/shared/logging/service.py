import logging
from typing import Optional, Dict, Any
from .config import LogConfig
from .handlers import LogHandlerFactory
from .tracers import Tracer
from ..utilities.types import TraceId
from ..utilities.constants import LogLevel


class LoggingService:
    """Central service for structured logging operations."""

    def __init__(self, config: LogConfig, tracer: Tracer = None):
        """Initialize logging service with configuration and tracer."""
        self.logger = logging.getLogger(config.logger_name)
        self.logger.setLevel(getattr(logging, config.level))
        self.logger.propagate = False
        self.tracer = tracer or Tracer()

        # Modules share one named logger; attach handlers once
        if not self.logger.handlers:
            for handler in LogHandlerFactory.get_handlers(config):
                self.logger.addHandler(handler)

    def set_log_level(self, level: str) -> None:
        """Change the logging level dynamically."""
        if level not in LogLevel.__members__:
            raise ValueError(f"Invalid log level: {level}. Valid levels: {list(LogLevel.__members__)}")
        self.logger.setLevel(getattr(logging, level))
        for handler in self.logger.handlers:
            handler.setLevel(level)
        self.info(f"Log level changed to {level}", context={"new_level": level})

    def log(
            self,
            level: str,
            message: str,
            context: Optional[Dict[str, Any]] = None,
            trace_id: Optional[TraceId] = None
    ) -> None:
        """Log message with specified level and context."""
        extra = {
            "extra_context": context or {},
            "extra_trace_id": trace_id or self.tracer.get_trace_id(),
            "extra_span_id": self.tracer.get_span_id()
        }
        self.logger.log(getattr(logging, level), message, extra=extra)

    def debug(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self.log(LogLevel.DEBUG.value, message, context)

    def info(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self.log(LogLevel.INFO.value, message, context)

    def warning(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self.log(LogLevel.WARNING.value, message, context)

    def error(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self.log(LogLevel.ERROR.value, message, context)

    def critical(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self.log(LogLevel.CRITICAL.value, message, context)
