import json
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict
from uuid import UUID
from colorama import Fore, Style, init
from src.shared.utilities.time import utc_now

# Initialize colorama for Windows compatibility
init()


def _trace_of(record: logging.LogRecord) -> str:
    trace_id = getattr(record, "extra_trace_id", None)
    return str(trace_id) if trace_id else "-"


class JsonFormatter(logging.Formatter):
    """Formatter for JSON-structured logs."""

    def _serialize_context(self, context: Dict[str, Any]) -> Dict[str, Any]:
        """Convert non-serializable objects in context to JSON-compatible types."""
        serialized = {}
        for key, value in context.items():
            if isinstance(value, UUID):
                serialized[key] = str(value)
            elif isinstance(value, datetime):
                serialized[key] = value.isoformat()
            elif isinstance(value, Enum):
                serialized[key] = value.value
            elif isinstance(value, (dict, list, str, int, float, bool, type(None))):
                serialized[key] = value
            else:
                serialized[key] = str(value)
        return serialized

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": utc_now().isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "trace_id": _trace_of(record),
            "span_id": getattr(record, "extra_span_id", None),
            "context": self._serialize_context(getattr(record, "extra_context", {})),
            "module": record.module,
            "funcName": record.funcName,
            "lineno": record.lineno
        }
        return json.dumps(log_data, ensure_ascii=False, default=str)


class ConsoleFormatter(logging.Formatter):
    """Formatter for human-readable console logs with color."""

    LEVEL_COLORS = {
        "DEBUG": Fore.CYAN,
        "INFO": Fore.WHITE,
        "WARNING": Fore.YELLOW,
        "ERROR": Fore.RED,
        "CRITICAL": Fore.MAGENTA + Style.BRIGHT
    }

    def format(self, record: logging.LogRecord) -> str:
        timestamp = utc_now().isoformat()
        level = record.levelname
        context = getattr(record, "extra_context", {})
        context_str = f" | context={context}" if context else ""

        color = self.LEVEL_COLORS.get(level, Fore.WHITE)
        return f"{color}[{timestamp}] {level} | {record.getMessage()} | trace_id={_trace_of(record)}{context_str}{Style.RESET_ALL}"
