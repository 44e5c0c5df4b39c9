# Path: src/shared/errors/infrastructure/database.py
from typing import Optional
from ..base import BaseError
from ...utilities.constants import InfraErrorCode, HttpStatus
from ...utilities.helpers import generate_trace_id
from ...utilities.types import TraceId, ErrorDetails, LanguageCode


class DatabaseConnectionError(BaseError):
    """Error when database connection fails."""

    def __init__(
            self,
            db_type: str,
            message: Optional[str] = None,
            trace_id: TraceId = None,
            details: ErrorDetails = None,
            language: LanguageCode = "en"
    ):
        super().__init__(
            error_code=InfraErrorCode.DATABASE_CONNECTION.value,
            message=message or f"Failed to connect to {db_type} database.",
            status_code=HttpStatus.SERVICE_UNAVAILABLE.value,
            trace_id=trace_id or generate_trace_id(),
            details=details or {"db_type": db_type},
            language=language
        )


class MongoError(BaseError):
    """Error for MongoDB-specific issues."""

    def __init__(
            self,
            operation: str,
            message: Optional[str] = None,
            trace_id: TraceId = None,
            details: ErrorDetails = None,
            language: LanguageCode = "en"
    ):
        super().__init__(
            error_code=InfraErrorCode.MONGO_ERROR.value,
            message=message or f"MongoDB error during {operation}.",
            status_code=HttpStatus.SERVICE_UNAVAILABLE.value,
            trace_id=trace_id or generate_trace_id(),
            details=details or {"operation": operation},
            language=language
        )


class CacheError(BaseError):
    """Error for cache-related issues."""

    def __init__(
            self,
            operation: str,
            message: Optional[str] = None,
            trace_id: TraceId = None,
            details: ErrorDetails = None,
            language: LanguageCode = "en"
    ):
        super().__init__(
            error_code=InfraErrorCode.CACHE_ERROR.value,
            message=message or f"Redis error during {operation}.",
            status_code=HttpStatus.SERVICE_UNAVAILABLE.value,
            trace_id=trace_id or generate_trace_id(),
            details=details or {"operation": operation},
            language=language
        )
