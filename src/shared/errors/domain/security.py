# Path: src/shared/errors/domain/security.py
from ..base import BaseError
from ...i18n.messages import get_message
from ...utilities.constants import DomainErrorCode, HttpStatus
from ...utilities.helpers import generate_trace_id
from ...utilities.types import TraceId, ErrorDetails, LanguageCode


class UnauthorizedAccessError(BaseError):
    """Error when the caller's roles do not permit the action."""

    def __init__(
            self,
            resource: str,
            trace_id: TraceId = None,
            details: ErrorDetails = None,
            language: LanguageCode = "en"
    ):
        super().__init__(
            error_code=DomainErrorCode.UNAUTHORIZED_ACCESS.value,
            message=get_message("access.denied", language),
            status_code=HttpStatus.FORBIDDEN.value,
            trace_id=trace_id or generate_trace_id(),
            details=details or {"resource": resource},
            language=language
        )


class InvalidTokenError(BaseError):
    """Error when a bearer token is missing, malformed or expired."""

    def __init__(
            self,
            reason: str,
            trace_id: TraceId = None,
            details: ErrorDetails = None,
            language: LanguageCode = "en"
    ):
        super().__init__(
            error_code=DomainErrorCode.INVALID_TOKEN.value,
            message=get_message("token.invalid", language),
            status_code=HttpStatus.UNAUTHORIZED.value,
            trace_id=trace_id or generate_trace_id(),
            details=details or {"reason": reason},
            language=language
        )
