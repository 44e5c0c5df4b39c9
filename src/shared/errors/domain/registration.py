# Path: src/shared/errors/domain/registration.py
from ..base import BaseError
from ...i18n.messages import get_message
from ...utilities.constants import DomainErrorCode, HttpStatus
from ...utilities.helpers import generate_trace_id
from ...utilities.types import TraceId, ErrorDetails, LanguageCode


class RecordNotFoundError(BaseError):
    """Error when a registration does not exist or is not visible to the caller."""

    def __init__(
            self,
            identifier: str,
            trace_id: TraceId = None,
            details: ErrorDetails = None,
            language: LanguageCode = "en"
    ):
        super().__init__(
            error_code=DomainErrorCode.RECORD_NOT_FOUND.value,
            message=get_message("registration.not_found", language),
            status_code=HttpStatus.NOT_FOUND.value,
            trace_id=trace_id or generate_trace_id(),
            details=details or {"identifier": identifier},
            language=language
        )


class RecordHiddenError(BaseError):
    """Error when a mutation targets a hidden registration."""

    def __init__(
            self,
            registration_id: str,
            message_key: str = "registration.hidden",
            trace_id: TraceId = None,
            details: ErrorDetails = None,
            language: LanguageCode = "en"
    ):
        super().__init__(
            error_code=DomainErrorCode.RECORD_HIDDEN.value,
            message=get_message(message_key, language),
            status_code=HttpStatus.CONFLICT.value,
            trace_id=trace_id or generate_trace_id(),
            details=details or {"registration_id": registration_id},
            language=language
        )


class ReasonRequiredError(BaseError):
    """Error when a rejection is submitted without a reason."""

    def __init__(
            self,
            registration_id: str,
            trace_id: TraceId = None,
            details: ErrorDetails = None,
            language: LanguageCode = "en"
    ):
        super().__init__(
            error_code=DomainErrorCode.REASON_REQUIRED.value,
            message=get_message("registration.reason_required", language),
            status_code=HttpStatus.BAD_REQUEST.value,
            trace_id=trace_id or generate_trace_id(),
            details=details or {"registration_id": registration_id},
            language=language
        )


class InvalidTransitionError(BaseError):
    """Error when the current status does not allow the requested action."""

    def __init__(
            self,
            registration_id: str,
            action: str,
            status: str,
            message_key: str = "registration.invalid_transition",
            trace_id: TraceId = None,
            details: ErrorDetails = None,
            language: LanguageCode = "en"
    ):
        super().__init__(
            error_code=DomainErrorCode.INVALID_TRANSITION.value,
            message=get_message(message_key, language),
            status_code=HttpStatus.CONFLICT.value,
            trace_id=trace_id or generate_trace_id(),
            details=details or {"registration_id": registration_id, "action": action, "status": status},
            language=language
        )


class ConcurrentUpdateError(BaseError):
    """Error when optimistic writes kept losing to concurrent reviewers."""

    def __init__(
            self,
            registration_id: str,
            trace_id: TraceId = None,
            details: ErrorDetails = None,
            language: LanguageCode = "en"
    ):
        super().__init__(
            error_code=DomainErrorCode.CONCURRENT_UPDATE.value,
            message=get_message("registration.concurrent_update", language),
            status_code=HttpStatus.CONFLICT.value,
            trace_id=trace_id or generate_trace_id(),
            details=details or {"registration_id": registration_id},
            language=language
        )
