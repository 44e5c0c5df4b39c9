# Path: src/shared/errors/domain/identity.py
from ..base import BaseError
from ...i18n.messages import get_message
from ...utilities.constants import DomainErrorCode, HttpStatus
from ...utilities.helpers import generate_trace_id
from ...utilities.types import TraceId, ErrorDetails, LanguageCode


class IdentityNotFoundError(BaseError):
    """Error when an identity id does not exist."""

    def __init__(
            self,
            identity_id: str,
            trace_id: TraceId = None,
            details: ErrorDetails = None,
            language: LanguageCode = "en"
    ):
        super().__init__(
            error_code=DomainErrorCode.IDENTITY_NOT_FOUND.value,
            message=get_message("identity.not_found", language),
            status_code=HttpStatus.NOT_FOUND.value,
            trace_id=trace_id or generate_trace_id(),
            details=details or {"identity_id": identity_id},
            language=language
        )


class IdentityConflictError(BaseError):
    """Error when a provisioned identity collides on a unique field."""

    def __init__(
            self,
            field: str,
            trace_id: TraceId = None,
            details: ErrorDetails = None,
            language: LanguageCode = "en"
    ):
        super().__init__(
            error_code=DomainErrorCode.IDENTITY_CONFLICT.value,
            message=get_message("identity.conflict", language, {"field": field}),
            status_code=HttpStatus.CONFLICT.value,
            trace_id=trace_id or generate_trace_id(),
            details=details or {"field": field},
            language=language
        )
