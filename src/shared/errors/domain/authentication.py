# Path: src/shared/errors/domain/authentication.py
from ..base import BaseError
from ...i18n.messages import get_message
from ...utilities.constants import DomainErrorCode, HttpStatus
from ...utilities.helpers import generate_trace_id
from ...utilities.types import TraceId, ErrorDetails, LanguageCode


class InvalidPhoneFormatError(BaseError):
    """Error when a phone cannot be reduced to a valid local number."""

    def __init__(
            self,
            message_key: str = "phone.invalid",
            trace_id: TraceId = None,
            details: ErrorDetails = None,
            language: LanguageCode = "en"
    ):
        super().__init__(
            error_code=DomainErrorCode.INVALID_PHONE_FORMAT.value,
            message=get_message(message_key, language),
            status_code=HttpStatus.BAD_REQUEST.value,
            trace_id=trace_id or generate_trace_id(),
            details=details or {},
            language=language
        )


class AccountNotFoundError(BaseError):
    """
    Error when no eligible account matches the login input.

    Raised both for unknown phones and for accounts lacking the flow's role,
    with the same code and message, so callers cannot tell them apart.
    """

    def __init__(
            self,
            trace_id: TraceId = None,
            details: ErrorDetails = None,
            language: LanguageCode = "en"
    ):
        super().__init__(
            error_code=DomainErrorCode.ACCOUNT_NOT_FOUND.value,
            message=get_message("account.not_found", language),
            status_code=HttpStatus.NOT_FOUND.value,
            trace_id=trace_id or generate_trace_id(),
            details=details or {},
            language=language
        )


class OtpRateLimitError(BaseError):
    """Error when a session reached its OTP issuance cap."""

    def __init__(
            self,
            limit: int,
            trace_id: TraceId = None,
            details: ErrorDetails = None,
            language: LanguageCode = "en"
    ):
        super().__init__(
            error_code=DomainErrorCode.OTP_RATE_LIMIT.value,
            message=get_message("otp.rate_limited", language),
            status_code=HttpStatus.TOO_MANY_REQUESTS.value,
            trace_id=trace_id or generate_trace_id(),
            details=details or {"limit": limit},
            language=language
        )


class OtpCooldownError(BaseError):
    """Error when a resend arrives before the cooldown elapsed."""

    def __init__(
            self,
            retry_after: int,
            trace_id: TraceId = None,
            details: ErrorDetails = None,
            language: LanguageCode = "en"
    ):
        super().__init__(
            error_code=DomainErrorCode.OTP_COOLDOWN.value,
            message=get_message("otp.cooldown", language),
            status_code=HttpStatus.TOO_MANY_REQUESTS.value,
            trace_id=trace_id or generate_trace_id(),
            details=details or {"retry_after": retry_after},
            language=language
        )


class SessionExpiredError(BaseError):
    """Error when the session holds no usable challenge or has expired."""

    def __init__(
            self,
            trace_id: TraceId = None,
            details: ErrorDetails = None,
            language: LanguageCode = "en"
    ):
        super().__init__(
            error_code=DomainErrorCode.SESSION_EXPIRED.value,
            message=get_message("session.expired", language),
            status_code=HttpStatus.UNAUTHORIZED.value,
            trace_id=trace_id or generate_trace_id(),
            details=details or {},
            language=language
        )


class OtpExpiredError(BaseError):
    """Error when a code is submitted after the challenge expired."""

    def __init__(
            self,
            trace_id: TraceId = None,
            details: ErrorDetails = None,
            language: LanguageCode = "en"
    ):
        super().__init__(
            error_code=DomainErrorCode.OTP_EXPIRED.value,
            message=get_message("otp.expired", language),
            status_code=HttpStatus.BAD_REQUEST.value,
            trace_id=trace_id or generate_trace_id(),
            details=details or {},
            language=language
        )


class ProviderSendFailedError(BaseError):
    """Error when the verification provider refused to send a code."""

    def __init__(
            self,
            provider_message: str,
            resend: bool = False,
            trace_id: TraceId = None,
            details: ErrorDetails = None,
            language: LanguageCode = "en"
    ):
        super().__init__(
            error_code=DomainErrorCode.PROVIDER_SEND_FAILED.value,
            message=get_message("otp.resend_failed" if resend else "otp.send_failed", language),
            status_code=HttpStatus.BAD_GATEWAY.value,
            trace_id=trace_id or generate_trace_id(),
            details=details or {"provider_message": provider_message},
            language=language
        )


class InvalidOtpError(BaseError):
    """Error when the provider rejected the submitted code."""

    def __init__(
            self,
            trace_id: TraceId = None,
            details: ErrorDetails = None,
            language: LanguageCode = "en"
    ):
        super().__init__(
            error_code=DomainErrorCode.OTP_INVALID.value,
            message=get_message("otp.invalid", language),
            status_code=HttpStatus.BAD_REQUEST.value,
            trace_id=trace_id or generate_trace_id(),
            details=details or {},
            language=language
        )


class SignupRejectedError(BaseError):
    """Error when signup details collide with an existing account."""

    def __init__(
            self,
            trace_id: TraceId = None,
            details: ErrorDetails = None,
            language: LanguageCode = "en"
    ):
        super().__init__(
            error_code=DomainErrorCode.SIGNUP_REJECTED.value,
            message=get_message("signup.rejected", language),
            status_code=HttpStatus.CONFLICT.value,
            trace_id=trace_id or generate_trace_id(),
            details=details or {},
            language=language
        )


class AccountCreationFailedError(BaseError):
    """Error when identity and profile could not both be written."""

    def __init__(
            self,
            trace_id: TraceId = None,
            details: ErrorDetails = None,
            language: LanguageCode = "en"
    ):
        super().__init__(
            error_code=DomainErrorCode.ACCOUNT_CREATION_FAILED.value,
            message=get_message("account.create_failed", language),
            status_code=HttpStatus.INTERNAL_SERVER_ERROR.value,
            trace_id=trace_id or generate_trace_id(),
            details=details or {},
            language=language
        )
