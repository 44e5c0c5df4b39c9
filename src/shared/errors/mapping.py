# Path: src/shared/errors/mapping.py
from typing import Optional

from src.shared.config.settings import settings
from src.shared.errors.base import BaseError
from src.shared.errors.domain.authentication import (
    AccountNotFoundError,
    InvalidOtpError,
    InvalidPhoneFormatError,
    OtpCooldownError,
    OtpExpiredError,
    OtpRateLimitError,
    ProviderSendFailedError,
    SessionExpiredError,
)
from src.shared.errors.domain.registration import (
    InvalidTransitionError,
    ReasonRequiredError,
    RecordHiddenError,
    RecordNotFoundError,
)
from src.shared.errors.domain.security import UnauthorizedAccessError
from src.shared.utilities.result import ErrorKind, Result
from src.shared.utilities.types import ErrorDetails, LanguageCode


def error_for_kind(
        kind: ErrorKind,
        language: LanguageCode = "en",
        subject: str = "",
        provider_message: str = "",
        details: Optional[ErrorDetails] = None
) -> BaseError:
    """Translate an expected failure into the error raised at service boundaries."""
    details = details or {}
    if kind is ErrorKind.INVALID_PHONE_FORMAT:
        return InvalidPhoneFormatError(details=details, language=language)
    if kind in (ErrorKind.ACCOUNT_NOT_FOUND, ErrorKind.ROLE_MISMATCH):
        # Same error for both so responses never reveal which one occurred
        return AccountNotFoundError(details=details, language=language)
    if kind is ErrorKind.TOO_MANY_REQUESTS:
        return OtpRateLimitError(limit=settings.OTP_MAX_ISSUANCES, language=language)
    if kind is ErrorKind.COOLDOWN:
        return OtpCooldownError(retry_after=settings.OTP_COOLDOWN_SECONDS, language=language)
    if kind is ErrorKind.SESSION_EXPIRED:
        return SessionExpiredError(details=details, language=language)
    if kind is ErrorKind.OTP_EXPIRED:
        return OtpExpiredError(details=details, language=language)
    if kind is ErrorKind.PROVIDER_SEND_FAILED:
        return ProviderSendFailedError(provider_message=provider_message, details=details or None, language=language)
    if kind is ErrorKind.PROVIDER_VERIFY_FAILED:
        return InvalidOtpError(details=details, language=language)
    if kind is ErrorKind.RECORD_NOT_FOUND:
        return RecordNotFoundError(identifier=subject, language=language)
    if kind is ErrorKind.RECORD_HIDDEN:
        return RecordHiddenError(registration_id=subject, message_key=provider_message or "registration.hidden",
                                 language=language)
    if kind is ErrorKind.REASON_REQUIRED:
        return ReasonRequiredError(registration_id=subject, language=language)
    if kind is ErrorKind.INVALID_TRANSITION:
        return InvalidTransitionError(
            registration_id=subject,
            action=str(details.get("action", "")),
            status=str(details.get("status", "")),
            message_key=provider_message or "registration.invalid_transition",
            language=language
        )
    return UnauthorizedAccessError(resource=subject or "resource", language=language)


def raise_for_result(result: Result, language: LanguageCode = "en", subject: str = "",
                     details: Optional[ErrorDetails] = None) -> None:
    """Raise the boundary error for a failed result; no-op on success."""
    if result.ok:
        return
    raise error_for_kind(result.error, language, subject=subject, provider_message=result.message, details=details)
