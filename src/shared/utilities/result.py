# Path: src/shared/utilities/result.py
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Expected failure outcomes returned by leaf components."""
    INVALID_PHONE_FORMAT = "InvalidPhoneFormat"
    ACCOUNT_NOT_FOUND = "AccountNotFound"
    ROLE_MISMATCH = "RoleMismatch"
    TOO_MANY_REQUESTS = "TooManyRequests"
    COOLDOWN = "Cooldown"
    SESSION_EXPIRED = "SessionExpired"
    OTP_EXPIRED = "OtpExpired"
    PROVIDER_SEND_FAILED = "ProviderSendFailed"
    PROVIDER_VERIFY_FAILED = "ProviderVerifyFailed"
    RECORD_NOT_FOUND = "RecordNotFound"
    RECORD_HIDDEN = "RecordHidden"
    REASON_REQUIRED = "ReasonRequired"
    INVALID_TRANSITION = "InvalidTransition"
    UNAUTHORIZED = "Unauthorized"


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value or an error kind, never both."""
    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorKind, message: str = "") -> "Result[T]":
        return cls(error=error, message=message)
