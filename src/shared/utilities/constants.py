# Path: src/shared/utilities/constants.py
from enum import Enum


class HttpStatus(int, Enum):
    OK = 200
    CREATED = 201
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    CONFLICT = 409
    UNPROCESSABLE_ENTITY = 422
    TOO_MANY_REQUESTS = 429
    INTERNAL_SERVER_ERROR = 500
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ErrorType(str, Enum):
    GENERAL = "general"
    AUTHENTICATION = "authentication"
    REVIEW = "review"
    SERVICE = "service"
    DATABASE = "database"


class DomainErrorCode(str, Enum):
    # Authentication
    INVALID_PHONE_FORMAT = "AUTH_INVALID_PHONE_FORMAT"
    ACCOUNT_NOT_FOUND = "AUTH_ACCOUNT_NOT_FOUND"
    OTP_RATE_LIMIT = "AUTH_OTP_RATE_LIMIT"
    OTP_COOLDOWN = "AUTH_OTP_COOLDOWN"
    SESSION_EXPIRED = "AUTH_SESSION_EXPIRED"
    OTP_EXPIRED = "AUTH_OTP_EXPIRED"
    PROVIDER_SEND_FAILED = "AUTH_PROVIDER_SEND_FAILED"
    OTP_INVALID = "AUTH_OTP_INVALID"
    SIGNUP_REJECTED = "AUTH_SIGNUP_REJECTED"
    ACCOUNT_CREATION_FAILED = "AUTH_ACCOUNT_CREATION_FAILED"
    INVALID_TOKEN = "AUTH_INVALID_TOKEN"
    UNAUTHORIZED_ACCESS = "AUTH_UNAUTHORIZED_ACCESS"

    # Registration review
    RECORD_NOT_FOUND = "REVIEW_RECORD_NOT_FOUND"
    RECORD_HIDDEN = "REVIEW_RECORD_HIDDEN"
    REASON_REQUIRED = "REVIEW_REASON_REQUIRED"
    INVALID_TRANSITION = "REVIEW_INVALID_TRANSITION"
    CONCURRENT_UPDATE = "REVIEW_CONCURRENT_UPDATE"

    # Identity administration
    IDENTITY_NOT_FOUND = "IDENTITY_NOT_FOUND"
    IDENTITY_CONFLICT = "IDENTITY_CONFLICT"

    VALIDATION_ERROR = "VALIDATION_ERROR"


class InfraErrorCode(str, Enum):
    DATABASE_CONNECTION = "DATABASE_CONNECTION"
    MONGO_ERROR = "MONGO_ERROR"
    CACHE_ERROR = "CACHE_ERROR"
