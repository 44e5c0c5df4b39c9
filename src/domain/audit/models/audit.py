# Path: src/domain/audit/models/audit.py
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from src.shared.utilities.time import utc_now


class OtpAuditEvent(str, Enum):
    ISSUED = "issued"
    RESEND = "resend"
    VERIFIED = "verified"
    FAILED = "failed"
    EXPIRED = "expired"
    RATE_LIMITED = "rate_limited"
    SEND_FAILED = "send_failed"
    RESEND_FAILED = "resend_failed"
    ACCOUNT_CREATE_FAILED = "account_create_failed"


class OtpAuditEntry(BaseModel):
    """Append-only record of one OTP lifecycle event."""
    identity_id: Optional[str] = None
    phone: str = Field(..., description="Phone the event concerns")
    role: str = Field(..., description="Flow role tag")
    event: OtpAuditEvent
    at: datetime = Field(default_factory=utc_now)
    source_ip: str = "unknown"
    user_agent: str = ""
    device: dict = Field(default_factory=dict, description="Parsed device_type, os and browser")
    success: bool = False
    masked_code: Optional[str] = None


class ReviewAuditEntry(BaseModel):
    """Append-only record of one registration status change."""
    registration_id: str
    action: str
    from_status: str
    to_status: str
    actor_id: str
    actor_name: str = ""
    actor_role: str
    at: datetime = Field(default_factory=utc_now)
    note: Optional[str] = Field(default=None, description="Rejection reason, approval comment or reference token")
