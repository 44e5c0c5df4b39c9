# path: src/domain/authentication/models/otp.py
import re
from datetime import datetime, timedelta
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.domain.authentication.models.flows import OtpFlow
from src.shared.config.settings import settings
from src.shared.i18n.messages import get_message

NATIONAL_ID_PATTERN = re.compile(r"^\d{11}$")


class OtpChallenge(BaseModel):
    """The one outstanding OTP issuance held in a session."""
    target_identity_id: str = Field(default="", description="Empty until signup creates the identity")
    flow: OtpFlow = Field(..., description="Role tag of the issuing flow")
    phone: str = Field(..., description="Canonical E.164 phone the code was sent to")
    issued_at: datetime = Field(..., description="Issuance time (UTC)")
    expires_at: datetime = Field(..., description="Always issued_at + OTP TTL")
    issued_count: int = Field(default=1, ge=1, description="Issuances in this session so far")
    last_issued_at: datetime = Field(..., description="Most recent issuance time (UTC)")

    @classmethod
    def issue(cls, flow: OtpFlow, phone: str, target_identity_id: str, now: datetime,
              issued_count: int) -> "OtpChallenge":
        return cls(
            target_identity_id=target_identity_id,
            flow=flow,
            phone=phone,
            issued_at=now,
            expires_at=now + timedelta(seconds=settings.OTP_TTL_SECONDS),
            issued_count=issued_count,
            last_issued_at=now,
        )

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


class RateState(BaseModel):
    """Issuance counters; outlive individual challenges for the whole session."""
    issued_count: int = Field(default=0, ge=0)
    last_issued_at: Optional[datetime] = None

    def record_issue(self, now: datetime) -> "RateState":
        return RateState(issued_count=self.issued_count + 1, last_issued_at=now)


class PendingSignup(BaseModel):
    """Signup details held in the session between issue and verify."""
    name: str
    phone: str = Field(..., description="11-digit prefixed phone (974########)")
    national_id: str


class IssueOtpInput(BaseModel):
    phone: str = Field(..., min_length=1, max_length=32, description="Phone in any common format (e.g., 51270700, +97451270700)")

    model_config = ConfigDict(str_strip_whitespace=True)


class VehicleOwnerLoginInput(IssueOtpInput):
    national_id: Optional[str] = Field(default=None, description="Optional 11-digit QID; must match the profile when given")

    @field_validator("national_id")
    @classmethod
    def validate_national_id(cls, v: Optional[str]) -> Optional[str]:
        if v and not NATIONAL_ID_PATTERN.match(v):
            raise ValueError(get_message("national_id.invalid", settings.DEFAULT_LANGUAGE))
        return v or None


class SignupOtpInput(IssueOtpInput):
    name: str = Field(..., min_length=2, max_length=150, description="Full name")
    national_id: str = Field(..., description="11-digit QID")

    @field_validator("national_id")
    @classmethod
    def validate_national_id(cls, v: str) -> str:
        if not NATIONAL_ID_PATTERN.match(v):
            raise ValueError(get_message("national_id.invalid", settings.DEFAULT_LANGUAGE))
        return v


class VerifyOtpInput(BaseModel):
    code: str = Field(..., min_length=4, max_length=10, description="Code received by SMS")

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("code")
    @classmethod
    def validate_code(cls, v: str) -> str:
        if not v.isdigit():
            raise ValueError("Code must contain digits only.")
        return v
