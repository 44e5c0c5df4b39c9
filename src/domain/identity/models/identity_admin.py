# Path: src/domain/identity/models/identity_admin.py
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.domain.authentication.models.identity import Role
from src.domain.authentication.models.otp import NATIONAL_ID_PATTERN


class ProvisionIdentityInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=2, max_length=150)
    phone: str = Field(..., min_length=1, max_length=32)
    roles: List[Role] = Field(..., min_length=1)
    username: Optional[str] = Field(default=None, max_length=64)
    email: Optional[str] = Field(default=None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    national_id: Optional[str] = None

    @field_validator("national_id")
    @classmethod
    def validate_national_id(cls, v: Optional[str]) -> Optional[str]:
        if v and not NATIONAL_ID_PATTERN.match(v):
            raise ValueError("National id must be 11 digits.")
        return v or None

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v else None


class SetActiveInput(BaseModel):
    is_active: bool


class ReplaceRolesInput(BaseModel):
    roles: List[Role] = Field(..., min_length=1)
