# Path: src/domain/authentication/models/identity.py
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.shared.utilities.time import utc_now


class Role(str, Enum):
    """Closed set of roles an identity may hold."""
    SUPER_ADMIN = "SuperAdmin"
    ADMIN = "Admin"
    FINAL_APPROVER = "FinalApprover"
    DOCUMENT_VERIFIER = "DocumentVerifier"
    MINISTRY_OFFICER = "MinistryOfficer"
    OWNER = "Owner"
    VEHICLE_OWNER = "VehicleOwner"


def parse_roles(values: Iterable[Any]) -> List[Role]:
    """Known roles from stored strings; unknown values are dropped."""
    known = {role.value for role in Role}
    return [Role(value) for value in values or [] if value in known]


class Identity(BaseModel):
    """Authenticatable principal; never deleted, only deactivated."""
    model_config = ConfigDict(use_enum_values=False)

    id: str = Field(..., description="Opaque identity identifier")
    phone: Optional[str] = Field(default=None, description="Canonical 11-digit phone (974########)")
    username: Optional[str] = Field(default=None, description="Login name")
    roles: List[Role] = Field(default_factory=list, description="Granted roles")
    is_active: bool = Field(default=True, description="Inactive identities cannot sign in")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def has_any_role(self, roles: Iterable[Role]) -> bool:
        return any(role in self.roles for role in roles)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Identity":
        return cls(
            id=str(doc["_id"]),
            phone=doc.get("phone"),
            username=doc.get("username"),
            roles=parse_roles(doc.get("roles", [])),
            is_active=doc.get("is_active", True),
            created_at=doc.get("created_at") or utc_now(),
            updated_at=doc.get("updated_at") or utc_now(),
        )


class Profile(BaseModel):
    """Person attributes linked 1:1 to an identity."""
    identity_id: str = Field(..., description="Owning identity id")
    name: str = Field(..., description="Full name")
    email: Optional[str] = Field(default=None, description="Unique when set")
    phone: Optional[str] = Field(default=None, description="Unique when set")
    national_id: Optional[str] = Field(default=None, description="11-digit national id (QID), unique when set")
    is_active: bool = Field(default=True)
    created_by: str = Field(default="system")
    created_at: datetime = Field(default_factory=utc_now)
    updated_by: Optional[str] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Profile":
        return cls(**{key: value for key, value in doc.items() if key != "_id"})

    def to_document(self) -> Dict[str, Any]:
        # Unset unique fields are omitted so partial unique indexes ignore them
        return {key: value for key, value in self.model_dump().items() if value is not None}
