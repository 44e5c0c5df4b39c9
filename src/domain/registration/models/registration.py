# Path: src/domain/registration/models/registration.py
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from pydantic import BaseModel, Field, model_validator

from src.shared.utilities.time import utc_now


class RegistrationStatus(str, Enum):
    PENDING = "Pending"
    UNDER_REVIEW = "Under Review"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    HIDDEN = "Hidden"


class VehicleType(str, Enum):
    TRUCK = "truck"
    TANK = "tank"


class ReviewAction(str, Enum):
    VERIFY = "verify"
    APPROVE = "approve"
    REJECT = "reject"
    HIDE = "hide"
    UNHIDE = "unhide"


# Uploaded document slots per vehicle type
DOCUMENT_KEYS: Dict[VehicleType, FrozenSet[str]] = {
    VehicleType.TANK: frozenset({
        "id_card_both_sides",
        "tanker_form_both_sides",
        "iban_certificate",
        "tank_capacity_certificate",
        "landfill_works",
        "signed_registration_form",
        "release_form",
    }),
    VehicleType.TRUCK: frozenset({
        "id_card",
        "trailer_registration",
        "traffic_certificate",
        "iban_certificate",
        "vehicle_registration_form",
        "release_form",
    }),
}


class ActionStamp(BaseModel):
    """Who performed an approval or rejection, and when."""
    actor_id: str
    actor_name: str = ""
    actor_role: str
    at: datetime = Field(default_factory=utc_now)
    note: Optional[str] = Field(default=None, description="Approval comment or rejection reason")


class VehicleRegistration(BaseModel):
    id: str
    vehicle_type: VehicleType
    owner_phone: str
    owner_name: str
    driver_phone: str
    driver_name: str
    vehicle_number: Optional[str] = None
    document_paths: Dict[str, str] = Field(default_factory=dict)
    status: RegistrationStatus = RegistrationStatus.PENDING
    submitted_at: datetime = Field(default_factory=utc_now)
    approval: Optional[ActionStamp] = None
    rejection: Optional[ActionStamp] = None
    previous_status: Optional[RegistrationStatus] = None
    unique_token: Optional[str] = None
    reference_token: Optional[str] = None
    client_ip: Optional[str] = None
    version: int = Field(default=0, ge=0, description="Optimistic concurrency counter")

    @model_validator(mode="after")
    def check_document_keys(self) -> "VehicleRegistration":
        unknown = set(self.document_paths) - DOCUMENT_KEYS[self.vehicle_type]
        if unknown:
            raise ValueError(f"Invalid document keys for {self.vehicle_type.value}: {sorted(unknown)}")
        return self

    @property
    def is_hidden(self) -> bool:
        return self.status is RegistrationStatus.HIDDEN

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "VehicleRegistration":
        data = {key: value for key, value in doc.items() if key != "_id"}
        data["id"] = str(doc["_id"])
        return cls(**data)

    def to_document(self) -> Dict[str, Any]:
        doc = self.model_dump(mode="python", exclude={"id"})
        doc["vehicle_type"] = self.vehicle_type.value
        doc["status"] = self.status.value
        doc["previous_status"] = self.previous_status.value if self.previous_status else None
        return doc


class ApproveInput(BaseModel):
    comment: Optional[str] = Field(default=None, max_length=1000)


class RejectInput(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=1000)
