# Path: src/infrastructure/storage/nosql/repositories/audit_repository.py
from typing import List

from motor.motor_asyncio import AsyncIOMotorDatabase

from src.domain.audit.models.audit import OtpAuditEntry, ReviewAuditEntry
from src.infrastructure.storage.nosql.repositories.base import MongoRepository


class AuditRepository:
    """Append-only audit collections for OTP events and review actions."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.otp = MongoRepository(db, "otp_audits")
        self.review = MongoRepository(db, "registration_audits")

    async def append_otp(self, entry: OtpAuditEntry) -> str:
        return await self.otp.insert_one(entry.model_dump(mode="python"))

    async def append_review(self, entry: ReviewAuditEntry) -> str:
        return await self.review.insert_one(entry.model_dump(mode="python"))

    async def otp_history(self, phone: str) -> List[OtpAuditEntry]:
        docs = await self.otp.find({"phone": phone}, sort=[("at", 1)])
        return [OtpAuditEntry(**{k: v for k, v in doc.items() if k != "_id"}) for doc in docs]

    async def review_history(self, registration_id: str) -> List[ReviewAuditEntry]:
        docs = await self.review.find({"registration_id": registration_id}, sort=[("at", 1)])
        return [ReviewAuditEntry(**{k: v for k, v in doc.items() if k != "_id"}) for doc in docs]
