# Path: src/infrastructure/storage/nosql/repositories/identity_repository.py
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from src.domain.authentication.models.identity import Identity, Profile, Role
from src.infrastructure.storage.nosql.repositories.base import MongoRepository
from src.shared.utilities.time import utc_now


class IdentityRepository(MongoRepository):
    """Identities collection; identities are deactivated, never deleted by callers."""

    def __init__(self, db: AsyncIOMotorDatabase):
        super().__init__(db, "identities")

    async def get(self, identity_id: str) -> Optional[Identity]:
        doc = await self.find_one({"_id": identity_id})
        return Identity.from_document(doc) if doc else None

    async def find_by_phone(self, phones: List[str]) -> Optional[Identity]:
        if not phones:
            return None
        doc = await self.find_one({"phone": {"$in": phones}})
        return Identity.from_document(doc) if doc else None

    async def find_by_role(self, role: Role) -> Optional[Identity]:
        doc = await self.find_one({"roles": role.value})
        return Identity.from_document(doc) if doc else None

    async def create(self, phone: Optional[str], roles: List[Role], username: Optional[str] = None) -> str:
        now = utc_now()
        document: Dict[str, Any] = {
            "roles": [role.value for role in roles],
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        }
        # Unset unique fields stay absent for the partial indexes
        if phone:
            document["phone"] = phone
        if username:
            document["username"] = username
        return await self.insert_one(document)

    async def list_all(self) -> List[Identity]:
        docs = await self.find({}, sort=[("created_at", 1)])
        return [Identity.from_document(doc) for doc in docs]

    async def set_active(self, identity_id: str, is_active: bool) -> bool:
        matched = await self.update_one({"_id": identity_id}, {"is_active": is_active, "updated_at": utc_now()})
        return matched > 0

    async def set_roles(self, identity_id: str, roles: List[Role]) -> bool:
        matched = await self.update_one(
            {"_id": identity_id},
            {"roles": [role.value for role in roles], "updated_at": utc_now()}
        )
        return matched > 0

    async def remove(self, identity_id: str) -> int:
        """Compensating delete for an identity whose profile could not be written."""
        return await self.delete_one({"_id": identity_id})


class ProfileRepository(MongoRepository):
    def __init__(self, db: AsyncIOMotorDatabase):
        super().__init__(db, "profiles")

    async def get_by_identity(self, identity_id: str) -> Optional[Profile]:
        doc = await self.find_one({"identity_id": identity_id})
        return Profile.from_document(doc) if doc else None

    async def get_by_identities(self, identity_ids: List[str]) -> List[Profile]:
        if not identity_ids:
            return []
        docs = await self.find({"identity_id": {"$in": identity_ids}})
        return [Profile.from_document(doc) for doc in docs]

    async def find_by_phone_variants(self, phones: List[str]) -> Optional[Profile]:
        if not phones:
            return None
        doc = await self.find_one({"phone": {"$in": phones}})
        return Profile.from_document(doc) if doc else None

    async def find_by_national_id(self, national_id: str) -> Optional[Profile]:
        doc = await self.find_one({"national_id": national_id})
        return Profile.from_document(doc) if doc else None

    async def find_by_email(self, email: str) -> Optional[Profile]:
        doc = await self.find_one({"email": email})
        return Profile.from_document(doc) if doc else None

    async def create(self, profile: Profile) -> str:
        return await self.insert_one(profile.to_document())

    async def set_active(self, identity_id: str, is_active: bool, updated_by: str) -> bool:
        matched = await self.update_one(
            {"identity_id": identity_id},
            {"is_active": is_active, "updated_by": updated_by, "updated_at": utc_now()}
        )
        return matched > 0
