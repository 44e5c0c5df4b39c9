# Path: src/infrastructure/storage/nosql/repositories/registration_repository.py
from typing import Any, Dict, List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase

from src.domain.registration.models.registration import VehicleRegistration
from src.infrastructure.storage.nosql.repositories.base import MongoRepository, SortSpec
from src.shared.config.settings import settings
from src.shared.utilities.tokens import parse_reference_token


class RegistrationRepository(MongoRepository):
    def __init__(self, db: AsyncIOMotorDatabase):
        super().__init__(db, "registrations")

    async def get(self, registration_id: str) -> Optional[VehicleRegistration]:
        doc = await self.find_one({"_id": registration_id})
        return VehicleRegistration.from_document(doc) if doc else None

    async def get_by_unique_token(self, unique_token: str) -> Optional[VehicleRegistration]:
        doc = await self.find_one({"unique_token": unique_token.lower()})
        return VehicleRegistration.from_document(doc) if doc else None

    async def create(self, registration: VehicleRegistration) -> str:
        return await self.insert_one(registration.to_document())

    async def list_page(self, query: Dict[str, Any], skip: int, limit: int,
                        sort: SortSpec) -> Tuple[List[VehicleRegistration], int]:
        docs = await self.find_with_pagination(query, skip=skip, limit=limit, sort=sort)
        total = await self.count(query)
        return [VehicleRegistration.from_document(doc) for doc in docs], total

    async def update_if_version(self, registration_id: str, expected_version: int, fields: Dict[str, Any],
                                unset: Optional[List[str]] = None) -> bool:
        """Apply ``fields`` only if nobody else wrote since ``expected_version`` was read."""
        fields = {**fields, "version": expected_version + 1}
        matched = await self.update_one(
            {"_id": registration_id, "version": expected_version},
            fields,
            unset=unset
        )
        return matched > 0

    async def find_missing_unique_token(self) -> List[VehicleRegistration]:
        docs = await self.find({"$or": [{"unique_token": None}, {"unique_token": ""}]})
        return [VehicleRegistration.from_document(doc) for doc in docs]

    async def set_unique_token(self, registration_id: str, unique_token: str) -> bool:
        matched = await self.update_one(
            {"_id": registration_id, "$or": [{"unique_token": None}, {"unique_token": ""}]},
            {"unique_token": unique_token}
        )
        return matched > 0

    async def max_reference_number(self) -> int:
        """Highest sequence number among issued reference tokens, 0 when none."""
        docs = await self.find({"reference_token": {"$regex": f"^{settings.REFERENCE_TOKEN_PREFIX}\\d+$"}})
        numbers = [parse_reference_token(doc["reference_token"]) for doc in docs]
        return max((n for n in numbers if n is not None), default=0)
