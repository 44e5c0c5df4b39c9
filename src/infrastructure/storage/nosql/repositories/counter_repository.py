# Path: src/infrastructure/storage/nosql/repositories/counter_repository.py
from motor.motor_asyncio import AsyncIOMotorDatabase

from src.infrastructure.storage.nosql.repositories.base import MongoRepository


class CounterRepository(MongoRepository):
    """Named monotonic sequences backed by atomic $inc."""

    def __init__(self, db: AsyncIOMotorDatabase):
        super().__init__(db, "counters")

    async def next_value(self, name: str) -> int:
        doc = await self.find_one_and_update({"_id": name}, {"$inc": {"value": 1}}, upsert=True)
        return int(doc["value"])

    async def ensure_at_least(self, name: str, value: int) -> int:
        """Raise the sequence to ``value`` if it is lower; never lowers it."""
        doc = await self.find_one_and_update({"_id": name}, {"$max": {"value": value}}, upsert=True)
        return int(doc["value"])
