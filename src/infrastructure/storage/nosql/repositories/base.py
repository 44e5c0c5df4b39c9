# Path: src/infrastructure/storage/nosql/repositories/base.py
from typing import Any, Dict, List, Optional, Tuple
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from src.shared.i18n.messages import get_message
from src.shared.errors.infrastructure.database import MongoError
from src.shared.logging.service import LoggingService
from src.shared.logging.config import LogConfig
from src.shared.utilities.types import LanguageCode

SortSpec = List[Tuple[str, int]]


class MongoRepository:
    """Repository for MongoDB operations."""

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str):
        """Initialize repository with database and logger."""
        self.db = db
        self.collection = db[collection_name]
        self.logger = LoggingService(LogConfig())

    @staticmethod
    def _convert_to_objectid(value: Any) -> Any:
        """Convert string to ObjectId if valid."""
        if isinstance(value, str) and ObjectId.is_valid(value):
            return ObjectId(value)
        return value

    def _prepare(self, query: Dict[str, Any]) -> Dict[str, Any]:
        if "_id" in query:
            query = {**query, "_id": self._convert_to_objectid(query["_id"])}
        return query

    @staticmethod
    def _stringify_id(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if doc and "_id" in doc:
            doc["_id"] = str(doc["_id"])
        return doc

    def _mongo_error(self, operation: str, error: Exception, language: LanguageCode) -> MongoError:
        self.logger.error(f"Mongo {operation} failed", context={"collection": self.collection.name, "error": str(error)})
        return MongoError(
            operation=operation,
            message=get_message(f"mongo.{operation}.failed", language),
            trace_id=self.logger.tracer.get_trace_id(),
            details={"collection": self.collection.name, "error": str(error)},
            language=language
        )

    async def insert_one(self, document: Dict[str, Any], language: LanguageCode = "en") -> str:
        """Insert a single document; unique index violations propagate as DuplicateKeyError."""
        try:
            if "_id" in document:
                document["_id"] = self._convert_to_objectid(document["_id"])
            result = await self.collection.insert_one(document)
            inserted_id = str(result.inserted_id)
            self.logger.info("Mongo insert_one", context={"collection": self.collection.name, "id": inserted_id})
            return inserted_id
        except DuplicateKeyError as e:
            self.logger.warning("Mongo insert_one duplicate key", context={"collection": self.collection.name,
                                                                          "key": str(e.details.get("keyValue") if e.details else "")})
            raise
        except PyMongoError as e:
            raise self._mongo_error("insert", e, language)

    async def find_one(self, query: Dict[str, Any], language: LanguageCode = "en") -> Optional[Dict[str, Any]]:
        """Find a single document."""
        try:
            result = await self.collection.find_one(self._prepare(query))
            return self._stringify_id(result)
        except PyMongoError as e:
            raise self._mongo_error("find_one", e, language)

    async def find(self, query: Dict[str, Any], sort: Optional[SortSpec] = None,
                   language: LanguageCode = "en") -> List[Dict[str, Any]]:
        """Find multiple documents."""
        try:
            cursor = self.collection.find(self._prepare(query))
            if sort:
                cursor = cursor.sort(sort)
            result = await cursor.to_list(length=None)
            self.logger.debug("Mongo find", context={"collection": self.collection.name, "count": len(result)})
            return [self._stringify_id(doc) for doc in result]
        except PyMongoError as e:
            raise self._mongo_error("find", e, language)

    async def find_with_pagination(self, query: Dict[str, Any], skip: int = 0, limit: int = 10,
                                   sort: Optional[SortSpec] = None,
                                   language: LanguageCode = "en") -> List[Dict[str, Any]]:
        """Find documents with pagination."""
        try:
            cursor = self.collection.find(self._prepare(query))
            if sort:
                cursor = cursor.sort(sort)
            cursor = cursor.skip(skip).limit(limit)
            result = await cursor.to_list(length=limit)
            return [self._stringify_id(doc) for doc in result]
        except PyMongoError as e:
            raise self._mongo_error("paginate", e, language)

    async def count(self, query: Dict[str, Any], language: LanguageCode = "en") -> int:
        try:
            return await self.collection.count_documents(self._prepare(query))
        except PyMongoError as e:
            raise self._mongo_error("count", e, language)

    async def update_one(self, query: Dict[str, Any], update: Dict[str, Any],
                         unset: Optional[List[str]] = None, language: LanguageCode = "en") -> int:
        """Set fields on the first matching document; returns matched count."""
        try:
            operations: Dict[str, Any] = {"$set": update}
            if unset:
                operations["$unset"] = {field: "" for field in unset}
            result = await self.collection.update_one(self._prepare(query), operations)
            self.logger.debug("Mongo update_one", context={"collection": self.collection.name,
                                                            "matched": result.matched_count,
                                                            "modified": result.modified_count})
            return result.matched_count
        except PyMongoError as e:
            raise self._mongo_error("update", e, language)

    async def find_one_and_update(self, query: Dict[str, Any], operations: Dict[str, Any], upsert: bool = False,
                                  language: LanguageCode = "en") -> Optional[Dict[str, Any]]:
        """Atomically apply update operators and return the updated document."""
        try:
            result = await self.collection.find_one_and_update(
                self._prepare(query),
                operations,
                upsert=upsert,
                return_document=ReturnDocument.AFTER
            )
            return self._stringify_id(result)
        except PyMongoError as e:
            raise self._mongo_error("update", e, language)

    async def delete_one(self, query: Dict[str, Any], language: LanguageCode = "en") -> int:
        """Delete a single document."""
        try:
            result = await self.collection.delete_one(self._prepare(query))
            self.logger.info("Mongo delete_one", context={"collection": self.collection.name,
                                                          "deleted": result.deleted_count})
            return result.deleted_count
        except PyMongoError as e:
            raise self._mongo_error("delete", e, language)

    async def create_index(self, keys: SortSpec, **kwargs) -> str:
        try:
            return await self.collection.create_index(keys, **kwargs)
        except PyMongoError as e:
            raise self._mongo_error("insert", e, "en")
