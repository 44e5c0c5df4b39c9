# Path: src/infrastructure/storage/nosql/client.py
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from src.shared.config.settings import settings
from src.shared.logging.service import LoggingService
from src.shared.logging.config import LogConfig
from src.shared.errors.infrastructure.database import DatabaseConnectionError

logger = LoggingService(LogConfig())


class MongoDBConnection:
    _client: AsyncIOMotorClient = None
    _db: AsyncIOMotorDatabase = None

    @classmethod
    async def connect(cls):
        """Connect to MongoDB."""
        if cls._client is not None:
            return
        mongo_uri = settings.MONGO_URI
        timeout = settings.MONGO_TIMEOUT
        try:
            logger.info("Attempting MongoDB connection", context={"db": settings.MONGO_DB, "timeout": timeout})
            client = AsyncIOMotorClient(mongo_uri, serverSelectionTimeoutMS=timeout, tz_aware=True)
            await client.admin.command("ping")
            cls._client = client
            cls._db = client[settings.MONGO_DB]
            logger.info("MongoDB connection established", context={"db": settings.MONGO_DB})
        except Exception as e:
            logger.error("MongoDB connection failed", context={"timeout": timeout, "error": str(e)})
            raise DatabaseConnectionError(
                db_type="MongoDB",
                message="MongoDB unavailable",
                trace_id=logger.tracer.get_trace_id(),
                details={"error": str(e)}
            )

    @classmethod
    async def disconnect(cls):
        """Disconnect from MongoDB."""
        if cls._client is not None:
            cls._client.close()
            logger.info("MongoDB connection closed", context={"db": settings.MONGO_DB})
            cls._client = None
            cls._db = None

    @classmethod
    def get_db(cls) -> AsyncIOMotorDatabase:
        """Get MongoDB database instance."""
        if cls._db is None:
            logger.error("Attempt to access MongoDB before connection was established", context={})
            raise DatabaseConnectionError(
                db_type="MongoDB",
                message="MongoDB not connected. Call connect() first.",
                trace_id=logger.tracer.get_trace_id()
            )
        return cls._db


async def get_nosql_db() -> AsyncIOMotorDatabase:
    """Dependency to get MongoDB database."""
    if MongoDBConnection._client is None:
        await MongoDBConnection.connect()
    return MongoDBConnection.get_db()
