# Path: src/infrastructure/setup/database_setup.py
from contextlib import asynccontextmanager
from tenacity import retry, stop_after_attempt, wait_fixed, retry_if_exception_type
from src.infrastructure.storage.nosql.client import MongoDBConnection
from src.infrastructure.storage.cache.client import init_cache_pool, close_cache_pool
from src.shared.config.settings import settings
from src.shared.logging.service import LoggingService
from src.shared.logging.config import LogConfig

logger = LoggingService(LogConfig())


@asynccontextmanager
async def database_lifespan():
    """
    Manage the lifecycle of database connections (MongoDB and Redis) with retry mechanism.

    Yields:
        None: After successful connection setup.

    Raises:
        Exception: If all retry attempts for connecting to MongoDB or Redis fail.
    """

    # Retry decorator for MongoDB connection
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_fixed(2),
        retry=retry_if_exception_type(Exception),
        after=lambda retry_state: logger.error(
            f"MongoDB connection attempt {retry_state.attempt_number} failed",
            context={"error": str(retry_state.outcome.exception())},
        ),
    )
    async def connect_mongo():
        await MongoDBConnection.connect()
        logger.info(
            "MongoDB connection established",
            context={"db": settings.MONGO_DB},
        )

    # Retry decorator for Redis connection
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_fixed(2),
        retry=retry_if_exception_type(Exception),
        after=lambda retry_state: logger.error(
            f"Redis connection attempt {retry_state.attempt_number} failed",
            context={"error": str(retry_state.outcome.exception())},
        ),
    )
    async def connect_redis():
        await init_cache_pool()
        logger.info(
            "Redis connection established",
            context={
                "host": settings.REDIS_HOST,
                "port": settings.REDIS_PORT,
                "db": settings.REDIS_DB,
            },
        )

    try:
        # Connect to MongoDB with retry
        await connect_mongo()
        db = MongoDBConnection.get_db()

        # Connect to Redis with retry
        await connect_redis()

        # Indexes, SuperAdmin seed and reference sequence
        from src.infrastructure.setup.initial_setup import run_initial_setup
        await run_initial_setup(db)
        logger.info("Initial setup completed", context={})

        yield

    except Exception as e:
        logger.error("Database setup failed after retries", context={"error": str(e)})
        raise
    finally:
        # Cleanup
        await MongoDBConnection.disconnect()
        await close_cache_pool()
        logger.info("MongoDB and Redis connections closed", context={})