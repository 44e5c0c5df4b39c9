# Path: src/api/v1/endpoints/health.py
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from src.infrastructure.storage.cache.client import get_cache_client
from src.infrastructure.storage.nosql.client import get_nosql_db
from src.shared.errors.base import BaseError
from src.shared.logging.service import LoggingService
from src.shared.logging.config import LogConfig
from src.shared.models.responses.standard_response import StandardResponse
from src.shared.utilities.health_check import validate_dependencies

router = APIRouter(prefix="/api/v1", tags=["Health"])

logger = LoggingService(LogConfig())


@router.get("/health", response_model=StandardResponse, summary="Redis and MongoDB liveness")
async def health_endpoint():
    try:
        checks = await validate_dependencies(await get_cache_client(), await get_nosql_db())
    except BaseError as e:
        logger.error("Health check could not connect", context={"error_code": e.error_code})
        checks = {"redis_ok": False, "mongo_ok": False}

    healthy = all(checks.values())
    code = status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE
    body = StandardResponse.success(data=checks, message="healthy" if healthy else "degraded", code=code)
    return JSONResponse(status_code=code, content=body.model_dump())
