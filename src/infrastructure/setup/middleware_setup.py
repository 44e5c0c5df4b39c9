# Path: src/infrastructure/setup/middleware_setup.py
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from src.shared.config.settings import settings
from src.shared.logging.service import LoggingService
from src.shared.logging.config import LogConfig
from src.shared.logging.tracers import Tracer

logger = LoggingService(LogConfig())

TRACE_HEADER = "X-Trace-Id"


async def log_requests_middleware(request: Request, call_next):
    """
    Bind a request-scoped trace id and log each request with its outcome.

    Bodies are never logged: they carry phone numbers and OTP codes.
    """
    trace_id = Tracer.bind_request()
    started = time.perf_counter()
    logger.info(
        "Incoming request",
        context={"method": request.method, "path": request.url.path},
    )
    response = await call_next(request)
    response.headers[TRACE_HEADER] = str(trace_id)
    logger.info(
        "Request completed",
        context={
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        },
    )
    return response


def setup_middlewares(app: FastAPI):
    """
    Configure FastAPI middlewares (CORS, request logging).

    Args:
        app: The FastAPI application instance.
    """
    # Add request logging middleware
    app.middleware("http")(log_requests_middleware)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in settings.CORS_ORIGINS.split(",")],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[TRACE_HEADER],
    )
    logger.info(
        "Middlewares configured",
        context={"cors_origins": settings.CORS_ORIGINS},
    )
