# Path: src/shared/errors/exception_handlers.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import sentry_sdk
from starlette.exceptions import HTTPException as StarletteHTTPException
from src.shared.config.settings import settings
from src.shared.logging.service import LoggingService
from src.shared.logging.config import LogConfig
from src.shared.i18n.messages import get_message
from src.shared.errors.base import BaseError
from src.shared.errors.router import ErrorRouter
from src.shared.utilities.language import extract_language
from src.shared.utilities.constants import HttpStatus, DomainErrorCode

logger = LoggingService(LogConfig())
error_router = ErrorRouter(logger)


def _render(error: BaseError) -> JSONResponse:
    response = error_router.route(error)
    return JSONResponse(status_code=error.status_code, content=response.model_dump(mode="json"))


def register_exception_handlers(app: FastAPI):
    """
    Register exception handlers for FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle validation errors."""
        language = extract_language(request)
        details = []
        for err in exc.errors():
            loc = err.get("loc", [])
            field = loc[-1] if loc else "field"
            details.append(f"{field}: {err.get('msg', 'Invalid input.')}")

        error_message = "; ".join(details)
        logger.warning("Validation error", context={
            "path": request.url.path,
            "method": request.method,
            "errors": error_message
        })
        return _render(BaseError(
            error_code=DomainErrorCode.VALIDATION_ERROR.value,
            message=get_message("validation.failed", language),
            status_code=HttpStatus.UNPROCESSABLE_ENTITY.value,
            trace_id=logger.tracer.get_trace_id(),
            details={"errors": error_message},
            language=language
        ))

    @app.exception_handler(BaseError)
    async def base_error_handler(request: Request, exc: BaseError):
        """Handle custom BaseError exceptions."""
        logger.info("BaseError caught", context={
            "path": request.url.path,
            "method": request.method,
            "status_code": exc.status_code,
            "error_code": exc.error_code
        })
        return _render(exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Wrap framework HTTP errors (404 routes, 405 methods) in the error envelope."""
        return _render(BaseError(
            error_code="HTTP_ERROR",
            message=str(exc.detail),
            status_code=exc.status_code,
            trace_id=logger.tracer.get_trace_id(),
            details={"path": request.url.path},
            language=extract_language(request)
        ))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        language = extract_language(request)
        logger.critical("Unhandled exception", context={
            "path": request.url.path,
            "method": request.method,
            "error": str(exc)
        })
        sentry_sdk.capture_exception(exc)
        return _render(BaseError(
            error_code="INTERNAL_SERVER_ERROR",
            message=get_message("server.error", language),
            status_code=HttpStatus.INTERNAL_SERVER_ERROR.value,
            trace_id=logger.tracer.get_trace_id(),
            details={"error": str(exc)} if settings.ENVIRONMENT == "development" else {},
            language=language
        ))
