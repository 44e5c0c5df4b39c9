# Path: src/api/v1/endpoints/auth/sessions.py
from fastapi import APIRouter, Depends, status

from src.api.v1.dependencies.request_context import RequestContext, get_request_context
from src.infrastructure.di.container import container
from src.shared.config.settings import settings
from src.shared.errors.response import ErrorResponse
from src.shared.i18n.messages import get_message
from src.shared.logging.service import LoggingService
from src.shared.logging.config import LogConfig
from src.shared.models.responses.standard_response import StandardResponse

router = APIRouter(prefix="/api/v1", tags=[settings.AUTH_TAG])

logger = LoggingService(LogConfig())


@router.post(
    "/sessions",
    status_code=status.HTTP_201_CREATED,
    response_model=StandardResponse,
    summary="Open a server-side session",
    description="Returns the token every OTP endpoint expects in the X-Session-Token header.",
    responses={
        201: {
            "description": "Session opened",
            "content": {
                "application/json": {
                    "example": {
                        "data": {"session_token": "c2Vzc2lvbi10b2tlbi1leGFtcGxl", "idle_timeout": 1200},
                        "meta": {"message": "Session started.", "status": "success", "code": 201}
                    }
                }
            }
        }
    }
)
async def open_session_endpoint(ctx: RequestContext = Depends(get_request_context)) -> StandardResponse:
    token = await container.session_service().open_session(ctx.client_ip, ctx.user_agent)
    return StandardResponse.success(
        data={"session_token": token, "idle_timeout": settings.SESSION_IDLE_TIMEOUT},
        message=get_message("session.opened", ctx.language),
        code=status.HTTP_201_CREATED
    )


@router.post(
    "/sessions/sign-out",
    status_code=status.HTTP_200_OK,
    response_model=StandardResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Sign the current session out",
)
async def sign_out_endpoint(ctx: RequestContext = Depends(get_request_context)) -> StandardResponse:
    session_service = container.session_service()
    token = await session_service.require_session(ctx.session_token, ctx.language)
    await session_service.sign_out(token)
    return StandardResponse.success(message=get_message("session.signed_out", ctx.language))
