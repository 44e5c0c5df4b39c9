# Path: src/api/routers/otp_flow_router.py
from typing import Optional

from fastapi import APIRouter, Depends, status

from src.api.v1.dependencies.request_context import RequestContext, get_request_context
from src.domain.authentication.models.flows import OtpFlow
from src.domain.authentication.models.otp import IssueOtpInput, VehicleOwnerLoginInput, VerifyOtpInput
from src.infrastructure.di.container import container
from src.shared.config.settings import settings
from src.shared.errors.response import ErrorResponse
from src.shared.logging.service import LoggingService
from src.shared.logging.config import LogConfig
from src.shared.models.responses.standard_response import StandardResponse

logger = LoggingService(LogConfig())

OTP_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid phone, expired or wrong code"},
    401: {"model": ErrorResponse, "description": "Session missing or challenge gone; restart the flow"},
    404: {"model": ErrorResponse, "description": "No eligible account for this phone"},
    429: {"model": ErrorResponse, "description": "Issuance cap reached or resend cooldown active"},
    502: {"model": ErrorResponse, "description": "Verification provider refused to send"},
}


def add_verify_and_resend(router: APIRouter, flow: OtpFlow, path: str) -> None:
    """Attach the verify and resend endpoints every flow shares."""

    @router.post(
        f"{path}/otp/verify",
        status_code=status.HTTP_200_OK,
        response_model=StandardResponse,
        responses=OTP_ERROR_RESPONSES,
        summary=f"Verify {flow.value} OTP",
        name=f"{flow.value}_verify",
    )
    async def verify_otp(data: VerifyOtpInput, ctx: RequestContext = Depends(get_request_context)) -> StandardResponse:
        result = await container.otp_service().verify(
            flow,
            ctx.session_token,
            data.code,
            client_ip=ctx.client_ip,
            user_agent=ctx.user_agent,
            language=ctx.language,
        )
        return StandardResponse.from_result(result)

    @router.post(
        f"{path}/otp/resend",
        status_code=status.HTTP_200_OK,
        response_model=StandardResponse,
        responses=OTP_ERROR_RESPONSES,
        summary=f"Resend {flow.value} OTP",
        name=f"{flow.value}_resend",
    )
    async def resend_otp(ctx: RequestContext = Depends(get_request_context)) -> StandardResponse:
        result = await container.otp_service().resend(
            flow,
            ctx.session_token,
            client_ip=ctx.client_ip,
            user_agent=ctx.user_agent,
            language=ctx.language,
        )
        return StandardResponse.from_result(result)


def build_login_router(flow: OtpFlow, path: str) -> APIRouter:
    """Issue/verify/resend endpoints for a flow that signs in an existing account."""
    router = APIRouter(prefix="/api/v1", tags=[settings.AUTH_TAG])
    accepts_national_id = flow is OtpFlow.VEHICLE_OWNER_LOGIN

    async def issue(data: IssueOtpInput, ctx: RequestContext, national_id: Optional[str] = None) -> StandardResponse:
        result = await container.otp_service().issue(
            flow,
            ctx.session_token,
            data.phone,
            national_id=national_id,
            client_ip=ctx.client_ip,
            user_agent=ctx.user_agent,
            language=ctx.language,
        )
        return StandardResponse.from_result(result)

    if accepts_national_id:
        @router.post(f"{path}/otp/issue", response_model=StandardResponse, responses=OTP_ERROR_RESPONSES,
                     summary=f"Issue {flow.value} OTP", name=f"{flow.value}_issue")
        async def issue_with_national_id(data: VehicleOwnerLoginInput,
                                         ctx: RequestContext = Depends(get_request_context)) -> StandardResponse:
            return await issue(data, ctx, data.national_id)
    else:
        @router.post(f"{path}/otp/issue", response_model=StandardResponse, responses=OTP_ERROR_RESPONSES,
                     summary=f"Issue {flow.value} OTP", name=f"{flow.value}_issue")
        async def issue_by_phone(data: IssueOtpInput,
                                 ctx: RequestContext = Depends(get_request_context)) -> StandardResponse:
            return await issue(data, ctx)

    add_verify_and_resend(router, flow, path)
    logger.debug("OTP flow routes built", context={"flow": flow.value, "path": path})
    return router
