# Path: src/api/v1/endpoints/auth/vehicle_owner_otp.py
from fastapi import Depends, status

from src.api.routers.otp_flow_router import OTP_ERROR_RESPONSES, add_verify_and_resend, build_login_router
from src.api.v1.dependencies.request_context import RequestContext, get_request_context
from src.domain.authentication.models.flows import OtpFlow
from src.domain.authentication.models.otp import SignupOtpInput
from src.infrastructure.di.container import container
from src.shared.errors.response import ErrorResponse
from src.shared.models.responses.standard_response import StandardResponse

# Login: /vehicle-owner/login/otp/*; signup: /vehicle-owner/signup/otp/*
router = build_login_router(OtpFlow.VEHICLE_OWNER_LOGIN, "/vehicle-owner/login")


@router.post(
    "/vehicle-owner/signup/otp/issue",
    status_code=status.HTTP_200_OK,
    response_model=StandardResponse,
    responses={**OTP_ERROR_RESPONSES, 409: {"model": ErrorResponse, "description": "Signup details already in use"}},
    summary="Start vehicle owner signup",
)
async def signup_issue_endpoint(data: SignupOtpInput,
                                ctx: RequestContext = Depends(get_request_context)) -> StandardResponse:
    result = await container.otp_service().issue_signup(
        ctx.session_token,
        name=data.name,
        phone=data.phone,
        national_id=data.national_id,
        client_ip=ctx.client_ip,
        user_agent=ctx.user_agent,
        language=ctx.language,
    )
    return StandardResponse.from_result(result)


add_verify_and_resend(router, OtpFlow.VEHICLE_OWNER_SIGNUP, "/vehicle-owner/signup")
