# Path: src/api/v1/endpoints/auth/ministry_otp.py
from src.api.routers.otp_flow_router import build_login_router
from src.domain.authentication.models.flows import OtpFlow

router = build_login_router(OtpFlow.MINISTRY_LOGIN, "/ministry")
