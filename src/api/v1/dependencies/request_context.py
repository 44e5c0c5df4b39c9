# Path: src/api/v1/dependencies/request_context.py
from dataclasses import dataclass
from typing import Optional

from fastapi import Header, Request

from src.shared.utilities.language import extract_language
from src.shared.utilities.network import extract_client_ip, extract_user_agent
from src.shared.utilities.types import LanguageCode


@dataclass
class RequestContext:
    """Per-request values the OTP and review endpoints pass down to services."""
    language: LanguageCode
    client_ip: str
    user_agent: str
    session_token: Optional[str] = None


async def get_request_context(
        request: Request,
        x_session_token: Optional[str] = Header(default=None, alias="X-Session-Token"),
) -> RequestContext:
    return RequestContext(
        language=extract_language(request),
        client_ip=await extract_client_ip(request),
        user_agent=await extract_user_agent(request),
        session_token=x_session_token,
    )
