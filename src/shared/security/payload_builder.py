# Path: src/shared/security/payload_builder.py
from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4

from src.shared.config.settings import settings
from src.shared.logging.service import LoggingService
from src.shared.logging.config import LogConfig

logger = LoggingService(LogConfig())


def build_jwt_payload(
    *,
    subject_id: str,
    roles: List[str],
    session_id: str,
    scopes: Optional[List[str]] = None,
    expires_in: int = None,
    issuer: str = None,
    audience: Optional[str] = None,
    jti: Optional[str] = None,
    language: Optional[str] = "en",
    now: Optional[datetime] = None,
) -> dict:
    """Build a standardized access-token payload bound to a server-side session."""
    now = now or datetime.now(timezone.utc)
    iat = int(now.timestamp())
    exp = iat + (expires_in or settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60)

    payload = {
        "iss": issuer or settings.TOKEN_ISSUER,
        "aud": audience or settings.TOKEN_AUDIENCE,
        "sub": subject_id,
        "jti": jti or str(uuid4()),
        "sid": session_id,
        "roles": roles,
        "token_type": "access",
        "iat": iat,
        "exp": exp,
        "language": language,
    }
    if scopes:
        payload["scopes"] = scopes

    logger.debug("Built JWT payload", context={"subject_id": subject_id, "roles": roles, "exp": exp})
    return payload
