# Path: src/shared/security/token.py
from datetime import datetime
from typing import List, Optional

from jose import jwt, ExpiredSignatureError, JWTError

from src.shared.config.settings import settings
from src.shared.errors.domain.security import InvalidTokenError
from src.shared.logging.service import LoggingService
from src.shared.logging.config import LogConfig
from src.shared.security.payload_builder import build_jwt_payload
from src.shared.security.permissions_loader import scopes_for_roles
from src.shared.utilities.types import LanguageCode

logger = LoggingService(LogConfig())


def generate_access_token(
        identity_id: str,
        roles: List[str],
        session_id: str,
        language: LanguageCode = "en",
        now: Optional[datetime] = None
) -> str:
    """Issue an access token for a signed-in identity."""
    payload = build_jwt_payload(
        subject_id=identity_id,
        roles=roles,
        session_id=session_id,
        scopes=scopes_for_roles(roles),
        language=language,
        now=now
    )
    token = jwt.encode(payload, settings.ACCESS_SECRET, algorithm=settings.ALGORITHM)
    logger.info("Access token generated", context={"identity_id": identity_id, "jti": payload["jti"]})
    return token


def decode_access_token(token: str, language: LanguageCode = "en") -> dict:
    """Decode and validate an access token, raising InvalidTokenError on any problem."""
    try:
        payload = jwt.decode(
            token,
            settings.ACCESS_SECRET,
            algorithms=[settings.ALGORITHM],
            audience=settings.TOKEN_AUDIENCE,
            issuer=settings.TOKEN_ISSUER
        )
    except ExpiredSignatureError:
        logger.info("Access token expired", context={})
        raise InvalidTokenError(reason="expired", language=language)
    except JWTError as e:
        logger.warning("Access token rejected", context={"error": str(e)})
        raise InvalidTokenError(reason="invalid", language=language)

    if payload.get("token_type") != "access" or not payload.get("sub") or not payload.get("sid"):
        logger.warning("Access token missing claims", context={"jti": payload.get("jti")})
        raise InvalidTokenError(reason="claims", language=language)
    return payload
