# Path: src/domain/authentication/services/session_service.py
from datetime import datetime
from typing import Optional

from jose import jwt

from src.domain.authentication.models.identity import Identity
from src.domain.authentication.services.challenge_store import ChallengeStore
from src.infrastructure.storage.cache.repositories.session_repository import SessionRepository
from src.infrastructure.storage.nosql.repositories.identity_repository import IdentityRepository
from src.shared.errors.domain.authentication import SessionExpiredError
from src.shared.errors.domain.security import InvalidTokenError
from src.shared.logging.service import LoggingService
from src.shared.logging.config import LogConfig
from src.shared.security.token import decode_access_token, generate_access_token
from src.shared.utilities.helpers import generate_session_token
from src.shared.utilities.time import utc_now
from src.shared.utilities.types import LanguageCode

logger = LoggingService(LogConfig())


class SessionService:
    """Opens server-side sessions and binds signed-in identities to them."""

    def __init__(self, sessions: SessionRepository, store: ChallengeStore, identity_repo: IdentityRepository):
        self.sessions = sessions
        self.store = store
        self.identity_repo = identity_repo

    async def open_session(self, client_ip: str = "unknown", user_agent: str = "",
                           now: Optional[datetime] = None) -> str:
        token = generate_session_token()
        now = now or utc_now()
        await self.sessions.create(token, {
            "created_at": now.isoformat(),
            "client_ip": client_ip or "unknown",
            "user_agent": user_agent or "",
        })
        logger.info("Session opened", context={"client_ip": client_ip})
        return token

    async def require_session(self, token: Optional[str], language: LanguageCode = "en") -> str:
        """Return ``token`` if it names a live session, else raise SessionExpiredError."""
        if not token or not await self.sessions.exists(token):
            raise SessionExpiredError(language=language)
        return token

    async def sign_in(self, token: str, identity: Identity, language: LanguageCode = "en",
                      now: Optional[datetime] = None) -> str:
        roles = [role.value for role in identity.roles]
        access_token = generate_access_token(identity.id, roles, token, language=language, now=now)
        claims = jwt.get_unverified_claims(access_token)
        await self.store.mark_signed_in(token, identity.id, roles, claims["jti"])
        logger.info("Identity signed in", context={"identity_id": identity.id, "roles": roles})
        return access_token

    async def sign_out(self, token: str) -> None:
        await self.store.sign_out(token)
        logger.info("Session signed out", context={})

    async def authenticate(self, access_token: str, language: LanguageCode = "en") -> Identity:
        """
        Resolve a bearer token to the identity behind it.

        The token must still be the one recorded in its session, so signing
        out or letting the session idle out revokes it. The identity is read
        fresh so deactivation and role changes apply immediately.
        """
        payload = decode_access_token(access_token, language)
        auth = await self.store.get_auth(payload["sid"])
        if not auth or auth.get("jti") != payload.get("jti"):
            logger.info("Access token no longer bound to a session", context={"jti": payload.get("jti")})
            raise InvalidTokenError(reason="session", language=language)

        identity = await self.identity_repo.get(payload["sub"])
        if identity is None or not identity.is_active:
            raise InvalidTokenError(reason="inactive", language=language)
        return identity
