# Path: src/domain/authentication/services/challenge_store.py
import json
from typing import Optional

from pydantic import ValidationError

from src.domain.authentication.models.otp import OtpChallenge, PendingSignup, RateState
from src.infrastructure.storage.cache.repositories.session_repository import SessionRepository
from src.shared.logging.service import LoggingService
from src.shared.logging.config import LogConfig

CHALLENGE_FIELD = "otp_challenge"
RATE_FIELD = "otp_rate"
SIGNUP_FIELD = "signup_pending"
AUTH_FIELD = "auth"


class ChallengeStore:
    """Typed view of the OTP state kept in one server-side session."""

    def __init__(self, sessions: SessionRepository):
        self.sessions = sessions
        self.logger = LoggingService(LogConfig())

    async def get_challenge(self, token: str) -> Optional[OtpChallenge]:
        raw = await self.sessions.get_field(token, CHALLENGE_FIELD)
        if not raw:
            return None
        try:
            return OtpChallenge.model_validate_json(raw)
        except ValidationError as e:
            # Unreadable state is treated as no challenge and dropped
            self.logger.warning("Discarding corrupt challenge", context={"error": str(e)})
            await self.sessions.delete_fields(token, CHALLENGE_FIELD)
            return None

    async def save_challenge(self, token: str, challenge: OtpChallenge) -> None:
        """Write the one challenge for this session, replacing any earlier one."""
        await self.sessions.set_fields(token, {CHALLENGE_FIELD: challenge.model_dump_json()})

    async def clear_challenge(self, token: str) -> None:
        await self.sessions.delete_fields(token, CHALLENGE_FIELD)

    async def get_rate_state(self, token: str) -> RateState:
        raw = await self.sessions.get_field(token, RATE_FIELD)
        if not raw:
            return RateState()
        try:
            return RateState.model_validate_json(raw)
        except ValidationError:
            return RateState()

    async def save_rate_state(self, token: str, state: RateState) -> None:
        await self.sessions.set_fields(token, {RATE_FIELD: state.model_dump_json()})

    async def get_pending_signup(self, token: str) -> Optional[PendingSignup]:
        raw = await self.sessions.get_field(token, SIGNUP_FIELD)
        if not raw:
            return None
        try:
            return PendingSignup.model_validate_json(raw)
        except ValidationError:
            return None

    async def save_pending_signup(self, token: str, pending: PendingSignup) -> None:
        await self.sessions.set_fields(token, {SIGNUP_FIELD: pending.model_dump_json()})

    async def clear_pending_signup(self, token: str) -> None:
        await self.sessions.delete_fields(token, SIGNUP_FIELD)

    async def mark_signed_in(self, token: str, identity_id: str, roles: list, jti: str) -> None:
        await self.sessions.set_fields(token, {
            AUTH_FIELD: json.dumps({"identity_id": identity_id, "roles": roles, "jti": jti})
        })

    async def get_auth(self, token: str) -> Optional[dict]:
        raw = await self.sessions.get_field(token, AUTH_FIELD)
        return json.loads(raw) if raw else None

    async def sign_out(self, token: str) -> None:
        await self.sessions.delete_fields(token, AUTH_FIELD, CHALLENGE_FIELD, SIGNUP_FIELD)
