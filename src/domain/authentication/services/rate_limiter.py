# Path: src/domain/authentication/services/rate_limiter.py
from datetime import datetime

from src.domain.authentication.models.otp import RateState
from src.shared.config.settings import settings
from src.shared.utilities.result import ErrorKind, Result


class RateLimiter:
    """
    Per-session OTP issuance policy.

    A session may trigger at most ``max_issuances`` sends over its lifetime.
    Resends additionally wait out a short cooldown since the previous send;
    first issues never do.
    """

    def __init__(self, max_issuances: int = None, cooldown_seconds: int = None):
        self.max_issuances = max_issuances if max_issuances is not None else settings.OTP_MAX_ISSUANCES
        self.cooldown_seconds = cooldown_seconds if cooldown_seconds is not None else settings.OTP_COOLDOWN_SECONDS

    def check(self, state: RateState, now: datetime, enforce_cooldown: bool = False) -> Result[None]:
        if state.issued_count >= self.max_issuances:
            return Result.failure(ErrorKind.TOO_MANY_REQUESTS, "Too many OTP requests")
        if enforce_cooldown and state.last_issued_at is not None:
            elapsed = (now - state.last_issued_at).total_seconds()
            if elapsed < self.cooldown_seconds:
                return Result.failure(ErrorKind.COOLDOWN, f"Retry in {self.cooldown_seconds - int(elapsed)}s")
        return Result.success()
