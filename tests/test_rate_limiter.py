# tests/test_rate_limiter.py
"""Per-session issuance cap and resend cooldown."""

from datetime import timedelta

from src.domain.authentication.models.otp import RateState
from src.domain.authentication.services.rate_limiter import RateLimiter
from src.shared.utilities.result import ErrorKind
from src.shared.utilities.time import utc_now


class TestRateLimiter:
    def test_fresh_session_is_allowed(self):
        assert RateLimiter(20, 5).check(RateState(), utc_now()).ok

    def test_cap_is_reached_at_twenty_issuances(self):
        limiter = RateLimiter(max_issuances=20, cooldown_seconds=5)
        now = utc_now()

        assert limiter.check(RateState(issued_count=19, last_issued_at=now - timedelta(minutes=1)), now).ok
        result = limiter.check(RateState(issued_count=20, last_issued_at=now - timedelta(minutes=1)), now)
        assert result.error is ErrorKind.TOO_MANY_REQUESTS

    def test_cooldown_only_applies_when_enforced(self):
        limiter = RateLimiter(max_issuances=20, cooldown_seconds=5)
        now = utc_now()
        state = RateState(issued_count=1, last_issued_at=now - timedelta(seconds=2))

        assert limiter.check(state, now).ok
        assert limiter.check(state, now, enforce_cooldown=True).error is ErrorKind.COOLDOWN

    def test_cooldown_ends_after_five_seconds(self):
        limiter = RateLimiter(max_issuances=20, cooldown_seconds=5)
        now = utc_now()
        state = RateState(issued_count=1, last_issued_at=now - timedelta(seconds=5))

        assert limiter.check(state, now, enforce_cooldown=True).ok

    def test_cap_wins_over_cooldown(self):
        limiter = RateLimiter(max_issuances=2, cooldown_seconds=5)
        now = utc_now()
        state = RateState(issued_count=2, last_issued_at=now)

        assert limiter.check(state, now, enforce_cooldown=True).error is ErrorKind.TOO_MANY_REQUESTS

    def test_record_issue_counts_and_stamps(self):
        now = utc_now()
        state = RateState().record_issue(now).record_issue(now)

        assert state.issued_count == 2
        assert state.last_issued_at == now
