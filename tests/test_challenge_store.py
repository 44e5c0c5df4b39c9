# tests/test_challenge_store.py
"""Typed session state: challenge, rate counters, pending signup, sign-in binding."""

import pytest

from src.domain.authentication.models.flows import OtpFlow
from src.domain.authentication.models.otp import OtpChallenge, PendingSignup, RateState
from src.domain.authentication.services.challenge_store import CHALLENGE_FIELD
from src.shared.utilities.time import utc_now


class TestChallengeStore:
    @pytest.mark.asyncio
    async def test_challenge_round_trips_and_replaces(self, store):
        now = utc_now()
        first = OtpChallenge.issue(OtpFlow.OWNER_LOGIN, "+97451270700", "id-1", now, 1)
        second = OtpChallenge.issue(OtpFlow.OWNER_LOGIN, "+97451270700", "id-1", now, 2)

        await store.save_challenge("tok", first)
        await store.save_challenge("tok", second)
        loaded = await store.get_challenge("tok")

        assert loaded.issued_count == 2
        assert loaded.flow is OtpFlow.OWNER_LOGIN
        assert (loaded.expires_at - loaded.issued_at).total_seconds() == 300

    @pytest.mark.asyncio
    async def test_corrupt_challenge_is_discarded(self, store, sessions):
        await sessions.create("tok", {CHALLENGE_FIELD: "{not json"})

        assert await store.get_challenge("tok") is None
        assert CHALLENGE_FIELD not in sessions.sessions["tok"]

    @pytest.mark.asyncio
    async def test_rate_state_defaults_to_zero(self, store):
        state = await store.get_rate_state("tok")

        assert state == RateState()

    @pytest.mark.asyncio
    async def test_sign_out_keeps_rate_counters(self, store):
        now = utc_now()
        await store.save_rate_state("tok", RateState(issued_count=3, last_issued_at=now))
        await store.save_pending_signup("tok", PendingSignup(name="Ali", phone="97451270700",
                                                             national_id="28412345678"))
        await store.mark_signed_in("tok", "id-1", ["Owner"], "jti-1")

        await store.sign_out("tok")

        assert await store.get_auth("tok") is None
        assert await store.get_pending_signup("tok") is None
        assert (await store.get_rate_state("tok")).issued_count == 3
