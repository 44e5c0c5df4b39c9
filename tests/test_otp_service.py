# tests/test_otp_service.py
"""Issue, resend and verify across the four OTP flows."""

import pytest

from src.domain.audit.models.audit import OtpAuditEvent
from src.domain.authentication.models.flows import OtpFlow
from src.domain.authentication.models.identity import Role
from src.shared.errors.domain.authentication import (
    AccountCreationFailedError,
    AccountNotFoundError,
    InvalidOtpError,
    InvalidPhoneFormatError,
    OtpCooldownError,
    OtpExpiredError,
    OtpRateLimitError,
    ProviderSendFailedError,
    SessionExpiredError,
    SignupRejectedError,
)
from src.shared.utilities.constants import DomainErrorCode


def events(audit_repo):
    return [entry.event for entry in audit_repo.otp_entries]


class TestOwnerLogin:
    @pytest.mark.asyncio
    async def test_issue_then_verify_signs_in(self, otp_service, session_service, store, provider,
                                              audit_repo, owner):
        token = await session_service.open_session("10.0.0.1", "pytest")

        issued = await otp_service.issue(OtpFlow.OWNER_LOGIN, token, "97451270700")

        assert issued["redirect_to"] == "/auth/owner/verify"
        assert issued["issued_count"] == 1
        assert provider.sent == ["+97451270700"]
        challenge = await store.get_challenge(token)
        assert challenge.target_identity_id == owner.id
        assert challenge.phone == "+97451270700"

        verified = await otp_service.verify(OtpFlow.OWNER_LOGIN, token, "123456")

        assert verified["redirect_to"] == "/"
        assert verified["identity_id"] == owner.id
        assert verified["roles"] == ["Owner"]
        assert verified["access_token"]
        assert await store.get_challenge(token) is None
        assert (await store.get_auth(token))["identity_id"] == owner.id
        assert events(audit_repo) == [OtpAuditEvent.ISSUED, OtpAuditEvent.VERIFIED]

    @pytest.mark.asyncio
    async def test_local_number_reaches_same_account(self, otp_service, session_service, store, owner):
        token = await session_service.open_session()

        await otp_service.issue(OtpFlow.OWNER_LOGIN, token, "51270700")

        assert (await store.get_challenge(token)).target_identity_id == owner.id

    @pytest.mark.asyncio
    async def test_unknown_and_wrong_role_look_the_same(self, otp_service, session_service, owner):
        token = await session_service.open_session()

        with pytest.raises(AccountNotFoundError) as unknown:
            await otp_service.issue(OtpFlow.OWNER_LOGIN, token, "59998888")
        with pytest.raises(AccountNotFoundError) as wrong_role:
            await otp_service.issue(OtpFlow.MINISTRY_LOGIN, token, "51270700")

        assert unknown.value.error_code == wrong_role.value.error_code == DomainErrorCode.ACCOUNT_NOT_FOUND.value
        assert unknown.value.message == wrong_role.value.message
        assert unknown.value.details["redirect_to"] == "/auth/owner/login"

    @pytest.mark.asyncio
    async def test_invalid_phone_is_rejected_before_lookup(self, otp_service, session_service, provider, owner):
        token = await session_service.open_session()

        with pytest.raises(InvalidPhoneFormatError):
            await otp_service.issue(OtpFlow.OWNER_LOGIN, token, "1234")
        assert provider.sent == []

    @pytest.mark.asyncio
    async def test_unknown_session_must_restart(self, otp_service, owner):
        with pytest.raises(SessionExpiredError):
            await otp_service.issue(OtpFlow.OWNER_LOGIN, "no-such-session", "51270700")


class TestRateLimits:
    @pytest.mark.asyncio
    async def test_twenty_first_issuance_is_refused(self, otp_service, session_service, provider,
                                                    audit_repo, owner):
        token = await session_service.open_session()
        for _ in range(20):
            await otp_service.issue(OtpFlow.OWNER_LOGIN, token, "51270700")

        with pytest.raises(OtpRateLimitError) as exc:
            await otp_service.issue(OtpFlow.OWNER_LOGIN, token, "51270700")

        assert exc.value.status_code == 429
        assert len(provider.sent) == 20
        assert events(audit_repo)[-1] is OtpAuditEvent.RATE_LIMITED

    @pytest.mark.asyncio
    async def test_resend_waits_out_cooldown(self, otp_service, session_service, clock, owner):
        token = await session_service.open_session()
        await otp_service.issue(OtpFlow.OWNER_LOGIN, token, "51270700")

        with pytest.raises(OtpCooldownError):
            await otp_service.resend(OtpFlow.OWNER_LOGIN, token)

        clock.advance(5)
        resent = await otp_service.resend(OtpFlow.OWNER_LOGIN, token)
        assert resent["issued_count"] == 2

    @pytest.mark.asyncio
    async def test_first_issue_is_never_cooled_down(self, otp_service, session_service, owner):
        token = await session_service.open_session()
        await otp_service.issue(OtpFlow.OWNER_LOGIN, token, "51270700")

        again = await otp_service.issue(OtpFlow.OWNER_LOGIN, token, "51270700")

        assert again["issued_count"] == 2

    @pytest.mark.asyncio
    async def test_counters_survive_successful_verification(self, otp_service, session_service, owner):
        token = await session_service.open_session()
        await otp_service.issue(OtpFlow.OWNER_LOGIN, token, "51270700")
        await otp_service.verify(OtpFlow.OWNER_LOGIN, token, "123456")

        again = await otp_service.issue(OtpFlow.OWNER_LOGIN, token, "51270700")

        assert again["issued_count"] == 2

    @pytest.mark.asyncio
    async def test_resend_needs_a_challenge_of_the_same_flow(self, otp_service, session_service, owner):
        token = await session_service.open_session()

        with pytest.raises(SessionExpiredError):
            await otp_service.resend(OtpFlow.OWNER_LOGIN, token)

        await otp_service.issue(OtpFlow.OWNER_LOGIN, token, "51270700")
        with pytest.raises(SessionExpiredError):
            await otp_service.resend(OtpFlow.MINISTRY_LOGIN, token)


class TestVerification:
    @pytest.mark.asyncio
    async def test_expired_code_clears_challenge(self, otp_service, session_service, store, clock,
                                                 audit_repo, owner):
        token = await session_service.open_session()
        await otp_service.issue(OtpFlow.OWNER_LOGIN, token, "51270700")
        clock.advance(301)

        with pytest.raises(OtpExpiredError):
            await otp_service.verify(OtpFlow.OWNER_LOGIN, token, "123456")

        assert await store.get_challenge(token) is None
        assert events(audit_repo)[-1] is OtpAuditEvent.EXPIRED

    @pytest.mark.asyncio
    async def test_code_is_still_valid_at_exactly_five_minutes(self, otp_service, session_service, clock, owner):
        token = await session_service.open_session()
        await otp_service.issue(OtpFlow.OWNER_LOGIN, token, "51270700")
        clock.advance(300)

        verified = await otp_service.verify(OtpFlow.OWNER_LOGIN, token, "123456")

        assert verified["identity_id"] == owner.id

    @pytest.mark.asyncio
    async def test_wrong_code_keeps_challenge(self, otp_service, session_service, store, audit_repo, owner):
        token = await session_service.open_session()
        await otp_service.issue(OtpFlow.OWNER_LOGIN, token, "51270700")

        with pytest.raises(InvalidOtpError):
            await otp_service.verify(OtpFlow.OWNER_LOGIN, token, "000000")

        assert await store.get_challenge(token) is not None
        failed = audit_repo.otp_entries[-1]
        assert failed.event is OtpAuditEvent.FAILED
        assert failed.masked_code == "******"
        assert (await otp_service.verify(OtpFlow.OWNER_LOGIN, token, "123456"))["identity_id"] == owner.id

    @pytest.mark.asyncio
    async def test_verify_without_challenge_restarts(self, otp_service, session_service, owner):
        token = await session_service.open_session()

        with pytest.raises(SessionExpiredError) as exc:
            await otp_service.verify(OtpFlow.MINISTRY_LOGIN, token, "123456")

        assert exc.value.details["redirect_to"] == "/auth/ministry/login"

    @pytest.mark.asyncio
    async def test_deactivated_between_issue_and_verify(self, otp_service, session_service, identities, owner):
        token = await session_service.open_session()
        await otp_service.issue(OtpFlow.OWNER_LOGIN, token, "51270700")
        await identities.set_active(owner.id, False)

        with pytest.raises(SessionExpiredError):
            await otp_service.verify(OtpFlow.OWNER_LOGIN, token, "123456")


class TestProviderFailures:
    @pytest.mark.asyncio
    async def test_send_failure_leaves_no_challenge(self, otp_service, session_service, store, provider,
                                                    audit_repo, owner):
        provider.send_error = "Invalid parameter `To`"
        token = await session_service.open_session()

        with pytest.raises(ProviderSendFailedError) as exc:
            await otp_service.issue(OtpFlow.OWNER_LOGIN, token, "51270700")

        assert exc.value.status_code == 502
        assert await store.get_challenge(token) is None
        assert (await store.get_rate_state(token)).issued_count == 0
        assert events(audit_repo) == [OtpAuditEvent.SEND_FAILED]

    @pytest.mark.asyncio
    async def test_development_fallback_code(self, make_otp_service, session_service, provider, owner):
        service = make_otp_service(dev_fallback_enabled=True, dev_fallback_code="654321")
        provider.send_error = "unreachable"
        token = await session_service.open_session()

        issued = await service.issue(OtpFlow.OWNER_LOGIN, token, "51270700")
        assert "654321" in issued["message"]

        verified = await service.verify(OtpFlow.OWNER_LOGIN, token, "654321")
        assert verified["identity_id"] == owner.id

    @pytest.mark.asyncio
    async def test_fallback_code_is_refused_when_disabled(self, otp_service, session_service, owner):
        token = await session_service.open_session()
        await otp_service.issue(OtpFlow.OWNER_LOGIN, token, "51270700")

        with pytest.raises(InvalidOtpError):
            await otp_service.verify(OtpFlow.OWNER_LOGIN, token, "654321")


class TestVehicleOwnerFlows:
    @pytest.mark.asyncio
    async def test_signup_creates_account_and_signs_in(self, otp_service, session_service, store,
                                                       identities, profiles):
        token = await session_service.open_session()

        issued = await otp_service.issue_signup(token, " Ali Hassan ", "+974 5127 0700", "28412345678")
        assert issued["redirect_to"] == "/auth/vehicle-owner/signup/verify"
        assert (await store.get_pending_signup(token)).phone == "97451270700"

        verified = await otp_service.verify(OtpFlow.VEHICLE_OWNER_SIGNUP, token, "123456")

        assert verified["redirect_to"] == "/vehicles/register"
        assert verified["roles"] == [Role.VEHICLE_OWNER.value]
        identity = await identities.get(verified["identity_id"])
        assert identity.phone == "97451270700"
        profile = await profiles.get_by_identity(identity.id)
        assert profile.name == "Ali Hassan"
        assert profile.national_id == "28412345678"
        assert profile.created_by == "signup"
        assert await store.get_pending_signup(token) is None

    @pytest.mark.asyncio
    async def test_signup_rejects_taken_phone_or_national_id(self, otp_service, session_service, provider, owner):
        token = await session_service.open_session()

        with pytest.raises(SignupRejectedError) as taken_phone:
            await otp_service.issue_signup(token, "Someone", "51270700", "28499999999")
        with pytest.raises(SignupRejectedError) as taken_id:
            await otp_service.issue_signup(token, "Someone", "55667788", "28412345678")

        assert taken_phone.value.message == taken_id.value.message
        assert provider.sent == []

    @pytest.mark.asyncio
    async def test_profile_failure_removes_identity(self, otp_service, session_service, store, identities,
                                                    profiles, audit_repo):
        token = await session_service.open_session()
        await otp_service.issue_signup(token, "Ali Hassan", "51270700", "28412345678")
        profiles.fail_on_create = True

        with pytest.raises(AccountCreationFailedError):
            await otp_service.verify(OtpFlow.VEHICLE_OWNER_SIGNUP, token, "123456")

        assert identities.identities == {}
        assert await store.get_challenge(token) is None
        assert await store.get_pending_signup(token) is None
        assert events(audit_repo)[-1] is OtpAuditEvent.ACCOUNT_CREATE_FAILED

    @pytest.mark.asyncio
    async def test_login_accepts_owner_role_and_checks_national_id(self, otp_service, session_service, owner):
        token = await session_service.open_session()

        with pytest.raises(AccountNotFoundError):
            await otp_service.issue(OtpFlow.VEHICLE_OWNER_LOGIN, token, "51270700", national_id="28400000000")

        issued = await otp_service.issue(OtpFlow.VEHICLE_OWNER_LOGIN, token, "51270700",
                                         national_id="28412345678")
        assert issued["redirect_to"] == "/auth/vehicle-owner/verify"

        verified = await otp_service.verify(OtpFlow.VEHICLE_OWNER_LOGIN, token, "123456")
        assert verified["redirect_to"] == "/vehicles?type=truck"

    @pytest.mark.asyncio
    async def test_signup_flow_is_not_issued_as_a_login(self, otp_service, session_service, provider):
        token = await session_service.open_session()

        with pytest.raises(SessionExpiredError) as exc:
            await otp_service.issue(OtpFlow.VEHICLE_OWNER_SIGNUP, token, "51270700")

        assert exc.value.status_code == 401
        assert exc.value.details == {"redirect_to": "/auth/vehicle-owner/signup"}
        assert provider.sent == []
