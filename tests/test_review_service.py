# tests/test_review_service.py
"""Review actions with persistence, reference tokens, audit and optimistic retries."""

import pytest

from src.domain.authentication.models.identity import Identity, Role
from src.domain.registration.models.registration import RegistrationStatus
from src.shared.errors.domain.registration import (
    ConcurrentUpdateError,
    InvalidTransitionError,
    ReasonRequiredError,
    RecordHiddenError,
    RecordNotFoundError,
)
from src.shared.errors.domain.security import UnauthorizedAccessError


def staff(identity_id, *roles, username=None):
    return Identity(id=identity_id, roles=list(roles), username=username)


@pytest.fixture
def verifier(profiles):
    profiles.add("dv-1", "Mariam Verifier")
    return staff("dv-1", Role.DOCUMENT_VERIFIER)


@pytest.fixture
def approver():
    return staff("fa-1", Role.FINAL_APPROVER, username="final.approver")


@pytest.fixture
def super_admin():
    return staff("sa-1", Role.SUPER_ADMIN, username="superadmin")


@pytest.fixture
def admin():
    return staff("ad-1", Role.ADMIN, username="admin")


class TestReviewPipeline:
    @pytest.mark.asyncio
    async def test_verify_approve_hide_unhide(self, review_service, registrations, audit_repo,
                                              verifier, approver, super_admin):
        registrations.add("reg-1")

        verified = await review_service.verify("reg-1", verifier)
        assert verified["registration"]["status"] == "Under Review"

        approved = await review_service.approve("reg-1", approver, comment="documents complete")
        record = approved["registration"]
        assert record["status"] == "Approved"
        assert record["reference_token"] == "REF000001"
        assert record["approval"]["actor_role"] == "FinalApprover"
        assert record["approval"]["actor_name"] == "final.approver"
        assert record["approval"]["note"] == "documents complete"
        assert "REF000001" in approved["message"]

        hidden = await review_service.hide("reg-1", super_admin)
        assert hidden["registration"]["status"] == "Hidden"
        assert hidden["registration"]["previous_status"] == "Approved"

        restored = await review_service.unhide("reg-1", super_admin)
        assert restored["registration"]["status"] == "Approved"
        assert restored["registration"]["previous_status"] is None
        assert restored["registration"]["reference_token"] == "REF000001"

        actions = [(entry.action, entry.from_status, entry.to_status) for entry in audit_repo.review_entries]
        assert actions == [
            ("verify", "Pending", "Under Review"),
            ("approve", "Under Review", "Approved"),
            ("hide", "Approved", "Hidden"),
            ("unhide", "Hidden", "Approved"),
        ]
        assert audit_repo.review_entries[0].actor_name == "Mariam Verifier"
        assert audit_repo.review_entries[1].note == "REF000001"

    @pytest.mark.asyncio
    async def test_approve_twice_issues_one_reference(self, review_service, registrations, counters,
                                                      audit_repo, admin):
        registrations.add("reg-1")

        first = await review_service.approve("reg-1", admin)
        second = await review_service.approve("reg-1", admin)

        assert first["changed"] is True
        assert second["changed"] is False
        assert second["registration"]["reference_token"] == "REF000001"
        assert counters.values["registration_reference"] == 1
        assert len(audit_repo.review_entries) == 1

    @pytest.mark.asyncio
    async def test_each_approval_takes_next_reference(self, review_service, registrations, admin, verifier):
        registrations.add("reg-1")
        registrations.add("reg-2", unique_token="mnpqrstuvwxy")

        await review_service.approve("reg-1", admin)
        await review_service.reject("reg-1", verifier, reason="plate mismatch")
        again = await review_service.approve("reg-1", admin)
        other = await review_service.approve("reg-2", admin)

        assert again["registration"]["reference_token"] == "REF000002"
        assert other["registration"]["reference_token"] == "REF000003"

    @pytest.mark.asyncio
    async def test_reject_requires_reason_and_changes_nothing(self, review_service, registrations,
                                                              audit_repo, verifier):
        registrations.add("reg-1")

        with pytest.raises(ReasonRequiredError) as exc:
            await review_service.reject("reg-1", verifier, reason="  ")

        assert exc.value.status_code == 400
        assert (await registrations.get("reg-1")).status is RegistrationStatus.PENDING
        assert audit_repo.review_entries == []

    @pytest.mark.asyncio
    async def test_reject_records_reason_and_actor(self, review_service, registrations, verifier):
        registrations.add("reg-1")

        rejected = await review_service.reject("reg-1", verifier, reason="expired trailer registration")

        stamp = rejected["registration"]["rejection"]
        assert rejected["registration"]["status"] == "Rejected"
        assert stamp["note"] == "expired trailer registration"
        assert stamp["actor_id"] == "dv-1"
        assert stamp["actor_role"] == "DocumentVerifier"

    @pytest.mark.asyncio
    async def test_final_approver_cannot_skip_verification(self, review_service, registrations, approver):
        registrations.add("reg-1")

        with pytest.raises(InvalidTransitionError) as exc:
            await review_service.approve("reg-1", approver)

        assert "Document Verifier" in exc.value.message

    @pytest.mark.asyncio
    async def test_hidden_record_refuses_mutations(self, review_service, registrations, admin, super_admin):
        registrations.add("reg-1")
        await review_service.hide("reg-1", super_admin)

        with pytest.raises(RecordHiddenError):
            await review_service.approve("reg-1", admin)
        with pytest.raises(RecordHiddenError) as twice:
            await review_service.hide("reg-1", super_admin)

        assert twice.value.message == "Record is already hidden."

    @pytest.mark.asyncio
    async def test_only_super_admin_hides(self, review_service, registrations, admin):
        registrations.add("reg-1")

        with pytest.raises(UnauthorizedAccessError):
            await review_service.hide("reg-1", admin)

    @pytest.mark.asyncio
    async def test_missing_record(self, review_service, admin):
        with pytest.raises(RecordNotFoundError):
            await review_service.approve("nope", admin)


class TestConcurrentWrites:
    @pytest.mark.asyncio
    async def test_lost_write_is_replanned(self, review_service, registrations, admin):
        registrations.add("reg-1")
        registrations.lost_writes = 1

        approved = await review_service.approve("reg-1", admin)

        assert approved["registration"]["status"] == "Approved"
        # The losing attempt's sequence number is skipped, not reused
        assert approved["registration"]["reference_token"] == "REF000002"

    @pytest.mark.asyncio
    async def test_gives_up_after_configured_attempts(self, review_service, registrations, admin):
        registrations.add("reg-1")
        registrations.lost_writes = 3

        with pytest.raises(ConcurrentUpdateError) as exc:
            await review_service.approve("reg-1", admin)

        assert exc.value.status_code == 409
        assert (await registrations.get("reg-1")).status is RegistrationStatus.PENDING
