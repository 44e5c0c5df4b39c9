# tests/test_audit_service.py
"""Best-effort audit trail."""

import pytest

from src.domain.audit.models.audit import OtpAuditEvent, ReviewAuditEntry
from src.domain.audit.services.audit_service import AuditService

IPHONE_AGENT = ("Mozilla/5.0 (iPhone; CPU iPhone OS 16_0 like Mac OS X) AppleWebKit/605.1.15 "
                "(KHTML, like Gecko) Version/16.0 Mobile/15E148 Safari/604.1")


class TestAuditService:
    @pytest.mark.asyncio
    async def test_submitted_codes_are_masked(self, audit, audit_repo):
        await audit.record_otp_event(OtpAuditEvent.FAILED, phone="+97451270700", role="Owner",
                                     success=False, code_submitted=True)

        entry = audit_repo.otp_entries[0]
        assert entry.masked_code == "******"
        assert entry.source_ip == "unknown"

    @pytest.mark.asyncio
    async def test_user_agent_is_truncated(self, audit, audit_repo):
        await audit.record_otp_event(OtpAuditEvent.ISSUED, phone="+97451270700", role="Owner",
                                     success=True, user_agent=IPHONE_AGENT + " " + "x" * 300)

        assert len(audit_repo.otp_entries[0].user_agent) == 256

    @pytest.mark.asyncio
    async def test_device_is_parsed_from_user_agent(self, audit, audit_repo):
        await audit.record_otp_event(OtpAuditEvent.ISSUED, phone="+97451270700", role="Owner",
                                     success=True, user_agent=IPHONE_AGENT)

        device = audit_repo.otp_entries[0].device
        assert device["device_type"] == "Mobile"
        assert device["os"] == "iOS"

    @pytest.mark.asyncio
    async def test_storage_failures_are_swallowed(self, audit_repo):
        audit_repo.fail = True
        service = AuditService(audit_repo)

        await service.record_otp_event(OtpAuditEvent.ISSUED, phone="+97451270700", role="Owner", success=True)
        await service.record_review_event(ReviewAuditEntry(
            registration_id="reg-1", action="verify", from_status="Pending", to_status="Under Review",
            actor_id="id-1", actor_role="DocumentVerifier"
        ))

        assert audit_repo.otp_entries == []
        assert audit_repo.review_entries == []
