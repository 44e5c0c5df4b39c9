# Path: src/domain/audit/services/audit_service.py
from datetime import datetime
from typing import Optional

from src.domain.audit.models.audit import OtpAuditEntry, OtpAuditEvent, ReviewAuditEntry
from src.infrastructure.storage.nosql.repositories.audit_repository import AuditRepository
from src.shared.config.settings import settings
from src.shared.logging.service import LoggingService
from src.shared.logging.config import LogConfig
from src.shared.utilities.helpers import truncate
from src.shared.utilities.network import parse_user_agent
from src.shared.utilities.time import utc_now

MASKED_CODE = "******"


class AuditService:
    """
    Best-effort audit trail.

    Audit writes never fail the operation being audited: storage errors are
    logged at warning level and dropped.
    """

    def __init__(self, repository: AuditRepository):
        self.repository = repository
        self.logger = LoggingService(LogConfig())

    async def record_otp_event(
            self,
            event: OtpAuditEvent,
            phone: str,
            role: str,
            success: bool,
            identity_id: Optional[str] = None,
            source_ip: Optional[str] = None,
            user_agent: Optional[str] = None,
            code_submitted: bool = False,
            at: Optional[datetime] = None
    ) -> None:
        entry = OtpAuditEntry(
            identity_id=identity_id or None,
            phone=phone,
            role=role,
            event=event,
            at=at or utc_now(),
            source_ip=source_ip or "unknown",
            user_agent=truncate(user_agent or "", settings.AUDIT_USER_AGENT_MAX_LENGTH),
            device=parse_user_agent(user_agent) if user_agent else {},
            success=success,
            masked_code=MASKED_CODE if code_submitted else None
        )
        try:
            await self.repository.append_otp(entry)
        except Exception as e:
            self.logger.warning("OTP audit write failed", context={"event": event.value, "error": str(e)})
            return
        self.logger.debug("OTP audit recorded", context={"event": event.value, "phone": phone, "success": success})

    async def record_review_event(self, entry: ReviewAuditEntry) -> None:
        try:
            await self.repository.append_review(entry)
        except Exception as e:
            self.logger.warning("Review audit write failed", context={"registration_id": entry.registration_id,
                                                                      "action": entry.action, "error": str(e)})
