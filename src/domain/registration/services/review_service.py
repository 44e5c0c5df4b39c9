# Path: src/domain/registration/services/review_service.py
import re
from datetime import timedelta
from typing import Any, Dict, List, Optional

from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt

from src.domain.audit.models.audit import ReviewAuditEntry
from src.domain.audit.services.audit_service import AuditService
from src.domain.authentication.models.identity import Identity, Role
from src.domain.registration.models.registration import (
    ActionStamp,
    RegistrationStatus,
    ReviewAction,
    VehicleRegistration,
    VehicleType,
)
from src.domain.registration.services.transitions import TransitionPlan, plan
from src.infrastructure.storage.nosql.repositories.counter_repository import CounterRepository
from src.infrastructure.storage.nosql.repositories.identity_repository import ProfileRepository
from src.infrastructure.storage.nosql.repositories.registration_repository import RegistrationRepository
from src.shared.base_service.base_service import BaseService
from src.shared.config.settings import settings
from src.shared.errors.domain.registration import ConcurrentUpdateError, RecordNotFoundError
from src.shared.errors.domain.security import UnauthorizedAccessError
from src.shared.errors.mapping import raise_for_result
from src.shared.i18n.messages import get_message
from src.shared.utilities.phone import phone_variants
from src.shared.utilities.time import utc_now
from src.shared.utilities.tokens import format_reference_token, generate_public_token
from src.shared.utilities.types import Clock, LanguageCode

SORT_FIELDS = {
    "date": "submitted_at",
    "owner": "owner_name",
    "driver": "driver_name",
    "phone": "owner_phone",
    "status": "status",
    "token": "unique_token",
}
SEARCH_FIELDS = ("owner_name", "driver_name", "owner_phone", "unique_token")

# Roles that see every registration rather than only their own
STAFF_ROLES = frozenset({Role.SUPER_ADMIN, Role.ADMIN, Role.FINAL_APPROVER, Role.DOCUMENT_VERIFIER,
                         Role.MINISTRY_OFFICER, Role.OWNER})
BACKFILL_ROLES = frozenset({Role.SUPER_ADMIN, Role.ADMIN})
DASHBOARD_RECENT_LIMIT = 10


class VersionConflict(Exception):
    """Another writer updated the registration between read and write."""


class ReviewService(BaseService):
    """Applies review actions to registrations and serves the role-filtered read path."""

    def __init__(
            self,
            registrations: RegistrationRepository,
            counters: CounterRepository,
            profiles: ProfileRepository,
            audit: AuditService,
            clock: Clock = utc_now,
            write_attempts: int = None
    ):
        super().__init__()
        self.registrations = registrations
        self.counters = counters
        self.profiles = profiles
        self.audit = audit
        self.clock = clock
        self.write_attempts = write_attempts or settings.REVIEW_WRITE_ATTEMPTS

    async def verify(self, registration_id: str, actor: Identity, language: LanguageCode = "en") -> dict:
        return await self._transition(ReviewAction.VERIFY, registration_id, actor, None, language)

    async def approve(self, registration_id: str, actor: Identity, comment: Optional[str] = None,
                      language: LanguageCode = "en") -> dict:
        return await self._transition(ReviewAction.APPROVE, registration_id, actor, comment, language)

    async def reject(self, registration_id: str, actor: Identity, reason: Optional[str] = None,
                     language: LanguageCode = "en") -> dict:
        return await self._transition(ReviewAction.REJECT, registration_id, actor, reason, language)

    async def hide(self, registration_id: str, actor: Identity, language: LanguageCode = "en") -> dict:
        return await self._transition(ReviewAction.HIDE, registration_id, actor, None, language)

    async def unhide(self, registration_id: str, actor: Identity, language: LanguageCode = "en") -> dict:
        return await self._transition(ReviewAction.UNHIDE, registration_id, actor, None, language)

    async def _transition(self, action: ReviewAction, registration_id: str, actor: Identity,
                          note: Optional[str], language: LanguageCode) -> dict:
        context = {"entity_type": "registration", "entity_id": registration_id, "action": action.value,
                   "actor_id": actor.id}

        async def operation():
            try:
                async for attempt in AsyncRetrying(
                        stop=stop_after_attempt(self.write_attempts),
                        retry=retry_if_exception_type(VersionConflict),
                        reraise=True
                ):
                    with attempt:
                        return await self._apply_once(action, registration_id, actor, note, language)
            except VersionConflict:
                self.logger.warning("Review write kept conflicting", context={"registration_id": registration_id,
                                                                              "action": action.value})
                raise ConcurrentUpdateError(registration_id=registration_id, language=language)

        return await self.execute(operation, context, language)

    async def _apply_once(self, action: ReviewAction, registration_id: str, actor: Identity,
                          note: Optional[str], language: LanguageCode) -> dict:
        registration = await self.registrations.get(registration_id)
        if registration is None:
            raise RecordNotFoundError(identifier=registration_id, language=language)

        planned = plan(action, registration, actor.roles, note)
        raise_for_result(planned, language, subject=registration_id,
                         details={"action": action.value, "status": registration.status.value})
        step: TransitionPlan = planned.value

        if step.noop:
            self.logger.info("Review action already satisfied", context={"registration_id": registration_id,
                                                                         "action": action.value,
                                                                         "status": registration.status.value})
            return {
                "message": get_message(step.message_key, language),
                "registration": registration.model_dump(mode="json"),
                "changed": False,
            }

        now = self.clock()
        fields: Dict[str, Any] = {"status": step.to_status.value}
        if step.assign_reference:
            sequence = await self.counters.next_value(settings.REFERENCE_SEQUENCE_NAME)
            fields["reference_token"] = format_reference_token(sequence)
        if step.stamp:
            fields[step.stamp] = ActionStamp(
                actor_id=actor.id,
                actor_name=await self._actor_name(actor),
                actor_role=step.acting_role.value,
                at=now,
                note=step.note
            ).model_dump()
        if step.remember_previous:
            fields["previous_status"] = step.from_status.value
        if step.clear_previous:
            fields["previous_status"] = None

        written = await self.registrations.update_if_version(registration_id, registration.version, fields)
        if not written:
            self.logger.info("Registration changed concurrently, replanning",
                             context={"registration_id": registration_id, "action": action.value})
            raise VersionConflict(registration_id)

        await self.audit.record_review_event(ReviewAuditEntry(
            registration_id=registration_id,
            action=action.value,
            from_status=step.from_status.value,
            to_status=step.to_status.value,
            actor_id=actor.id,
            actor_name=await self._actor_name(actor),
            actor_role=step.acting_role.value,
            at=now,
            note=fields.get("reference_token") or step.note
        ))
        self.logger.info("Registration status changed", context={
            "registration_id": registration_id,
            "action": action.value,
            "from": step.from_status.value,
            "to": step.to_status.value,
            "actor_role": step.acting_role.value,
            "reference_token": fields.get("reference_token"),
        })

        updated = await self.registrations.get(registration_id)
        return {
            "message": get_message(step.message_key, language, {"reference": fields.get("reference_token", "")}),
            "registration": updated.model_dump(mode="json") if updated else None,
            "changed": True,
        }

    async def _actor_name(self, actor: Identity) -> str:
        profile = await self.profiles.get_by_identity(actor.id)
        if profile and profile.name:
            return profile.name
        return actor.username or ""

    async def _owner_scope(self, viewer: Identity) -> Optional[List[str]]:
        """
        Phone variants a vehicle owner may see, or None when the viewer sees everything.

        The VehicleOwner role restricts the viewer even when it is held together
        with a staff role.
        """
        if Role.VEHICLE_OWNER in viewer.roles:
            profile = await self.profiles.get_by_identity(viewer.id)
            phone = (profile.phone if profile else None) or viewer.phone
            return phone_variants(phone) if phone else []
        if viewer.has_any_role(STAFF_ROLES):
            return None
        return []

    async def _visible_query(self, viewer: Identity) -> Optional[Dict[str, Any]]:
        """Base Mongo filter for what ``viewer`` may read, or None when nothing is visible."""
        scope = await self._owner_scope(viewer)
        if scope is not None and not scope:
            return None
        query: Dict[str, Any] = {}
        if Role.SUPER_ADMIN not in viewer.roles:
            query["status"] = {"$ne": RegistrationStatus.HIDDEN.value}
        if scope is not None:
            query["owner_phone"] = {"$in": scope}
        return query

    @staticmethod
    def _can_see(registration: VehicleRegistration, viewer: Optional[Identity],
                 scope: Optional[List[str]]) -> bool:
        if registration.is_hidden and (viewer is None or Role.SUPER_ADMIN not in viewer.roles):
            return False
        if scope is not None and registration.owner_phone not in scope:
            return False
        return True

    async def list_registrations(
            self,
            viewer: Identity,
            vehicle_type: Optional[VehicleType] = None,
            search: Optional[str] = None,
            sort: str = "date",
            descending: bool = True,
            page: int = 1,
            page_size: int = None,
            language: LanguageCode = "en"
    ) -> dict:
        """List registrations visible to ``viewer`` with filtering, search, sort and paging."""
        context = {"entity_type": "registration", "action": "list", "actor_id": viewer.id}

        async def operation():
            size = page_size or settings.REGISTRATION_PAGE_SIZE
            current = max(page, 1)
            query = await self._visible_query(viewer)
            if query is None:
                return {"message": get_message("registration.listed", language), "items": [], "total": 0,
                        "page": current, "page_size": size}

            if vehicle_type is not None:
                query["vehicle_type"] = vehicle_type.value
            if search and search.strip():
                pattern = {"$regex": re.escape(search.strip()), "$options": "i"}
                query["$or"] = [{field: pattern} for field in SEARCH_FIELDS]

            sort_field = SORT_FIELDS.get(sort, SORT_FIELDS["date"])
            items, total = await self.registrations.list_page(
                query,
                skip=(current - 1) * size,
                limit=size,
                sort=[(sort_field, -1 if descending else 1)]
            )
            return {
                "message": get_message("registration.listed", language),
                "items": [item.model_dump(mode="json") for item in items],
                "total": total,
                "page": current,
                "page_size": size,
            }

        return await self.execute(operation, context, language)

    async def get_registration(self, registration_id: str, viewer: Identity, language: LanguageCode = "en") -> dict:
        context = {"entity_type": "registration", "entity_id": registration_id, "action": "read"}

        async def operation():
            registration = await self.registrations.get(registration_id)
            scope = await self._owner_scope(viewer)
            if registration is None or not self._can_see(registration, viewer, scope):
                raise RecordNotFoundError(identifier=registration_id, language=language)
            return {"message": get_message("registration.details", language),
                    "registration": registration.model_dump(mode="json")}

        return await self.execute(operation, context, language)

    async def dashboard(self, viewer: Identity, language: LanguageCode = "en") -> dict:
        """
        Headline counts and the most recent submissions visible to ``viewer``.

        Counts use the same hidden and owner-scope rules as the listing. "Today"
        is the current UTC day; today's rejections are rejected registrations
        submitted today.
        """
        context = {"entity_type": "registration", "action": "dashboard", "actor_id": viewer.id}

        async def operation():
            base = await self._visible_query(viewer)
            if base is None:
                return {"message": get_message("registration.dashboard", language), "today_submissions": 0,
                        "total_approvals": 0, "today_rejections": 0, "total_submissions": 0, "recent": []}

            day_start = self.clock().replace(hour=0, minute=0, second=0, microsecond=0)
            today = {"submitted_at": {"$gte": day_start, "$lt": day_start + timedelta(days=1)}}
            # Approved/Rejected never match Hidden, so replacing the status filter keeps visibility intact
            recent, total = await self.registrations.list_page(
                base, skip=0, limit=DASHBOARD_RECENT_LIMIT, sort=[("submitted_at", -1)]
            )
            return {
                "message": get_message("registration.dashboard", language),
                "today_submissions": await self.registrations.count({**base, **today}),
                "total_approvals": await self.registrations.count(
                    {**base, "status": RegistrationStatus.APPROVED.value}),
                "today_rejections": await self.registrations.count(
                    {**base, **today, "status": RegistrationStatus.REJECTED.value}),
                "total_submissions": total,
                "recent": [item.model_dump(mode="json") for item in recent],
            }

        return await self.execute(operation, context, language)

    async def get_by_unique_token(self, unique_token: str, viewer: Optional[Identity] = None,
                                  language: LanguageCode = "en") -> dict:
        """Public lookup; hidden records stay invisible to everyone but a SuperAdmin."""
        context = {"entity_type": "registration", "action": "public_lookup"}

        async def operation():
            registration = await self.registrations.get_by_unique_token(unique_token)
            if registration is None or not self._can_see(registration, viewer, None):
                raise RecordNotFoundError(identifier=unique_token, language=language)
            return {"message": get_message("registration.details", language),
                    "registration": registration.model_dump(mode="json", exclude={"client_ip"})}

        return await self.execute(operation, context, language)

    async def backfill_unique_tokens(self, actor: Identity, language: LanguageCode = "en") -> dict:
        """Generate public lookup tokens for registrations created without one."""
        context = {"entity_type": "registration", "action": "backfill_tokens", "actor_id": actor.id}

        async def operation():
            if not actor.has_any_role(BACKFILL_ROLES):
                raise UnauthorizedAccessError(resource="backfill:registrations", language=language)

            count = 0
            for registration in await self.registrations.find_missing_unique_token():
                token = generate_public_token()
                while await self.registrations.get_by_unique_token(token) is not None:
                    token = generate_public_token()
                if await self.registrations.set_unique_token(registration.id, token):
                    count += 1
            self.logger.info("Unique tokens backfilled", context={"count": count, "actor_id": actor.id})
            return {"message": get_message("registration.backfilled", language, {"count": count}), "count": count}

        return await self.execute(operation, context, language)
