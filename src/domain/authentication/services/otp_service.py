# Path: src/domain/authentication/services/otp_service.py
from typing import Optional

from pymongo.errors import DuplicateKeyError

from src.domain.audit.models.audit import OtpAuditEvent
from src.domain.audit.services.audit_service import AuditService
from src.domain.authentication.models.flows import FlowPolicy, OtpFlow, policy_for
from src.domain.authentication.models.identity import Identity, Profile, Role
from src.domain.authentication.models.otp import OtpChallenge, PendingSignup
from src.domain.authentication.services.account_resolver import AccountResolver
from src.domain.authentication.services.challenge_store import ChallengeStore
from src.domain.authentication.services.rate_limiter import RateLimiter
from src.domain.authentication.services.session_service import SessionService
from src.infrastructure.providers.verification import VerificationProvider
from src.infrastructure.storage.nosql.repositories.identity_repository import IdentityRepository, ProfileRepository
from src.shared.base_service.base_service import BaseService
from src.shared.config.settings import settings
from src.shared.errors.domain.authentication import (
    AccountCreationFailedError,
    InvalidOtpError,
    OtpExpiredError,
    ProviderSendFailedError,
    SessionExpiredError,
    SignupRejectedError,
)
from src.shared.errors.infrastructure.database import MongoError
from src.shared.errors.mapping import raise_for_result
from src.shared.i18n.messages import get_message
from src.shared.utilities.phone import NormalizedPhone, normalize_phone, phone_variants
from src.shared.utilities.time import utc_now
from src.shared.utilities.types import Clock, LanguageCode


class OTPService(BaseService):
    """
    Orchestrates the four OTP flows over one server-side session.

    Issue resolves the account, applies the per-session rate policy, asks the
    provider to send a code and records the challenge. Verify checks expiry,
    delegates the code check to the provider and, on success, runs the flow's
    effect (signup creates the account), signs the identity in and clears the
    challenge. Every step leaves an audit entry.
    """

    def __init__(
            self,
            store: ChallengeStore,
            session_service: SessionService,
            resolver: AccountResolver,
            rate_limiter: RateLimiter,
            provider: VerificationProvider,
            audit: AuditService,
            identity_repo: IdentityRepository,
            profile_repo: ProfileRepository,
            clock: Clock = utc_now,
            dev_fallback_enabled: bool = None,
            dev_fallback_code: str = None
    ):
        super().__init__()
        self.store = store
        self.session_service = session_service
        self.resolver = resolver
        self.rate_limiter = rate_limiter
        self.provider = provider
        self.audit = audit
        self.identity_repo = identity_repo
        self.profile_repo = profile_repo
        self.clock = clock
        self.dev_fallback_enabled = (settings.OTP_DEV_FALLBACK_ENABLED
                                     if dev_fallback_enabled is None else dev_fallback_enabled)
        self.dev_fallback_code = dev_fallback_code or settings.OTP_DEV_FALLBACK_CODE

    @staticmethod
    def _restart(policy: FlowPolicy) -> dict:
        return {"redirect_to": policy.restart_redirect}

    async def issue(
            self,
            flow: OtpFlow,
            session_token: str,
            phone: str,
            national_id: Optional[str] = None,
            client_ip: str = "unknown",
            user_agent: str = "",
            language: LanguageCode = "en"
    ) -> dict:
        """Start a login flow: resolve the account and send a fresh code."""
        policy = policy_for(flow)
        context = {"entity_type": "otp", "action": "issue", "flow": flow.value}

        async def operation():
            if policy.creates_account:
                # Signup needs the registration fields; send the client back to that form
                raise SessionExpiredError(details=self._restart(policy), language=language)
            await self.session_service.require_session(session_token, language)

            normalized = normalize_phone(phone)
            raise_for_result(normalized, language, details=self._restart(policy))

            resolved = await self.resolver.resolve(phone, policy.required_roles, national_id=national_id)
            if not resolved.ok:
                self.logger.info("OTP issue refused", context={"flow": flow.value, "phone": normalized.value.e164,
                                                               "reason": resolved.error.value})
            raise_for_result(resolved, language, details=self._restart(policy))

            return await self._send(policy, session_token, normalized.value, resolved.value.id,
                                    resend=False, client_ip=client_ip, user_agent=user_agent, language=language)

        return await self.execute(operation, context, language)

    async def issue_signup(
            self,
            session_token: str,
            name: str,
            phone: str,
            national_id: str,
            client_ip: str = "unknown",
            user_agent: str = "",
            language: LanguageCode = "en"
    ) -> dict:
        """Start a VehicleOwner signup: check uniqueness, keep the details, send a code."""
        policy = policy_for(OtpFlow.VEHICLE_OWNER_SIGNUP)
        context = {"entity_type": "otp", "action": "issue", "flow": policy.flow.value}

        async def operation():
            await self.session_service.require_session(session_token, language)

            normalized = normalize_phone(phone)
            raise_for_result(normalized, language, details=self._restart(policy))
            target = normalized.value

            variants = phone_variants(phone)
            taken = (
                await self.profile_repo.find_by_phone_variants(variants)
                or await self.identity_repo.find_by_phone(variants)
                or await self.profile_repo.find_by_national_id(national_id)
            )
            if taken:
                # One generic rejection whichever field collided
                self.logger.info("Signup rejected", context={"phone": target.e164})
                raise SignupRejectedError(details=self._restart(policy), language=language)

            await self.store.save_pending_signup(
                session_token,
                PendingSignup(name=name.strip(), phone=target.prefixed, national_id=national_id)
            )
            return await self._send(policy, session_token, target, "", resend=False,
                                    client_ip=client_ip, user_agent=user_agent, language=language)

        return await self.execute(operation, context, language)

    async def resend(
            self,
            flow: OtpFlow,
            session_token: str,
            client_ip: str = "unknown",
            user_agent: str = "",
            language: LanguageCode = "en"
    ) -> dict:
        """Send another code for the challenge already held in the session."""
        policy = policy_for(flow)
        context = {"entity_type": "otp", "action": "resend", "flow": flow.value}

        async def operation():
            await self.session_service.require_session(session_token, language)
            challenge = await self.store.get_challenge(session_token)
            if challenge is None or challenge.flow is not flow:
                raise SessionExpiredError(details=self._restart(policy), language=language)

            normalized = normalize_phone(challenge.phone)
            raise_for_result(normalized, language, details=self._restart(policy))
            return await self._send(policy, session_token, normalized.value, challenge.target_identity_id,
                                    resend=True, client_ip=client_ip, user_agent=user_agent, language=language)

        return await self.execute(operation, context, language)

    async def _send(
            self,
            policy: FlowPolicy,
            session_token: str,
            phone: NormalizedPhone,
            target_identity_id: str,
            resend: bool,
            client_ip: str,
            user_agent: str,
            language: LanguageCode
    ) -> dict:
        now = self.clock()
        role = policy.flow.value
        audit_fields = {"phone": phone.e164, "role": role, "identity_id": target_identity_id,
                        "source_ip": client_ip, "user_agent": user_agent, "at": now}

        state = await self.store.get_rate_state(session_token)
        allowed = self.rate_limiter.check(state, now, enforce_cooldown=resend)
        if not allowed.ok:
            await self.audit.record_otp_event(OtpAuditEvent.RATE_LIMITED, success=False, **audit_fields)
            self.logger.info("OTP rate limited", context={"flow": role, "reason": allowed.error.value,
                                                          "issued_count": state.issued_count})
            raise_for_result(allowed, language, details=self._restart(policy))

        sent = await self.provider.send(phone.e164)
        if not sent.ok:
            if not self.dev_fallback_enabled:
                event = OtpAuditEvent.RESEND_FAILED if resend else OtpAuditEvent.SEND_FAILED
                await self.audit.record_otp_event(event, success=False, **audit_fields)
                self.logger.warning("OTP send failed", context={"flow": role, "phone": phone.e164,
                                                                "provider_message": sent.message})
                raise ProviderSendFailedError(
                    provider_message=sent.message,
                    resend=resend,
                    details={"provider_message": sent.message, **self._restart(policy)},
                    language=language
                )
            self.logger.warning("OTP send failed, development fallback code active",
                                context={"flow": role, "phone": phone.e164, "fallback_code": self.dev_fallback_code})

        state = state.record_issue(now)
        await self.store.save_rate_state(session_token, state)
        challenge = OtpChallenge.issue(policy.flow, phone.e164, target_identity_id, now, state.issued_count)
        await self.store.save_challenge(session_token, challenge)

        event = OtpAuditEvent.RESEND if resend else OtpAuditEvent.ISSUED
        await self.audit.record_otp_event(event, success=True, **audit_fields)
        self.logger.info("OTP issued", context={"flow": role, "phone": phone.e164, "resend": resend,
                                                "issued_count": state.issued_count})

        message_key = "otp.resent" if resend else "otp.sent"
        if not sent.ok:
            message_key = "otp.dev_fallback"
        return {
            "message": get_message(message_key, language, {"code": self.dev_fallback_code}),
            "flow": policy.flow.value,
            "redirect_to": policy.verify_redirect,
            "expires_at": challenge.expires_at.isoformat(),
            "expires_in": settings.OTP_TTL_SECONDS,
            "issued_count": state.issued_count,
        }

    async def verify(
            self,
            flow: OtpFlow,
            session_token: str,
            code: str,
            client_ip: str = "unknown",
            user_agent: str = "",
            language: LanguageCode = "en"
    ) -> dict:
        """Check a submitted code and sign the session in on success."""
        policy = policy_for(flow)
        context = {"entity_type": "otp", "action": "verify", "flow": flow.value}

        async def operation():
            await self.session_service.require_session(session_token, language)
            now = self.clock()

            challenge = await self.store.get_challenge(session_token)
            pending = None
            if challenge is not None and policy.creates_account:
                pending = await self.store.get_pending_signup(session_token)
            if (
                    challenge is None
                    or challenge.flow is not flow
                    or (policy.creates_account and pending is None)
                    or (not policy.creates_account and not challenge.target_identity_id)
            ):
                raise SessionExpiredError(details=self._restart(policy), language=language)

            audit_fields = {"phone": challenge.phone, "role": flow.value, "source_ip": client_ip,
                            "user_agent": user_agent, "at": now, "code_submitted": True}

            if challenge.is_expired(now):
                await self.audit.record_otp_event(OtpAuditEvent.EXPIRED, success=False,
                                                  identity_id=challenge.target_identity_id, **audit_fields)
                await self.store.clear_challenge(session_token)
                self.logger.info("OTP expired", context={"flow": flow.value, "phone": challenge.phone})
                raise OtpExpiredError(details=self._restart(policy), language=language)

            checked = await self.provider.check(challenge.phone, code)
            accepted = checked.ok
            if not accepted and self.dev_fallback_enabled and code == self.dev_fallback_code:
                self.logger.warning("OTP accepted through development fallback",
                                    context={"flow": flow.value, "phone": challenge.phone})
                accepted = True
            if not accepted:
                await self.audit.record_otp_event(OtpAuditEvent.FAILED, success=False,
                                                  identity_id=challenge.target_identity_id, **audit_fields)
                self.logger.info("OTP rejected", context={"flow": flow.value, "phone": challenge.phone,
                                                          "provider_message": checked.message})
                raise InvalidOtpError(language=language)

            if policy.creates_account:
                identity = await self._create_account(session_token, pending, challenge, client_ip,
                                                      user_agent, language)
            else:
                identity = await self.identity_repo.get(challenge.target_identity_id)
                if identity is None or not identity.is_active:
                    await self.store.clear_challenge(session_token)
                    raise SessionExpiredError(details=self._restart(policy), language=language)

            access_token = await self.session_service.sign_in(session_token, identity, language, now)
            await self.audit.record_otp_event(OtpAuditEvent.VERIFIED, success=True,
                                              identity_id=identity.id, **audit_fields)
            await self.store.clear_challenge(session_token)
            if policy.creates_account:
                await self.store.clear_pending_signup(session_token)

            self.logger.info("OTP verified", context={"flow": flow.value, "identity_id": identity.id})
            return {
                "message": get_message("signup.created" if policy.creates_account else "otp.verified", language),
                "redirect_to": policy.success_redirect,
                "access_token": access_token,
                "token_type": "bearer",
                "identity_id": identity.id,
                "roles": [role.value for role in identity.roles],
            }

        return await self.execute(operation, context, language)

    async def _create_account(
            self,
            session_token: str,
            pending: PendingSignup,
            challenge: OtpChallenge,
            client_ip: str,
            user_agent: str,
            language: LanguageCode
    ) -> Identity:
        """Write identity then profile; a profile failure removes the identity again."""
        policy = policy_for(OtpFlow.VEHICLE_OWNER_SIGNUP)
        identity_id = None
        try:
            identity_id = await self.identity_repo.create(phone=pending.phone, roles=[Role.VEHICLE_OWNER])
            await self.profile_repo.create(Profile(
                identity_id=identity_id,
                name=pending.name,
                phone=pending.phone,
                national_id=pending.national_id,
                created_by="signup",
            ))
        except (DuplicateKeyError, MongoError) as e:
            self.logger.error("Account creation failed", context={"phone": pending.phone, "error": str(e)})
            if identity_id:
                try:
                    await self.identity_repo.remove(identity_id)
                except MongoError as cleanup_error:
                    self.logger.critical("Orphan identity left after failed signup",
                                         context={"identity_id": identity_id, "error": str(cleanup_error)})
            await self.store.clear_challenge(session_token)
            await self.store.clear_pending_signup(session_token)
            await self.audit.record_otp_event(
                OtpAuditEvent.ACCOUNT_CREATE_FAILED,
                phone=challenge.phone,
                role=challenge.flow.value,
                success=False,
                source_ip=client_ip,
                user_agent=user_agent
            )
            raise AccountCreationFailedError(details=self._restart(policy), language=language)

        self.logger.info("Account created", context={"identity_id": identity_id})
        return Identity(id=identity_id, phone=pending.phone, roles=[Role.VEHICLE_OWNER])
