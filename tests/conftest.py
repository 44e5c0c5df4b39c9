# tests/conftest.py
"""In-memory stand-ins for the Redis and MongoDB repositories, plus a controllable clock."""

import os
import re

os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import timedelta
from itertools import count
from typing import Dict, List, Optional

import pytest
from pymongo.errors import DuplicateKeyError

from src.domain.audit.services.audit_service import AuditService
from src.domain.authentication.models.identity import Identity, Profile, Role
from src.domain.authentication.services.account_resolver import AccountResolver
from src.domain.authentication.services.challenge_store import ChallengeStore
from src.domain.authentication.services.otp_service import OTPService
from src.domain.authentication.services.rate_limiter import RateLimiter
from src.domain.authentication.services.session_service import SessionService
from src.domain.registration.models.registration import VehicleRegistration, VehicleType
from src.domain.registration.services.review_service import ReviewService
from src.infrastructure.providers.verification import VerificationProvider
from src.shared.utilities.result import ErrorKind, Result
from src.shared.utilities.time import utc_now
from src.shared.utilities.tokens import parse_reference_token


class FrozenClock:
    def __init__(self, start=None):
        self.now = start or utc_now()

    def __call__(self):
        return self.now

    def advance(self, seconds: float):
        self.now = self.now + timedelta(seconds=seconds)


class FakeSessionRepository:
    def __init__(self):
        self.sessions: Dict[str, Dict[str, str]] = {}

    async def create(self, token, fields):
        self.sessions[token] = dict(fields)

    async def exists(self, token):
        return token in self.sessions

    async def get_field(self, token, field):
        return self.sessions.get(token, {}).get(field)

    async def set_fields(self, token, fields):
        self.sessions.setdefault(token, {}).update(fields)

    async def delete_fields(self, token, *fields):
        for field in fields:
            self.sessions.get(token, {}).pop(field, None)

    async def delete(self, token):
        self.sessions.pop(token, None)


class FakeIdentityRepository:
    def __init__(self):
        self.identities: Dict[str, Identity] = {}
        self._ids = count(1)

    def add(self, phone=None, roles=None, username=None, is_active=True) -> Identity:
        identity = Identity(id=f"id-{next(self._ids)}", phone=phone, username=username,
                            roles=roles or [], is_active=is_active)
        self.identities[identity.id] = identity
        return identity

    async def get(self, identity_id):
        return self.identities.get(identity_id)

    async def find_by_phone(self, phones):
        return next((i for i in self.identities.values() if i.phone and i.phone in phones), None)

    async def find_by_role(self, role):
        return next((i for i in self.identities.values() if role in i.roles), None)

    async def create(self, phone, roles, username=None):
        if phone and await self.find_by_phone([phone]):
            raise DuplicateKeyError("E11000 duplicate key error: phone")
        return self.add(phone=phone, roles=roles, username=username).id

    async def list_all(self):
        return list(self.identities.values())

    async def set_active(self, identity_id, is_active):
        identity = self.identities.get(identity_id)
        if identity is None:
            return False
        self.identities[identity_id] = identity.model_copy(update={"is_active": is_active})
        return True

    async def set_roles(self, identity_id, roles):
        identity = self.identities.get(identity_id)
        if identity is None:
            return False
        self.identities[identity_id] = identity.model_copy(update={"roles": list(roles)})
        return True

    async def remove(self, identity_id):
        return 1 if self.identities.pop(identity_id, None) else 0


class FakeProfileRepository:
    def __init__(self):
        self.profiles: List[Profile] = []
        self.fail_on_create = False

    def add(self, identity_id, name, phone=None, national_id=None, email=None) -> Profile:
        profile = Profile(identity_id=identity_id, name=name, phone=phone, national_id=national_id, email=email)
        self.profiles.append(profile)
        return profile

    async def get_by_identity(self, identity_id):
        return next((p for p in self.profiles if p.identity_id == identity_id), None)

    async def get_by_identities(self, identity_ids):
        return [p for p in self.profiles if p.identity_id in identity_ids]

    async def find_by_phone_variants(self, phones):
        return next((p for p in self.profiles if p.phone and p.phone in phones), None)

    async def find_by_national_id(self, national_id):
        return next((p for p in self.profiles if p.national_id == national_id), None)

    async def find_by_email(self, email):
        return next((p for p in self.profiles if p.email == email), None)

    async def create(self, profile):
        if self.fail_on_create:
            raise DuplicateKeyError("E11000 duplicate key error: national_id")
        self.profiles.append(profile)
        return f"profile-{len(self.profiles)}"

    async def set_active(self, identity_id, is_active, updated_by):
        for index, profile in enumerate(self.profiles):
            if profile.identity_id == identity_id:
                self.profiles[index] = profile.model_copy(update={"is_active": is_active, "updated_by": updated_by})
                return True
        return False


class FakeAuditRepository:
    def __init__(self):
        self.otp_entries = []
        self.review_entries = []
        self.fail = False

    async def append_otp(self, entry):
        if self.fail:
            raise RuntimeError("audit store down")
        self.otp_entries.append(entry)
        return str(len(self.otp_entries))

    async def append_review(self, entry):
        if self.fail:
            raise RuntimeError("audit store down")
        self.review_entries.append(entry)
        return str(len(self.review_entries))


class FakeCounterRepository:
    def __init__(self):
        self.values: Dict[str, int] = {}

    async def next_value(self, name):
        self.values[name] = self.values.get(name, 0) + 1
        return self.values[name]

    async def ensure_at_least(self, name, value):
        self.values[name] = max(self.values.get(name, 0), value)
        return self.values[name]


def _matches_condition(value, condition):
    if not isinstance(condition, dict):
        return value == condition
    for operator, operand in condition.items():
        if operator == "$ne" and value == operand:
            return False
        if operator == "$in" and value not in operand:
            return False
        if operator == "$gte" and (value is None or value < operand):
            return False
        if operator == "$lt" and (value is None or value >= operand):
            return False
        if operator == "$regex":
            flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
            if value is None or not re.search(operand, str(value), flags):
                return False
    return True


def matches(doc, query):
    """Enough of the Mongo filter language for the queries the services build."""
    for field, condition in (query or {}).items():
        if field == "$or":
            if not any(matches(doc, branch) for branch in condition):
                return False
        elif not _matches_condition(doc.get(field), condition):
            return False
    return True


class FakeRegistrationRepository:
    def __init__(self):
        self.docs: Dict[str, dict] = {}
        self.lost_writes = 0
        self.last_query: Optional[dict] = None
        self.last_sort = None

    def add(self, registration_id="reg-1", status="Pending", owner_phone="97451270700",
            unique_token="abcdefghjkmn", **extra) -> VehicleRegistration:
        registration = VehicleRegistration(
            id=registration_id,
            vehicle_type=extra.pop("vehicle_type", VehicleType.TRUCK),
            owner_phone=owner_phone,
            owner_name=extra.pop("owner_name", "Ali Hassan"),
            driver_phone=extra.pop("driver_phone", "55001122"),
            driver_name=extra.pop("driver_name", "Omar Saleh"),
            status=status,
            unique_token=unique_token,
            **extra
        )
        doc = registration.to_document()
        doc["_id"] = registration_id
        self.docs[registration_id] = doc
        return registration

    async def get(self, registration_id):
        doc = self.docs.get(registration_id)
        return VehicleRegistration.from_document(doc) if doc else None

    async def get_by_unique_token(self, unique_token):
        token = unique_token.lower()
        doc = next((d for d in self.docs.values() if d.get("unique_token") == token), None)
        return VehicleRegistration.from_document(doc) if doc else None

    async def update_if_version(self, registration_id, expected_version, fields, unset=None):
        doc = self.docs.get(registration_id)
        if self.lost_writes > 0:
            # Simulates another reviewer writing first
            self.lost_writes -= 1
            doc["version"] += 1
            return False
        if doc is None or doc["version"] != expected_version:
            return False
        doc.update(fields)
        for field in unset or []:
            doc.pop(field, None)
        doc["version"] = expected_version + 1
        return True

    async def list_page(self, query, skip, limit, sort):
        self.last_query = query
        self.last_sort = sort
        docs = [d for d in self.docs.values() if matches(d, query)]
        for field, direction in reversed(sort or []):
            docs.sort(key=lambda d: d.get(field), reverse=direction < 0)
        items = [VehicleRegistration.from_document(d) for d in docs]
        return items[skip:skip + limit], len(items)

    async def count(self, query):
        return sum(1 for d in self.docs.values() if matches(d, query))

    async def find_missing_unique_token(self):
        return [VehicleRegistration.from_document(d) for d in self.docs.values() if not d.get("unique_token")]

    async def set_unique_token(self, registration_id, unique_token):
        doc = self.docs.get(registration_id)
        if doc is None or doc.get("unique_token"):
            return False
        doc["unique_token"] = unique_token
        return True

    async def max_reference_number(self):
        numbers = [parse_reference_token(d.get("reference_token")) for d in self.docs.values()]
        return max((n for n in numbers if n is not None), default=0)


class FakeVerificationProvider(VerificationProvider):
    name = "fake"

    def __init__(self, code="123456"):
        self.code = code
        self.sent: List[str] = []
        self.send_error: Optional[str] = None

    async def send(self, phone_e164):
        if self.send_error:
            return Result.failure(ErrorKind.PROVIDER_SEND_FAILED, self.send_error)
        self.sent.append(phone_e164)
        return Result.success()

    async def check(self, phone_e164, code):
        if code == self.code:
            return Result.success()
        return Result.failure(ErrorKind.PROVIDER_VERIFY_FAILED, "pending")


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def sessions():
    return FakeSessionRepository()


@pytest.fixture
def store(sessions):
    return ChallengeStore(sessions)


@pytest.fixture
def identities():
    return FakeIdentityRepository()


@pytest.fixture
def profiles():
    return FakeProfileRepository()


@pytest.fixture
def audit_repo():
    return FakeAuditRepository()


@pytest.fixture
def audit(audit_repo):
    return AuditService(audit_repo)


@pytest.fixture
def provider():
    return FakeVerificationProvider()


@pytest.fixture
def session_service(sessions, store, identities):
    return SessionService(sessions, store, identities)


@pytest.fixture
def make_otp_service(store, session_service, identities, profiles, provider, audit, clock):
    def factory(**overrides):
        kwargs = dict(
            store=store,
            session_service=session_service,
            resolver=AccountResolver(identities, profiles),
            rate_limiter=RateLimiter(max_issuances=20, cooldown_seconds=5),
            provider=provider,
            audit=audit,
            identity_repo=identities,
            profile_repo=profiles,
            clock=clock,
            dev_fallback_enabled=False,
        )
        kwargs.update(overrides)
        return OTPService(**kwargs)

    return factory


@pytest.fixture
def otp_service(make_otp_service):
    return make_otp_service()


@pytest.fixture
def registrations():
    return FakeRegistrationRepository()


@pytest.fixture
def counters():
    return FakeCounterRepository()


@pytest.fixture
def review_service(registrations, counters, profiles, audit, clock):
    return ReviewService(registrations, counters, profiles, audit, clock=clock, write_attempts=3)


@pytest.fixture
def owner(identities, profiles):
    identity = identities.add(phone="97451270700", roles=[Role.OWNER])
    profiles.add(identity.id, "Khalid Owner", phone="97451270700", national_id="28412345678")
    return identity
