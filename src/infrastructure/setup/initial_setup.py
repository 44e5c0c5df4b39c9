# Path: src/infrastructure/setup/initial_setup.py
from pymongo import ASCENDING, DESCENDING

from src.domain.authentication.models.identity import Role
from src.domain.identity.models.identity_admin import ProvisionIdentityInput
from src.domain.identity.services.identity_admin_service import IdentityAdminService
from src.infrastructure.storage.nosql.repositories.counter_repository import CounterRepository
from src.infrastructure.storage.nosql.repositories.identity_repository import IdentityRepository, ProfileRepository
from src.infrastructure.storage.nosql.repositories.registration_repository import RegistrationRepository
from src.shared.config.settings import settings
from src.shared.logging.service import LoggingService
from src.shared.logging.config import LogConfig

logger = LoggingService(LogConfig())


def _unique_when_set(field: str) -> dict:
    # Partial indexes skip documents where the field is absent
    return {"unique": True, "partialFilterExpression": {field: {"$exists": True, "$type": "string"}}}


async def ensure_indexes(identities: IdentityRepository, profiles: ProfileRepository,
                         registrations: RegistrationRepository):
    """Create the uniqueness and lookup indexes the service relies on."""
    await identities.create_index([("phone", ASCENDING)], **_unique_when_set("phone"))
    await identities.create_index([("roles", ASCENDING)])
    await profiles.create_index([("identity_id", ASCENDING)], unique=True)
    await profiles.create_index([("phone", ASCENDING)], **_unique_when_set("phone"))
    await profiles.create_index([("email", ASCENDING)], **_unique_when_set("email"))
    await profiles.create_index([("national_id", ASCENDING)], **_unique_when_set("national_id"))
    await registrations.create_index([("unique_token", ASCENDING)], **_unique_when_set("unique_token"))
    await registrations.create_index([("owner_phone", ASCENDING)])
    await registrations.create_index([("status", ASCENDING), ("submitted_at", DESCENDING)])
    logger.info("MongoDB indexes ensured", context={})


async def seed_super_admin(identities: IdentityRepository, profiles: ProfileRepository):
    """Create the configured SuperAdmin when no identity holds that role yet."""
    if await identities.find_by_role(Role.SUPER_ADMIN):
        logger.info("SuperAdmin already present", context={})
        return
    if not settings.SUPERADMIN_PHONE:
        logger.warning("No SuperAdmin exists and SUPERADMIN_PHONE is not set", context={})
        return

    admin_service = IdentityAdminService(identities, profiles)
    identity = await admin_service.create_identity(
        ProvisionIdentityInput(
            name=settings.SUPERADMIN_NAME,
            phone=settings.SUPERADMIN_PHONE,
            roles=[Role.SUPER_ADMIN],
            username=settings.SUPERADMIN_USERNAME,
        ),
        created_by="system"
    )
    logger.info("SuperAdmin seeded", context={"identity_id": identity.id})


async def seed_reference_sequence(counters: CounterRepository, registrations: RegistrationRepository):
    """Start the reference sequence at or above the highest token already issued."""
    highest = await registrations.max_reference_number()
    value = await counters.ensure_at_least(settings.REFERENCE_SEQUENCE_NAME, highest)
    logger.info("Reference sequence ready", context={"highest_issued": highest, "sequence": value})


async def run_initial_setup(db):
    identities = IdentityRepository(db)
    profiles = ProfileRepository(db)
    registrations = RegistrationRepository(db)
    counters = CounterRepository(db)

    await ensure_indexes(identities, profiles, registrations)
    await seed_super_admin(identities, profiles)
    await seed_reference_sequence(counters, registrations)
