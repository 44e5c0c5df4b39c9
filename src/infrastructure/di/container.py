from dependency_injector import containers, providers

from src.shared.config.settings import settings

from src.infrastructure.providers.verification import build_verification_provider
from src.infrastructure.storage.cache.repositories.session_repository import SessionRepository
from src.infrastructure.storage.nosql.client import MongoDBConnection
from src.infrastructure.storage.nosql.repositories.audit_repository import AuditRepository
from src.infrastructure.storage.nosql.repositories.counter_repository import CounterRepository
from src.infrastructure.storage.nosql.repositories.identity_repository import IdentityRepository, ProfileRepository
from src.infrastructure.storage.nosql.repositories.registration_repository import RegistrationRepository

from src.domain.audit.services.audit_service import AuditService
from src.domain.authentication.services.account_resolver import AccountResolver
from src.domain.authentication.services.challenge_store import ChallengeStore
from src.domain.authentication.services.otp_service import OTPService
from src.domain.authentication.services.rate_limiter import RateLimiter
from src.domain.authentication.services.session_service import SessionService
from src.domain.identity.services.identity_admin_service import IdentityAdminService
from src.domain.registration.services.review_service import ReviewService


class Container(containers.DeclarativeContainer):
    """Dependency Injection container for managing application dependencies."""
    config = providers.Configuration()

    # MongoDB database, resolved from the connection opened at startup
    mongo_db = providers.Callable(MongoDBConnection.get_db)

    # Redis-backed sessions; the client is resolved lazily from the shared pool
    session_repo = providers.Singleton(SessionRepository, idle_timeout=settings.SESSION_IDLE_TIMEOUT)

    # Repositories
    identity_repo = providers.Factory(IdentityRepository, db=mongo_db)
    profile_repo = providers.Factory(ProfileRepository, db=mongo_db)
    registration_repo = providers.Factory(RegistrationRepository, db=mongo_db)
    audit_repo = providers.Factory(AuditRepository, db=mongo_db)
    counter_repo = providers.Factory(CounterRepository, db=mongo_db)

    # External collaborators
    verification_provider = providers.Singleton(build_verification_provider, kind=settings.VERIFICATION_PROVIDER)

    # Services
    challenge_store = providers.Factory(ChallengeStore, sessions=session_repo)
    rate_limiter = providers.Singleton(
        RateLimiter,
        max_issuances=settings.OTP_MAX_ISSUANCES,
        cooldown_seconds=settings.OTP_COOLDOWN_SECONDS
    )
    audit_service = providers.Factory(AuditService, repository=audit_repo)
    account_resolver = providers.Factory(AccountResolver, identity_repo=identity_repo, profile_repo=profile_repo)

    session_service = providers.Factory(
        SessionService,
        sessions=session_repo,
        store=challenge_store,
        identity_repo=identity_repo
    )

    otp_service = providers.Factory(
        OTPService,
        store=challenge_store,
        session_service=session_service,
        resolver=account_resolver,
        rate_limiter=rate_limiter,
        provider=verification_provider,
        audit=audit_service,
        identity_repo=identity_repo,
        profile_repo=profile_repo
    )

    review_service = providers.Factory(
        ReviewService,
        registrations=registration_repo,
        counters=counter_repo,
        profiles=profile_repo,
        audit=audit_service
    )

    identity_admin_service = providers.Factory(
        IdentityAdminService,
        identity_repo=identity_repo,
        profile_repo=profile_repo
    )


# Create the container instance
container = Container()
container.config.from_dict(settings.model_dump())
