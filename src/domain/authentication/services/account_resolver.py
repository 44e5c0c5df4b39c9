# Path: src/domain/authentication/services/account_resolver.py
from typing import Iterable, Optional

from src.domain.authentication.models.identity import Identity, Role
from src.infrastructure.storage.nosql.repositories.identity_repository import IdentityRepository, ProfileRepository
from src.shared.logging.service import LoggingService
from src.shared.logging.config import LogConfig
from src.shared.utilities.phone import phone_variants
from src.shared.utilities.result import ErrorKind, Result


class AccountResolver:
    """Finds the identity a phone number belongs to."""

    def __init__(self, identity_repo: IdentityRepository, profile_repo: ProfileRepository):
        self.identity_repo = identity_repo
        self.profile_repo = profile_repo
        self.logger = LoggingService(LogConfig())

    async def resolve(
            self,
            phone: str,
            required_roles: Optional[Iterable[Role]] = None,
            national_id: Optional[str] = None
    ) -> Result[Identity]:
        """
        Resolve ``phone`` to an active identity.

        Profiles are searched first across every stored phone form, then the
        identity's own phone. When ``national_id`` is given it must match the
        profile. ``RoleMismatch`` is returned only for identities that exist
        but hold none of ``required_roles``.
        """
        variants = phone_variants(phone)
        if not variants:
            return Result.failure(ErrorKind.ACCOUNT_NOT_FOUND)

        identity = None
        profile = await self.profile_repo.find_by_phone_variants(variants)
        if profile:
            identity = await self.identity_repo.get(profile.identity_id)
        if identity is None:
            identity = await self.identity_repo.find_by_phone(variants)
            if identity is not None and national_id:
                profile = await self.profile_repo.get_by_identity(identity.id)

        if identity is None or not identity.is_active:
            self.logger.info("Account not resolved", context={"phone": phone})
            return Result.failure(ErrorKind.ACCOUNT_NOT_FOUND)

        if national_id and (profile is None or profile.national_id != national_id):
            self.logger.info("National id mismatch", context={"identity_id": identity.id})
            return Result.failure(ErrorKind.ACCOUNT_NOT_FOUND)

        roles = list(required_roles or [])
        if roles and not identity.has_any_role(roles):
            self.logger.info("Role mismatch", context={"identity_id": identity.id,
                                                       "required": [role.value for role in roles]})
            return Result.failure(ErrorKind.ROLE_MISMATCH)

        return Result.success(identity)
