# Path: src/domain/identity/services/identity_admin_service.py
from typing import List, Optional

from pymongo.errors import DuplicateKeyError

from src.domain.authentication.models.identity import Identity, Profile, Role
from src.domain.identity.models.identity_admin import ProvisionIdentityInput
from src.infrastructure.storage.nosql.repositories.identity_repository import IdentityRepository, ProfileRepository
from src.shared.base_service.base_service import BaseService
from src.shared.errors.domain.identity import IdentityConflictError, IdentityNotFoundError
from src.shared.errors.domain.security import UnauthorizedAccessError
from src.shared.errors.mapping import raise_for_result
from src.shared.i18n.messages import get_message
from src.shared.utilities.phone import normalize_phone, phone_variants
from src.shared.utilities.types import LanguageCode


class IdentityAdminService(BaseService):
    """SuperAdmin tooling: provision identities, toggle activation, replace roles."""

    def __init__(self, identity_repo: IdentityRepository, profile_repo: ProfileRepository):
        super().__init__()
        self.identity_repo = identity_repo
        self.profile_repo = profile_repo

    @staticmethod
    def _require_super_admin(actor: Identity, resource: str, language: LanguageCode) -> None:
        if Role.SUPER_ADMIN not in actor.roles:
            raise UnauthorizedAccessError(resource=resource, language=language)

    async def _ensure_unique(self, phone_raw: str, email: Optional[str], national_id: Optional[str],
                             language: LanguageCode) -> None:
        variants = phone_variants(phone_raw)
        if await self.profile_repo.find_by_phone_variants(variants) or await self.identity_repo.find_by_phone(variants):
            raise IdentityConflictError(field="phone", language=language)
        if email and await self.profile_repo.find_by_email(email):
            raise IdentityConflictError(field="email", language=language)
        if national_id and await self.profile_repo.find_by_national_id(national_id):
            raise IdentityConflictError(field="national_id", language=language)

    async def create_identity(self, data: ProvisionIdentityInput, created_by: str,
                              language: LanguageCode = "en") -> Identity:
        """Write identity and profile after uniqueness checks; used by provisioning and the startup seed."""
        normalized = normalize_phone(data.phone)
        raise_for_result(normalized, language)
        phone = normalized.value.prefixed
        await self._ensure_unique(data.phone, data.email, data.national_id, language)

        try:
            identity_id = await self.identity_repo.create(phone=phone, roles=data.roles, username=data.username)
        except DuplicateKeyError:
            raise IdentityConflictError(field="phone", language=language)
        try:
            await self.profile_repo.create(Profile(
                identity_id=identity_id,
                name=data.name,
                phone=phone,
                email=data.email,
                national_id=data.national_id,
                created_by=created_by,
            ))
        except DuplicateKeyError:
            await self.identity_repo.remove(identity_id)
            raise IdentityConflictError(field="profile", language=language)

        self.logger.info("Identity provisioned", context={"identity_id": identity_id,
                                                          "roles": [role.value for role in data.roles],
                                                          "created_by": created_by})
        return Identity(id=identity_id, phone=phone, username=data.username, roles=data.roles)

    async def provision(self, actor: Identity, data: ProvisionIdentityInput, language: LanguageCode = "en") -> dict:
        context = {"entity_type": "identity", "action": "provision", "actor_id": actor.id}

        async def operation():
            self._require_super_admin(actor, "admin:identities", language)
            identity = await self.create_identity(data, created_by=actor.id, language=language)
            return {"message": get_message("identity.created", language), "identity": identity.model_dump(mode="json")}

        return await self.execute(operation, context, language)

    async def list_identities(self, actor: Identity, language: LanguageCode = "en") -> dict:
        """Every identity with its roles, activation flag and profile name."""
        context = {"entity_type": "identity", "action": "list", "actor_id": actor.id}

        async def operation():
            self._require_super_admin(actor, "admin:identities", language)
            identities = await self.identity_repo.list_all()
            profiles = await self.profile_repo.get_by_identities([identity.id for identity in identities])
            names = {profile.identity_id: profile.name for profile in profiles}
            items = []
            for identity in identities:
                item = identity.model_dump(mode="json", include={"id", "phone", "username", "roles", "is_active"})
                item["name"] = names.get(identity.id)
                items.append(item)
            return {"message": get_message("identity.listed", language), "items": items, "total": len(items)}

        return await self.execute(operation, context, language)

    async def set_active(self, actor: Identity, identity_id: str, is_active: bool,
                         language: LanguageCode = "en") -> dict:
        """Activate or deactivate; identities are never deleted."""
        context = {"entity_type": "identity", "entity_id": identity_id, "action": "set_active", "actor_id": actor.id}

        async def operation():
            self._require_super_admin(actor, "admin:identities", language)
            if not await self.identity_repo.set_active(identity_id, is_active):
                raise IdentityNotFoundError(identity_id=identity_id, language=language)
            await self.profile_repo.set_active(identity_id, is_active, updated_by=actor.id)
            self.logger.info("Identity activation changed", context={"identity_id": identity_id,
                                                                     "is_active": is_active})
            key = "identity.activated" if is_active else "identity.deactivated"
            return {"message": get_message(key, language), "identity_id": identity_id, "is_active": is_active}

        return await self.execute(operation, context, language)

    async def replace_roles(self, actor: Identity, identity_id: str, roles: List[Role],
                            language: LanguageCode = "en") -> dict:
        context = {"entity_type": "identity", "entity_id": identity_id, "action": "replace_roles", "actor_id": actor.id}

        async def operation():
            self._require_super_admin(actor, "admin:identities", language)
            unique_roles = list(dict.fromkeys(roles))
            if not await self.identity_repo.set_roles(identity_id, unique_roles):
                raise IdentityNotFoundError(identity_id=identity_id, language=language)
            self.logger.info("Identity roles replaced", context={"identity_id": identity_id,
                                                                 "roles": [role.value for role in unique_roles]})
            return {"message": get_message("identity.roles_updated", language), "identity_id": identity_id,
                    "roles": [role.value for role in unique_roles]}

        return await self.execute(operation, context, language)
