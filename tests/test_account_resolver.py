# tests/test_account_resolver.py
"""Phone-to-identity resolution across stored phone forms."""

import pytest

from src.domain.authentication.models.identity import Role
from src.domain.authentication.services.account_resolver import AccountResolver
from src.shared.utilities.result import ErrorKind


class TestAccountResolver:
    @pytest.mark.asyncio
    async def test_resolves_through_profile_with_any_phone_form(self, identities, profiles, owner):
        resolver = AccountResolver(identities, profiles)

        for raw in ("51270700", "+97451270700", "97451270700"):
            result = await resolver.resolve(raw, [Role.OWNER])
            assert result.ok
            assert result.value.id == owner.id

    @pytest.mark.asyncio
    async def test_falls_back_to_identity_phone(self, identities, profiles):
        identity = identities.add(phone="97455554444", roles=[Role.MINISTRY_OFFICER])
        resolver = AccountResolver(identities, profiles)

        result = await resolver.resolve("55554444", [Role.MINISTRY_OFFICER])

        assert result.ok
        assert result.value.id == identity.id

    @pytest.mark.asyncio
    async def test_unknown_phone_is_not_found(self, identities, profiles):
        result = await AccountResolver(identities, profiles).resolve("51112222", [Role.OWNER])

        assert result.error is ErrorKind.ACCOUNT_NOT_FOUND

    @pytest.mark.asyncio
    async def test_inactive_identity_is_not_found(self, identities, profiles):
        identities.add(phone="97451112222", roles=[Role.OWNER], is_active=False)

        result = await AccountResolver(identities, profiles).resolve("51112222", [Role.OWNER])

        assert result.error is ErrorKind.ACCOUNT_NOT_FOUND

    @pytest.mark.asyncio
    async def test_missing_role_is_role_mismatch(self, identities, profiles, owner):
        result = await AccountResolver(identities, profiles).resolve("51270700", [Role.MINISTRY_OFFICER])

        assert result.error is ErrorKind.ROLE_MISMATCH

    @pytest.mark.asyncio
    async def test_any_of_the_required_roles_is_enough(self, identities, profiles, owner):
        result = await AccountResolver(identities, profiles).resolve(
            "51270700", [Role.VEHICLE_OWNER, Role.OWNER]
        )

        assert result.ok

    @pytest.mark.asyncio
    async def test_national_id_must_match_profile(self, identities, profiles, owner):
        resolver = AccountResolver(identities, profiles)

        assert (await resolver.resolve("51270700", [Role.OWNER], national_id="28412345678")).ok
        mismatch = await resolver.resolve("51270700", [Role.OWNER], national_id="28400000000")
        assert mismatch.error is ErrorKind.ACCOUNT_NOT_FOUND
