# Path: src/api/v1/dependencies/permissions.py
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.domain.authentication.models.identity import Identity
from src.infrastructure.di.container import container
from src.shared.errors.domain.security import InvalidTokenError
from src.shared.logging.service import LoggingService
from src.shared.logging.config import LogConfig
from src.shared.security.permissions_loader import check_permissions
from src.shared.utilities.language import extract_language

logger = LoggingService(LogConfig())

bearer_scheme = HTTPBearer(auto_error=False)


async def get_optional_identity(
        request: Request,
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Identity]:
    """Identity behind the bearer token, or None for anonymous callers."""
    if credentials is None or not credentials.credentials:
        return None
    session_service = container.session_service()
    return await session_service.authenticate(credentials.credentials, extract_language(request))


async def get_current_identity(
        request: Request,
        identity: Optional[Identity] = Depends(get_optional_identity),
) -> Identity:
    if identity is None:
        raise InvalidTokenError(reason="missing", language=extract_language(request))
    return identity


def require_scope(required_scope: str):
    """
    Dependency factory gating an endpoint on a permission scope.

    Scopes come from the role map in permissions_map.yaml; the services still
    apply their own finer role rules on top.
    """

    async def dependency(request: Request, identity: Identity = Depends(get_current_identity)) -> Identity:
        roles = [role.value for role in identity.roles]
        logger.debug("Checking permissions", context={"identity_id": identity.id, "required_scope": required_scope})
        check_permissions(roles, required_scope, extract_language(request))
        return identity

    return dependency
