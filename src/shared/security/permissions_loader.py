# Path: src/shared/security/permissions_loader.py
from functools import lru_cache
from typing import Dict, Iterable, List

import yaml

from src.shared.config.settings import settings
from src.shared.logging.service import LoggingService
from src.shared.logging.config import LogConfig
from src.shared.errors.base import BaseError
from src.shared.errors.domain.security import UnauthorizedAccessError
from src.shared.utilities.types import LanguageCode
from src.shared.utilities.constants import HttpStatus

logger = LoggingService(LogConfig())

PERMISSIONS_PATH = settings.BASE_DIR / "src" / "shared" / "security" / "permissions_map.yaml"


@lru_cache()
def load_permissions_map() -> Dict[str, List[str]]:
    """Load role -> scopes map from YAML file."""
    if not PERMISSIONS_PATH.exists():
        logger.error("Permissions file not found", context={"path": str(PERMISSIONS_PATH)})
        raise BaseError(
            error_code="FILE_NOT_FOUND",
            message=f"Permissions file not found at: {PERMISSIONS_PATH}",
            status_code=HttpStatus.INTERNAL_SERVER_ERROR.value,
            trace_id=logger.tracer.get_trace_id(),
            details={"path": str(PERMISSIONS_PATH)},
            language="en"
        )

    try:
        with PERMISSIONS_PATH.open("r", encoding="utf-8") as f:
            permissions = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error("Failed to parse permissions map", context={"path": str(PERMISSIONS_PATH), "error": str(e)})
        raise BaseError(
            error_code="INVALID_PERMISSIONS_YAML",
            message=f"Failed to parse permissions YAML: {str(e)}",
            status_code=HttpStatus.INTERNAL_SERVER_ERROR.value,
            trace_id=logger.tracer.get_trace_id(),
            details={"path": str(PERMISSIONS_PATH), "error": str(e)},
            language="en"
        )

    if not isinstance(permissions, dict):
        logger.error("Invalid permissions file format", context={"path": str(PERMISSIONS_PATH)})
        raise BaseError(
            error_code="INVALID_PERMISSIONS_FORMAT",
            message="Permissions file must contain a valid dictionary",
            status_code=HttpStatus.INTERNAL_SERVER_ERROR.value,
            trace_id=logger.tracer.get_trace_id(),
            details={"path": str(PERMISSIONS_PATH)},
            language="en"
        )
    logger.info("Permissions map loaded", context={"path": str(PERMISSIONS_PATH)})
    return permissions


def get_scopes_for_role(role: str) -> List[str]:
    """Get permission scopes for a role."""
    scopes = load_permissions_map().get(role, [])
    if not isinstance(scopes, list):
        logger.error("Scopes not in list format", context={"role": role})
        return []
    return scopes


def scopes_for_roles(roles: Iterable[str]) -> List[str]:
    """Union of scopes over all of an identity's roles, in stable order."""
    merged: List[str] = []
    for role in roles:
        for scope in get_scopes_for_role(role):
            if scope not in merged:
                merged.append(scope)
    return merged


def check_permissions(roles: Iterable[str], required_scope: str, language: LanguageCode = "en") -> None:
    """Raise UnauthorizedAccessError unless one of the roles grants the scope."""
    scopes = scopes_for_roles(roles)
    if "*" in scopes or required_scope in scopes:
        return

    logger.warning("Access denied", context={"roles": list(roles), "required_scope": required_scope})
    raise UnauthorizedAccessError(
        resource=required_scope,
        details={"required_scope": required_scope},
        language=language
    )
