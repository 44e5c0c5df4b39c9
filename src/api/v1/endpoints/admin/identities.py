# Path: src/api/v1/endpoints/admin/identities.py
from fastapi import APIRouter, Depends, status

from src.api.v1.dependencies.permissions import get_current_identity
from src.api.v1.dependencies.request_context import RequestContext, get_request_context
from src.domain.authentication.models.identity import Identity
from src.domain.identity.models.identity_admin import ProvisionIdentityInput, ReplaceRolesInput, SetActiveInput
from src.infrastructure.di.container import container
from src.shared.config.settings import settings
from src.shared.errors.response import ErrorResponse
from src.shared.models.responses.standard_response import StandardResponse

router = APIRouter(prefix="/api/v1/admin/identities", tags=[settings.ADMIN_TAG])

ADMIN_ERROR_RESPONSES = {
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse, "description": "SuperAdmin only"},
    404: {"model": ErrorResponse, "description": "Identity not found"},
    409: {"model": ErrorResponse, "description": "Phone, email or national id already used"},
}


@router.get("", response_model=StandardResponse, responses=ADMIN_ERROR_RESPONSES,
            summary="List identities with their roles")
async def list_identities_endpoint(
        actor: Identity = Depends(get_current_identity),
        ctx: RequestContext = Depends(get_request_context),
) -> StandardResponse:
    result = await container.identity_admin_service().list_identities(actor, ctx.language)
    return StandardResponse.from_result(result)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=StandardResponse,
             responses=ADMIN_ERROR_RESPONSES, summary="Provision an identity with roles and profile")
async def provision_identity_endpoint(
        data: ProvisionIdentityInput,
        actor: Identity = Depends(get_current_identity),
        ctx: RequestContext = Depends(get_request_context),
) -> StandardResponse:
    result = await container.identity_admin_service().provision(actor, data, ctx.language)
    return StandardResponse.from_result(result, code=status.HTTP_201_CREATED)


@router.patch("/{identity_id}/active", response_model=StandardResponse, responses=ADMIN_ERROR_RESPONSES,
              summary="Activate or deactivate an identity")
async def set_active_endpoint(
        identity_id: str,
        data: SetActiveInput,
        actor: Identity = Depends(get_current_identity),
        ctx: RequestContext = Depends(get_request_context),
) -> StandardResponse:
    result = await container.identity_admin_service().set_active(actor, identity_id, data.is_active, ctx.language)
    return StandardResponse.from_result(result)


@router.put("/{identity_id}/roles", response_model=StandardResponse, responses=ADMIN_ERROR_RESPONSES,
            summary="Replace an identity's roles")
async def replace_roles_endpoint(
        identity_id: str,
        data: ReplaceRolesInput,
        actor: Identity = Depends(get_current_identity),
        ctx: RequestContext = Depends(get_request_context),
) -> StandardResponse:
    result = await container.identity_admin_service().replace_roles(actor, identity_id, data.roles, ctx.language)
    return StandardResponse.from_result(result)
