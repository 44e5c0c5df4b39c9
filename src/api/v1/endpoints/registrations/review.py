# Path: src/api/v1/endpoints/registrations/review.py
from typing import Optional

from fastapi import APIRouter, Depends

from src.api.v1.dependencies.permissions import get_current_identity, require_scope
from src.api.v1.dependencies.request_context import RequestContext, get_request_context
from src.domain.authentication.models.identity import Identity
from src.domain.registration.models.registration import ApproveInput, RejectInput
from src.infrastructure.di.container import container
from src.shared.config.settings import settings
from src.shared.errors.response import ErrorResponse
from src.shared.models.responses.standard_response import StandardResponse

router = APIRouter(prefix="/api/v1/registrations", tags=[settings.REGISTRATION_TAG])

REVIEW_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Rejection reason missing"},
    403: {"model": ErrorResponse, "description": "Role may not perform this action"},
    404: {"model": ErrorResponse, "description": "Registration not found"},
    409: {"model": ErrorResponse, "description": "Hidden record, disallowed status or concurrent update"},
}


@router.post("/{registration_id}/verify", response_model=StandardResponse, responses=REVIEW_ERROR_RESPONSES,
             summary="Move a pending registration under review")
async def verify_endpoint(
        registration_id: str,
        identity: Identity = Depends(require_scope("verify:registrations")),
        ctx: RequestContext = Depends(get_request_context),
) -> StandardResponse:
    result = await container.review_service().verify(registration_id, identity, ctx.language)
    return StandardResponse.from_result(result)


@router.post("/{registration_id}/approve", response_model=StandardResponse, responses=REVIEW_ERROR_RESPONSES,
             summary="Approve a registration and issue its reference token")
async def approve_endpoint(
        registration_id: str,
        data: Optional[ApproveInput] = None,
        identity: Identity = Depends(require_scope("approve:registrations")),
        ctx: RequestContext = Depends(get_request_context),
) -> StandardResponse:
    result = await container.review_service().approve(registration_id, identity, data.comment if data else None,
                                                     ctx.language)
    return StandardResponse.from_result(result)


@router.post("/{registration_id}/reject", response_model=StandardResponse, responses=REVIEW_ERROR_RESPONSES,
             summary="Reject a registration with a reason")
async def reject_endpoint(
        registration_id: str,
        data: RejectInput,
        identity: Identity = Depends(require_scope("reject:registrations")),
        ctx: RequestContext = Depends(get_request_context),
) -> StandardResponse:
    result = await container.review_service().reject(registration_id, identity, data.reason, ctx.language)
    return StandardResponse.from_result(result)


# Hide/unhide are gated by the service's SuperAdmin rule
@router.post("/{registration_id}/hide", response_model=StandardResponse, responses=REVIEW_ERROR_RESPONSES,
             summary="Hide a registration")
async def hide_endpoint(
        registration_id: str,
        identity: Identity = Depends(get_current_identity),
        ctx: RequestContext = Depends(get_request_context),
) -> StandardResponse:
    result = await container.review_service().hide(registration_id, identity, ctx.language)
    return StandardResponse.from_result(result)


@router.post("/{registration_id}/unhide", response_model=StandardResponse, responses=REVIEW_ERROR_RESPONSES,
             summary="Restore a hidden registration to its previous status")
async def unhide_endpoint(
        registration_id: str,
        identity: Identity = Depends(get_current_identity),
        ctx: RequestContext = Depends(get_request_context),
) -> StandardResponse:
    result = await container.review_service().unhide(registration_id, identity, ctx.language)
    return StandardResponse.from_result(result)


@router.post("/backfill-tokens", response_model=StandardResponse, responses=REVIEW_ERROR_RESPONSES,
             summary="Generate public tokens for registrations missing one")
async def backfill_tokens_endpoint(
        identity: Identity = Depends(require_scope("backfill:registrations")),
        ctx: RequestContext = Depends(get_request_context),
) -> StandardResponse:
    result = await container.review_service().backfill_unique_tokens(identity, ctx.language)
    return StandardResponse.from_result(result)
