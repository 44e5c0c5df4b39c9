# Path: src/api/v1/endpoints/registrations/listing.py
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query

from src.api.v1.dependencies.permissions import get_optional_identity, require_scope
from src.api.v1.dependencies.request_context import RequestContext, get_request_context
from src.domain.authentication.models.identity import Identity
from src.domain.registration.models.registration import VehicleType
from src.infrastructure.di.container import container
from src.shared.config.settings import settings
from src.shared.errors.response import ErrorResponse
from src.shared.models.responses.standard_response import StandardResponse

router = APIRouter(prefix="/api/v1/registrations", tags=[settings.REGISTRATION_TAG])

SortKey = Literal["date", "owner", "driver", "phone", "status", "token"]


@router.get(
    "",
    response_model=StandardResponse,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
    summary="List registrations visible to the caller",
)
async def list_registrations_endpoint(
        vehicle_type: Optional[VehicleType] = Query(default=None, alias="type"),
        search: Optional[str] = Query(default=None, max_length=100),
        sort: SortKey = Query(default="date"),
        order: Literal["asc", "desc"] = Query(default="desc"),
        page: int = Query(default=1, ge=1),
        page_size: int = Query(default=settings.REGISTRATION_PAGE_SIZE, ge=1, le=200),
        identity: Identity = Depends(require_scope("read:registrations")),
        ctx: RequestContext = Depends(get_request_context),
) -> StandardResponse:
    result = await container.review_service().list_registrations(
        identity,
        vehicle_type=vehicle_type,
        search=search,
        sort=sort,
        descending=order == "desc",
        page=page,
        page_size=page_size,
        language=ctx.language,
    )
    return StandardResponse.from_result(result)


@router.get(
    "/dashboard",
    response_model=StandardResponse,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
    summary="Today's and total counts plus the latest submissions",
)
async def dashboard_endpoint(
        identity: Identity = Depends(require_scope("read:registrations")),
        ctx: RequestContext = Depends(get_request_context),
) -> StandardResponse:
    result = await container.review_service().dashboard(identity, ctx.language)
    return StandardResponse.from_result(result)


@router.get(
    "/public/{unique_token}",
    response_model=StandardResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Look up a registration by its public token",
)
async def public_lookup_endpoint(
        unique_token: str,
        viewer: Optional[Identity] = Depends(get_optional_identity),
        ctx: RequestContext = Depends(get_request_context),
) -> StandardResponse:
    result = await container.review_service().get_by_unique_token(unique_token, viewer, ctx.language)
    return StandardResponse.from_result(result)


@router.get(
    "/{registration_id}",
    response_model=StandardResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Registration details",
)
async def registration_details_endpoint(
        registration_id: str,
        identity: Identity = Depends(require_scope("read:registrations")),
        ctx: RequestContext = Depends(get_request_context),
) -> StandardResponse:
    result = await container.review_service().get_registration(registration_id, identity, ctx.language)
    return StandardResponse.from_result(result)
