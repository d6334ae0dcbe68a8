"""Store lifecycle endpoints.

Create and delete only validate and enqueue; the actual work runs in the
background and its progress is visible through GET and the events feed.

Endpoint Summary:
    GET    /stores              - List non-deleted stores, newest first
    POST   /stores              - Request a new store (202)
    GET    /stores/{id}         - Store with its latest job
    DELETE /stores/{id}         - Request deletion (202)
    GET    /stores/{id}/events  - Audit trail
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from store_provisioner.app.api.http.deps import get_actor, get_orchestrator
from store_provisioner.app.api.http.schemas.stores import (
    ErrorResponse,
    EventListResponse,
    EventResponse,
    JobResponse,
    StoreCreatedResponse,
    StoreDeletedResponse,
    StoreDetailResponse,
    StoreListResponse,
    StoreResponse,
)
from store_provisioner.app.core.errors import StoreNotFoundError
from store_provisioner.app.core.models import StoreCreateRequest, StoreEngine, StoreStatus
from store_provisioner.app.core.provisioning import StoreOrchestrator

router = APIRouter(prefix="/stores", tags=["stores"])

_NOT_FOUND = {404: {"description": "Store not found", "model": ErrorResponse}}
_UNAVAILABLE = {"description": "Shutting down", "model": ErrorResponse}


@router.get(
    "",
    response_model=StoreListResponse,
    summary="List stores",
)
def list_stores(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    status_filter: StoreStatus | None = Query(default=None, alias="status"),
    engine: StoreEngine | None = Query(default=None),
    orchestrator: StoreOrchestrator = Depends(get_orchestrator),
) -> StoreListResponse:
    result = orchestrator.list_stores(
        page=page, limit=limit, status=status_filter, engine=engine
    )
    return StoreListResponse(
        stores=[StoreResponse.from_record(s) for s in result.stores],
        total=result.total,
        page=result.page,
        limit=result.limit,
    )


@router.post(
    "",
    response_model=StoreCreatedResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses={
        400: {"description": "Invalid request", "model": ErrorResponse},
        409: {"description": "Store name already in use", "model": ErrorResponse},
        422: {"description": "Engine not supported yet", "model": ErrorResponse},
        503: _UNAVAILABLE,
    },
    summary="Create a store",
)
async def create_store(
    request: StoreCreateRequest,
    actor: str | None = Depends(get_actor),
    orchestrator: StoreOrchestrator = Depends(get_orchestrator),
) -> StoreCreatedResponse:
    """Accept a store request. Provisioning continues in the background.

    The returned store is `pending`; poll `GET /stores/{id}` for progress.
    """
    store = await orchestrator.create(request, actor=actor)
    return StoreCreatedResponse(store=StoreResponse.from_record(store))


@router.get(
    "/{store_id}",
    response_model=StoreDetailResponse,
    responses=_NOT_FOUND,
    summary="Get a store",
)
def get_store(
    store_id: str,
    orchestrator: StoreOrchestrator = Depends(get_orchestrator),
) -> StoreDetailResponse:
    detail = orchestrator.get(store_id)
    if detail is None:
        raise StoreNotFoundError(store_id)

    return StoreDetailResponse(
        **StoreResponse.from_record(detail.store).model_dump(),
        latest_job=JobResponse.from_record(detail.latest_job) if detail.latest_job else None,
    )


@router.delete(
    "/{store_id}",
    response_model=StoreDeletedResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses={
        **_NOT_FOUND,
        409: {"description": "Store cannot be deleted now", "model": ErrorResponse},
        503: _UNAVAILABLE,
    },
    summary="Delete a store",
)
async def delete_store(
    store_id: str,
    orchestrator: StoreOrchestrator = Depends(get_orchestrator),
) -> StoreDeletedResponse:
    await orchestrator.delete(store_id)
    return StoreDeletedResponse()


@router.get(
    "/{store_id}/events",
    response_model=EventListResponse,
    responses=_NOT_FOUND,
    summary="Store audit trail",
)
def list_store_events(
    store_id: str,
    orchestrator: StoreOrchestrator = Depends(get_orchestrator),
) -> EventListResponse:
    return EventListResponse(
        events=[EventResponse.from_record(e) for e in orchestrator.events(store_id)]
    )
