"""Client endpoints - listing, upcoming due dates and maintenance"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from payment_tracker.api.dependencies import get_backend_client, get_reference_date, get_request_id
from payment_tracker.api.errors import backend_failure
from payment_tracker.api.v1.schemas import (
    ClientCreate,
    ClientListResponse,
    ClientSchema,
    ClientUpdate,
    PageMeta,
    UpcomingSchema,
)
from payment_tracker.config import settings
from payment_tracker.domain.aggregates import upcoming_payments
from payment_tracker.domain.exceptions import BackendAPIError, NotFoundError
from payment_tracker.domain.listing import CLIENT_SORT_FIELDS, filter_clients, paginate, sort_records
from payment_tracker.domain.status import next_due_date
from payment_tracker.infrastructure.clients.backend import BackendClient

router = APIRouter()


@router.get("/clients", response_model=ClientListResponse)
async def list_clients(
    request: Request,
    search: Optional[str] = Query(None, description="Match name, email or phone"),
    sort: str = Query("created_at", description=f"One of: {', '.join(CLIENT_SORT_FIELDS)}"),
    order: str = Query("desc", description="asc or desc"),
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.items_per_page, ge=1, le=100),
    today: date = Depends(get_reference_date),
    backend: BackendClient = Depends(get_backend_client),
):
    """Active clients with their monthly amount, next due date and payment count"""
    try:
        clients = await backend.list_clients()
    except BackendAPIError as e:
        raise backend_failure("list_clients", get_request_id(request), e)

    try:
        ordered = sort_records(filter_clients(clients, search), sort, order, CLIENT_SORT_FIELDS)
    except ValueError as e:
        logging.warning(f"Invalid client listing request: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=422, detail=str(e))

    result = paginate(ordered, page, per_page)

    return ClientListResponse(
        clients=[ClientSchema.from_domain(c, next_due_date(c.payment_day, today)) for c in result.items],
        pagination=PageMeta.from_page(result),
    )


@router.get("/clients/upcoming", response_model=list[UpcomingSchema])
async def list_upcoming_payments(
    request: Request,
    horizon_days: int = Query(settings.upcoming_horizon_days, ge=0, le=366),
    limit: Optional[int] = Query(None, ge=1),
    today: date = Depends(get_reference_date),
    backend: BackendClient = Depends(get_backend_client),
):
    """Clients due within the next horizon_days, soonest first"""
    try:
        clients = await backend.list_clients()
    except BackendAPIError as e:
        raise backend_failure("list_clients", get_request_id(request), e)

    return [UpcomingSchema.from_domain(u) for u in upcoming_payments(clients, today, horizon_days, limit)]


@router.post("/clients", response_model=ClientSchema, status_code=201)
async def create_client(
    request_body: ClientCreate,
    request: Request,
    today: date = Depends(get_reference_date),
    backend: BackendClient = Depends(get_backend_client),
):
    """Register a client; the monthly rate defaults to the configured percentage"""
    request_id = get_request_id(request)
    try:
        client = await backend.create_client(request_body.model_dump(exclude_none=True))
    except BackendAPIError as e:
        raise backend_failure("create_client", request_id, e)

    logging.info("Client created", extra={"request_id": request_id, "client_id": client.id})
    return ClientSchema.from_domain(client, next_due_date(client.payment_day, today))


@router.patch("/clients/{client_id}", response_model=ClientSchema)
async def update_client(
    client_id: str,
    request_body: ClientUpdate,
    request: Request,
    today: date = Depends(get_reference_date),
    backend: BackendClient = Depends(get_backend_client),
):
    """Update the given client fields"""
    changes = request_body.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=422, detail="No fields to update")

    try:
        client = await backend.update_client(client_id, changes)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except BackendAPIError as e:
        raise backend_failure("update_client", get_request_id(request), e)

    return ClientSchema.from_domain(client, next_due_date(client.payment_day, today))


@router.delete("/clients/{client_id}", status_code=204)
async def delete_client(
    client_id: str,
    request: Request,
    backend: BackendClient = Depends(get_backend_client),
):
    """Remove the client's payments and deactivate the client"""
    request_id = get_request_id(request)
    try:
        await backend.deactivate_client(client_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except BackendAPIError as e:
        raise backend_failure("deactivate_client", request_id, e)

    logging.info("Client deactivated", extra={"request_id": request_id, "client_id": client_id})
