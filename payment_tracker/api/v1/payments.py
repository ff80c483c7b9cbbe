"""Payment endpoints - listing with computed status and recording payments"""

import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from payment_tracker.api.dependencies import get_backend_client, get_request_id
from payment_tracker.api.errors import backend_failure
from payment_tracker.api.v1.schemas import PageMeta, PaymentListResponse, PaymentSchema, PaymentWrite
from payment_tracker.config import settings
from payment_tracker.domain.exceptions import BackendAPIError, NotFoundError
from payment_tracker.domain.listing import PAYMENT_SORT_FIELDS, filter_payments, paginate, sort_records
from payment_tracker.domain.status import classify
from payment_tracker.infrastructure.clients.backend import BackendClient
from payment_tracker.infrastructure.observability.logging import log_payment_recorded
from payment_tracker.infrastructure.observability.metrics import record_payment

router = APIRouter()


@router.get("/payments", response_model=PaymentListResponse)
async def list_payments(
    request: Request,
    search: Optional[str] = Query(None, description="Match client name, notes or amount"),
    status: Optional[str] = Query(None, description="late, on_time, early or all"),
    client_id: Optional[str] = Query(None),
    sort: str = Query("actual_date", description=f"One of: {', '.join(PAYMENT_SORT_FIELDS)}"),
    order: str = Query("desc", description="asc or desc"),
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.payments_per_page, ge=1, le=100),
    backend: BackendClient = Depends(get_backend_client),
):
    """Payments, most recent first unless sorted otherwise, each with its late/on-time/early status"""
    try:
        payments = await backend.list_payments()
    except BackendAPIError as e:
        raise backend_failure("list_payments", get_request_id(request), e)

    try:
        filtered = filter_payments(payments, search, status, client_id)
        ordered = sort_records(filtered, sort, order, PAYMENT_SORT_FIELDS)
    except ValueError as e:
        logging.warning(f"Invalid payment listing request: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=422, detail=str(e))

    result = paginate(ordered, page, per_page)

    return PaymentListResponse(
        payments=[PaymentSchema.from_domain(p, classify(p.expected_date, p.actual_date)) for p in result.items],
        pagination=PageMeta.from_page(result),
    )


@router.post("/payments", response_model=PaymentSchema, status_code=201)
async def create_payment(
    request_body: PaymentWrite,
    request: Request,
    backend: BackendClient = Depends(get_backend_client),
):
    """
    Record a received payment.

    The status and day offset are computed from the expected and actual
    dates and stored with the payment.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        payment = await backend.create_payment(request_body.model_dump())
    except BackendAPIError as e:
        raise backend_failure("create_payment", request_id, e)

    status = classify(payment.expected_date, payment.actual_date)

    duration_ms = (time.time() - start_time) * 1000
    record_payment(status)
    log_payment_recorded(request_id, payment.client_id, status.status.value, status.days, duration_ms)

    return PaymentSchema.from_domain(payment, status)


@router.put("/payments/{payment_id}", response_model=PaymentSchema)
async def update_payment(
    payment_id: str,
    request_body: PaymentWrite,
    request: Request,
    backend: BackendClient = Depends(get_backend_client),
):
    """Replace a payment's details and recompute its status"""
    try:
        payment = await backend.update_payment(payment_id, request_body.model_dump())
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except BackendAPIError as e:
        raise backend_failure("update_payment", get_request_id(request), e)

    return PaymentSchema.from_domain(payment, classify(payment.expected_date, payment.actual_date))


@router.delete("/payments/{payment_id}", status_code=204)
async def delete_payment(
    payment_id: str,
    request: Request,
    backend: BackendClient = Depends(get_backend_client),
):
    request_id = get_request_id(request)
    try:
        await backend.delete_payment(payment_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except BackendAPIError as e:
        raise backend_failure("delete_payment", request_id, e)

    logging.info("Payment deleted", extra={"request_id": request_id, "payment_id": payment_id})
