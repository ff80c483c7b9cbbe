"""Payment status classification and due date projection endpoints"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from payment_tracker.api.dependencies import get_reference_date
from payment_tracker.api.v1.schemas import ClassifyRequest, NextDueResponse, StatusSchema
from payment_tracker.domain.exceptions import InvalidDate, InvalidDay
from payment_tracker.domain.status import classify, days_until, next_due_date

router = APIRouter()


@router.post("/status/classify", response_model=StatusSchema)
def classify_payment(request_body: ClassifyRequest):
    """Classify a payment as late, on time or early relative to its due date"""
    status = classify(request_body.expected_date, request_body.actual_date)
    return StatusSchema.from_domain(status)


@router.get("/schedule/next-due", response_model=NextDueResponse)
def get_next_due_date(
    payment_day: int = Query(..., description="Recurring day of month (1-31)"),
    reference_date: Optional[date] = Query(None, description="Project from this date (default: today)"),
    today: date = Depends(get_reference_date),
):
    """
    Project the next due date for a recurring payment day.

    Days beyond the end of a month are clamped to its last day.
    """
    ref = reference_date or today
    try:
        due = next_due_date(payment_day, ref)
    except (InvalidDay, InvalidDate) as e:
        logging.warning(f"Rejected due date projection: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    return NextDueResponse(
        payment_day=payment_day,
        reference_date=ref,
        next_due_date=due,
        days_until=days_until(due, ref),
    )
