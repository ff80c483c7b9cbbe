"""GET /v1/dashboard - Portfolio overview"""

from datetime import date

from fastapi import APIRouter, Depends, Request

from payment_tracker.api.dependencies import get_backend_client, get_reference_date, get_request_id
from payment_tracker.api.errors import backend_failure
from payment_tracker.api.v1.schemas import (
    AmountBucket,
    DashboardResponse,
    PaymentSchema,
    PaymentStatsSchema,
    PortfolioSchema,
    UpcomingSchema,
)
from payment_tracker.config import settings
from payment_tracker.domain.aggregates import (
    client_totals,
    monthly_totals,
    payment_stats,
    portfolio_summary,
    upcoming_payments,
)
from payment_tracker.domain.exceptions import BackendAPIError
from payment_tracker.domain.status import classify
from payment_tracker.infrastructure.clients.backend import BackendClient

router = APIRouter()

RECENT_PAYMENTS = 5
TOP_CLIENTS = 10


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    request: Request,
    today: date = Depends(get_reference_date),
    backend: BackendClient = Depends(get_backend_client),
):
    """
    Collection overview for the reference date.

    Returns:
        Portfolio totals, payment timeliness stats, collections per month and
        per client, the latest payments and the clients due soonest
    """
    try:
        clients = await backend.list_clients()
        payments = await backend.list_payments()
    except BackendAPIError as e:
        raise backend_failure("dashboard", get_request_id(request), e)

    portfolio = portfolio_summary(clients)
    stats = payment_stats(payments, today)
    upcoming = upcoming_payments(clients, today, settings.upcoming_horizon_days, settings.upcoming_limit)

    return DashboardResponse(
        reference_date=today,
        currency=settings.currency,
        portfolio=PortfolioSchema(
            client_count=portfolio.client_count,
            total_principal=portfolio.total_principal,
            monthly_expected=portfolio.monthly_expected,
        ),
        stats=PaymentStatsSchema(
            total_count=stats.total_count,
            late_count=stats.late_count,
            on_time_count=stats.on_time_count,
            early_count=stats.early_count,
            total_amount=stats.total_amount,
            average_late_days=stats.average_late_days,
            on_time_rate=stats.on_time_rate,
            month_total=stats.month_total,
        ),
        monthly_totals=[AmountBucket(label=month, total=total) for month, total in monthly_totals(payments)],
        top_clients=[AmountBucket(label=name, total=total) for name, total in client_totals(payments, TOP_CLIENTS)],
        recent_payments=[
            PaymentSchema.from_domain(p, classify(p.expected_date, p.actual_date))
            for p in payments[:RECENT_PAYMENTS]
        ],
        upcoming_payments=[UpcomingSchema.from_domain(u) for u in upcoming],
    )
