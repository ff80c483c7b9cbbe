"""Portfolio aggregates - payment statistics and upcoming due dates"""

from collections import defaultdict
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from payment_tracker.domain.models import (
    Client,
    Payment,
    PaymentStats,
    PortfolioSummary,
    StatusKind,
    UpcomingPayment,
)
from payment_tracker.domain.status import classify, days_until, next_due_date
from payment_tracker.utils.date_utils import DateLike, month_key, to_date

UNKNOWN_CLIENT = "Unknown client"


def payment_stats(payments: List[Payment], reference_date: DateLike) -> PaymentStats:
    """
    Summarize payments by timeliness.

    - Counts per status, computed from the dates rather than any stored label
    - Average late days: mean over late payments only, 0.0 when none are late
    - On-time rate: share of on_time payments as a percentage
    - Month total: amount collected in the reference date's calendar month
    """
    ref_month = month_key(to_date(reference_date))

    counts = {kind: 0 for kind in StatusKind}
    late_days: List[int] = []
    total_amount = Decimal(0)
    month_total = Decimal(0)

    for payment in payments:
        status = classify(payment.expected_date, payment.actual_date)
        counts[status.status] += 1
        if status.status == StatusKind.LATE:
            late_days.append(status.days)

        total_amount += payment.amount
        if month_key(payment.actual_date) == ref_month:
            month_total += payment.amount

    total = len(payments)
    average_late = sum(late_days) / len(late_days) if late_days else 0.0
    on_time_rate = counts[StatusKind.ON_TIME] / total * 100 if total else 0.0

    return PaymentStats(
        total_count=total,
        late_count=counts[StatusKind.LATE],
        on_time_count=counts[StatusKind.ON_TIME],
        early_count=counts[StatusKind.EARLY],
        total_amount=total_amount,
        average_late_days=average_late,
        on_time_rate=on_time_rate,
        month_total=month_total,
    )


def upcoming_payments(
    clients: List[Client],
    reference_date: DateLike,
    horizon_days: int = 30,
    limit: Optional[int] = None,
) -> List[UpcomingPayment]:
    """
    Clients whose next due date is within horizon_days of reference_date
    (inclusive), soonest first. Ties keep the input order.
    """
    if horizon_days < 0:
        raise ValueError(f"horizon_days must be non-negative, got {horizon_days}")

    ref = to_date(reference_date)
    upcoming = []
    for client in clients:
        due = next_due_date(client.payment_day, ref)
        remaining = days_until(due, ref)
        if 0 <= remaining <= horizon_days:
            upcoming.append(UpcomingPayment(client=client, due_date=due, days_until=remaining))

    upcoming.sort(key=lambda u: u.days_until)
    return upcoming[:limit] if limit is not None else upcoming


def portfolio_summary(clients: List[Client]) -> PortfolioSummary:
    """Total principal lent and expected monthly collection"""
    return PortfolioSummary(
        client_count=len(clients),
        total_principal=sum((c.principal_amount for c in clients), Decimal(0)),
        monthly_expected=sum((c.monthly_amount for c in clients), Decimal(0)),
    )


def monthly_totals(payments: List[Payment]) -> List[Tuple[str, Decimal]]:
    """Collected amount per YYYY-MM of the actual payment date, oldest month first"""
    totals: Dict[str, Decimal] = defaultdict(Decimal)
    for payment in payments:
        totals[month_key(payment.actual_date)] += payment.amount
    return sorted(totals.items())


def client_totals(payments: List[Payment], limit: int = 10) -> List[Tuple[str, Decimal]]:
    """Top clients by total amount paid"""
    totals: Dict[str, Decimal] = defaultdict(Decimal)
    for payment in payments:
        totals[payment.client_name or UNKNOWN_CLIENT] += payment.amount

    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return ranked[:limit]
