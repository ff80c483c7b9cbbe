"""Search, filtering and pagination over in-memory client and payment lists"""

import math
from typing import Any, Iterable, List, Optional, Sequence, Tuple, TypeVar

from payment_tracker.domain.models import Client, Page, Payment, StatusKind
from payment_tracker.domain.status import classify

T = TypeVar("T")

ALL = "all"

CLIENT_SORT_FIELDS = (
    "created_at",
    "name",
    "principal_amount",
    "monthly_percentage",
    "payment_day",
    "payment_count",
)
PAYMENT_SORT_FIELDS = ("actual_date", "expected_date", "amount", "client_name")
SORT_ORDERS = ("asc", "desc")


def filter_clients(clients: List[Client], search: Optional[str] = None) -> List[Client]:
    """Match search term against name and email (case-insensitive) or phone"""
    if not search:
        return list(clients)

    term = search.lower()
    return [
        c
        for c in clients
        if term in c.name.lower()
        or (c.email and term in c.email.lower())
        or (c.phone and search in c.phone)
    ]


def filter_payments(
    payments: List[Payment],
    search: Optional[str] = None,
    status: Optional[str] = None,
    client_id: Optional[str] = None,
) -> List[Payment]:
    """
    Narrow payments by free-text search, computed status and client.

    Search matches client name or notes (case-insensitive) or the amount's
    string form. A status or client_id of None or "all" disables that filter.
    """
    filtered = list(payments)

    if search:
        term = search.lower()
        filtered = [
            p
            for p in filtered
            if (p.client_name and term in p.client_name.lower())
            or (p.notes and term in p.notes.lower())
            or term in str(p.amount)
        ]

    if status and status != ALL:
        wanted = StatusKind(status)
        filtered = [p for p in filtered if classify(p.expected_date, p.actual_date).status == wanted]

    if client_id and client_id != ALL:
        filtered = [p for p in filtered if p.client_id == client_id]

    return filtered


def _sort_key(value: Any) -> Tuple[bool, Any]:
    # Missing values after present ones ascending, before them descending
    if isinstance(value, str):
        value = value.lower()
    return (value is None, value)


def sort_records(items: Iterable[T], field: str, order: str, allowed: Sequence[str]) -> List[T]:
    """
    Order records by one allow-listed attribute.

    Raises:
        ValueError: If the field is not allowed or order is not asc/desc
    """
    if field not in allowed:
        raise ValueError(f"Cannot sort by {field!r}; choose one of {', '.join(allowed)}")
    if order not in SORT_ORDERS:
        raise ValueError(f"Sort order must be 'asc' or 'desc', got {order!r}")

    return sorted(items, key=lambda item: _sort_key(getattr(item, field)), reverse=order == "desc")


def page_window(current: int, total_pages: int, size: int = 5) -> List[int]:
    """Page numbers to offer around the current page, starting two before it"""
    start = max(1, current - 2)
    return [page for page in range(start, start + min(size, total_pages)) if page <= total_pages]


def paginate(items: Sequence[T], page: int = 1, per_page: int = 10) -> Page[T]:
    """Slice one 1-based page out of items; pages past the end are empty"""
    if per_page < 1:
        raise ValueError(f"per_page must be at least 1, got {per_page}")
    if page < 1:
        raise ValueError(f"page must be at least 1, got {page}")

    total_items = len(items)
    total_pages = math.ceil(total_items / per_page)
    start = (page - 1) * per_page

    return Page(
        items=list(items[start:start + per_page]),
        page=page,
        per_page=per_page,
        total_items=total_items,
        total_pages=total_pages,
        window=page_window(page, total_pages),
    )
