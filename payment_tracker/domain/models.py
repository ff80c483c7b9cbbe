"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")


class StatusKind(str, Enum):
    """Timeliness of a payment relative to its due date"""

    LATE = "late"
    ON_TIME = "on_time"
    EARLY = "early"


@dataclass
class Client:
    """Borrower with a recurring monthly payment"""

    id: str
    name: str
    principal_amount: Decimal
    payment_day: int  # Day of month, 1-31
    monthly_percentage: Decimal = Decimal("5.00")
    email: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool = True
    payment_count: int = 0
    created_at: Optional[datetime] = None

    @property
    def monthly_amount(self) -> Decimal:
        """Expected monthly payment: principal times the monthly rate"""
        return self.principal_amount * self.monthly_percentage / Decimal(100)


@dataclass
class Payment:
    """Payment received from a client"""

    id: str
    client_id: str
    expected_date: date
    actual_date: date
    amount: Decimal
    notes: Optional[str] = None
    client_name: Optional[str] = None  # Joined from the clients table


@dataclass(frozen=True)
class PaymentStatus:
    """Classification of a payment plus the absolute day offset"""

    status: StatusKind
    days: int


@dataclass
class UpcomingPayment:
    """Client whose next due date falls inside the look-ahead horizon"""

    client: Client
    due_date: date
    days_until: int

    @property
    def expected_amount(self) -> Decimal:
        return self.client.monthly_amount


@dataclass
class PaymentStats:
    """Summary of a list of payments"""

    total_count: int
    late_count: int
    on_time_count: int
    early_count: int
    total_amount: Decimal
    average_late_days: float
    on_time_rate: float  # Percentage, 0-100
    month_total: Decimal


@dataclass
class PortfolioSummary:
    """Totals across active clients"""

    client_count: int
    total_principal: Decimal
    monthly_expected: Decimal


@dataclass
class Page(Generic[T]):
    """One page of an in-memory listing"""

    items: List[T]
    page: int
    per_page: int
    total_items: int
    total_pages: int
    window: List[int] = field(default_factory=list)

    @property
    def first_index(self) -> int:
        """1-based position of the first item on this page (0 when empty)"""
        if not self.items:
            return 0
        return (self.page - 1) * self.per_page + 1

    @property
    def last_index(self) -> int:
        return min(self.page * self.per_page, self.total_items) if self.items else 0
