"""Pydantic schemas for API request/response validation"""

import re
from datetime import date
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, EmailStr, Field, field_validator

from payment_tracker.domain.models import Client, Page, Payment, PaymentStatus, StatusKind, UpcomingPayment

# Guatemalan numbers: optional 502 country code, then eight digits not starting with 0 or 1
PHONE_PATTERN = re.compile(r"^(\+?502)?[2-9]\d{7}$")


def normalize_phone(value: str) -> str:
    """Strip spaces and dashes, then require a Guatemalan phone number"""
    phone = re.sub(r"[\s-]", "", value)
    if not PHONE_PATTERN.match(phone):
        raise ValueError("Phone must be a Guatemalan number such as 5555-1234 or +502 5555 1234")
    return phone


Phone = Annotated[str, AfterValidator(normalize_phone)]


class ClassifyRequest(BaseModel):
    """Request body for POST /v1/status/classify"""

    expected_date: date
    actual_date: date


class StatusSchema(BaseModel):
    """Timeliness classification of a payment"""

    status: StatusKind
    days: int

    @classmethod
    def from_domain(cls, status: PaymentStatus) -> "StatusSchema":
        return cls(status=status.status, days=status.days)


class NextDueResponse(BaseModel):
    """Response for GET /v1/schedule/next-due"""

    payment_day: int
    reference_date: date
    next_due_date: date
    days_until: int


class ClientCreate(BaseModel):
    """Request body for POST /v1/clients"""

    name: str = Field(..., min_length=1)
    principal_amount: Decimal = Field(..., gt=0, description="Amount lent")
    monthly_percentage: Optional[Decimal] = Field(None, gt=0, description="Monthly rate in percent")
    payment_day: int = Field(..., ge=1, le=31, description="Recurring day of month")
    email: Optional[EmailStr] = None
    phone: Optional[Phone] = None


class ClientUpdate(BaseModel):
    """Request body for PATCH /v1/clients/{client_id}; null email or phone clears it"""

    name: Optional[str] = Field(None, min_length=1)
    principal_amount: Optional[Decimal] = Field(None, gt=0)
    monthly_percentage: Optional[Decimal] = Field(None, gt=0)
    payment_day: Optional[int] = Field(None, ge=1, le=31)
    email: Optional[EmailStr] = None
    phone: Optional[Phone] = None

    @field_validator("name", "principal_amount", "monthly_percentage", "payment_day", mode="before")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null; omit it to leave it unchanged")
        return value


class ClientSchema(BaseModel):
    """Client with its derived monthly amount and next due date"""

    id: str
    name: str
    principal_amount: Decimal
    monthly_percentage: Decimal
    monthly_amount: Decimal
    payment_day: int
    next_due_date: date
    payment_count: int = 0
    email: Optional[str] = None
    phone: Optional[str] = None

    @classmethod
    def from_domain(cls, client: Client, next_due_date: date) -> "ClientSchema":
        return cls(
            id=client.id,
            name=client.name,
            principal_amount=client.principal_amount,
            monthly_percentage=client.monthly_percentage,
            monthly_amount=client.monthly_amount,
            payment_day=client.payment_day,
            next_due_date=next_due_date,
            payment_count=client.payment_count,
            email=client.email,
            phone=client.phone,
        )


class UpcomingSchema(BaseModel):
    """Client payment falling inside the look-ahead horizon"""

    client_id: str
    client_name: str
    due_date: date
    days_until: int
    expected_amount: Decimal

    @classmethod
    def from_domain(cls, upcoming: UpcomingPayment) -> "UpcomingSchema":
        return cls(
            client_id=upcoming.client.id,
            client_name=upcoming.client.name,
            due_date=upcoming.due_date,
            days_until=upcoming.days_until,
            expected_amount=upcoming.expected_amount,
        )


class PaymentWrite(BaseModel):
    """Request body for POST /v1/payments and PUT /v1/payments/{payment_id}"""

    client_id: str = Field(..., min_length=1)
    expected_date: date
    actual_date: date
    amount: Decimal = Field(..., gt=0)
    notes: Optional[str] = None


class PaymentSchema(BaseModel):
    """Payment with its computed status"""

    id: str
    client_id: str
    client_name: Optional[str] = None
    expected_date: date
    actual_date: date
    amount: Decimal
    notes: Optional[str] = None
    status: StatusSchema

    @classmethod
    def from_domain(cls, payment: Payment, status: PaymentStatus) -> "PaymentSchema":
        return cls(
            id=payment.id,
            client_id=payment.client_id,
            client_name=payment.client_name,
            expected_date=payment.expected_date,
            actual_date=payment.actual_date,
            amount=payment.amount,
            notes=payment.notes,
            status=StatusSchema.from_domain(status),
        )


class PageMeta(BaseModel):
    """Pagination details for list responses"""

    page: int
    per_page: int
    total_items: int
    total_pages: int
    first_index: int
    last_index: int
    window: List[int]

    @classmethod
    def from_page(cls, page: Page) -> "PageMeta":
        return cls(
            page=page.page,
            per_page=page.per_page,
            total_items=page.total_items,
            total_pages=page.total_pages,
            first_index=page.first_index,
            last_index=page.last_index,
            window=page.window,
        )


class ClientListResponse(BaseModel):
    """Response for GET /v1/clients"""

    clients: List[ClientSchema]
    pagination: PageMeta


class PaymentListResponse(BaseModel):
    """Response for GET /v1/payments"""

    payments: List[PaymentSchema]
    pagination: PageMeta


class PaymentStatsSchema(BaseModel):
    """Timeliness summary of all payments"""

    total_count: int
    late_count: int
    on_time_count: int
    early_count: int
    total_amount: Decimal
    average_late_days: float
    on_time_rate: float
    month_total: Decimal


class PortfolioSchema(BaseModel):
    """Totals across active clients"""

    client_count: int
    total_principal: Decimal
    monthly_expected: Decimal


class AmountBucket(BaseModel):
    """Collected amount for one month or one client"""

    label: str
    total: Decimal


class DashboardResponse(BaseModel):
    """Response for GET /v1/dashboard"""

    reference_date: date
    currency: str = Field(..., description="Symbol amounts are displayed with")
    portfolio: PortfolioSchema
    stats: PaymentStatsSchema
    monthly_totals: List[AmountBucket]
    top_clients: List[AmountBucket]
    recent_payments: List[PaymentSchema]
    upcoming_payments: List[UpcomingSchema]
