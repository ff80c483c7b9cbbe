"""Pytest fixtures for testing"""

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from payment_tracker.api.dependencies import get_backend_client, get_reference_date
from payment_tracker.api.main import create_app
from payment_tracker.domain.exceptions import BackendAPIError, BackendRejectedError, NotFoundError
from payment_tracker.domain.models import Client, Payment

REFERENCE_DATE = date(2024, 3, 10)


class FakeBackend:
    """In-memory stand-in for the hosted backend client"""

    def __init__(self, clients: List[Client], payments: List[Payment]):
        self.clients = list(clients)
        self.payments = list(payments)
        self.fail = False
        self.reject: Optional[BackendRejectedError] = None
        self.written: List[Dict[str, Any]] = []

    def _check(self) -> None:
        if self.fail:
            raise BackendAPIError("Backend error: 500")
        if self.reject is not None:
            raise self.reject

    async def list_clients(self) -> List[Client]:
        self._check()
        return [
            replace(c, payment_count=sum(1 for p in self.payments if p.client_id == c.id))
            for c in self.clients
            if c.is_active
        ]

    async def create_client(self, data: Dict[str, Any]) -> Client:
        self._check()
        self.written.append(data)
        client = Client(
            id=f"c{len(self.clients) + 1}",
            name=data["name"],
            principal_amount=data["principal_amount"],
            monthly_percentage=data.get("monthly_percentage", Decimal("5.00")),
            payment_day=data["payment_day"],
            email=data.get("email"),
            phone=data.get("phone"),
        )
        self.clients.append(client)
        return client

    async def update_client(self, client_id: str, data: Dict[str, Any]) -> Client:
        self._check()
        for client in self.clients:
            if client.id == client_id:
                for key, value in data.items():
                    setattr(client, key, value)
                return client
        raise NotFoundError(f"Client {client_id} not found")

    async def deactivate_client(self, client_id: str) -> None:
        self._check()
        for client in self.clients:
            if client.id == client_id:
                client.is_active = False
                self.payments = [p for p in self.payments if p.client_id != client_id]
                return
        raise NotFoundError(f"Client {client_id} not found")

    async def list_payments(self) -> List[Payment]:
        self._check()
        return sorted(self.payments, key=lambda p: p.actual_date, reverse=True)

    async def create_payment(self, data: Dict[str, Any]) -> Payment:
        self._check()
        self.written.append(data)
        names = {c.id: c.name for c in self.clients}
        payment = Payment(id=f"p{len(self.payments) + 1}", client_name=names.get(data["client_id"]), **data)
        self.payments.append(payment)
        return payment

    async def update_payment(self, payment_id: str, data: Dict[str, Any]) -> Payment:
        self._check()
        for index, payment in enumerate(self.payments):
            if payment.id == payment_id:
                updated = Payment(id=payment_id, client_name=payment.client_name, **data)
                self.payments[index] = updated
                return updated
        raise NotFoundError(f"Payment {payment_id} not found")

    async def delete_payment(self, payment_id: str) -> None:
        self._check()
        remaining = [p for p in self.payments if p.id != payment_id]
        if len(remaining) == len(self.payments):
            raise NotFoundError(f"Payment {payment_id} not found")
        self.payments = remaining


@pytest.fixture
def sample_clients() -> List[Client]:
    """Three active borrowers with different due days"""
    return [
        Client(
            id="c1",
            name="Ana López",
            principal_amount=Decimal("10000.00"),
            monthly_percentage=Decimal("5.00"),
            payment_day=15,
            email="ana@example.com",
            phone="55512345",
        ),
        Client(
            id="c2",
            name="Carlos Pérez",
            principal_amount=Decimal("5000.00"),
            monthly_percentage=Decimal("6.00"),
            payment_day=31,
            phone="55598765",
        ),
        Client(
            id="c3",
            name="María Gómez",
            principal_amount=Decimal("2500.00"),
            payment_day=5,
            email="maria@example.com",
        ),
    ]


@pytest.fixture
def sample_payments() -> List[Payment]:
    """Payment history: one late, two on time, one early"""
    return [
        Payment("p1", "c1", date(2024, 1, 15), date(2024, 1, 15), Decimal("500.00"), None, "Ana López"),
        Payment("p2", "c1", date(2024, 2, 15), date(2024, 2, 21), Decimal("500.00"), "Paid in cash", "Ana López"),
        Payment("p3", "c2", date(2024, 2, 29), date(2024, 2, 26), Decimal("300.00"), None, "Carlos Pérez"),
        Payment("p4", "c3", date(2024, 3, 5), date(2024, 3, 5), Decimal("125.00"), "Transfer", "María Gómez"),
    ]


@pytest.fixture
def fake_backend(sample_clients: List[Client], sample_payments: List[Payment]) -> FakeBackend:
    return FakeBackend(sample_clients, sample_payments)


@pytest.fixture
def client(fake_backend: FakeBackend) -> TestClient:
    """Create FastAPI test client with fake backend and a fixed reference date"""
    app = create_app()

    app.dependency_overrides[get_backend_client] = lambda: fake_backend
    app.dependency_overrides[get_reference_date] = lambda: REFERENCE_DATE
    return TestClient(app)
