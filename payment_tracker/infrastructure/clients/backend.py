"""Hosted backend HTTP client for the clients and payments tables"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

import httpx

from payment_tracker.config import settings
from payment_tracker.domain.exceptions import BackendAPIError, BackendRejectedError, InvalidDay, NotFoundError
from payment_tracker.domain.models import Client, Payment, StatusKind
from payment_tracker.domain.status import classify, validate_payment_day

# Labels the payments table stores for each status
STORED_STATUS = {
    StatusKind.LATE: "late",
    StatusKind.ON_TIME: "ontime",
    StatusKind.EARLY: "early",
}

CLIENT_SELECT = "*,payments:payments(count)"
PAYMENT_SELECT = "*,clients:client_id(name)"

# Constraint violations caused by the submitted data
REJECTED_STATUS_CODES = (400, 409, 422)


def parse_client(row: Dict[str, Any]) -> Client:
    """Build a Client from a clients table row, with its embedded payment count"""
    try:
        created_at = row.get("created_at")
        counted = row.get("payments") or [{}]
        return Client(
            id=str(row["id"]),
            name=row["name"],
            principal_amount=Decimal(str(row["principal_amount"])),
            monthly_percentage=Decimal(str(row.get("monthly_percentage") or settings.default_monthly_percentage)),
            payment_day=validate_payment_day(int(row["payment_day"])),
            email=row.get("email"),
            phone=row.get("phone"),
            is_active=row.get("is_active", True),
            payment_count=int(counted[0].get("count", 0)),
            created_at=datetime.fromisoformat(created_at) if created_at else None,
        )
    except (KeyError, IndexError, AttributeError, ValueError, TypeError, InvalidOperation, InvalidDay) as e:
        raise BackendAPIError(f"Invalid client data from backend: {e}") from e


def parse_payment(row: Dict[str, Any]) -> Payment:
    """Build a Payment from a payments table row joined with its client"""
    try:
        joined = row.get("clients") or {}
        return Payment(
            id=str(row["id"]),
            client_id=str(row["client_id"]),
            expected_date=date.fromisoformat(row["expected_date"]),
            actual_date=date.fromisoformat(row["actual_date"]),
            amount=Decimal(str(row["amount"])),
            notes=row.get("notes"),
            client_name=joined.get("name"),
        )
    except (KeyError, ValueError, TypeError, InvalidOperation) as e:
        raise BackendAPIError(f"Invalid payment data from backend: {e}") from e


def _encode(data: Dict[str, Any]) -> Dict[str, Any]:
    """Make dates and decimals JSON-safe"""
    encoded = {}
    for key, value in data.items():
        if isinstance(value, date):
            value = value.isoformat()
        elif isinstance(value, Decimal):
            value = str(value)
        encoded[key] = value
    return encoded


def _with_status(data: Dict[str, Any]) -> Dict[str, Any]:
    """Attach the computed status columns to a payment row"""
    status = classify(data["expected_date"], data["actual_date"])
    return {**data, "status": STORED_STATUS[status.status], "days_difference": status.days}


def _error_message(response: httpx.Response) -> str:
    """Backend's own explanation of a rejected request"""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"Backend error: {response.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"Backend error: {response.status_code}"


class BackendClient:
    """Client for the hosted backend's table API"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        access_token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.backend_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.backend_api_key
        self.access_token = access_token or settings.backend_access_token or self.api_key
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token}",
        }

    async def _request(
        self,
        method: str,
        table: str,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        returning: bool = False,
    ) -> Any:
        """
        Call one table endpoint.

        Raises:
            BackendRejectedError: When the backend refuses the submitted data
            BackendAPIError: On timeout, other HTTP errors, or unreadable response
        """
        headers = self._headers()
        if returning:
            headers["Prefer"] = "return=representation"

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.request(
                    method,
                    f"{self.base_url}/rest/v1/{table}",
                    params=params,
                    json=json,
                    headers=headers,
                )
                response.raise_for_status()
                return response.json() if response.content else None

            except httpx.TimeoutException as e:
                raise BackendAPIError(f"Backend timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                code = e.response.status_code
                if code in REJECTED_STATUS_CODES:
                    raise BackendRejectedError(_error_message(e.response), code) from e
                raise BackendAPIError(f"Backend error: {code}") from e
            except httpx.RequestError as e:
                raise BackendAPIError(f"Backend unreachable: {e}") from e
            except ValueError as e:
                raise BackendAPIError(f"Invalid JSON from backend: {e}") from e

    # Clients

    async def list_clients(self) -> List[Client]:
        """Active clients, newest first"""
        rows = await self._request(
            "GET",
            "clients",
            params={"select": CLIENT_SELECT, "is_active": "eq.true", "order": "created_at.desc"},
        )
        return [parse_client(row) for row in rows or []]

    async def create_client(self, data: Dict[str, Any]) -> Client:
        row = {"monthly_percentage": settings.default_monthly_percentage, **data}
        if row["monthly_percentage"] is None:
            row["monthly_percentage"] = settings.default_monthly_percentage

        rows = await self._request(
            "POST",
            "clients",
            params={"select": CLIENT_SELECT},
            json=[_encode(row)],
            returning=True,
        )
        if not rows:
            raise BackendAPIError("Backend did not return the created client")
        return parse_client(rows[0])

    async def update_client(self, client_id: str, data: Dict[str, Any]) -> Client:
        rows = await self._request(
            "PATCH",
            "clients",
            params={"id": f"eq.{client_id}", "select": CLIENT_SELECT},
            json=_encode(data),
            returning=True,
        )
        if not rows:
            raise NotFoundError(f"Client {client_id} not found")
        return parse_client(rows[0])

    async def deactivate_client(self, client_id: str) -> None:
        """Delete the client's payments, then soft-delete the client"""
        await self._request("DELETE", "payments", params={"client_id": f"eq.{client_id}"})
        rows = await self._request(
            "PATCH",
            "clients",
            params={"id": f"eq.{client_id}"},
            json={"is_active": False},
            returning=True,
        )
        if not rows:
            raise NotFoundError(f"Client {client_id} not found")

    # Payments

    async def list_payments(self) -> List[Payment]:
        """All payments with client names, most recent actual date first"""
        rows = await self._request(
            "GET",
            "payments",
            params={"select": PAYMENT_SELECT, "order": "actual_date.desc"},
        )
        return [parse_payment(row) for row in rows or []]

    async def create_payment(self, data: Dict[str, Any]) -> Payment:
        rows = await self._request(
            "POST",
            "payments",
            params={"select": PAYMENT_SELECT},
            json=[_encode(_with_status(data))],
            returning=True,
        )
        if not rows:
            raise BackendAPIError("Backend did not return the created payment")
        return parse_payment(rows[0])

    async def update_payment(self, payment_id: str, data: Dict[str, Any]) -> Payment:
        rows = await self._request(
            "PATCH",
            "payments",
            params={"id": f"eq.{payment_id}", "select": PAYMENT_SELECT},
            json=_encode(_with_status(data)),
            returning=True,
        )
        if not rows:
            raise NotFoundError(f"Payment {payment_id} not found")
        return parse_payment(rows[0])

    async def delete_payment(self, payment_id: str) -> None:
        rows = await self._request(
            "DELETE",
            "payments",
            params={"id": f"eq.{payment_id}"},
            returning=True,
        )
        if not rows:
            raise NotFoundError(f"Payment {payment_id} not found")
