"""Dependency injection for FastAPI endpoints"""

from datetime import date

from fastapi import Request

from payment_tracker.infrastructure.clients.backend import BackendClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_backend_client() -> BackendClient:
    """Provide hosted backend client instance"""
    return BackendClient()


def get_reference_date() -> date:
    """Today's date, injected so date-dependent endpoints stay deterministic in tests"""
    return date.today()
