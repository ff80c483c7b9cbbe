"""Translation of domain failures into HTTP errors"""

import logging

from fastapi import HTTPException

from payment_tracker.domain.exceptions import BackendAPIError, BackendRejectedError
from payment_tracker.infrastructure.observability.metrics import backend_failures_counter


def backend_failure(operation: str, request_id: str, error: BackendAPIError) -> HTTPException:
    """
    Translate a hosted backend error.

    Rejected data is the caller's problem: 409 conflicts pass through, other
    rejections become 422, both with the backend's message. Anything else is
    an outage, counted and logged as 503.
    """
    if isinstance(error, BackendRejectedError):
        logging.warning(
            f"Backend rejected {operation}: {error}",
            extra={"request_id": request_id, "backend_status": error.status_code},
        )
        return HTTPException(status_code=409 if error.status_code == 409 else 422, detail=str(error))

    backend_failures_counter.labels(operation=operation).inc()
    logging.error(f"Backend error during {operation}: {error}", extra={"request_id": request_id})
    return HTTPException(status_code=503, detail="Backend service unavailable")
