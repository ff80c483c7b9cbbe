"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidDate(DomainException):
    """Value cannot be interpreted as a calendar date"""

    pass


class InvalidDay(DomainException):
    """Recurring payment day is outside 1-31"""

    pass


class BackendAPIError(DomainException):
    """Hosted backend returned an error or is unavailable"""

    pass


class BackendRejectedError(BackendAPIError):
    """Hosted backend refused the submitted data (constraint violation)"""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(DomainException):
    """Requested client or payment does not exist"""

    pass
