# backend/app/core/exceptions.py
"""
Exceptions raised by Sideout services.

Each DomainException carries its HTTP status, a stable machine-readable
``code`` and a ``details`` dict; main.py renders them as
``{"detail": {"message", "code", "details"}}``.
"""

from typing import Any, Dict, Optional

from fastapi import status


class DomainException(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_detail(self) -> Dict[str, Any]:
        return {"message": self.message, "code": self.code, "details": self.details}


class ValidationException(DomainException):
    """Malformed input the schema layer could not catch (bad dates, bad signatures)."""

    status_code = status.HTTP_400_BAD_REQUEST


class ForbiddenException(DomainException):
    """The caller is authenticated but not a party to the resource."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundException(DomainException):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """A well-formed request that booking policy rejects."""

    status_code = 422


class ServiceException(DomainException):
    """Something on our side failed; the request may succeed if retried."""

    def __init__(
        self,
        message: str = "An error occurred processing your request",
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class ExternalServiceException(ServiceException):
    """Stripe or Uploadthing refused or could not be reached."""

    status_code = status.HTTP_502_BAD_GATEWAY


class BookingConflictException(ConflictException):
    """The instructor or the student already has a live lesson overlapping the slot."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "This time slot conflicts with an existing lesson",
            code="BOOKING_CONFLICT",
            details=details,
        )


class InsufficientNoticeException(BusinessRuleException):
    def __init__(self, required_hours: int, provided_hours: float):
        super().__init__(
            message=f"Lessons must be booked at least {required_hours} hours in advance",
            code="INSUFFICIENT_NOTICE",
            details={"required_hours": required_hours, "provided_hours": round(provided_hours, 2)},
        )


class InvalidStatusTransitionException(BusinessRuleException):
    def __init__(self, current: str, target: str):
        super().__init__(
            message=f"Cannot change lesson from {current} to {target}",
            code="INVALID_STATUS_TRANSITION",
            details={"current_status": current, "target_status": target},
        )


class RepositoryException(Exception):
    """A database read or write failed below the service layer (served as 503)."""
