from typing import Any, Dict, Optional

from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RosterLocked(ServiceError):
    """Raised by any roster, event or application write once the college is final-approved."""

    def __init__(self, message: str = "Final approval is locked. No modifications allowed.") -> None:
        super().__init__(message, status.HTTP_403_FORBIDDEN)


# ----- Final approval -----

class FinalApprovalError(ServiceError):
    """
    Failure of the final-approval transaction. The transaction is always rolled back
    before one of these reaches a caller.

    kind: machine-readable error kind returned to clients.
    retryable: True only when repeating the same request can succeed without a state change.
    """

    kind = "UnexpectedFailure"
    retryable = False
    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message, status_code or self.default_status)
        self.request_id: Optional[str] = None
        self.state: Optional[str] = None

    def to_detail(self) -> Dict[str, Any]:
        detail: Dict[str, Any] = {
            "kind": self.kind,
            "message": self.message,
            "retryable": self.retryable,
        }
        if self.request_id:
            detail["request_id"] = self.request_id
        return detail


class Unauthorized(FinalApprovalError):
    kind = "Unauthorized"
    default_status = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Unauthorized: Only PRINCIPAL can perform final approval") -> None:
        super().__init__(message)


class CollegeNotFound(FinalApprovalError):
    kind = "CollegeNotFound"
    default_status = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "College not found") -> None:
        super().__init__(message)


class AlreadyApproved(FinalApprovalError):
    kind = "AlreadyApproved"
    default_status = status.HTTP_409_CONFLICT

    def __init__(self, message: str = "Final approval already submitted") -> None:
        super().__init__(message)


class NoEligibleParticipants(FinalApprovalError):
    kind = "NoEligibleParticipants"
    default_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "No approved students found for final approval") -> None:
        super().__init__(message)


class PoolExhausted(FinalApprovalError):
    kind = "PoolExhausted"
    default_status = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, needed: int, available: int) -> None:
        super().__init__("QR code pool exhausted. Cannot complete final approval.")
        self.needed = needed
        self.available = available

    def to_detail(self) -> Dict[str, Any]:
        detail = super().to_detail()
        detail["needed"] = self.needed
        detail["available"] = self.available
        return detail


class ConcurrentConflict(FinalApprovalError):
    kind = "ConcurrentConflict"
    retryable = True
    default_status = status.HTTP_409_CONFLICT

    def __init__(self, message: str = "Concurrent transaction conflict. Please retry.") -> None:
        super().__init__(message)


class ApprovalTimeout(FinalApprovalError):
    kind = "ApprovalTimeout"
    retryable = True
    default_status = status.HTTP_504_GATEWAY_TIMEOUT

    def __init__(
        self,
        message: str = (
            "Final approval timed out and may not have completed. "
            "Retry to confirm; an approved college answers AlreadyApproved."
        ),
    ) -> None:
        super().__init__(message)


class UnexpectedFailure(FinalApprovalError):
    kind = "UnexpectedFailure"

    def __init__(self, message: str = "Internal server error during final approval") -> None:
        super().__init__(message)
