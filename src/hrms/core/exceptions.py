class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400
    code = "DOMAIN_ERROR"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"


class NotFoundError(DomainError):
    """Raised when the requested entity does not exist."""

    status_code = 404
    code = "NOT_FOUND"


class ConflictError(DomainError):
    """Raised when a write collides with existing state."""

    code = "CONFLICT"


class AlreadyClockedInError(ConflictError):
    code = "ALREADY_CLOCKED_IN"


class NoOpenClockInError(ConflictError):
    code = "NO_OPEN_CLOCK_IN"


class OverlappingLeaveError(ConflictError):
    code = "OVERLAPPING_LEAVE"


class AlreadyDecidedError(ConflictError):
    code = "ALREADY_DECIDED"


class DuplicatePayrollError(ConflictError):
    code = "DUPLICATE_PAYROLL"


class LockTimeoutError(ConflictError):
    code = "LOCK_TIMEOUT"


class AuthenticationError(DomainError):
    """Raised when credentials or tokens are missing or invalid."""

    status_code = 401
    code = "UNAUTHENTICATED"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403
    code = "FORBIDDEN"
