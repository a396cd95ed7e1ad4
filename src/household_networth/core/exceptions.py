"""Domain exceptions raised by services and mapped to HTTP by ErrorMapper."""


class AppError(Exception):
    """Base class for errors that carry a client-safe message."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthenticatedError(AppError):
    status_code = 401
    default_message = "Unauthorized"


class NeedsOnboardingError(AppError):
    """Known identity without a profile or household yet."""

    status_code = 404
    default_message = "Profile not found"


class ForbiddenError(AppError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid data"


class ConflictError(AppError):
    status_code = 409
    default_message = "Already exists"


class SnapshotTimeoutError(AppError):
    status_code = 500
    default_message = "Snapshot run timed out"


class UpstreamUnavailableError(Exception):
    """Price provider could not answer for a symbol.

    Never reaches the HTTP layer directly: the price cache turns it into a
    per-symbol QuoteError.
    """

    def __init__(self, symbol: str, reason: str) -> None:
        self.symbol = symbol
        self.reason = reason
        super().__init__(f"{symbol}: {reason}")
