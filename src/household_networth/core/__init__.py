"""Cross-cutting pieces: domain exceptions, error mapping, ids and money helpers."""
from household_networth.core.error_mapper import (ErrorMapper,
                                                  install_exception_handlers)
from household_networth.core.exceptions import (AppError, ConflictError,
                                                ForbiddenError,
                                                NeedsOnboardingError,
                                                NotFoundError,
                                                SnapshotTimeoutError,
                                                UnauthenticatedError,
                                                UpstreamUnavailableError,
                                                ValidationError)
from household_networth.core.utils import (money, new_id, round2, utcnow,
                                           validate_id)

__all__ = [
    "AppError",
    "ConflictError",
    "ErrorMapper",
    "ForbiddenError",
    "NeedsOnboardingError",
    "NotFoundError",
    "SnapshotTimeoutError",
    "UnauthenticatedError",
    "UpstreamUnavailableError",
    "ValidationError",
    "install_exception_handlers",
    "money",
    "new_id",
    "round2",
    "utcnow",
    "validate_id",
]
