"""
Error taxonomy shared by the API and the client library.

Only NetworkError is ever turned into a "queued offline" outcome, and only by
the submission coordinator.
"""
from typing import Iterable


class WellnessError(Exception):
    """Base class for every domain error."""

    kind = "wellness_error"


class ValidationError(WellnessError):
    """Malformed or incomplete input. Never retried, never queued."""

    kind = "validation_error"

    def __init__(self, message: str, missing: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.missing = list(missing)


class AuthError(WellnessError):
    """Missing, expired or invalid credential."""

    kind = "auth_error"


class NotFoundError(WellnessError):
    kind = "not_found"


class NetworkError(WellnessError):
    """Timeout, refused connection, DNS failure or unreachable gateway."""

    kind = "network_error"


class StorageError(WellnessError):
    """Local persistence medium failure."""

    kind = "storage_error"


class ServerError(WellnessError):
    """Unexpected server-side failure (5xx other than gateway errors)."""

    kind = "server_error"


class ConflictError(WellnessError):
    """The resource already exists (e.g. an email that is already registered)."""

    kind = "conflict"
