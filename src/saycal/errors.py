"""Error types raised by SayCal services and adapters.

A provider saying "this is not food" is not an error: it is a
``NutritionFailure`` value. The exceptions here cover everything that keeps
a well-formed answer from reaching the caller.
"""


class SayCalError(Exception):
    """Base class for SayCal errors."""

    kind = "error"


class ProviderTransportError(SayCalError):
    """Request to an upstream provider failed (HTTP status, network, timeout)."""

    kind = "transport"

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.body = body


class SchemaViolationError(SayCalError):
    """Upstream response does not match the fixed response contract."""

    kind = "schema_violation"


class AudioDecodeError(SayCalError):
    """Audio payload could not be decoded from base64."""

    kind = "decode"


class ProfileValidationError(SayCalError):
    """User profile values are inconsistent."""

    kind = "profile_validation"
