"""Exception hierarchy for schema migration."""

from typing import Optional


class DirectusMigrateError(RuntimeError):
    """Base class for all errors raised by directus_migrate."""


class ConfigError(DirectusMigrateError):
    """Connection settings are missing or malformed."""


class TransportError(DirectusMigrateError):
    """The request could not be built or sent (bad URL, DNS, refused connection)."""


class SerializationError(DirectusMigrateError):
    """A snapshot or diff could not be encoded as JSON."""


class MalformedEnvelopeError(DirectusMigrateError):
    """Response body is not JSON or has no usable top-level 'data' object."""


class RemoteRejectionError(DirectusMigrateError):
    """
    The instance answered with a status other than the one expected.
    Carries the status code and the raw response body for diagnostics.
    """

    def __init__(self, operation: str, status_code: int, body: str):
        self.operation = operation
        self.status_code = status_code
        self.body = body
        super().__init__(f"{operation} request failed with status {status_code}: {body}")


class MigrationError(DirectusMigrateError):
    """A migration step failed. The underlying error is kept as .cause and __cause__."""

    def __init__(self, step, message: str, cause: Optional[BaseException] = None):
        self.step = step
        self.cause = cause
        text = f"{message}: {cause}" if cause is not None else message
        super().__init__(text)
