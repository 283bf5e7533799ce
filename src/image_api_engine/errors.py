"""Exception types raised inside the engine.

The public operations catch these at the smallest unit of work and
degrade to empty results; they only escape from the leaf helpers.
"""


class EngineError(Exception):
    """Base class for all engine errors."""


class TransportError(EngineError):
    """An HTTP request failed or returned a non-2xx status."""

    def __init__(self, url: str, status: int | None = None, reason: str = ""):
        self.url = url
        self.status = status
        self.reason = reason
        detail = f"status {status}" if status is not None else reason or "network error"
        super().__init__(f"Request to {url} failed: {detail}")


class ConfigValidationError(EngineError):
    """A config document does not match the expected schema."""

    def __init__(self, source: str, errors: list[str]):
        self.source = source
        self.errors = errors
        super().__init__(f"Invalid API config {source}: {'; '.join(errors)}")


class ResponseParseError(EngineError):
    """A response body could not be decoded as expected."""


class ParameterValueError(EngineError, ValueError):
    """A user-supplied parameter value does not fit the parameter."""
