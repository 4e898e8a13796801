"""
Metis Error Kinds

Every failure this client surfaces is one of these.
Callers show the message; no error codes beyond the class.
"""


class MetisError(Exception):
    """Base class for Metis gateway client failures."""
    pass


class MalformedInput(MetisError):
    """Caller input could not be parsed (invalid JSON, bad header list, bad number)."""
    pass


class MissingRequiredField(MetisError):
    """A required value was empty, either in caller input or in a gateway response."""
    pass


class UpstreamFailure(MetisError):
    """Transport-level failure talking to the Metis gateway."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)
