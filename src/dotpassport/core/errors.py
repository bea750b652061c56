"""Exception types raised by the client and widgets."""

from typing import Any, Optional


class DotPassportError(Exception):
    """Failed request against the DotPassport API.

    ``status_code`` is None when no response was received (offline, DNS,
    connection reset). Otherwise it carries the HTTP status and ``response``
    holds the decoded body (or raw text when the body is not JSON).
    """

    def __init__(self, message: str, status_code: Optional[int] = None, response: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response = response

    @property
    def is_transport_error(self) -> bool:
        return self.status_code is None

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429

    def __repr__(self) -> str:
        return f"DotPassportError({self.message!r}, status_code={self.status_code!r})"


class RequestCancelled(Exception):
    """A request was aborted through its cancellation signal.

    Not a DotPassportError: widgets treat it as a non-event.
    """


class ConfigurationError(ValueError):
    """Invalid client or widget configuration (missing key, bad container)."""


class WidgetNotMountedError(RuntimeError):
    """Operation requires a mounted widget."""
