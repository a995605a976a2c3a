# errors.py
# Exception hierarchy for the IDX engine.
#
# Only two kinds are ever raised to callers: configuration defects (fatal,
# never retried) and transport failures (propagated unchanged). A step that
# simply needs more input is not an error; it is transaction state.

from typing import Any


class AuthSdkError(Exception):
    """Base class for every error raised by idx_flow."""


class ConfigurationError(AuthSdkError):
    """Raised for integration defects: unknown step, missing input builder, bad version."""


class TransportError(AuthSdkError):
    """Raised when a request cannot be completed at the network level."""


class AuthApiError(TransportError):
    """Raised when the server answers with a non-2xx status."""

    def __init__(
        self,
        message: str,
        status_code: int,
        response_body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body
        self.headers = headers or {}


def is_raw_idx_response(obj: Any) -> bool:
    """True if `obj` looks like an exchange document rather than an error payload."""
    return isinstance(obj, dict) and bool(obj.get("version"))
