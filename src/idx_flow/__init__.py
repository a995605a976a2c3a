# idx_flow
# Client-side remediation engine for server-driven IDX authentication flows.

from idx_flow.authenticate import authenticate
from idx_flow.client import AuthClient
from idx_flow.config import IdxConfig
from idx_flow.errors import AuthApiError, AuthSdkError, ConfigurationError, TransportError
from idx_flow.introspect import introspect
from idx_flow.models import IdxStatus, IdxTransaction, IntrospectOptions
from idx_flow.flow import run

__all__ = [
    "AuthApiError",
    "AuthClient",
    "AuthSdkError",
    "ConfigurationError",
    "IdxConfig",
    "IdxStatus",
    "IdxTransaction",
    "IntrospectOptions",
    "TransportError",
    "authenticate",
    "introspect",
    "run",
]
