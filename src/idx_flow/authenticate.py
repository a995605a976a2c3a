# authenticate.py
# Sign-in flow: identify, pick an authenticator, answer its challenge,
# re-enroll an expired credential, or hand off to an external IdP.

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from idx_flow.flow import GENERIC_OPTIONS, run
from idx_flow.models import IdxTransaction
from idx_flow.remediators import (
    EnrollOrChallengeAuthenticator,
    Identify,
    RedirectIdp,
    ReEnrollAuthenticator,
    RemediatorRegistry,
    SelectAuthenticatorAuthenticate,
)

if TYPE_CHECKING:
    from idx_flow.client import AuthClient

FLOW = RemediatorRegistry(
    {
        "identify": Identify,
        "select-authenticator-authenticate": SelectAuthenticatorAuthenticate,
        "challenge-authenticator": EnrollOrChallengeAuthenticator,
        "reenroll-authenticator": ReEnrollAuthenticator,
        "redirect-idp": RedirectIdp,
    }
)

ALLOWED_NEXT_STEPS = (
    "challenge-authenticator",
    "reenroll-authenticator",
    "select-authenticator-authenticate",
    "redirect-idp",
)


def authentication_values(options: Mapping[str, Any]) -> dict[str, Any]:
    """Fold a bare password into `authenticators` so password steps match."""
    values = dict(options)
    authenticators = list(values.get("authenticators") or [])
    if values.get("password") and "password" not in authenticators:
        values["authenticators"] = ["password", *authenticators]
    return values


def authenticate(
    client: "AuthClient",
    options: Mapping[str, Any] | None = None,
    **kwargs: Any,
) -> IdxTransaction:
    """
    Authenticate with whatever values are at hand.

    Example:
        transaction = authenticate(client, username="ada", password="...",
                                   interaction_handle=handle)
        if transaction.status == IdxStatus.PENDING:
            ...  # prompt for transaction.next_step.inputs, then call again
    """
    values = authentication_values({**(options or {}), **kwargs})
    generic = {key: values.pop(key) for key in GENERIC_OPTIONS if key in values}
    return run(client, values, flow=FLOW, allowed_next_steps=ALLOWED_NEXT_STEPS, **generic)
