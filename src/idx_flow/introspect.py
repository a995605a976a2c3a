# introspect.py
# Transaction bootstrap: obtain the current raw document, from storage or
# from exactly one introspect round trip, and decompose it.

import logging
from typing import TYPE_CHECKING

from idx_flow.config import IDX_API_VERSION, validate_version_config
from idx_flow.errors import AuthApiError, is_raw_idx_response
from idx_flow.idx_state import IdxState, make_idx_state
from idx_flow.models import IntrospectOptions

if TYPE_CHECKING:
    from idx_flow.client import AuthClient

logger = logging.getLogger(__name__)

MEDIA_TYPE = "application/ion+json; okta-version={version}"


def introspect(client: "AuthClient", options: IntrospectOptions | None = None) -> IdxState:
    """
    Resume the stored exchange if there is one, else ask the server for it.

    A failed request whose body is itself an exchange document is decomposed
    like a success. Any other failure propagates unchanged.
    """
    options = options or IntrospectOptions()
    raw = client.storage.load()

    if raw:
        logger.debug("Resuming exchange from stored document")
    else:
        version = options.version or client.config.version or IDX_API_VERSION
        try:
            validate_version_config(version)
            media_type = MEDIA_TYPE.format(version=version)
            if options.state_handle:
                body = {"stateToken": options.state_handle}
            else:
                body = {"interactionHandle": options.interaction_handle}
            request = {
                "method": "POST",
                "url": f"{client.domain}/idp/idx/introspect",
                "headers": {"content-type": media_type, "accept": media_type},
                "args": body,
            }
            if options.with_credentials is not None:
                request["with_credentials"] = options.with_credentials
            raw = client.transport.request(**request)
        except AuthApiError as err:
            if not is_raw_idx_response(err.response_body):
                raise
            logger.info("Introspect returned an exchange document with status %s", err.status_code)
            raw = err.response_body

    return make_idx_state(client, raw, options.with_credentials)
