# actions.py
# Bound actions. Every remediation and every top-level `rel` object in a
# document compiles into an IdxAction: a callable tied to one href/method,
# carrying the immutable params (the `stateHandle` resume token) it was
# constructed with.

import logging
from typing import TYPE_CHECKING, Any

from idx_flow.errors import AuthApiError, ConfigurationError, is_raw_idx_response

if TYPE_CHECKING:
    from idx_flow.client import AuthClient
    from idx_flow.idx_state import IdxState

logger = logging.getLogger(__name__)

DEVICE_CHALLENGE_HEADER = 'Oktadevicejwt realm="Okta Device"'


def divide_action_params(action_definition: dict) -> tuple[dict, list[dict], dict]:
    """
    Split an action's fields into (defaults, needed, immutable).

    `mutable: false` fields are immutable and always sent as-is. Every other
    field is needed from the caller; if it already carries a value that value
    is the default.
    """
    defaults: dict[str, Any] = {}
    needed: list[dict] = []
    immutable: dict[str, Any] = {}

    fields = action_definition.get("value")
    if not isinstance(fields, list):
        return defaults, needed, immutable

    for field in fields:
        if field.get("mutable") is False:
            immutable[field["name"]] = field.get("value", "")
            continue
        needed.append(field)
        if field.get("value"):
            defaults[field["name"]] = field["value"]
    return defaults, needed, immutable


class IdxAction:
    """A callable bound to one HTTP action and its resume token."""

    def __init__(
        self,
        client: "AuthClient",
        definition: dict,
        with_credentials: bool | None = None,
    ) -> None:
        self._client = client
        self.name: str = definition.get("name", "")
        self.href: str | None = definition.get("href")
        self.method: str = definition.get("method", "POST")
        self.accepts: str = definition.get("accepts") or "application/ion+json"
        self._with_credentials = with_credentials
        self.defaults, self.needed_params, self.immutable = divide_action_params(definition)

    @property
    def needed_param_names(self) -> list[str]:
        return [field["name"] for field in self.needed_params]

    def build_body(self, params: dict | None = None) -> dict:
        # Unset values are omitted, not sent as null.
        supplied = {k: v for k, v in (params or {}).items() if v is not None}
        return {**self.defaults, **supplied, **self.immutable}

    def __call__(self, params: dict | None = None) -> "IdxState":
        """
        Submit `params` and decompose whatever document comes back.

        An error response whose body is an exchange document is data, not a
        failure: it becomes the next state just like a success would.
        """
        from idx_flow.idx_state import make_idx_state

        if not self.href:
            raise ConfigurationError(f"Action '{self.name}' has no href to submit to")

        headers = {
            "content-type": "application/json",
            "accept": self.accepts,
        }
        logger.info("Invoking action '%s'", self.name)
        try:
            raw = self._client.transport.request(
                method=self.method,
                url=self.href,
                headers=headers,
                args=self.build_body(params),
                with_credentials=True if self._with_credentials is None else self._with_credentials,
            )
        except AuthApiError as err:
            if not is_raw_idx_response(err.response_body):
                raise
            logger.info("Action '%s' returned an exchange document with status %s", self.name, err.status_code)
            state = make_idx_state(self._client, err.response_body, self._with_credentials, request_did_succeed=False)
            if err.status_code == 401 and err.headers.get("www-authenticate") == DEVICE_CHALLENGE_HEADER:
                state.step_up = True
            return state

        self._client.storage.save(raw)
        return make_idx_state(self._client, raw, self._with_credentials)

    def __repr__(self) -> str:
        return f"IdxAction({self.name!r}, {self.method} {self.href})"
