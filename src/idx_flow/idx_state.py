# idx_state.py
# IdxState: a fully decomposed document plus the means to proceed from it.

import logging
from typing import TYPE_CHECKING

from idx_flow.actions import IdxAction
from idx_flow.errors import ConfigurationError
from idx_flow.models import IdxMessage, IdxRemediation
from idx_flow.parser import parse_idx_response
from idx_flow.paths import PathResolver, resolve_path

if TYPE_CHECKING:
    from idx_flow.client import AuthClient

logger = logging.getLogger(__name__)


def _find_interaction_code(raw: dict) -> str | None:
    success = raw.get("successWithInteractionCode")
    if not isinstance(success, dict):
        return None
    for field in success.get("value") or []:
        if field.get("name") == "interaction_code":
            return field.get("value")
    return None


class IdxState:
    """
    One step of the exchange, decomposed.

    `needed_to_proceed` lists the remediations the server offers right now;
    `proceed(name, params)` invokes one of them and returns the next IdxState.
    """

    def __init__(
        self,
        raw_idx_state: dict,
        needed_to_proceed: list[IdxRemediation],
        context: dict,
        actions: dict[str, IdxAction],
        request_did_succeed: bool = True,
    ) -> None:
        self.raw_idx_state = raw_idx_state
        self.needed_to_proceed = needed_to_proceed
        self.context = context
        self.actions = actions
        self.request_did_succeed = request_did_succeed
        self.step_up = False
        self.interaction_code = _find_interaction_code(raw_idx_state)

    @property
    def state_handle(self) -> str | None:
        return self.raw_idx_state.get("stateHandle")

    @property
    def messages(self) -> list[IdxMessage]:
        messages = self.raw_idx_state.get("messages")
        if not isinstance(messages, dict):
            return []
        return [IdxMessage.model_validate(m) for m in messages.get("value") or []]

    def remediation(self, name: str) -> IdxRemediation | None:
        return next((r for r in self.needed_to_proceed if r.name == name), None)

    def proceed(self, name: str, params: dict | None = None) -> "IdxState":
        remediation = self.remediation(name)
        if remediation is None or remediation.action is None:
            raise ConfigurationError(f"Unknown remediation choice: [{name}]")
        return remediation.action(params or {})

    def __repr__(self) -> str:
        names = [r.name for r in self.needed_to_proceed]
        return f"IdxState(remediations={names}, actions={sorted(self.actions)})"


def make_idx_state(
    client: "AuthClient",
    raw: dict,
    with_credentials: bool | None = None,
    request_did_succeed: bool = True,
    resolver: PathResolver = resolve_path,
) -> IdxState:
    remediations, context, actions = parse_idx_response(client, raw, with_credentials, resolver)
    logger.debug("Decomposed document: %d remediation(s), %d action(s)", len(remediations), len(actions))
    return IdxState(raw, remediations, context, actions, request_did_succeed=request_did_succeed)
