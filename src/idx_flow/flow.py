# flow.py
# Flow orchestrator.
#
# Owns the loop: introspect -> select remediator -> readiness check ->
# proceed, until a step needs caller input or the exchange ends. Strictly
# sequential; each step's inputs depend on the previous response.
#
# Control flow per iteration:
#   decomposed state → terminal? → pick remediator (registry + allow-list)
#   → not ready: return PENDING with the next step
#   → ready: proceed, reduce the value bag, loop on the new state

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from idx_flow.errors import ConfigurationError
from idx_flow.idx_state import IdxState
from idx_flow.introspect import introspect
from idx_flow.models import IdxMessage, IdxStatus, IdxTransaction, IntrospectOptions, RemediationValues
from idx_flow.remediators import Remediator, RemediatorRegistry

if TYPE_CHECKING:
    from idx_flow.client import AuthClient

logger = logging.getLogger(__name__)

# Options that steer the engine rather than feed a remediation.
GENERIC_OPTIONS = ("state_handle", "interaction_handle", "with_credentials", "version", "cancel")


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


def select_remediator(
    state: IdxState,
    values: RemediationValues,
    flow: RemediatorRegistry,
    allowed_next_steps: Sequence[str],
    restrict_to_allowed: bool,
) -> Remediator | None:
    """
    Pick the remediator to drive from the steps the server offers.

    Steps outside `allowed_next_steps` are only candidates before the first
    proceed (the step the exchange starts on) and rank ahead of listed ones;
    listed steps rank by their position in `allowed_next_steps`. The first
    ready candidate wins. When none is ready, the first candidate describes
    the pending step.
    """
    rank = {name: i for i, name in enumerate(allowed_next_steps)}
    candidates = sorted(
        (
            flow.create(r, values) for r in state.needed_to_proceed
            if r.name in flow and (not restrict_to_allowed or r.name in rank)
        ),
        key=lambda r: rank.get(r.name, -1),
    )

    for remediator in candidates:
        if remediator.can_remediate():
            return remediator
    return candidates[0] if candidates else None


# ---------------------------------------------------------------------------
# Transaction assembly
# ---------------------------------------------------------------------------


def _messages(state: IdxState, remediator: Remediator | None) -> list[IdxMessage]:
    messages = list(state.messages)
    if remediator is not None:
        messages.extend(Remediator.get_messages(remediator.remediation))
    return messages


def _transaction(
    state: IdxState,
    status: IdxStatus,
    remediator: Remediator | None = None,
) -> IdxTransaction:
    next_step = None
    if remediator is not None and status == IdxStatus.PENDING:
        next_step = remediator.get_next_step(state.context)
        next_step.can_skip = state.remediation("skip") is not None
        next_step.can_resend = any(name.endswith("-resend") for name in state.actions)
    return IdxTransaction(
        status=status,
        next_step=next_step,
        messages=_messages(state, remediator),
        available_steps=[r.name for r in state.needed_to_proceed],
        interaction_code=state.interaction_code,
        context=state.context,
        actions=list(state.actions),
    )


def _pending(client: "AuthClient", state: IdxState, remediator: Remediator | None = None) -> IdxTransaction:
    # The next call resumes from this document.
    client.storage.save(state.raw_idx_state)
    return _transaction(state, IdxStatus.PENDING, remediator)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def run(
    client: "AuthClient",
    values: Mapping[str, Any] | None = None,
    *,
    flow: RemediatorRegistry,
    allowed_next_steps: Sequence[str],
    state_handle: str | None = None,
    interaction_handle: str | None = None,
    with_credentials: bool | None = None,
    version: str | None = None,
    cancel: bool = False,
) -> IdxTransaction:
    """
    Drive the exchange as far as the supplied values allow.

    Returns a transaction in every non-fatal case. ConfigurationError and
    transport errors propagate.
    """
    state = introspect(
        client,
        IntrospectOptions(
            with_credentials=with_credentials,
            interaction_handle=interaction_handle,
            state_handle=state_handle,
            version=version,
        ),
    )

    if cancel:
        action = state.actions.get("cancel")
        if action is None:
            raise ConfigurationError("The current step offers no 'cancel' action")
        state = action()
        client.storage.clear()
        logger.info("Exchange canceled")
        return _transaction(state, IdxStatus.CANCELED)

    bag = RemediationValues(values)
    proceeded = False

    while True:
        bag = bag.replace(state_handle=state.state_handle)

        if state.interaction_code:
            client.storage.clear()
            logger.info("Exchange complete: interaction code received")
            return _transaction(state, IdxStatus.SUCCESS)

        if not state.needed_to_proceed:
            client.storage.clear()
            logger.info("Exchange reached a terminal state")
            return _transaction(state, IdxStatus.TERMINAL)

        remediator = select_remediator(state, bag, flow, allowed_next_steps, restrict_to_allowed=proceeded)
        if remediator is None:
            logger.warning(
                "No remediation can match current flow. Remediations: [%s]",
                ", ".join(r.name for r in state.needed_to_proceed),
            )
            return _pending(client, state)

        if not remediator.can_remediate():
            logger.info("Step '%s' needs more input", remediator.name)
            return _pending(client, state, remediator)

        logger.info("Proceeding with step '%s'", remediator.name)
        state = state.proceed(remediator.name, remediator.get_data())
        bag = remediator.get_values_after_proceed()
        proceeded = True

        if not state.request_did_succeed:
            # Server rejected the submission; describe the step it offers now.
            bag = bag.replace(state_handle=state.state_handle)
            if not state.needed_to_proceed:
                client.storage.clear()
                return _transaction(state, IdxStatus.TERMINAL)
            retry = select_remediator(state, bag, flow, allowed_next_steps, restrict_to_allowed=False)
            return _pending(client, state, retry)
