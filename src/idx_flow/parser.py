# parser.py
# Response decomposer: splits one raw document into remediations, context,
# and top-level actions.
#
# The raw document is deep-copied before anything else happens, so callers
# can decompose the same document any number of times and always get the
# same result back.

import copy
from typing import TYPE_CHECKING, Any

from idx_flow.actions import IdxAction
from idx_flow.models import IdxRemediation
from idx_flow.paths import PathResolver, resolve_path

if TYPE_CHECKING:
    from idx_flow.client import AuthClient

RELATES_TO = "relatesTo"

# remediation: surfaced as IdxRemediation objects.
# context: the literal field carries nothing the generic rules don't already fold in.
SKIP_FIELDS = frozenset({"remediation", "context"})


# ---------------------------------------------------------------------------
# Non-remediation fields
# ---------------------------------------------------------------------------


def parse_non_remediations(
    client: "AuthClient",
    document: dict,
    with_credentials: bool | None = None,
) -> tuple[dict, dict[str, IdxAction]]:
    """Classify every top-level field as context or action. Returns (context, actions)."""
    context: dict[str, Any] = {}
    actions: dict[str, IdxAction] = {}

    for field, raw in document.items():
        if field in SKIP_FIELDS:
            continue

        # Scalars (and lists) are contextual info.
        if not isinstance(raw, dict):
            context[field] = raw
            continue

        if raw.get("rel"):
            actions[raw["name"]] = IdxAction(client, raw, with_credentials)
            continue

        info = {k: v for k, v in raw.items() if k != "value"}
        context[field] = info
        field_value = raw.get("value")

        if raw.get("type") != "object" or not isinstance(field_value, dict):
            info["value"] = field_value
            continue

        # Object field holding an object value: actions may sit one level down.
        info["value"] = {}
        for sub_field, sub_value in field_value.items():
            if isinstance(sub_value, dict) and sub_value.get("rel"):
                actions[f"{field}-{sub_field}"] = IdxAction(
                    client, sub_value, with_credentials
                )
            else:
                info["value"][sub_field] = sub_value

    return context, actions


# ---------------------------------------------------------------------------
# Cross-references
# ---------------------------------------------------------------------------


def expand_relates_to(document: dict, value: Any, resolver: PathResolver = resolve_path) -> None:
    """
    Replace every `relatesTo` path query inside `value` with its target.

    Queries are evaluated against the root `document`, since targets usually
    live outside the remediation. Already-resolved references are objects,
    not strings, so running this twice changes nothing.
    """
    if not isinstance(value, dict):
        return

    for key in list(value):
        item = value[key]
        if key == RELATES_TO:
            query = item[0] if isinstance(item, list) and item else item
            if isinstance(query, str):
                result = resolver(query, document)
                if result:
                    value[key] = result
                    continue
        if isinstance(item, list):
            for inner in item:
                expand_relates_to(document, inner, resolver)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def parse_idx_response(
    client: "AuthClient",
    raw: dict,
    with_credentials: bool | None = None,
    resolver: PathResolver = resolve_path,
) -> tuple[list[IdxRemediation], dict, dict[str, IdxAction]]:
    """Decompose `raw` into (remediations, context, actions). `raw` is left untouched."""
    document = copy.deepcopy(raw)
    remediation_data = (document.get("remediation") or {}).get("value") or []

    for remediation in remediation_data:
        expand_relates_to(document, remediation, resolver)

    remediations = [
        IdxRemediation.model_validate(
            {**remediation, "action": IdxAction(client, remediation, with_credentials)}
        )
        for remediation in remediation_data
    ]
    context, actions = parse_non_remediations(client, document, with_credentials)
    return remediations, context, actions
