import copy

import pytest

from idx_flow.actions import IdxAction, divide_action_params
from idx_flow.idx_state import make_idx_state
from idx_flow.parser import expand_relates_to, parse_idx_response, parse_non_remediations
from idx_flow.paths import PathSyntaxError, resolve_path

from conftest import STATE_HANDLE, challenge_document, identify_document, select_document, success_document

# ---------------------------------------------------------------------------
# Path resolution
# ---------------------------------------------------------------------------


def test_resolve_path_nested_index():
    doc = {"authenticators": {"value": [{"id": "a"}, {"id": "b"}]}}
    assert resolve_path("$.authenticators.value[1]", doc) == {"id": "b"}


def test_resolve_path_missing_segment_returns_none():
    doc = {"authenticators": {"value": []}}
    assert resolve_path("$.authenticators.value[3]", doc) is None
    assert resolve_path("$.nothing.here", doc) is None


def test_resolve_path_rejects_unsupported_syntax():
    with pytest.raises(PathSyntaxError):
        resolve_path("$..authenticators[?(@.id)]", {})
    with pytest.raises(PathSyntaxError):
        resolve_path("authenticators.value", {})


# ---------------------------------------------------------------------------
# Field classification
# ---------------------------------------------------------------------------


def test_scalars_are_context(client):
    context, actions = parse_non_remediations(client, identify_document())
    assert context["version"] == "1.0.0"
    assert context["stateHandle"] == STATE_HANDLE
    assert context["intent"] == "LOGIN"


def test_reserved_fields_are_skipped(client):
    doc = identify_document()
    doc["context"] = {"type": "object", "value": {"ignored": True}}
    context, actions = parse_non_remediations(client, doc)
    assert "remediation" not in context
    assert "context" not in context


def test_rel_objects_become_actions(client):
    context, actions = parse_non_remediations(client, identify_document())
    assert isinstance(actions["cancel"], IdxAction)
    assert "cancel" not in context


def test_object_field_keeps_metadata_and_value(client):
    context, _ = parse_non_remediations(client, select_document())
    assert context["authenticators"]["type"] == "array"
    assert len(context["authenticators"]["value"]) == 2
    assert context["app"] == {"type": "object", "value": {"name": "oidc_client", "label": "Test App", "id": "0oa1"}}


def test_nested_action_is_keyed_by_field_and_name(client):
    context, actions = parse_non_remediations(client, challenge_document())
    assert "currentAuthenticatorEnrollment-resend" in actions
    assert "resend" not in context["currentAuthenticatorEnrollment"]["value"]
    assert context["currentAuthenticatorEnrollment"]["value"]["key"] == "okta_password"


def test_nested_action_key_ignores_its_name(client):
    doc = challenge_document()
    doc["currentAuthenticatorEnrollment"]["value"]["poll"] = {
        "rel": ["create-form"],
        "name": "poll-authenticator",
        "href": "https://example.okta.com/idp/idx/poll",
        "method": "POST",
        "value": [],
    }
    _, actions = parse_non_remediations(client, doc)
    assert "currentAuthenticatorEnrollment-poll" in actions
    assert "currentAuthenticatorEnrollment-poll-authenticator" not in actions


# ---------------------------------------------------------------------------
# Cross-references
# ---------------------------------------------------------------------------


def test_relates_to_resolves_against_root_document(client):
    remediations, _, _ = parse_idx_response(client, select_document())
    options = remediations[0].field("authenticator")["options"]
    assert options[0]["relatesTo"]["key"] == "okta_password"
    assert options[1]["relatesTo"]["key"] == "okta_email"


def test_remediation_level_relates_to(client):
    remediations, _, _ = parse_idx_response(client, challenge_document())
    challenge = remediations[0]
    assert challenge.relates_to["value"]["type"] == "password"


def test_relates_to_resolution_is_idempotent():
    doc = select_document()
    remediation = doc["remediation"]["value"][0]
    expand_relates_to(doc, remediation)
    once = copy.deepcopy(remediation)
    expand_relates_to(doc, remediation)
    assert remediation == once


def test_relates_to_array_form_uses_first_query():
    doc = {"target": {"value": 1}, "remediation": {"value": [{"name": "x", "relatesTo": ["$.target"]}]}}
    remediation = doc["remediation"]["value"][0]
    expand_relates_to(doc, remediation)
    assert remediation["relatesTo"] == {"value": 1}


def test_unresolvable_reference_is_left_alone():
    doc = {"remediation": {"value": [{"name": "x", "relatesTo": "$.missing"}]}}
    remediation = doc["remediation"]["value"][0]
    expand_relates_to(doc, remediation)
    assert remediation["relatesTo"] == "$.missing"


def test_injected_resolver_is_used(client):
    calls = []

    def resolver(query, document):
        calls.append(query)
        return {"resolved": query}

    remediations, _, _ = parse_idx_response(client, select_document(), resolver=resolver)
    assert calls == ["$.authenticators.value[0]", "$.authenticators.value[1]"]
    assert remediations[0].field("authenticator")["options"][0]["relatesTo"] == {"resolved": "$.authenticators.value[0]"}


# ---------------------------------------------------------------------------
# Purity
# ---------------------------------------------------------------------------


def test_decomposition_does_not_mutate_input(client):
    doc = challenge_document()
    before = copy.deepcopy(doc)
    parse_idx_response(client, doc)
    assert doc == before


def test_decomposing_twice_is_identical(client):
    doc = select_document()
    first = parse_idx_response(client, doc)
    second = parse_idx_response(client, doc)
    assert [r.model_dump() for r in first[0]] == [r.model_dump() for r in second[0]]
    assert first[1] == second[1]
    assert sorted(first[2]) == sorted(second[2])


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


def test_divide_action_params():
    definition = {
        "value": [
            {"name": "identifier", "required": True},
            {"name": "rememberMe", "value": True},
            {"name": "stateHandle", "value": STATE_HANDLE, "mutable": False},
        ]
    }
    defaults, needed, immutable = divide_action_params(definition)
    assert defaults == {"rememberMe": True}
    assert [f["name"] for f in needed] == ["identifier", "rememberMe"]
    assert immutable == {"stateHandle": STATE_HANDLE}


def test_action_binds_resume_token(client):
    client.transport.request.return_value = select_document()
    state = make_idx_state(client, identify_document())

    state.proceed("identify", {"identifier": "ada", "stateHandle": "forged", "rememberMe": None})

    kwargs = client.transport.request.call_args.kwargs
    assert kwargs["url"] == "https://example.okta.com/idp/idx/identify"
    assert kwargs["args"] == {"identifier": "ada", "stateHandle": STATE_HANDLE}
    assert kwargs["headers"]["accept"] == "application/json; okta-version=1.0.0"


def test_action_persists_next_document(client):
    next_doc = select_document()
    client.transport.request.return_value = next_doc
    state = make_idx_state(client, identify_document())

    result = state.actions["cancel"]()

    assert client.storage.load() == next_doc
    assert result.needed_to_proceed[0].name == "select-authenticator-authenticate"


def test_interaction_code_is_extracted(client):
    state = make_idx_state(client, success_document())
    assert state.interaction_code == "code-123"
    assert state.needed_to_proceed == []
    assert "issue" in state.actions
