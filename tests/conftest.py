# Shared fixtures: a client with a mocked transport, and factories for the
# documents an IDX server returns at each step of a password sign-in.

import copy
from unittest.mock import MagicMock

import pytest

from idx_flow.client import AuthClient
from idx_flow.config import IdxConfig
from idx_flow.storage import MemoryStorage

DOMAIN = "https://example.okta.com"
ISSUER = f"{DOMAIN}/oauth2/default"
STATE_HANDLE = "02stateHandle"
ACCEPTS_JSON = "application/json; okta-version=1.0.0"


def state_handle_field() -> dict:
    return {"name": "stateHandle", "required": True, "value": STATE_HANDLE, "visible": False, "mutable": False}


def _remediation(name: str, value: list[dict], **extra) -> dict:
    return {
        "rel": ["create-form"],
        "name": name,
        "href": f"{DOMAIN}/idp/idx/{name}",
        "method": "POST",
        "produces": "application/ion+json; okta-version=1.0.0",
        "accepts": ACCEPTS_JSON,
        "value": value,
        **extra,
    }


def _document(remediations: list[dict], **fields) -> dict:
    doc = {
        "version": "1.0.0",
        "stateHandle": STATE_HANDLE,
        "expiresAt": "2026-10-19T12:00:00.000Z",
        "intent": "LOGIN",
        "remediation": {"type": "array", "value": remediations},
        "cancel": _remediation("cancel", [state_handle_field()]),
        "app": {"type": "object", "value": {"name": "oidc_client", "label": "Test App", "id": "0oa1"}},
    }
    doc.update(fields)
    return doc


def identify_document(with_password: bool = False, with_idp: bool = False) -> dict:
    value = [
        {"name": "identifier", "label": "Username", "required": True},
        {"name": "rememberMe", "type": "boolean", "label": "Remember this device"},
        state_handle_field(),
    ]
    if with_password:
        value.insert(1, {
            "name": "credentials",
            "type": "object",
            "required": True,
            "form": {"value": [{"name": "passcode", "label": "Password", "secret": True}]},
        })
    remediations = [_remediation("identify", value)]
    if with_idp:
        remediations.append({
            "name": "redirect-idp",
            "type": "GOOGLE",
            "idp": {"id": "0oa-google", "name": "Google IdP"},
            "href": f"{DOMAIN}/oauth2/v1/authorize?idp=0oa-google",
            "method": "GET",
        })
    return _document(remediations)


AUTHENTICATORS = {
    "type": "array",
    "value": [
        {"type": "password", "key": "okta_password", "id": "aut-pass", "displayName": "Password"},
        {"type": "email", "key": "okta_email", "id": "aut-email", "displayName": "Email"},
    ],
}


def _option(label: str, authenticator_id: str, method: str, index: int) -> dict:
    return {
        "label": label,
        "value": {
            "form": {
                "value": [
                    {"name": "id", "required": True, "value": authenticator_id, "mutable": False},
                    {"name": "methodType", "required": False, "value": method, "mutable": False},
                ]
            }
        },
        "relatesTo": f"$.authenticators.value[{index}]",
    }


def select_document() -> dict:
    field = {
        "name": "authenticator",
        "type": "object",
        "required": True,
        "options": [
            _option("Password", "aut-pass", "password", 0),
            _option("Email", "aut-email", "email", 1),
        ],
    }
    return _document(
        [_remediation("select-authenticator-authenticate", [field, state_handle_field()])],
        authenticators=copy.deepcopy(AUTHENTICATORS),
    )


def challenge_document(kind: str = "password", messages: list[dict] | None = None) -> dict:
    authenticator = next(a for a in AUTHENTICATORS["value"] if a["type"] == kind)
    passcode = {"name": "passcode", "label": "Enter code", "secret": True}
    if messages:
        passcode["messages"] = {"type": "array", "value": messages}
    credentials = {"name": "credentials", "type": "object", "required": True, "form": {"value": [passcode]}}
    return _document(
        [
            _remediation(
                "challenge-authenticator",
                [credentials, state_handle_field()],
                relatesTo="$.currentAuthenticatorEnrollment",
            ),
            _remediation("select-authenticator-authenticate", [state_handle_field()]),
        ],
        currentAuthenticatorEnrollment={
            "type": "object",
            "value": {
                **authenticator,
                "resend": _remediation("resend", [state_handle_field()]),
            },
        },
    )


def success_document() -> dict:
    return {
        "version": "1.0.0",
        "stateHandle": STATE_HANDLE,
        "intent": "LOGIN",
        "successWithInteractionCode": {
            "rel": ["create-form"],
            "name": "issue",
            "href": f"{ISSUER}/v1/token",
            "method": "POST",
            "value": [
                {"name": "grant_type", "required": True, "value": "interaction_code"},
                {"name": "interaction_code", "required": True, "value": "code-123"},
                {"name": "client_id", "required": True, "value": "0oa1"},
            ],
        },
    }


def terminal_document(message: str = "The session has expired.") -> dict:
    return {
        "version": "1.0.0",
        "intent": "LOGIN",
        "messages": {"type": "array", "value": [{"message": message, "class": "ERROR", "i18n": {"key": "idx.session.expired"}}]},
    }


@pytest.fixture
def client() -> AuthClient:
    return AuthClient(IdxConfig(issuer=ISSUER), transport=MagicMock(), storage=MemoryStorage())
