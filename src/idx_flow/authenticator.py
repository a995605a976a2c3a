# authenticator.py
# Helpers for the authenticator candidates a caller supplies: plain keys
# ("password", "okta_email") or objects carrying `key` and/or `id`.

from typing import Any

from idx_flow.errors import ConfigurationError

OKTA_PASSWORD = "okta_password"


def is_authenticator(obj: Any) -> bool:
    return isinstance(obj, dict) and bool(obj.get("key") or obj.get("id"))


def format_authenticator(incoming: Any) -> dict:
    if is_authenticator(incoming):
        return dict(incoming)
    if isinstance(incoming, str) and incoming:
        return {"key": incoming}
    raise ConfigurationError(f"Invalid format for authenticator: {incoming!r}")


def compare_authenticators(first: dict | None, second: dict | None) -> bool:
    """Identity comparison: by id when both have one, else by key."""
    if not first or not second:
        return False
    if first.get("id") and second.get("id"):
        return first["id"] == second["id"]
    if first.get("key") and second.get("key"):
        return first["key"] == second["key"]
    return False


def matches_option(authenticator: dict, related: dict | None) -> bool:
    """True if a candidate selects the authenticator an option relates to."""
    if not isinstance(related, dict):
        return False
    if compare_authenticators(authenticator, related):
        return True
    # Short keys such as "password" name the authenticator type.
    key = authenticator.get("key")
    return bool(key) and key == related.get("type")
