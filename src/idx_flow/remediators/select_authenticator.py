# remediators/select_authenticator.py
# `select-authenticator-*`: pick one authenticator among the server's options.

from collections.abc import Mapping
from typing import Any

from idx_flow.authenticator import OKTA_PASSWORD, compare_authenticators, matches_option
from idx_flow.models import IdxRemediation, Input, NextStep, RemediationValues
from idx_flow.remediators.base import Remediator, input_builder, mapper


def _option_form_values(option: dict) -> dict:
    """The values an option's own form pre-fills, e.g. {"id": "aut123"}."""
    form = (option.get("value") or {}).get("form") or {}
    return {f["name"]: f["value"] for f in form.get("value") or [] if f.get("value") is not None}


class SelectAuthenticator(Remediator):
    aliases = {"authenticator": []}

    def _options(self) -> list[dict]:
        field = self.remediation.field("authenticator") or {}
        return field.get("options") or []

    def _select(self) -> tuple[dict, dict | None] | None:
        """(selected authenticator, matched option) or None when nothing matches."""
        explicit = self.values.get("authenticator")
        if isinstance(explicit, dict) and explicit.get("id"):
            return explicit, None

        for authenticator in self.values.get("authenticators") or []:
            for option in self._options():
                if matches_option(authenticator, option.get("relatesTo")):
                    return option["relatesTo"], option
        return None

    def can_remediate(self) -> bool:
        if not self.values.get("authenticators"):
            return False
        return self._select() is not None and super().can_remediate()

    @mapper("authenticator")
    def map_authenticator(self, field: dict | None) -> dict | None:
        selection = self._select()
        if selection is None:
            return None
        authenticator, option = selection
        if option is None:
            return {"id": authenticator["id"]}
        return _option_form_values(option) or {"id": authenticator.get("id")}

    @input_builder("authenticator")
    def input_authenticator(self, field: dict) -> Input:
        options = [
            {"label": option.get("label"), "value": (option.get("relatesTo") or {}).get("key")}
            for option in field.get("options") or []
        ]
        return Input(name="authenticator", type="string", required=field.get("required"), options=options)

    def get_next_step(self, context: dict | None = None) -> NextStep:
        step = super().get_next_step(context)
        step.options = [
            {"label": option.get("label"), "value": (option.get("relatesTo") or {}).get("key")}
            for option in self._options()
        ]
        return step

    def get_values_after_proceed(self) -> RemediationValues:
        selection = self._select()
        values = super().get_values_after_proceed()
        if selection is None:
            return values
        selected, _ = selection
        remaining = [
            a for a in values.get("authenticators") or []
            if not compare_authenticators(a, selected) and not matches_option(a, selected)
        ]
        return values.replace(authenticators=remaining)


class SelectAuthenticatorAuthenticate(SelectAuthenticator):
    remediation_name = "select-authenticator-authenticate"

    def __init__(self, remediation: IdxRemediation, values: Mapping[str, Any] | None = None) -> None:
        super().__init__(remediation, values)
        # A supplied password implies the password authenticator when offered.
        password_option = next(
            (
                option for option in self._options()
                if (option.get("relatesTo") or {}).get("key") == OKTA_PASSWORD
            ),
            None,
        )
        authenticators = self.values.get("authenticators") or []
        already = any(matches_option(a, (password_option or {}).get("relatesTo")) for a in authenticators)
        if password_option and self.values.get("password") and not already:
            self.values = self.values.replace(authenticators=[*authenticators, {"key": OKTA_PASSWORD}])


class SelectAuthenticatorEnroll(SelectAuthenticator):
    remediation_name = "select-authenticator-enroll"
