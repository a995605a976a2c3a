# remediators/identify.py
# `identify`: the user names themselves, optionally with a password on the
# same form.

from idx_flow.models import Input
from idx_flow.remediators.base import Remediator, input_builder, mapper


class Identify(Remediator):
    remediation_name = "identify"

    aliases = {
        "identifier": ["username"],
        "credentials": [],
        "rememberMe": ["remember_me"],
    }

    @mapper("credentials")
    def map_credentials(self, field: dict | None) -> dict:
        return {"passcode": self.values.get("password")}

    @input_builder("credentials")
    def input_credentials(self, field: dict) -> Input:
        form_fields = (field.get("form") or {}).get("value") or [{}]
        return Input.model_validate(
            {**form_fields[0], "name": "password", "required": field.get("required")}
        )
