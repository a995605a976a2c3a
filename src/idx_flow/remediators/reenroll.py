# remediators/reenroll.py
# `reenroll-authenticator`: replace an expired credential (usually a password).

from idx_flow.models import Input
from idx_flow.remediators.base import Remediator, input_builder, mapper


class ReEnrollAuthenticator(Remediator):
    remediation_name = "reenroll-authenticator"

    aliases = {"credentials": []}

    def _is_password(self) -> bool:
        return (self.get_authenticator() or {}).get("type") == "password"

    @mapper("credentials")
    def map_credentials(self, field: dict | None) -> dict:
        if self._is_password():
            return {"passcode": self.values.get("new_password")}
        return {"passcode": self.values.get("verification_code")}

    @input_builder("credentials")
    def input_credentials(self, field: dict) -> Input:
        name = "new_password" if self._is_password() else "verification_code"
        form_fields = (field.get("form") or {}).get("value") or [{}]
        return Input.model_validate({**form_fields[0], "name": name})
