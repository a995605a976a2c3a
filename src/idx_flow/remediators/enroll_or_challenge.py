# remediators/enroll_or_challenge.py
# `challenge-authenticator` / `enroll-authenticator`: submit a credential for
# the authenticator the server related to this step.

from idx_flow.authenticator import compare_authenticators
from idx_flow.models import Input, RemediationValues
from idx_flow.remediators.base import Remediator, input_builder, mapper

PASSWORD = "password"
SECURITY_QUESTION = "security_question"


class EnrollOrChallengeAuthenticator(Remediator):
    remediation_name = "challenge-authenticator"

    aliases = {"credentials": []}

    def _authenticator_type(self) -> str | None:
        authenticator = self.get_authenticator() or {}
        return authenticator.get("type")

    @mapper("credentials")
    def map_credentials(self, field: dict | None) -> dict:
        kind = self._authenticator_type()
        if kind == PASSWORD:
            return {"passcode": self.values.get("password")}
        if kind == SECURITY_QUESTION:
            credentials = {"answer": self.values.get("answer")}
            if self.values.get("question_key"):
                credentials["questionKey"] = self.values["question_key"]
            return credentials
        return {"passcode": self.values.get("verification_code") or self.values.get("otp")}

    @input_builder("credentials")
    def input_credentials(self, field: dict) -> Input:
        kind = self._authenticator_type()
        if kind == PASSWORD:
            name = "password"
        elif kind == SECURITY_QUESTION:
            name = "answer"
        else:
            name = "verification_code"
        form_fields = (field.get("form") or {}).get("value") or [{}]
        return Input.model_validate(
            {**form_fields[0], "name": name, "type": "string", "required": field.get("required")}
        )

    def get_values_after_proceed(self) -> RemediationValues:
        values = super().get_values_after_proceed().without("otp", "question_key")
        used = self.get_authenticator()
        if not used:
            return values
        remaining = [
            a for a in values.get("authenticators") or []
            if not compare_authenticators(a, used) and a.get("key") != used.get("type")
        ]
        return values.replace(authenticators=remaining)


class EnrollAuthenticator(EnrollOrChallengeAuthenticator):
    remediation_name = "enroll-authenticator"
