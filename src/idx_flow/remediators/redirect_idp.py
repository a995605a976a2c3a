# remediators/redirect_idp.py
# `redirect-idp`: hand off to an external identity provider. Never
# remediated in-process; the caller follows `href`.

from idx_flow.models import NextStep
from idx_flow.remediators.base import Remediator


class RedirectIdp(Remediator):
    remediation_name = "redirect-idp"

    def can_remediate(self) -> bool:
        return False

    def get_next_step(self, context: dict | None = None) -> NextStep:
        extra = self.remediation.model_extra or {}
        return NextStep(
            name=self.name,
            type=extra.get("type"),
            idp=extra.get("idp"),
            href=self.remediation.href,
        )
