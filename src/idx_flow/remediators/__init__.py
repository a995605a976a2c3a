# remediators
# Tagged remediator constructors, resolved by step name at orchestration time.

from collections.abc import Iterable, Mapping
from typing import Any

from idx_flow.errors import ConfigurationError
from idx_flow.models import IdxRemediation
from idx_flow.remediators.base import Remediator, input_builder, mapper
from idx_flow.remediators.enroll_or_challenge import EnrollAuthenticator, EnrollOrChallengeAuthenticator
from idx_flow.remediators.identify import Identify
from idx_flow.remediators.redirect_idp import RedirectIdp
from idx_flow.remediators.reenroll import ReEnrollAuthenticator
from idx_flow.remediators.select_authenticator import (
    SelectAuthenticator,
    SelectAuthenticatorAuthenticate,
    SelectAuthenticatorEnroll,
)


class RemediatorRegistry:
    """Step name -> Remediator subclass, fixed for one flow."""

    def __init__(self, entries: Mapping[str, type[Remediator]] | Iterable[type[Remediator]] = ()) -> None:
        self._entries: dict[str, type[Remediator]] = {}
        if isinstance(entries, Mapping):
            for name, cls in entries.items():
                self.register(cls, name)
        else:
            for cls in entries:
                self.register(cls)

    def register(self, cls: type[Remediator], name: str | None = None) -> None:
        name = name or cls.remediation_name
        if not name:
            raise ConfigurationError(f"{cls.__name__} has no remediation name to register under")
        self._entries[name] = cls

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def names(self) -> list[str]:
        return list(self._entries)

    def create(self, remediation: IdxRemediation, values: Mapping[str, Any]) -> Remediator:
        cls = self._entries.get(remediation.name)
        if cls is None:
            raise ConfigurationError(f"No remediator registered for step '{remediation.name}'")
        return cls(remediation, values)


__all__ = [
    "EnrollAuthenticator",
    "EnrollOrChallengeAuthenticator",
    "Identify",
    "RedirectIdp",
    "ReEnrollAuthenticator",
    "Remediator",
    "RemediatorRegistry",
    "SelectAuthenticator",
    "SelectAuthenticatorAuthenticate",
    "SelectAuthenticatorEnroll",
    "input_builder",
    "mapper",
]
