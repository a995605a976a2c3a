# remediators/base.py
# Remediator base class.
#
# A Remediator wraps one remediation offered by the server plus the caller's
# current value bag. It answers three questions for the flow loop: can this
# step proceed, what data would it submit, and what does the caller still
# need to supply.
#
# Per-field behaviour is registered, not looked up by name at runtime:
# decorate a method with @mapper("field") or @input_builder("field") and
# __init_subclass__ collects it into the class's dispatch tables.

from collections.abc import Callable, Mapping
from typing import Any, ClassVar

from idx_flow.authenticator import compare_authenticators, format_authenticator
from idx_flow.errors import ConfigurationError
from idx_flow.models import IdxMessage, IdxRemediation, Input, NextStep, RemediationValues

# Aliases every remediator understands but never prompts for.
COMMON_ALIASES: dict[str, list[str]] = {
    "stateHandle": ["state_handle"],
}


def mapper(field: str) -> Callable:
    """Register a method as the data extractor for `field`."""

    def decorate(fn: Callable) -> Callable:
        fn._idx_mapper = field
        return fn

    return decorate


def input_builder(field: str) -> Callable:
    """Register a method as the input builder for `field`."""

    def decorate(fn: Callable) -> Callable:
        fn._idx_input_builder = field
        return fn

    return decorate


def _normalize_values(values: RemediationValues) -> RemediationValues:
    """
    Merge a singular `authenticator` into `authenticators`, and copy any
    authenticator carrying metadata beyond its identity into
    `authenticators_data`, so a later step cannot mistake stored metadata for
    a fresh selection.
    """
    authenticators = [format_authenticator(a) for a in values.get("authenticators") or []]

    if values.get("authenticator"):
        authenticator = format_authenticator(values["authenticator"])
        if not any(compare_authenticators(authenticator, existing) for existing in authenticators):
            authenticators.append(authenticator)

    data = list(values.get("authenticators_data") or [])
    for authenticator in authenticators:
        if len(authenticator) > 1 and not any(compare_authenticators(authenticator, d) for d in data):
            data.append(authenticator)

    return values.replace(authenticators=authenticators, authenticators_data=data)


class Remediator:
    remediation_name: ClassVar[str] = ""

    # Server field name -> value-bag aliases. None means "cannot remediate".
    aliases: ClassVar[dict[str, list[str]] | None] = None

    mappers: ClassVar[dict[str, Callable]] = {}
    input_builders: ClassVar[dict[str, Callable]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        mappers: dict[str, Callable] = {}
        builders: dict[str, Callable] = {}
        for klass in reversed(cls.__mro__):
            for attr in vars(klass).values():
                if hasattr(attr, "_idx_mapper"):
                    mappers[attr._idx_mapper] = attr
                if hasattr(attr, "_idx_input_builder"):
                    builders[attr._idx_input_builder] = attr
        cls.mappers = mappers
        cls.input_builders = builders

    def __init__(self, remediation: IdxRemediation, values: Mapping[str, Any] | None = None) -> None:
        self.remediation = remediation
        bag = values if isinstance(values, RemediationValues) else RemediationValues(values)
        self.values = _normalize_values(bag)

    @property
    def name(self) -> str:
        return self.remediation.name

    # ------------------------------------------------------------------
    # Readiness
    # ------------------------------------------------------------------

    def required_fields(self) -> list[str]:
        return [f["name"] for f in self.remediation.value if f.get("required")]

    def can_remediate(self) -> bool:
        """Override for a custom check. False means "need more input", not failure."""
        if self.aliases is None:
            return False
        return all(self.has_data(key) for key in self.required_fields())

    def has_data(self, key: str) -> bool:
        data = self.get_data(key)
        if isinstance(data, Mapping):
            return any(data.values())
        if isinstance(data, list):
            return any(data)
        return bool(data)

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------

    def get_data(self, key: str | None = None) -> Any:
        """The value submitted for `key`, or for every field when `key` is None."""
        if key is None:
            return {f["name"]: self.get_data(f["name"]) for f in self.remediation.value}

        extractor = self.mappers.get(key)
        if extractor is not None:
            return extractor(self, self.remediation.field(key))

        for alias in (self.aliases or {}).get(key) or COMMON_ALIASES.get(key) or []:
            value = self.values.get(alias)
            if value:
                return value

        return self.values.get(key)

    def get_authenticator(self) -> dict | None:
        related = self.remediation.relates_to
        if isinstance(related, dict):
            return related.get("value")
        return None

    # ------------------------------------------------------------------
    # Next step
    # ------------------------------------------------------------------

    def get_next_step(self, context: dict | None = None) -> NextStep:
        authenticator = self.get_authenticator()
        return NextStep(
            name=self.name,
            inputs=self.get_inputs(),
            missing=self.get_missing(),
            type=authenticator.get("type") if authenticator else None,
            authenticator=authenticator,
        )

    def get_missing(self) -> list[str]:
        """Input names of the required fields that fail the readiness check."""
        if not self.aliases:
            return []
        return [
            item.name
            for key in self.required_fields()
            if key in self.aliases and not self.has_data(key)
            for item in self._field_inputs(key, self.aliases[key])
        ]

    def get_inputs(self) -> list[Input]:
        if not self.aliases:
            return []

        inputs: list[Input] = []
        for key, aliases in self.aliases.items():
            inputs.extend(self._field_inputs(key, aliases))
        return inputs

    def _field_inputs(self, key: str, aliases: list[str]) -> list[Input]:
        field = self.remediation.field(key)
        if field is None:
            return []

        built: Input | list[Input] | None = None
        builder = self.input_builders.get(key)
        if builder is not None:
            built = builder(self, field)
        elif field.get("type") != "object":
            if len(aliases) == 1:
                name = aliases[0]
            else:
                name = next((alias for alias in aliases if alias in self.values), None)
            if name:
                built = Input.model_validate({**field, "name": name})

        if built is None:
            raise ConfigurationError(
                f"Missing input builder for field '{key}' in remediator: {self.name}"
            )
        return built if isinstance(built, list) else [built]

    @staticmethod
    def get_messages(remediation: IdxRemediation) -> list[IdxMessage]:
        """Messages attached to the fields of the remediation's first form."""
        if not remediation.value:
            return []
        form = remediation.value[0].get("form") or {}
        messages: list[IdxMessage] = []
        for field in form.get("value") or []:
            field_messages = field.get("messages")
            if isinstance(field_messages, dict):
                messages.extend(IdxMessage.model_validate(m) for m in field_messages.get("value") or [])
        return messages

    # ------------------------------------------------------------------
    # After proceed
    # ------------------------------------------------------------------

    def get_values_after_proceed(self) -> RemediationValues:
        """The value bag for the next step: everything except what was just submitted."""
        consumed = [i.name for i in self.get_inputs()]
        return self.values.without(*consumed)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"
