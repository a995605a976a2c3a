# models.py
# Data contracts for the IDX remediation engine.
# No business logic lives here; pure schema and validation.

from collections.abc import Callable, Iterator, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class IdxStatus(str, Enum):
    SUCCESS = "SUCCESS"
    PENDING = "PENDING"
    FAILURE = "FAILURE"
    TERMINAL = "TERMINAL"
    CANCELED = "CANCELED"


class IdxMessage(BaseModel):
    """A server-supplied validation or info message."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    message: str
    class_: str = Field(default="INFO", alias="class")
    i18n: dict | None = None


class IdxRemediation(BaseModel):
    """One named step offered by the server, with its bound proceed action."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str
    value: list[dict] = Field(default_factory=list, description="Ordered field descriptors.")
    relates_to: Any = Field(default=None, alias="relatesTo")
    href: str | None = None
    method: str | None = None
    accepts: str | None = None
    action: Callable[..., Any] | None = Field(default=None, exclude=True)

    def field(self, name: str) -> dict | None:
        return next((item for item in self.value if item.get("name") == name), None)


class Input(BaseModel):
    """One input the caller must supply to proceed with a step."""

    model_config = ConfigDict(extra="allow")

    name: str
    type: str | None = None
    label: str | None = None
    required: bool | None = None
    secret: bool | None = None
    options: list[dict] | None = None
    value: Any = None


class NextStep(BaseModel):
    """Normalized description of the pending step and what it still needs."""

    name: str
    inputs: list[Input] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list, description="Required inputs with no value yet.")
    type: str | None = None
    authenticator: dict | None = None
    options: list[dict] | None = None
    idp: dict | None = None
    href: str | None = None
    can_skip: bool = False
    can_resend: bool = False


class IdxTransaction(BaseModel):
    """Caller-visible state of the exchange after one `authenticate` call."""

    status: IdxStatus
    next_step: NextStep | None = None
    messages: list[IdxMessage] = Field(default_factory=list)
    available_steps: list[str] = Field(default_factory=list)
    interaction_code: str | None = None
    context: dict = Field(default_factory=dict)
    actions: list[str] = Field(default_factory=list)

    @property
    def terminal(self) -> bool:
        return self.status in (IdxStatus.SUCCESS, IdxStatus.TERMINAL, IdxStatus.CANCELED)


class IntrospectOptions(BaseModel):
    with_credentials: bool | None = None
    interaction_handle: str | None = None
    state_handle: str | None = None
    version: str | None = None


class RemediationValues(Mapping[str, Any]):
    """
    The caller's candidate values, threaded between loop iterations.

    Immutable: every change returns a fresh bag, so a Remediator can never
    alter the values another step was constructed with.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any] | None = None, **values: Any) -> None:
        merged = dict(data or {})
        merged.update(values)
        self._data = merged

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"RemediationValues({sorted(self._data)})"

    def replace(self, **changes: Any) -> "RemediationValues":
        return RemediationValues(self._data, **changes)

    def without(self, *keys: str) -> "RemediationValues":
        return RemediationValues({k: v for k, v in self._data.items() if k not in keys})

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)
