# config.py
# Client configuration. Values come from the environment (optionally a .env
# file) and are validated once, up front.

import os
import re

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from idx_flow.errors import ConfigurationError

IDX_API_VERSION = "1.0.0"
SUPPORTED_VERSIONS = frozenset({IDX_API_VERSION})


class IdxConfig(BaseModel):
    """Settings for one authorization server."""

    issuer: str = Field(..., description="Issuer URL, e.g. https://example.okta.com/oauth2/default.")
    version: str = Field(default=IDX_API_VERSION, description="IDX protocol version pinned on every request.")
    transaction_file: str | None = Field(
        default=None,
        description="Persist in-flight documents to this JSON file. In-memory when unset.",
    )
    http_timeout: float = Field(default=10.0, gt=0)

    @field_validator("issuer")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError("issuer must not be empty")
        return value

    @classmethod
    def from_env(cls) -> "IdxConfig":
        load_dotenv()
        data: dict = {"issuer": os.getenv("IDX_ISSUER", "")}
        if os.getenv("IDX_API_VERSION"):
            data["version"] = os.getenv("IDX_API_VERSION")
        if os.getenv("IDX_TRANSACTION_FILE"):
            data["transaction_file"] = os.getenv("IDX_TRANSACTION_FILE")
        if os.getenv("IDX_HTTP_TIMEOUT"):
            data["http_timeout"] = os.getenv("IDX_HTTP_TIMEOUT")
        return cls.model_validate(data)


def get_oauth_domain(issuer: str) -> str:
    """The org domain: everything before the `/oauth2` segment of the issuer."""
    return issuer.split("/oauth2")[0]


def validate_version_config(version: str | None) -> None:
    """Reject empty, malformed, or unsupported protocol versions."""
    if not version:
        raise ConfigurationError("version is required")
    if re.sub(r"[^0-9a-zA-Z._-]", "", version) != version:
        raise ConfigurationError("invalid version supplied - version is required and uses semver syntax")
    if version not in SUPPORTED_VERSIONS:
        raise ConfigurationError(f"Unknown api version: {version}. Use an exact semver version.")
