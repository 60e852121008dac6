"""Configuration models and loading."""

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from core.exceptions import ConfigurationError

DEFAULT_ORIGINS = "http://localhost:3000,https://www.figma.com"


class ProxySettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str = "127.0.0.1"
    port: int = 8080
    mount_prefix: str = "/api/floristone"
    timeout: float = 30.0

    @field_validator("mount_prefix")
    @classmethod
    def _normalize_prefix(cls, value: str) -> str:
        return "/" + value.strip("/")


class UpstreamSettings(BaseModel):
    """Base URL per `api` selector. Every base ends with a slash."""

    model_config = ConfigDict(frozen=True)

    flowershop: str = "https://www.floristone.com/api/flowershop"
    tree: str = "https://www.floristone.com/api/tree"
    cart: str = "https://www.floristone.com/api/cart"

    @field_validator("flowershop", "tree", "cart")
    @classmethod
    def _ensure_trailing_slash(cls, value: str) -> str:
        return value if value.endswith("/") else value + "/"

    def as_mapping(self) -> dict[str, str]:
        return self.model_dump()


class CredentialSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    api_key: str = ""
    api_password: str = Field(default="", repr=False)

    @property
    def is_complete(self) -> bool:
        return bool(self.api_key and self.api_password)


class CorsSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    allowed_origins: tuple[str, ...] = tuple(DEFAULT_ORIGINS.split(","))

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if isinstance(value, str):
            value = value.split(",")
        origins = tuple(o.strip() for o in value if o and o.strip())
        if not origins:
            raise ValueError("at least one allowed origin is required")
        return origins


class Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    proxy: ProxySettings = Field(default_factory=ProxySettings)
    upstreams: UpstreamSettings = Field(default_factory=UpstreamSettings)
    credentials: CredentialSettings = Field(default_factory=CredentialSettings)
    cors: CorsSettings = Field(default_factory=CorsSettings)


# (section, field) for every environment variable we read
ENV_VARS = {
    "PROXY_HOST": ("proxy", "host"),
    "PROXY_PORT": ("proxy", "port"),
    "PROXY_MOUNT_PREFIX": ("proxy", "mount_prefix"),
    "PROXY_TIMEOUT": ("proxy", "timeout"),
    "F1_FLOWERSHOP_BASE": ("upstreams", "flowershop"),
    "F1_TREE_BASE": ("upstreams", "tree"),
    "F1_CART_BASE": ("upstreams", "cart"),
    "F1_API_KEY": ("credentials", "api_key"),
    "F1_API_PASSWORD": ("credentials", "api_password"),
    "ALLOWED_ORIGINS": ("cors", "allowed_origins"),
}


def load_config(environ: Mapping[str, str] | None = None) -> Config:
    """Build the process configuration from environment variables.

    Unset or empty variables fall back to the model defaults. Missing
    credentials are allowed here; requests are refused with a 500 instead.
    """
    if environ is None:
        environ = os.environ

    data: dict[str, dict[str, str]] = {}
    for name, (section, field) in ENV_VARS.items():
        value = environ.get(name)
        if value:
            data.setdefault(section, {})[field] = value

    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
