"""Configuration models and loading."""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import httpx
from pydantic import BaseModel, Field, ValidationError

from core.exceptions import ConfigurationError

DEFAULT_OPENAI_URL = "https://api.deepinfra.com/v1/openai"

# Environment variable -> (section, field)
ENV_FIELDS: dict[str, tuple[str, str]] = {
    "OPENAI_URL": ("upstream", "base_url"),
    "OPENAI_API_KEY": ("upstream", "api_key"),
    "HOST": ("proxy", "host"),
    "PORT": ("proxy", "port"),
    "FAKE_IP_CIDR": ("identity", "cidr"),
    "INJECT_REAL_IP": ("identity", "inject_real_ip"),
    "CONNECT_TIMEOUT": ("limits", "connect_timeout"),
    "READ_TIMEOUT": ("limits", "read_timeout"),
    "WRITE_TIMEOUT": ("limits", "write_timeout"),
    "IDLE_TIMEOUT": ("limits", "idle_timeout"),
    "LOG_DIR": ("logging", "log_dir"),
}


@dataclass(frozen=True)
class UpstreamTarget:
    """Where forwarded requests go."""

    scheme: str
    host: str
    base_path: str

    @classmethod
    def parse(cls, url: str) -> "UpstreamTarget":
        """Parse the upstream base URL, e.g. ``https://api.example.com/v1/openai``."""
        try:
            parsed = httpx.URL(url)
        except httpx.InvalidURL as e:
            raise ConfigurationError(f"Invalid upstream URL {url!r}: {e}") from e
        if parsed.scheme not in ("http", "https"):
            raise ConfigurationError(f"Upstream URL must be http or https: {url!r}")
        if not parsed.host:
            raise ConfigurationError(f"Upstream URL has no host: {url!r}")
        host = parsed.netloc.decode("ascii")
        return cls(scheme=parsed.scheme, host=host, base_path=parsed.path.rstrip("/"))

    @property
    def origin(self) -> str:
        return f"{self.scheme}://{self.host}"


class ProxySettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)


class UpstreamSettings(BaseModel):
    base_url: str = DEFAULT_OPENAI_URL
    api_key: str | None = None


class IdentitySettings(BaseModel):
    cidr: str = "32.250.0.0/14"
    inject_real_ip: bool = True


class LimitsSettings(BaseModel):
    """Timeouts in seconds; generous because responses may stream for minutes."""

    connect_timeout: float = Field(default=30.0, gt=0)
    read_timeout: float = Field(default=300.0, gt=0)
    write_timeout: float = Field(default=300.0, gt=0)
    idle_timeout: int = Field(default=600, gt=0)


class LoggingSettings(BaseModel):
    log_dir: Path = Path.cwd() / "logs"
    dashboard: bool = True


class Config(BaseModel):
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    upstream: UpstreamSettings = Field(default_factory=UpstreamSettings)
    identity: IdentitySettings = Field(default_factory=IdentitySettings)
    limits: LimitsSettings = Field(default_factory=LimitsSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def upstream_target(self) -> UpstreamTarget:
        return UpstreamTarget.parse(self.upstream.base_url)


def load_config(environ: Mapping[str, str] | None = None) -> Config:
    """Build configuration from environment variables.

    Unset or empty variables keep their defaults. Raises ConfigurationError
    when a value does not validate or the upstream URL is unusable.
    """
    environ = os.environ if environ is None else environ
    data: dict[str, dict[str, str]] = {}
    for env_name, (section, field) in ENV_FIELDS.items():
        value = environ.get(env_name)
        if value:
            data.setdefault(section, {})[field] = value

    try:
        config = Config.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    config.upstream_target()
    return config


def unset_variables(environ: Mapping[str, str] | None = None) -> list[str]:
    """Names of recognised variables that fall back to their defaults."""
    environ = os.environ if environ is None else environ
    return [name for name in ENV_FIELDS if not environ.get(name)]
