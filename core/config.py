"""Configuration models and loading."""

import json
from pathlib import Path
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, ValidationError, field_validator

from core.exceptions import ConfigurationError

VERSION = "0.1.0"

CONFIG_DIR = Path.home() / ".config" / "prefetch-relay"
CONFIG_FILE = CONFIG_DIR / "config.json"

# Hosting platforms cap outbound calls per invocation; the primary fetch uses one.
MAX_BACKEND_REQUESTS = 32
DEFAULT_MAX_PREFETCH = 24


class ProxySettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8080
    debug: bool = False


class OriginSettings(BaseModel):
    name: str = "origin"
    base_url: str = "http://127.0.0.1:8000"
    timeout: float = 30.0
    preserve_host: bool = True

    @field_validator("base_url")
    @classmethod
    def _check_scheme(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("origin base_url must start with http:// or https://")
        return value.rstrip("/")


class PrefetchSettings(BaseModel):
    max_fetches: int = Field(default=DEFAULT_MAX_PREFETCH, ge=0, le=MAX_BACKEND_REQUESTS - 1)
    debug_header: str = "Fastly-Debug"


class LimitsSettings(BaseModel):
    max_connections: int = 100
    max_keepalive_connections: int = 20
    keep_alive_timeout: int = 5


class Config(BaseModel):
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    origin: OriginSettings = Field(default_factory=OriginSettings)
    prefetch: PrefetchSettings = Field(default_factory=PrefetchSettings)
    limits: LimitsSettings = Field(default_factory=LimitsSettings)


def load_config(config_file: Path = CONFIG_FILE) -> Config:
    """Load configuration from JSON file, creating default if needed."""
    if not config_file.exists():
        config_file.parent.mkdir(parents=True, exist_ok=True)
        default = Config()
        config_file.write_text(default.model_dump_json(indent=2))
        return default

    try:
        data = json.loads(config_file.read_text())
        return Config.model_validate(data)
    except (json.JSONDecodeError, ValidationError):
        # Backup corrupted config and recreate default
        backup = config_file.with_suffix(".json.bak")
        config_file.rename(backup)
        default = Config()
        config_file.write_text(default.model_dump_json(indent=2))
        return default


def check_origin_loop(config: Config) -> None:
    """Refuse an origin that is the relay's own listener."""
    origin = urlsplit(config.origin.base_url)
    default_port = 443 if origin.scheme == "https" else 80
    origin_port = origin.port or default_port
    local_hosts = {config.proxy.host, "localhost", "127.0.0.1", "0.0.0.0"}
    if origin.hostname in local_hosts and origin_port == config.proxy.port:
        raise ConfigurationError(
            f"origin {config.origin.base_url} points back at the relay on port {config.proxy.port}"
        )
