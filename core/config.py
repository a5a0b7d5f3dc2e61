"""Configuration models and loading."""

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from core.cdn import DEFAULT_CDN_URL

CONFIG_DIR = Path.home() / ".config" / "gh-proxy"
CONFIG_FILE = CONFIG_DIR / "config.json"


class ProxySettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str = "127.0.0.1"
    port: int = 8080
    debug: bool = False


class RoutingSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Base URL for the static pages served when a path is not a GitHub resource
    asset_url: str = "https://t.me/CMLiussss"
    # Mount point, e.g. "/gh/" when served as example.com/gh/*
    prefix: str = "/"
    jsdelivr: bool = False
    cdn_url: str = DEFAULT_CDN_URL
    # Only paths containing one of these substrings are forwarded; empty allows all
    whitelist: tuple[str, ...] = ()
    max_redirect_hops: int = Field(default=10, ge=1)

    @field_validator("prefix")
    @classmethod
    def _check_prefix(cls, value: str) -> str:
        if not value.startswith("/") or not value.endswith("/"):
            raise ValueError("prefix must start and end with '/'")
        return value


class LimitsSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    upstream_timeout: float | None = None
    max_connections: int = 100
    max_keepalive_connections: int = 20
    keep_alive_timeout: int = 5


class Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    proxy: ProxySettings = Field(default_factory=ProxySettings)
    routing: RoutingSettings = Field(default_factory=RoutingSettings)
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
