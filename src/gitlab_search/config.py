"""Configuration loading and persistence for gitlab-search."""

import json
import os
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any

from gitlab_search.errors import ConfigError

RC_NAME = ".gitlab-searchrc"
CONFIG_DIR = Path.home()
CONFIG_PATH = CONFIG_DIR / RC_NAME

ENV_PREFIX = "GITLAB_SEARCH_"


class Protocol(Enum):
    HTTP = "http"
    HTTPS = "https"

    @classmethod
    def parse(cls, value: "Protocol | str | None") -> "Protocol":
        """Anything other than 'http' means https."""
        if isinstance(value, Protocol):
            return value
        if value and value.strip().lower() == "http":
            return cls.HTTP
        return cls.HTTPS


@dataclass(frozen=True)
class Config:
    """Connection settings for one run."""

    domain: str = "gitlab.com"
    token: str = ""
    ignore_ssl: bool = False
    protocol: Protocol = Protocol.HTTPS
    concurrency: int = 10
    timeout: float = 30.0  # seconds, per request

    @property
    def base_url(self) -> str:
        return f"{self.protocol.value}://{self.domain}/api/v4"

    def with_overrides(self, **overrides: Any) -> "Config":
        """Return a copy with every non-None override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        if "protocol" in values:
            values["protocol"] = Protocol.parse(values["protocol"])
        return replace(self, **values)


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _parse_int(name: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid value for {name}: {value!r}") from None


def read_rc_file(path: Path) -> dict[str, Any]:
    """Read one JSON rc file, returning {} if it does not exist."""
    if not path.is_file():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Could not read config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return data


def _from_mapping(config: Config, data: dict[str, Any]) -> Config:
    """Apply rc-style keys (domain, token, ignoreSSL, protocol, concurrency, timeout)."""
    overrides: dict[str, Any] = {}
    if data.get("domain"):
        overrides["domain"] = str(data["domain"])
    if data.get("token"):
        overrides["token"] = str(data["token"])
    if data.get("ignoreSSL") is not None:
        overrides["ignore_ssl"] = _parse_bool(data["ignoreSSL"])
    if data.get("protocol"):
        overrides["protocol"] = data["protocol"]
    if data.get("concurrency"):
        overrides["concurrency"] = _parse_int("concurrency", data["concurrency"])
    if data.get("timeout"):
        try:
            overrides["timeout"] = float(data["timeout"])
        except (TypeError, ValueError):
            raise ConfigError(f"Invalid value for timeout: {data['timeout']!r}") from None
    return config.with_overrides(**overrides)


def _env_mapping(environ: dict[str, str]) -> dict[str, Any]:
    keys = {
        "DOMAIN": "domain",
        "TOKEN": "token",
        "IGNORE_SSL": "ignoreSSL",
        "PROTOCOL": "protocol",
        "CONCURRENCY": "concurrency",
        "TIMEOUT": "timeout",
    }
    return {
        rc_key: environ[ENV_PREFIX + env_key]
        for env_key, rc_key in keys.items()
        if environ.get(ENV_PREFIX + env_key)
    }


def load_config(cwd: Path | None = None, environ: dict[str, str] | None = None) -> Config:
    """Load configuration from defaults, rc files and the environment.

    Later sources win: ~/.gitlab-searchrc, then ./.gitlab-searchrc, then
    GITLAB_SEARCH_* environment variables.
    """
    cwd = cwd or Path.cwd()
    environ = dict(os.environ) if environ is None else environ

    config = Config()
    config = _from_mapping(config, read_rc_file(CONFIG_PATH))
    local_path = cwd / RC_NAME
    if local_path.resolve() != CONFIG_PATH.resolve():
        config = _from_mapping(config, read_rc_file(local_path))
    return _from_mapping(config, _env_mapping(environ))


def validate_config(config: Config) -> None:
    """Check the preconditions for talking to GitLab."""
    if not config.token:
        raise ConfigError(
            "GitLab access token is required. "
            "Run 'gitlab-search setup' or pass --token <your-token>"
        )
    if not config.domain:
        raise ConfigError("GitLab domain is required")
    if config.concurrency < 1:
        raise ConfigError(f"Concurrency must be at least 1, got {config.concurrency}")


def save_config(config: Config, directory: Path | None = None) -> Path:
    """Write config as a JSON rc file and return its path."""
    directory = directory or CONFIG_DIR
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / RC_NAME
    data = {
        "domain": config.domain,
        "token": config.token,
        "ignoreSSL": config.ignore_ssl,
        "protocol": config.protocol.value,
        "concurrency": config.concurrency,
    }
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    path.chmod(0o600)
    return path
