"""Connection settings for a migration run, from .env / environment or YAML."""

import os
from pathlib import Path
from typing import Mapping, Optional

import yaml
from dotenv import dotenv_values
from pydantic import BaseModel, Field

from directus_migrate.errors import ConfigError
from directus_migrate.models.connection import Connection

ENV_KEYS = ("BASE_URL", "BASE_TOKEN", "TARGET_URL", "TARGET_TOKEN", "FORCE")

BASE_KEYS = ("base_url", "base_token")
CONNECTION_KEYS = BASE_KEYS + ("target_url", "target_token")

_TRUE_VALUES = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_VALUES = {"0", "f", "F", "FALSE", "false", "False"}


def parse_bool(value) -> bool:
    """Strict boolean parsing; anything outside the accepted spellings is an error."""
    if isinstance(value, bool):
        return value
    if value is None:
        raise ConfigError("FORCE is not set")
    text = str(value).strip()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigError(f"Invalid boolean for FORCE: {value!r}")


def _read_env(
    env_file: Optional[str | Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> dict:
    """
    Raw values from a .env file overlaid by the process environment.
    env_file defaults to ./.env; a missing default file is not an error.
    """
    if env_file is not None and not Path(env_file).is_file():
        raise ConfigError(f"Env file not found: {env_file}")
    path = Path(env_file) if env_file is not None else Path.cwd() / ".env"

    values: dict[str, Optional[str]] = dict(dotenv_values(path)) if path.is_file() else {}
    env = os.environ if environ is None else environ
    for key in ENV_KEYS:
        if env.get(key) is not None:
            values[key] = env[key]
    return {key.lower(): values.get(key) for key in ENV_KEYS}


def _read_yaml(path: str | Path) -> dict:
    """Raw values from YAML. Supports nested (base/target) or flat (base_url, ...) structure."""
    try:
        data = yaml.safe_load(Path(path).read_text()) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    def _get(side: str, key: str):
        nested = data.get(side) or {}
        if not isinstance(nested, dict):
            nested = {}
        return nested.get(key, data.get(f"{side}_{key}"))

    return {
        "base_url": _get("base", "url"),
        "base_token": _get("base", "token"),
        "target_url": _get("target", "url"),
        "target_token": _get("target", "token"),
        "force": data.get("force"),
    }


def _require(values: dict, keys: tuple[str, ...]) -> dict[str, str]:
    missing = [k.upper() for k in keys if values.get(k) is None or not str(values[k]).strip()]
    if missing:
        raise ConfigError(f"Missing required settings: {', '.join(missing)}")
    return {k: str(values[k]).strip() for k in keys}


def _base_connection(values: dict) -> Connection:
    conn = _require(values, BASE_KEYS)
    return Connection(url=conn["base_url"], token=conn["base_token"])


def base_connection_from_env(
    env_file: Optional[str | Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Connection:
    """Only BASE_URL and BASE_TOKEN are required (read-only use of the base instance)."""
    return _base_connection(_read_env(env_file, environ))


def base_connection_from_yaml(path: str | Path) -> Connection:
    return _base_connection(_read_yaml(path))


class MigrationSettings(BaseModel):
    """Both instances' connection parameters plus the force flag."""

    base_url: str
    base_token: str = Field(..., repr=False)
    target_url: str
    target_token: str = Field(..., repr=False)
    force: bool = False

    @classmethod
    def from_env(
        cls,
        env_file: Optional[str | Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "MigrationSettings":
        """Load from a .env file overlaid by the process environment."""
        return cls._build(_read_env(env_file, environ))

    @classmethod
    def from_yaml(cls, path: str | Path) -> "MigrationSettings":
        """Load from YAML. Supports nested (base/target) or flat (base_url, ...) structure."""
        return cls._build(_read_yaml(path))

    @classmethod
    def _build(cls, values: dict) -> "MigrationSettings":
        return cls(**_require(values, CONNECTION_KEYS), force=parse_bool(values.get("force")))

    def base_connection(self) -> Connection:
        return Connection(url=self.base_url, token=self.base_token)

    def target_connection(self) -> Connection:
        return Connection(url=self.target_url, token=self.target_token)

    def mask(self) -> dict:
        """Return a dict copy with tokens masked, for logging."""
        data = self.model_dump()
        for k in ("base_token", "target_token"):
            if data[k]:
                data[k] = "****"
        return data
