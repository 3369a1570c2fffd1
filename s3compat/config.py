"""Connection configuration for s3compat.

Supports two configuration sources:
1. Environment variables (for CI/CD) - takes priority
2. connections.json file (for local development)

Environment Variable Format:
    S3_CONNECTION_{KEY}=provider_id|region
    {KEY}_ACCESS_KEY=xxx
    {KEY}_SECRET_KEY=xxx
    {KEY}_PARAMS=name=value,name=value     (optional)

Example:
    S3_CONNECTION_R2=cloudflare_r2|eu
    R2_ACCESS_KEY=your-access-key
    R2_SECRET_KEY=your-secret-key
    R2_PARAMS=account_id=0123456789abcdef

JSON Format:
    {
        "r2": {
            "provider": "cloudflare_r2",
            "region": "eu",
            "access_key": "...",
            "secret_key": "...",
            "params": {"account_id": "0123456789abcdef"},
            "enabled": true
        }
    }
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from s3compat.client import S3Client
from s3compat.errors import InvalidConfiguration
from s3compat.models import Credentials
from s3compat.providers import Provider, create_provider
from s3compat.transport import Transport

ENV_PREFIX = "S3_CONNECTION_"
DEFAULT_CONFIG_PATH = "connections.json"


class ConfigError(InvalidConfiguration):
    """Raised when configuration loading fails."""

    pass


# Required fields for a connection in connections.json
REQUIRED_FIELDS = [
    "provider",
    "access_key",
    "secret_key",
]


@dataclass
class ConnectionConfig:
    """A named connection: provider, region, credentials and parameters."""

    key: str
    provider_id: str
    access_key: str
    secret_key: str = field(repr=False)
    region: Optional[str] = None
    params: dict[str, str] = field(default_factory=dict)
    enabled: bool = True

    @property
    def credentials(self) -> Credentials:
        return Credentials(self.access_key, self.secret_key)

    def build_provider(self) -> Provider:
        """Resolve the provider for this connection.

        Raises:
            InvalidConfiguration: If the provider, region or parameters
                are rejected
        """
        return create_provider(self.provider_id, self.region or None, **self.params)

    def build_client(self, transport: Optional[Transport] = None, **kwargs) -> S3Client:
        return S3Client(self.build_provider(), self.credentials, transport=transport, **kwargs)


def parse_params(value: str) -> dict[str, str]:
    """Parse 'name=value,name=value' into a dict.

    Raises:
        ConfigError: If an entry has no '='
    """
    params: dict[str, str] = {}
    for entry in value.split(","):
        entry = entry.strip()
        if not entry:
            continue
        name, sep, param_value = entry.partition("=")
        if not sep or not name.strip():
            raise ConfigError(f"Invalid parameter entry: {entry!r}. Expected name=value")
        params[name.strip()] = param_value.strip()
    return params


def load_from_json(config_path: str) -> dict[str, ConnectionConfig]:
    """Load connections from a JSON file.

    Args:
        config_path: Path to the connections.json file.

    Returns:
        Dictionary mapping connection keys to ConnectionConfig objects.
        Only enabled connections are included.

    Raises:
        ConfigError: If file doesn't exist, contains invalid JSON,
                    or is missing required fields.
    """
    path = Path(config_path)

    if not path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a JSON object of connections")

    connections: dict[str, ConnectionConfig] = {}

    for key, config in data.items():
        if not isinstance(config, dict):
            raise ConfigError(f"Connection '{key}' must be a JSON object")

        # Skip disabled connections
        if not config.get("enabled", True):
            continue

        for required in REQUIRED_FIELDS:
            if required not in config:
                raise ConfigError(
                    f"Missing required field '{required}' for connection '{key}'"
                )

        params = config.get("params", {})
        if not isinstance(params, dict):
            raise ConfigError(f"'params' for connection '{key}' must be an object")

        connections[key] = ConnectionConfig(
            key=key,
            provider_id=config["provider"],
            access_key=config["access_key"],
            secret_key=config["secret_key"],
            region=config.get("region") or None,
            params={name: str(value) for name, value in params.items()},
            enabled=True,
        )

    return connections


def load_from_env() -> dict[str, ConnectionConfig]:
    """Load connections from environment variables.

    Discovers connections by looking for S3_CONNECTION_* variables. For each
    one, expects corresponding credential variables.

    Returns:
        Dictionary mapping connection keys to ConnectionConfig objects.

    Raises:
        ConfigError: If environment variables are malformed or
                    required credential variables are missing.
    """
    connections: dict[str, ConnectionConfig] = {}

    for env_key, env_value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue

        # e.g. "S3_CONNECTION_R2" -> "R2"
        key = env_key[len(ENV_PREFIX):]

        parts = env_value.split("|")
        if len(parts) not in (1, 2) or not parts[0].strip():
            raise ConfigError(
                f"Invalid format for {env_key}. Expected: provider_id|region"
            )
        provider_id = parts[0].strip()
        region = parts[1].strip() if len(parts) == 2 else ""

        access_key_var = f"{key}_ACCESS_KEY"
        secret_key_var = f"{key}_SECRET_KEY"

        access_key = os.environ.get(access_key_var)
        if not access_key:
            raise ConfigError(f"Missing environment variable: {access_key_var}")

        secret_key = os.environ.get(secret_key_var)
        if not secret_key:
            raise ConfigError(f"Missing environment variable: {secret_key_var}")

        connections[key] = ConnectionConfig(
            key=key,
            provider_id=provider_id,
            access_key=access_key,
            secret_key=secret_key,
            region=region or None,
            params=parse_params(os.environ.get(f"{key}_PARAMS", "")),
            enabled=True,
        )

    return connections


def has_env_connections() -> bool:
    """Check if any S3_CONNECTION_* environment variables exist."""
    return any(key.startswith(ENV_PREFIX) for key in os.environ)


def load_connections(
    config_path: str = DEFAULT_CONFIG_PATH,
) -> dict[str, ConnectionConfig]:
    """Load connections with environment priority.

    Priority order:
    1. Environment variables (if any S3_CONNECTION_* vars exist)
    2. connections.json file

    Args:
        config_path: Path to connections.json (used as fallback).

    Returns:
        Dictionary mapping connection keys to ConnectionConfig objects.

    Raises:
        ConfigError: If no connections are configured or all are disabled.
    """
    connections: dict[str, ConnectionConfig] = {}

    if has_env_connections():
        connections = load_from_env()
    elif Path(config_path).exists():
        connections = load_from_json(config_path)

    if not connections:
        raise ConfigError(
            "No connections configured. Set S3_CONNECTION_* environment variables "
            "or create a connections.json file with at least one enabled connection."
        )

    return connections


def select_connection(
    connections: dict[str, ConnectionConfig],
    name: Optional[str] = None,
) -> ConnectionConfig:
    """Pick a connection by key, or the only one when no key is given.

    Raises:
        ConfigError: If the key is unknown or the choice is ambiguous
    """
    if name:
        if name not in connections:
            known = ", ".join(sorted(connections))
            raise ConfigError(f"Unknown connection '{name}'. Configured: {known}")
        return connections[name]

    if len(connections) > 1:
        known = ", ".join(sorted(connections))
        raise ConfigError(
            f"Several connections configured ({known}); choose one with --connection"
        )
    return next(iter(connections.values()))
