"""Load, save and resolve the agape YAML configuration."""

import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from agape.config.schema import AgapeConfig

DEFAULT_CONFIG_PATH = Path.home() / ".agape" / "agape.yaml"


class ConfigError(Exception):
    """Raised when the config file cannot be read or does not validate."""


def load_config(path: Path | None = None) -> AgapeConfig:
    """Read the config at ``path`` (default ``~/.agape/agape.yaml``).

    A missing or empty file yields the defaults.

    Raises:
        ConfigError: If the file is unreadable, not YAML or fails validation
    """
    path = path or DEFAULT_CONFIG_PATH
    if not path.exists():
        return AgapeConfig()

    try:
        data = yaml.safe_load(path.read_text()) or {}
        return AgapeConfig.model_validate(data)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e


def save_config(config: AgapeConfig, path: str | Path | None = None) -> None:
    """Write ``config`` as YAML, creating parent directories."""
    path = Path(path) if path else DEFAULT_CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(config.model_dump(), default_flow_style=False, sort_keys=False))


def resolve_credentials(config: AgapeConfig) -> tuple[str, str]:
    """Resolve the backend URL and anon key.

    Environment variables named by the config win over values in the file.

    Args:
        config: Loaded configuration

    Returns:
        Tuple of (url, anon_key)

    Raises:
        ConfigError: If either value is missing
    """
    backend = config.backend
    url = os.environ.get(backend.url_env) or backend.url
    anon_key = os.environ.get(backend.anon_key_env) or backend.anon_key

    if not url or not anon_key:
        raise ConfigError(
            f"Backend credentials missing: set {backend.url_env} and {backend.anon_key_env}, "
            "or backend.url and backend.anon_key in the config file"
        )

    return url.rstrip("/"), anon_key
