"""xerrors configuration from YAML file and environment.

Settings live under an ``xerrors:`` section:

    xerrors:
      stack_depth: 32
      internal_code: 500
      internal_message: internal error
      log_level: INFO
      json_logs: false

The file is taken from the ``config_path`` argument, else from the
XERRORS_CONFIG environment variable; without either, defaults are used.
Environment variables ARE supported using ${VAR_NAME} syntax in YAML files,
and XERRORS_<FIELD> variables take precedence over file values.
"""

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "XERRORS_CONFIG"
ENV_PREFIX = "XERRORS_"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file and return dict."""
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR_NAME} and ${VAR_NAME:-default} environment variables in config data."""
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        pattern = r"\$\{([^}:]+)(?::-(([^}]*))?)?\}"

        def replacer(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else match.group(0)
            return os.getenv(var_name, default_value)

        return re.sub(pattern, replacer, data)
    else:
        return data


def get_config_value(env_var: str, yaml_value: Any, default: Any = None) -> Any:
    """Resolve a setting: environment variable, then YAML value, then default."""
    env_value = os.getenv(env_var)
    if env_value:
        return env_value
    if yaml_value is not None and yaml_value != "":
        return yaml_value
    return default


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


@dataclass
class ErrorsConfig:
    """Settings for trace capture, boundary defaults and logging.

    Attributes:
        stack_depth: Maximum frames kept per stack snapshot
        internal_code: Code given to errors that reach a boundary unclassified
        internal_message: Message given to errors that reach a boundary unclassified
        log_level: Level for the xerrors logger
        json_logs: Emit JSON lines instead of console text
    """

    stack_depth: int = 32
    internal_code: int = 500
    internal_message: str = "internal error"
    log_level: str = "INFO"
    json_logs: bool = False

    def validate(self) -> None:
        """Raise ValueError describing the first invalid setting."""
        if self.stack_depth < 1:
            raise ValueError(f"stack_depth must be >= 1, got {self.stack_depth}")
        if self.internal_code == 0:
            raise ValueError("internal_code must not be 0 (0 means unclassified)")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}"
            )


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> ErrorsConfig:
    """Load configuration from an optional YAML file, overrides and environment.

    Precedence: XERRORS_<FIELD> environment variables, then overrides, then
    the file's ``xerrors:`` section, then dataclass defaults.

    Raises:
        FileNotFoundError: config_path (or XERRORS_CONFIG) names a missing file
        ValueError: the file has no ``xerrors:`` section, or a value is invalid
    """
    if config_path is None and os.getenv(CONFIG_ENV_VAR):
        config_path = Path(os.environ[CONFIG_ENV_VAR])

    section: Dict[str, Any] = {}
    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        logger.info(f"Loading configuration from file: {config_path}")
        yaml_data = _expand_env_vars(load_yaml(config_path))
        if "xerrors" not in yaml_data:
            raise ValueError(f"Invalid config file {config_path}: missing 'xerrors:' section")
        section = dict(yaml_data["xerrors"] or {})

    if overrides:
        logger.debug(f"Applying overrides: {list(overrides.keys())}")
        section.update(overrides)

    defaults = ErrorsConfig()
    try:
        config = ErrorsConfig(
            stack_depth=int(
                get_config_value(
                    f"{ENV_PREFIX}STACK_DEPTH", section.get("stack_depth"), defaults.stack_depth
                )
            ),
            internal_code=int(
                get_config_value(
                    f"{ENV_PREFIX}INTERNAL_CODE",
                    section.get("internal_code"),
                    defaults.internal_code,
                )
            ),
            internal_message=str(
                get_config_value(
                    f"{ENV_PREFIX}INTERNAL_MESSAGE",
                    section.get("internal_message"),
                    defaults.internal_message,
                )
            ),
            log_level=str(
                get_config_value(
                    f"{ENV_PREFIX}LOG_LEVEL", section.get("log_level"), defaults.log_level
                )
            ).upper(),
            json_logs=_to_bool(
                get_config_value(
                    f"{ENV_PREFIX}JSON_LOGS", section.get("json_logs"), defaults.json_logs
                )
            ),
        )
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid xerrors configuration: {e}") from e

    config.validate()
    return config


_config: Optional[ErrorsConfig] = None
_DEFAULTS = ErrorsConfig()


def get_config() -> ErrorsConfig:
    """Get or load the singleton config instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def current_config() -> ErrorsConfig:
    """Return the loaded config, or dataclass defaults. Never reads files or env."""
    if _config is None:
        return _DEFAULTS
    return _config


def set_config(config: ErrorsConfig) -> None:
    """Set the singleton config instance (useful for testing)."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the singleton config instance (forces reload on next get_config() call)."""
    global _config
    _config = None
