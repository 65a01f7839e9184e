"""Configuration management for dupedrop."""

from __future__ import annotations

import os
import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import DupedropConfig
from .resolver import assign_nested, flatten_for_env, parse_env, resolve_with_precedence

DEFAULT_CONFIG_PATH = Path("~/.dupedrop/config.yaml")
_CONFIG_HEADER = textwrap.dedent(
    """\
    # dupedrop configuration file
    # Manage via `dupedrop config set KEY --value VALUE` or edit by hand.
    """
)


class ConfigManager:
    """Load and persist the user configuration file."""

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def config_path(self) -> Path:
        """Return the resolved configuration path."""
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = False,
    ) -> DupedropConfig:
        """Return the effective configuration.

        Args:
            cli_overrides: Highest-precedence overrides, dotted keys allowed.
            include_env: Whether ``DUPEDROP__*`` environment variables apply.
            ensure_file: Write a default file first when none exists.

        Raises:
            ConfigError: If the file cannot be parsed or values are invalid.
        """
        if ensure_file:
            self.ensure_exists()

        return resolve_with_precedence(
            defaults=DupedropConfig(),
            file_overrides=self._read_file(),
            env_overrides=parse_env(self._env) if include_env else None,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return raw overrides stored on disk."""
        return self._read_file()

    def save(self, config: DupedropConfig | Mapping[str, Any]) -> None:
        """Persist configuration data to disk."""
        if isinstance(config, DupedropConfig):
            data = config.model_dump(mode="python")
        else:
            data = dict(config)
        self._write_file(data)

    def set_value(self, key: str, value: Any) -> DupedropConfig:
        """Validate and persist a single dotted ``key``.

        Returns:
            DupedropConfig: Configuration resolved from the updated file.
        """
        segments = [segment.strip() for segment in key.split(".") if segment.strip()]
        if not segments:
            raise ConfigError("KEY must be a dotted path such as 'previews.enabled'.")
        data = self._read_file()
        assign_nested(data, segments, value)
        resolved = resolve_with_precedence(defaults=DupedropConfig(), file_overrides=data)
        self._write_file(data)
        return resolved

    def ensure_exists(self) -> Path:
        """Create a configuration file with defaults if one does not exist."""
        if not self._config_path.exists():
            self._write_file(DupedropConfig().model_dump(mode="python"))
        return self._config_path

    def read_text(self) -> str:
        """Return the current configuration file contents."""
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")

    def _read_file(self) -> dict[str, Any]:
        if not self._config_path.exists():
            return {}

        try:
            raw = yaml.safe_load(self._config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc

        if not isinstance(raw, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")
        return raw

    def _write_file(self, data: Mapping[str, Any]) -> None:
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        body = yaml.safe_dump(dict(data), sort_keys=False)
        self._config_path.write_text(
            f"{_CONFIG_HEADER}# Last updated: {stamp}\n{body}", encoding="utf-8"
        )


__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "DupedropConfig",
    "resolve_with_precedence",
    "flatten_for_env",
    "ConfigError",
]
