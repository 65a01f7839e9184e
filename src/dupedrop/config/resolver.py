"""Configuration resolution helpers."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Mapping

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import DupedropConfig

ENV_PREFIX = "DUPEDROP__"


def resolve_with_precedence(
    *,
    defaults: DupedropConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> DupedropConfig:
    """Merge configuration layers, later layers winning.

    The order is defaults, then the config file, then environment variables,
    then CLI flags. Keys in any layer may be dotted (``previews.enabled``).

    Raises:
        ConfigError: If a layer is malformed or the merged result is invalid.
    """
    merged = defaults.model_dump(mode="python")
    layers = (("file", file_overrides), ("environment", env_overrides), ("cli", cli_overrides))
    for layer_name, layer in layers:
        if layer is None:
            continue
        merged = deep_merge(merged, expand_dotted(layer, layer_name=layer_name))

    try:
        return DupedropConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def flatten_for_env(config: DupedropConfig) -> Dict[str, str]:
    """Render the config as ``DUPEDROP__SECTION__KEY`` environment variables."""
    flat: Dict[str, str] = {}

    def _walk(prefix: list[str], value: Any) -> None:
        if isinstance(value, dict):
            for key, child in value.items():
                _walk(prefix + [str(key)], child)
            return
        env_key = ENV_PREFIX + "__".join(part.upper() for part in prefix)
        if isinstance(value, list):
            flat[env_key] = yaml.safe_dump(value, default_flow_style=True).strip()
        elif value is None:
            flat[env_key] = "null"
        else:
            flat[env_key] = str(value)

    for section, values in config.model_dump(mode="python").items():
        _walk([str(section)], values)
    return flat


def parse_env(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``DUPEDROP__`` variables into a nested override mapping.

    Values are parsed as YAML scalars so ``"false"`` and ``"8"`` become typed.
    """
    overrides: dict[str, Any] = {}
    for key, raw_value in env.items():
        if not key.startswith(ENV_PREFIX):
            continue
        segments = [segment.lower() for segment in key[len(ENV_PREFIX) :].split("__") if segment]
        if not segments:
            continue
        try:
            value = yaml.safe_load(raw_value)
        except yaml.YAMLError:
            value = raw_value
        assign_nested(overrides, segments, value)
    return overrides


def assign_nested(target: dict[str, Any], path: list[str], value: Any) -> None:
    """Set ``value`` at ``path`` inside ``target``, creating sections as needed.

    Raises:
        ConfigError: If an intermediate segment already holds a scalar.
    """
    node = target
    for segment in path[:-1]:
        child = node.setdefault(segment, {})
        if not isinstance(child, dict):
            raise ConfigError(f"Cannot assign {'.'.join(path)}: {segment} is not a section.")
        node = child
    node[path[-1]] = value


def expand_dotted(source: Mapping[str, Any], *, layer_name: str) -> dict[str, Any]:
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{layer_name.capitalize()} overrides must be a mapping.")

    expanded: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{layer_name.capitalize()} override keys must be strings.")
        if isinstance(value, MappingABC):
            value = expand_dotted(value, layer_name=layer_name)
        path = key.split(".")
        existing: Any = expanded
        for segment in path[:-1]:
            existing = existing.get(segment) if isinstance(existing, dict) else None
        if isinstance(existing, dict) and isinstance(existing.get(path[-1]), dict) and isinstance(value, dict):
            value = deep_merge(existing[path[-1]], value)
        try:
            assign_nested(expanded, path, value)
        except ConfigError as exc:
            raise ConfigError(f"{layer_name.capitalize()} override conflict: {exc}") from exc
    return expanded


def deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = {key: deepcopy(value) for key, value in base.items()}
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, MappingABC) and isinstance(current, MappingABC):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = [
    "ENV_PREFIX",
    "resolve_with_precedence",
    "flatten_for_env",
    "parse_env",
    "assign_nested",
    "expand_dotted",
    "deep_merge",
]
