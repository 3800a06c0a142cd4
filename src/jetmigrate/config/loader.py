"""Configuration loading utilities."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from jetmigrate.core.errors import ConfigError

from .environment import EnvironmentSettings, build_env_override_mapping, load_environment_settings
from .models import MigrateConfig

__all__ = ["load_raw_config", "apply_cli_overrides", "load_config"]


def load_raw_config(path: Path) -> dict[str, Any]:
    """Load a YAML configuration file; an empty file yields an empty mapping."""

    resolved = Path(path).expanduser()
    try:
        with resolved.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle)
    except FileNotFoundError as exc:
        raise ConfigError(f"Configuration file not found: {resolved}") from exc
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Unable to read configuration file {resolved}: {exc}") from exc

    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise ConfigError(f"Configuration root must be a mapping: {resolved}")
    return dict(payload)


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def apply_cli_overrides(
    payload: Mapping[str, Any],
    cli_overrides: Mapping[str, Any] | None,
) -> dict[str, Any]:
    """Apply dotted-key overrides (``logging.level``); ``None`` values are skipped."""

    merged: dict[str, Any] = dict(payload)
    if not cli_overrides:
        return merged
    tree: dict[str, Any] = {}
    for dotted_key, value in cli_overrides.items():
        if value is None:
            continue
        *parents, leaf = dotted_key.split(".")
        node = tree
        for key in parents:
            node = node.setdefault(key, {})
        node[leaf] = value
    return _deep_merge(merged, tree)


def load_config(
    config_path: str | Path | None = None,
    *,
    cli_overrides: Mapping[str, Any] | None = None,
    environment_settings: EnvironmentSettings | None = None,
) -> MigrateConfig:
    """Load, merge, and validate the run configuration.

    Layer order: defaults → YAML file → ``JETMIGRATE_*`` environment → CLI
    options.

    :raises ConfigError: when any layer is unreadable or the result is invalid.
    """

    merged: dict[str, Any] = {}
    if config_path is not None:
        merged = load_raw_config(Path(config_path))

    try:
        env_settings = environment_settings or load_environment_settings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid environment configuration: {exc}") from exc
    merged = _deep_merge(merged, build_env_override_mapping(env_settings))
    merged = apply_cli_overrides(merged, cli_overrides)

    try:
        return MigrateConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
