# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/certrot/config/loader.py

import logging
import os
import yaml
from pathlib import Path

from pydantic import ValidationError

from ..errors import ConfigError
from .models import RotationConfig

log = logging.getLogger("certrot")


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Recursively merge *override* into *base* (mutates base).
    Only overwrites when the override value is non-empty.
    """
    for key, value in override.items():
        if (
            key in base
            and isinstance(base[key], dict)
            and isinstance(value, dict)
        ):
            _deep_merge(base[key], value)
        else:
            if value not in (None, ""):
                base[key] = value
    return base


def _find_overrides_file(config_path: Path) -> Path | None:
    """
    Locate overrides.yaml using this priority:

    1. CERTROT_OVERRIDES_FILE environment variable (explicit override)
    2. overrides.yaml in the same directory as the rotation config
    """
    env = os.environ.get("CERTROT_OVERRIDES_FILE")
    if env:
        p = Path(env)
        if p.is_file():
            return p
        log.warning("CERTROT_OVERRIDES_FILE=%s does not exist, skipping", env)
        return None

    p = config_path.parent / "overrides.yaml"
    if p.is_file() and p != config_path:
        return p

    return None


def _load_yaml(path: Path) -> dict:
    """Load a YAML file, expanding ${ENV_VAR} references."""
    raw = path.read_text()
    expanded = os.path.expandvars(raw)
    data = yaml.safe_load(expanded) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")
    return data


def load_config(path: str | Path) -> RotationConfig:
    """
    Load and validate a rotation config.

    The file describes the control plane (spec + observed status) and the
    node inventory. Credentials can be kept out of it in an overrides file
    whose structure mirrors the config; it is deep-merged before validation.
    Discovery order:
      1. ``CERTROT_OVERRIDES_FILE`` env var -> explicit path
      2. ``overrides.yaml`` next to the config file

    ``${ENV_VAR}`` placeholders are resolved in both files at load time.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"config file not found: {path}")
    data = _load_yaml(path)

    overrides_path = _find_overrides_file(path)
    if overrides_path:
        log.debug("Merging overrides from %s", overrides_path)
        _deep_merge(data, _load_yaml(overrides_path))
    else:
        log.debug("No overrides.yaml found, using %s as is", path)

    try:
        return RotationConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"{path}: {exc}") from exc
