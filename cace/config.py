"""Conversion configuration.

Settings are read from a YAML file (``.cace.yaml`` in the working
directory, or an explicit path) and then overridden by ``CACE_*``
environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

DEFAULT_CONFIG_FILE = ".cace.yaml"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class ConversionConfig:
    """Options shared by the parse, render and transform commands."""

    include_comments: bool = False
    infer_capabilities: bool = True
    validate_on_parse: bool = False
    validate_output: bool = False
    strict: bool = False
    log_level: str = "WARNING"
    # Per-agent version to render for, e.g. {"cursor": "1.7"}
    target_versions: dict[str, str] = field(default_factory=dict)

    def target_version_for(self, agent: str) -> str | None:
        return self.target_versions.get(agent)


def load_config(path: str | Path | None = None) -> ConversionConfig:
    """Load configuration from YAML, then apply environment overrides.

    Args:
        path: Explicit config file. When None, ``$CACE_CONFIG`` and then
            ``.cace.yaml`` in the current directory are tried; a missing
            default file yields the built-in defaults.
    """
    config_path = path or os.environ.get("CACE_CONFIG")
    data: dict = {}

    if config_path:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    elif Path(DEFAULT_CONFIG_FILE).is_file():
        with open(DEFAULT_CONFIG_FILE) as f:
            data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping, got {type(data).__name__}")

    config = ConversionConfig(
        include_comments=bool(data.get("include_comments", False)),
        infer_capabilities=bool(data.get("infer_capabilities", True)),
        validate_on_parse=bool(data.get("validate_on_parse", False)),
        validate_output=bool(data.get("validate_output", False)),
        strict=bool(data.get("strict", False)),
        log_level=str(data.get("log_level", "WARNING")).upper(),
        target_versions={str(k): str(v) for k, v in (data.get("target_versions") or {}).items()},
    )
    _apply_env_overrides(config)
    return config


def _apply_env_overrides(config: ConversionConfig) -> None:
    env = os.environ
    for name in ("include_comments", "infer_capabilities", "validate_on_parse",
                 "validate_output", "strict"):
        raw = env.get(f"CACE_{name.upper()}")
        if raw is not None:
            setattr(config, name, raw.strip().lower() in _TRUE_VALUES)
    if env.get("CACE_LOG_LEVEL"):
        config.log_level = env["CACE_LOG_LEVEL"].strip().upper()
