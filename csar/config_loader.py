"""Config loader — parse and validate csarkit.yaml."""

from __future__ import annotations

from pathlib import Path

import yaml

from contracts.config import CsarKitConfig

DEFAULT_CONFIG_PATH = "csarkit.yaml"


def load_config(path: str | None = None) -> CsarKitConfig:
    """Load a csarkit.yaml file and return a validated CsarKitConfig.

    With no *path*, ``./csarkit.yaml`` is used when present and defaults
    otherwise. An explicitly named file must exist.
    """
    if path is None:
        if not Path(DEFAULT_CONFIG_PATH).exists():
            return CsarKitConfig()
        path = DEFAULT_CONFIG_PATH

    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    raw = p.read_text(encoding="utf-8")
    data = yaml.safe_load(raw)
    if data is None:
        return CsarKitConfig()
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a YAML mapping, got {type(data).__name__}")

    return CsarKitConfig(**data)
