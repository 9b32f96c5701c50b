"""Centralized config loading — read once at import time."""

import os
from pathlib import Path

import yaml
from dotenv import find_dotenv, load_dotenv

# .env lives in the project being documented, not beside the package
load_dotenv(find_dotenv(usecwd=True))

CONFIG_PATH = Path(__file__).resolve().parent / "config.yaml"


def load_config(override_path: str | Path | None = None) -> dict:
    """Read the packaged defaults, then overlay an optional YAML file.

    Top-level keys from the override replace the defaults, except ``models``,
    which is merged per provider.
    """
    config = yaml.safe_load(CONFIG_PATH.read_text(encoding="utf-8"))
    if not override_path:
        return config

    overrides = yaml.safe_load(Path(override_path).read_text(encoding="utf-8")) or {}
    if not isinstance(overrides, dict):
        raise ValueError(f"Config file {override_path} must contain a YAML mapping.")
    models = {**config.get("models", {}), **overrides.pop("models", {})}
    return {**config, **overrides, "models": models}


_config = load_config(os.environ.get("DOCFORGE_CONFIG"))


def get_config() -> dict:
    """Return the loaded config dictionary."""
    return _config
