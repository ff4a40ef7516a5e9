import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


CONFIG_DIR = Path(__file__).resolve().parent.parent.parent / "config"
CONFIG_FILES = ("settings", "tracking", "detection", "simulation")


def load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def merge_dict(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            merged[key] = merge_dict(base[key], value)
        else:
            merged[key] = value
    return merged


def load_config(
    config_dir: Optional[Path] = None, overrides: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    if config_dir is None:
        env_dir = os.getenv("BLOBTRACK_CONFIG_DIR")
        config_dir = Path(env_dir) if env_dir else CONFIG_DIR

    config = {name: load_yaml(Path(config_dir) / f"{name}.yaml") for name in CONFIG_FILES}

    env_mode = os.getenv("BLOBTRACK_MODE")
    if env_mode:
        config["settings"]["mode"] = env_mode

    if overrides:
        config = merge_dict(config, overrides)
    return config
