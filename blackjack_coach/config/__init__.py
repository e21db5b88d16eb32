"""Configuration loading: packaged defaults overlaid with the user's config.toml"""

from __future__ import annotations

import copy
import logging
import os
import pathlib
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

import tomli

DEFAULTS_PATH = pathlib.Path(__file__).resolve().parent / "defaults.toml"
CONFIG_HOME = pathlib.Path(os.path.expanduser("~/.blackjack_coach"))
CONFIG_PATH = CONFIG_HOME / "config.toml"


def load_defaults() -> Dict[str, Any]:
    with open(DEFAULTS_PATH, "rb") as f:
        return tomli.load(f)


def _merge(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


def load_config(config_path: Optional[Union[str, pathlib.Path]] = None) -> Dict[str, Any]:
    """Load configuration, falling back to defaults for anything missing.

    A missing or unreadable user file is not fatal; the defaults are used.
    """
    config = load_defaults()
    path = pathlib.Path(config_path) if config_path is not None else CONFIG_PATH
    try:
        with open(path, "rb") as f:
            user = tomli.load(f)
    except FileNotFoundError:
        if config_path is not None:
            logging.getLogger(__name__).warning("Config file not found: %s; using defaults", path)
        return config
    except tomli.TOMLDecodeError as e:
        logging.getLogger(__name__).error("Invalid TOML in %s: %s; using defaults", path, e)
        return config
    return _merge(config, user)


def ensure_config() -> bool:
    """Create the user config from the defaults if it does not exist yet"""
    CONFIG_HOME.mkdir(parents=True, exist_ok=True)
    if not CONFIG_PATH.exists():
        CONFIG_PATH.write_text(DEFAULTS_PATH.read_text(encoding="utf-8"), encoding="utf-8")
        return True
    return False


@dataclass(frozen=True)
class TrainerConfig:
    mode: str = "balanced"
    graduation_threshold: int = 3
    min_gap_between_queue_serves: int = 3
    max_queue_size: int = 20
    max_repeat_redraws: int = 5
    weak_spot_min_attempts: int = 3
    weak_spot_limit: int = 5

    @classmethod
    def from_dict(cls, config: Optional[Mapping[str, Any]]) -> "TrainerConfig":
        """Read the [trainer] and [stats] sections of a loaded config"""
        config = config or {}
        trainer = config.get("trainer", {}) or {}
        stats = config.get("stats", {}) or {}
        d = cls()
        return cls(
            mode=str(trainer.get("mode", d.mode)),
            graduation_threshold=int(trainer.get("graduation_threshold", d.graduation_threshold)),
            min_gap_between_queue_serves=int(trainer.get("min_gap_between_queue_serves", d.min_gap_between_queue_serves)),
            max_queue_size=int(trainer.get("max_queue_size", d.max_queue_size)),
            max_repeat_redraws=int(trainer.get("max_repeat_redraws", d.max_repeat_redraws)),
            weak_spot_min_attempts=int(stats.get("weak_spot_min_attempts", d.weak_spot_min_attempts)),
            weak_spot_limit=int(stats.get("weak_spot_limit", d.weak_spot_limit)),
        )


def db_path(config: Mapping[str, Any]) -> str:
    raw = (config.get("db", {}) or {}).get("path") or str(CONFIG_HOME / "coach.sqlite")
    return os.path.expanduser(str(raw))
