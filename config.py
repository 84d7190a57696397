# -*- coding: utf-8 -*-
########################
# config.py
########################
# Purpose:
# - Typed settings for the swing parity simulation and the batch runner.
# - Optional JSON settings file with environment variable overrides on top.
#
# Design notes:
# - Library callers that never touch a file use default_config() or AnalysisConfig().
# - Only the settings file is read. Nothing is created on disk.
# - Every failure to parse or validate surfaces as ValueError naming the file.
#
# Settings file search order:
# - PARITY_CONFIG_PATH when set (used as is, even if missing)
# - ./parity_config.json
# - <user config dir>/SwingParity/SwingParity/parity_config.json
# - <user config dir>/SwingParity/SwingParity/config.json
#
# Example parity_config.json:
# {
#   "analysis": {"angle_tolerance": 270.0, "angle_limit": 180.0, "slider_precision": 59.0},
#   "batch": {"max_workers": 4}
# }
#
########################
# Interfaces:
# Public models:
# - AnalysisConfig(angle_tolerance, angle_limit, slider_precision, max_slider_length)
# - BatchConfig(max_workers)
# - AppConfig(analysis: AnalysisConfig, batch: BatchConfig)
#
# Public functions:
# - default_config() -> AnalysisConfig
# - load_config(config_path: Optional[Path] = None) -> tuple[AppConfig, Path]
# - get_config() -> tuple[AppConfig, Path]   (memoized, cache_clear() to reload)
# - to_json(config: AppConfig) -> str
# - main() -> int   (prints the resolved settings as JSON)
#
########################

from __future__ import annotations

import json
import math
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from platformdirs import user_config_dir
from pydantic import BaseModel, Field, ValidationError, field_validator

CONFIG_PATH_ENV = "PARITY_CONFIG_PATH"
CONFIG_FILE_NAME = "parity_config.json"
APP_DIR_NAME = "SwingParity"

# env name -> (section, key, parser)
ENV_OVERRIDES: Dict[str, Tuple[str, str, Callable[[str], Any]]] = {
    "PARITY_ANGLE_TOLERANCE": ("analysis", "angle_tolerance", float),
    "PARITY_ANGLE_LIMIT": ("analysis", "angle_limit", float),
    "PARITY_SLIDER_PRECISION": ("analysis", "slider_precision", float),
    "PARITY_MAX_SLIDER_LENGTH": ("analysis", "max_slider_length", float),
    "PARITY_MAX_WORKERS": ("batch", "max_workers", int),
}


class AnalysisConfig(BaseModel):
    angle_tolerance: float = Field(
        default=270.0, ge=0.0, description="Largest rotation change (degrees) between swings before a reset."
    )
    angle_limit: float = Field(
        default=180.0, ge=0.0, description="Largest rotation from neutral (degrees) a swing may start at."
    )
    slider_precision: float = Field(
        default=59.0, ge=0.0, description="Largest gap (ms) between notes of one swing."
    )
    max_slider_length: float = Field(
        default=math.inf, gt=0.0, description="Largest span (ms) of one swing. Unbounded by default."
    )

    @field_validator("angle_tolerance", "angle_limit", "slider_precision", "max_slider_length")
    @classmethod
    def _not_nan(cls, value: float) -> float:
        if math.isnan(value):
            raise ValueError("value must be a number")
        return value


class BatchConfig(BaseModel):
    max_workers: int = Field(default=4, ge=1, le=64, description="Worker threads for multi-difficulty analysis.")


class AppConfig(BaseModel):
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)


def default_config() -> AnalysisConfig:
    return AnalysisConfig()


def _search_paths() -> List[Path]:
    app_dir = Path(user_config_dir(APP_DIR_NAME, APP_DIR_NAME))
    return [Path.cwd() / CONFIG_FILE_NAME, app_dir / CONFIG_FILE_NAME, app_dir / "config.json"]


def _locate_settings_file() -> Path:
    explicit = os.environ.get(CONFIG_PATH_ENV, "").strip()
    if explicit:
        return Path(explicit)

    search_paths = _search_paths()
    found = next((path for path in search_paths if path.exists()), None)
    if found is not None:
        return found

    listing = "\n".join(f"  - {path}" for path in search_paths)
    raise FileNotFoundError(f"No {CONFIG_FILE_NAME} found. Looked in:\n{listing}")


def _parse_settings_file(settings_path: Path) -> Dict[str, Any]:
    # FileNotFoundError propagates untouched so callers can tell "missing" from "broken".
    text = settings_path.read_text(encoding="utf-8")
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exception:
        raise ValueError(f"{settings_path}: invalid JSON ({exception})") from exception
    if not isinstance(document, dict):
        raise ValueError(f"{settings_path}: top level must be a JSON object")
    return document


def _overlay_environment(document: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``document`` with any PARITY_* environment values applied.

    Blank or unparsable values are ignored so a stray variable never masks the file.
    """
    merged = {name: dict(section) if isinstance(section, dict) else section for name, section in document.items()}
    for env_name, (section_name, key, parse) in ENV_OVERRIDES.items():
        raw = os.environ.get(env_name, "").strip()
        if not raw:
            continue
        try:
            value = parse(raw)
        except ValueError:
            continue
        section = merged.get(section_name)
        if not isinstance(section, dict):
            section = merged[section_name] = {}
        section[key] = value
    return merged


def load_config(config_path: Optional[Path] = None) -> Tuple[AppConfig, Path]:
    settings_path = _locate_settings_file() if config_path is None else config_path
    document = _overlay_environment(_parse_settings_file(settings_path))
    try:
        return AppConfig.model_validate(document), settings_path
    except ValidationError as exception:
        raise ValueError(f"{settings_path}: invalid settings\n{exception}") from exception


@lru_cache(maxsize=1)
def get_config() -> Tuple[AppConfig, Path]:
    return load_config()


def to_json(config: AppConfig) -> str:
    return json.dumps(config.model_dump(), indent=2)


def main() -> int:
    try:
        loaded, settings_path = load_config()
    except (OSError, ValueError) as exception:
        print(json.dumps({"ok": False, "error": str(exception)}, indent=2))
        return 2

    report = {"ok": True, "config_path": str(settings_path), "config": loaded.model_dump()}
    print(json.dumps(report, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
