"""
YouTube control configuration loader.

Design rules:
- Import-safe (no side effects)
- JSON-only configuration (secrets come from the environment)
- Invalid values are ignored per-key with a warning, never globally
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from jsonschema import Draft7Validator

from shared.logging.logger import get_logger

log = get_logger("shared.config.youtube")

_CONFIG_PATH = Path(__file__).parent / "youtube.json"

CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "api_base_url": {"type": "string", "minLength": 1},
        "request_timeout_seconds": {"type": "number", "exclusiveMinimum": 0},
        "page_size": {"type": "integer", "minimum": 1, "maximum": 50},
        "feedback_interval_seconds": {"type": "number", "minimum": 0},
        "implicit_target_on_empty": {"type": "boolean"},
        "access_token_env_key": {"type": "string", "minLength": 1},
    },
}


@dataclass
class YouTubeControlConfig:
    api_base_url: str = "https://www.googleapis.com/youtube/v3"
    request_timeout_seconds: float = 15.0
    page_size: int = 50
    # 0 disables background feedback polling
    feedback_interval_seconds: float = 10.0
    implicit_target_on_empty: bool = True
    access_token_env_key: str = "YOUTUBE_ACCESS_TOKEN"


def _load_json(path: Path) -> Dict[str, Any]:
    if not path.exists():
        log.warning(f"{path.name} not found at {path}; using defaults")
        return {}

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        log.warning(f"Failed to load {path.name} ({e}); using defaults")
        return {}

    if not isinstance(data, dict):
        log.warning(f"{path.name} root is not an object; ignoring file")
        return {}
    return data


def _validate(raw: Dict[str, Any]) -> None:
    errors = sorted(
        Draft7Validator(CONFIG_SCHEMA).iter_errors(raw), key=lambda e: list(e.path)
    )
    for err in errors:
        loc = "/".join(str(p) for p in err.path)
        log.warning(f"youtube config validation warning at '{loc}': {err.message}")


def _positive_float(raw: Dict[str, Any], key: str, default: float, *, allow_zero: bool) -> float:
    value = raw.get(key, default)
    if isinstance(value, bool):
        log.warning(f"{key} must be a number; defaulting to {default}")
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        log.warning(f"{key} must be a number; defaulting to {default}")
        return default
    if number < 0 or (number == 0 and not allow_zero):
        log.warning(f"{key} out of range ({number}); defaulting to {default}")
        return default
    return number


def load_youtube_config(
    raw: Optional[Dict[str, Any]] = None,
    *,
    path: Optional[Path] = None,
) -> YouTubeControlConfig:
    """
    Build the control configuration from a dict, a JSON file, or the
    bundled shared/config/youtube.json.
    """
    if raw is None:
        raw = _load_json(path or _CONFIG_PATH)

    _validate(raw)
    defaults = YouTubeControlConfig()

    base_url = raw.get("api_base_url", defaults.api_base_url)
    if not isinstance(base_url, str) or not base_url.strip():
        log.warning("api_base_url must be a non-empty string; using default")
        base_url = defaults.api_base_url

    page_size = raw.get("page_size", defaults.page_size)
    if isinstance(page_size, bool) or not isinstance(page_size, int) or not 1 <= page_size <= 50:
        log.warning(f"page_size must be an integer in 1..50; defaulting to {defaults.page_size}")
        page_size = defaults.page_size

    implicit = raw.get("implicit_target_on_empty", defaults.implicit_target_on_empty)
    if not isinstance(implicit, bool):
        log.warning("implicit_target_on_empty must be boolean; defaulting to true")
        implicit = defaults.implicit_target_on_empty

    env_key = raw.get("access_token_env_key", defaults.access_token_env_key)
    if not isinstance(env_key, str) or not env_key.strip():
        env_key = defaults.access_token_env_key

    return YouTubeControlConfig(
        api_base_url=base_url.rstrip("/"),
        request_timeout_seconds=_positive_float(
            raw, "request_timeout_seconds", defaults.request_timeout_seconds, allow_zero=False
        ),
        page_size=page_size,
        feedback_interval_seconds=_positive_float(
            raw, "feedback_interval_seconds", defaults.feedback_interval_seconds, allow_zero=True
        ),
        implicit_target_on_empty=implicit,
        access_token_env_key=env_key.strip(),
    )
