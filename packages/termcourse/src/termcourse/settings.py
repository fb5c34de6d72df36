"""
Render settings.

Defaults, overridden by ~/.termcourse/settings.json, overridden by TERMCOURSE_*
environment variables. Bad values are logged and ignored.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Literal, Mapping

from .config import get_settings_path

logger = logging.getLogger(__name__)

ImageBackendChoice = Literal["auto", "chafa", "viu", "off"]
ImageMode = Literal["mono", "color", "truecolor"]

IMAGE_BACKEND_CHOICES: tuple[str, ...] = ("auto", "chafa", "viu", "off")
IMAGE_MODES: tuple[str, ...] = ("mono", "color", "truecolor")


@dataclass(frozen=True)
class Settings:
    links_enabled: bool = True
    emoji_enabled: bool = True
    debug: bool = False

    image_backend: ImageBackendChoice = "auto"
    image_mode: ImageMode = "color"
    image_max_lines: int = 12
    image_max_bytes: int = 5 * 1024 * 1024
    image_fetch_timeout: float = 10.0
    image_render_timeout: float = 5.0
    image_quality_filter: bool = True
    image_cache_size: int | None = None  # None: keep every entry

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Settings":
        return cls().merge(data)

    def merge(self, data: Mapping[str, Any]) -> "Settings":
        """Return a copy with valid values from data applied."""
        known = {f.name: f for f in fields(self)}
        changes: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                continue
            coerced = _coerce(key, value)
            if coerced is _INVALID:
                logger.warning("Ignoring invalid setting %s=%r", key, value)
                continue
            changes[key] = coerced
        return replace(self, **changes)


# ─── Coercion ──────────────────────────────────────────────────────────────────

_INVALID = object()

_BOOL_FIELDS = {"links_enabled", "emoji_enabled", "debug", "image_quality_filter"}
_INT_FIELDS = {"image_max_lines", "image_max_bytes"}
_FLOAT_FIELDS = {"image_fetch_timeout", "image_render_timeout"}


def _coerce(key: str, value: Any) -> Any:
    if key in _BOOL_FIELDS:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ("1", "true", "yes", "on"):
                return True
            if lowered in ("0", "false", "no", "off"):
                return False
        return _INVALID

    if key == "image_cache_size" and value is None:
        return None
    if key in _INT_FIELDS or key == "image_cache_size":
        try:
            number = int(value)
        except (TypeError, ValueError):
            return _INVALID
        if key == "image_cache_size":
            return number if number > 0 else None
        return number if number > 0 else _INVALID

    if key in _FLOAT_FIELDS:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return _INVALID
        return number if number > 0 else _INVALID

    if key == "image_backend":
        value = str(value).strip().lower()
        return value if value in IMAGE_BACKEND_CHOICES else _INVALID

    if key == "image_mode":
        value = str(value).strip().lower()
        return value if value in IMAGE_MODES else _INVALID

    return value


# ─── Loading ───────────────────────────────────────────────────────────────────

ENV_VARS: dict[str, str] = {
    "TERMCOURSE_LINKS": "links_enabled",
    "TERMCOURSE_EMOJI": "emoji_enabled",
    "TERMCOURSE_DEBUG": "debug",
    "TERMCOURSE_IMAGES": "image_backend",
    "TERMCOURSE_IMAGE_MODE": "image_mode",
    "TERMCOURSE_IMAGE_LINES": "image_max_lines",
    "TERMCOURSE_IMAGE_MAX_BYTES": "image_max_bytes",
    "TERMCOURSE_IMAGE_TIMEOUT": "image_fetch_timeout",
    "TERMCOURSE_RENDER_TIMEOUT": "image_render_timeout",
    "TERMCOURSE_IMAGE_FILTER": "image_quality_filter",
    "TERMCOURSE_IMAGE_CACHE": "image_cache_size",
}


def settings_from_env(environ: Mapping[str, str]) -> dict[str, str]:
    return {field: environ[var] for var, field in ENV_VARS.items() if var in environ}


def read_settings_file(path: str) -> dict[str, Any]:
    """Read settings.json; a missing or unreadable file counts as empty."""
    if not os.path.exists(path):
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not read settings from %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Settings file %s does not hold an object", path)
        return {}
    return data


def load_settings(
    path: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings: defaults < settings.json < environment."""
    environ = os.environ if environ is None else environ
    settings = Settings().merge(read_settings_file(path or get_settings_path()))
    return settings.merge(settings_from_env(environ))
