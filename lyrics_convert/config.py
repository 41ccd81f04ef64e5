from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path

logger = logging.getLogger(__name__)

ENV_PREFIX = "LYRICS_CONVERT_"


def _config_dir() -> Path:
    xdg = os.getenv("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "lyrics-convert"
    return Path.home() / ".config" / "lyrics-convert"


def _config_file() -> Path:
    return _config_dir() / "config.json"


@dataclass(frozen=True)
class ConvertConfig:
    # Timestamp precision (2 or 3 fraction digits)
    lrc_precision: int = 2
    ttml_precision: int = 3

    # End-time fallbacks
    last_line_duration_s: float = 5.0
    default_word_duration_s: float = 0.5

    # TTML timing label: a word this far past its line start means word sync
    word_sync_threshold_s: float = 0.05

    # TTML defaults
    default_voice: str = "v1"
    default_language: str = "en"


DEFAULT_CONFIG = ConvertConfig()


def _coerce(name: str, raw: object) -> object:
    default = getattr(DEFAULT_CONFIG, name)
    value = type(default)(raw)
    if name.endswith("_precision") and value not in (2, 3):
        raise ValueError(f"{name} must be 2 or 3")
    if isinstance(value, float) and value < 0:
        raise ValueError(f"{name} must not be negative")
    return value


def _load_file(path: Path) -> dict[str, object]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def load_config(path: Path | None = None) -> ConvertConfig:
    """
    Priority: LYRICS_CONVERT_* env vars -> config.json -> defaults.
    Invalid values are logged and skipped.
    """
    data = _load_file(path or _config_file())
    overrides: dict[str, object] = {}
    for f in fields(ConvertConfig):
        raw = os.getenv(ENV_PREFIX + f.name.upper())
        if raw is None:
            raw = data.get(f.name)
        if raw is None:
            continue
        try:
            overrides[f.name] = _coerce(f.name, raw)
        except (TypeError, ValueError) as e:
            logger.warning("Ignoring config %s=%r: %s", f.name, raw, e)
    return replace(DEFAULT_CONFIG, **overrides)


def save_config(cfg: ConvertConfig) -> Path:
    cfg_path = _config_file()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    data = {f.name: getattr(cfg, f.name) for f in fields(ConvertConfig)}
    cfg_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    return cfg_path
