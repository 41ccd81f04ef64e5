from __future__ import annotations

import math
import re

_DECORATION_RE = re.compile(r"[\[\]<>]")
_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)$")


def format_timestamp(seconds: float, precision: int = 2) -> str:
    """
    MM:SS.xx (precision 2) or MM:SS.xxx (precision 3).
    From one hour on: H:MM:SS.xxx. Negative / NaN / inf -> zero string.
    """
    if precision not in (2, 3):
        raise ValueError(f"precision must be 2 or 3, got {precision}")
    if seconds is None or not math.isfinite(seconds) or seconds < 0:
        return "00:00." + "0" * precision

    scale = 10**precision
    # count whole units first so 12.34 never renders as 12.33
    units = int(round(seconds * scale))
    total_s, frac = divmod(units, scale)
    h, rem = divmod(total_s, 3600)
    m, s = divmod(rem, 60)

    base = f"{h}:{m:02d}:{s:02d}" if h else f"{m:02d}:{s:02d}"
    return f"{base}.{frac:0{precision}d}"


def parse_timestamp(text: str | None) -> float:
    """
    H:MM:SS[.fff] / MM:SS[.fff] / bare seconds, with optional [] or <> around it.
    Total: anything unparseable gives 0.0.
    """
    if not text:
        return 0.0
    clean = _DECORATION_RE.sub("", text).strip()
    parts = clean.split(":")
    try:
        if len(parts) == 3:
            value = int(parts[0]) * 3600 + int(parts[1]) * 60 + float(parts[2])
        elif len(parts) == 2:
            value = int(parts[0]) * 60 + float(parts[1])
        elif _NUMBER_RE.match(clean):
            value = float(clean)
        else:
            return 0.0
    except ValueError:
        return 0.0
    return value if math.isfinite(value) else 0.0


def parse_clock_value(text: str | None) -> float | None:
    """
    TTML time expression: clock time, bare seconds, "1.5s" or "1500ms".
    None when absent or unreadable.
    """
    if text is None:
        return None
    t = text.strip()
    if not t:
        return None
    if ":" in t:
        return parse_timestamp(t)
    scale = 1.0
    if t.endswith("ms"):
        t, scale = t[:-2], 1000.0
    elif t.endswith("s"):
        t = t[:-1]
    if not _NUMBER_RE.match(t.strip()):
        return None
    return float(t) / scale


def parse_offset(text: str) -> float:
    """Signed offset in seconds: "-1.5", "250ms", "+00:01.200"."""
    t = text.strip().lower()
    sign = -1.0 if t.startswith("-") else 1.0
    t = t.lstrip("+-")
    if t.endswith("ms"):
        value = parse_clock_value(t)
        return sign * (value or 0.0)
    return sign * parse_timestamp(t)
