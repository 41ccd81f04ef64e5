"""
Engine entry points: detect, parse, generate, shift.

Everything here is a pure function of its arguments; configuration is passed
in explicitly (see lyrics_convert.config.load_config for the CLI side).
"""

from __future__ import annotations

import logging

from .config import DEFAULT_CONFIG, ConvertConfig
from .detect import detect_format
from .lrc.export import generate_elrc, generate_lrc, generate_plain
from .lrc.parse import parse_lrc
from .model import LyricsDocument, LyricsFormat, TimedLine, TimedWord
from .sync.shift import shift as _shift
from .ttml.export import generate_ttml
from .ttml.parse import parse_ttml

logger = logging.getLogger(__name__)


def detect(text: str) -> LyricsFormat:
    return detect_format(text)


def parse_plain(text: str) -> LyricsDocument:
    lines = []
    for raw in text.splitlines():
        content = raw.strip()
        if not content:
            continue
        words = tuple(TimedWord(text=w, start_time=0.0) for w in content.split())
        lines.append(TimedLine(start_time=0.0, words=words, raw_text=content))
    return LyricsDocument(format=LyricsFormat.PLAIN, lines=tuple(lines))


def parse(
    text: str,
    fmt: LyricsFormat | str | None = None,
    cfg: ConvertConfig = DEFAULT_CONFIG,
) -> LyricsDocument:
    """Parse `text` as `fmt`, or as whatever detect() says when fmt is None."""
    if fmt is None:
        fmt = detect_format(text)
        logger.debug("Detected format: %s", fmt.value)
    elif isinstance(fmt, str) and not isinstance(fmt, LyricsFormat):
        fmt = LyricsFormat.from_name(fmt)

    if fmt is LyricsFormat.TTML:
        return parse_ttml(text)
    if fmt in (LyricsFormat.LRC, LyricsFormat.ELRC):
        return parse_lrc(text, fmt=fmt, last_line_duration=cfg.last_line_duration_s)
    return parse_plain(text)


def generate(
    doc: LyricsDocument,
    target: LyricsFormat | str,
    cfg: ConvertConfig = DEFAULT_CONFIG,
) -> str:
    if isinstance(target, str) and not isinstance(target, LyricsFormat):
        target = LyricsFormat.from_name(target)

    if target is LyricsFormat.LRC:
        return generate_lrc(doc, cfg)
    if target is LyricsFormat.ELRC:
        return generate_elrc(doc, cfg)
    if target is LyricsFormat.TTML:
        return generate_ttml(doc, cfg)
    return generate_plain(doc)


def shift(doc: LyricsDocument, offset_seconds: float) -> LyricsDocument:
    return _shift(doc, offset_seconds)


__all__ = ["detect", "parse", "parse_plain", "generate", "shift"]
