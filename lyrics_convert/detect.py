from __future__ import annotations

import re

from .model import LyricsFormat
from .ttml.namespaces import TTML_NS

_TT_ROOT_RE = re.compile(r"<(?:[\w.-]+:)?tt[\s>/]")
_WORD_TAG_RE = re.compile(r"<\d{1,2}:\d{2}(?:\.\d{1,3})?>")
_LINE_TAG_RE = re.compile(r"\[\d{1,3}:\d{2}")


def detect_format(text: str) -> LyricsFormat:
    """Heuristic: TTML > ELRC > LRC > plain. Nothing is validated."""
    if _TT_ROOT_RE.search(text) or TTML_NS in text:
        return LyricsFormat.TTML
    if _WORD_TAG_RE.search(text):
        return LyricsFormat.ELRC
    if _LINE_TAG_RE.search(text):
        return LyricsFormat.LRC
    return LyricsFormat.PLAIN
