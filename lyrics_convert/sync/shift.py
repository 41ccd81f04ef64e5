from __future__ import annotations

from dataclasses import replace

from lyrics_convert.model import LyricsDocument, TimedLine


def _moved(t: float | None, delta: float) -> float | None:
    if t is None:
        return None
    return max(0.0, t + delta)


def _shift_line(line: TimedLine, delta: float) -> TimedLine:
    words = tuple(
        replace(w, start_time=max(0.0, w.start_time + delta), end_time=_moved(w.end_time, delta))
        for w in line.words
    )
    return replace(
        line,
        start_time=max(0.0, line.start_time + delta),
        end_time=_moved(line.end_time, delta),
        words=words,
        attributes=dict(line.attributes),
    )


def shift(doc: LyricsDocument, offset_seconds: float) -> LyricsDocument:
    """
    Move every line and word by `offset_seconds`. Each time is clamped at 0
    on its own; line order is left as is.
    """
    return replace(
        doc,
        lines=tuple(_shift_line(ln, offset_seconds) for ln in doc.lines),
        metadata=replace(doc.metadata, custom=dict(doc.metadata.custom)),
    )


def retime_line(line: TimedLine, start_time: float) -> TimedLine:
    """Move one line to start at `start_time`, words and end following along."""
    return _shift_line(line, max(0.0, start_time) - line.start_time)
