from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace

from lyrics_convert.model import (
    LyricsDocument,
    LyricsFormat,
    LyricsMetadata,
    TimedLine,
    TimedWord,
    sort_lines,
)
from lyrics_convert.timecode import parse_timestamp

logger = logging.getLogger(__name__)

_TS_RE = re.compile(r"\[(\d{1,2}):(\d{1,2})(?::(\d{1,2}))?(?:\.(\d{1,3}))?\]")  # [mm:ss.xx] / [h:mm:ss.xxx]
_META_RE = re.compile(r"^\[([a-zA-Z0-9-]+):(.*)\]$")
_VOICE_RE = re.compile(r"^([A-Za-z0-9\s]+):\s+(.*)$")
_WORD_TAG_RE = re.compile(r"<\d{1,2}:\d{1,2}(?::\d{1,2})?(?:\.\d{1,3})?>")
_WORD_SPLIT_RE = re.compile(r"(<[\d:.]+>)")

DEFAULT_LAST_LINE_DURATION = 5.0

# lower-cased tag -> LyricsMetadata field
_META_FIELDS = {
    "ti": "title",
    "ar": "artist",
    "al": "album",
    "au": "author",
    "by": "created_by",
    "re": "creator",
    "ve": "version",
    "la": "language",
}


@dataclass(frozen=True, slots=True)
class LrcParseStats:
    lines_total: int
    lines_with_timestamps: int
    metadata_lines: int
    lines_ignored: int
    lines_out: int


def _ts_seconds(m: re.Match[str]) -> float:
    a, b, c, frac = m.group(1), m.group(2), m.group(3), m.group(4)
    # "2" -> .2, "23" -> .23, "234" -> .234
    f = float("0." + frac) if frac else 0.0
    if c is not None:
        return int(a) * 3600 + int(b) * 60 + int(c) + f
    return int(a) * 60 + int(b) + f


def _split_timestamps(content: str) -> tuple[list[float], str]:
    stamps: list[float] = []
    while True:
        # fresh anchored match each round, no shared scanner state
        m = _TS_RE.match(content)
        if not m:
            break
        stamps.append(_ts_seconds(m))
        content = content[m.end() :].strip()
    return stamps, content


def _words_for(content: str, start: float, bg: bool) -> list[TimedWord]:
    if not _WORD_TAG_RE.search(content):
        return [TimedWord(text=w, start_time=start, is_background=bg) for w in content.split()]

    words: list[TimedWord] = []
    current = start
    for part in _WORD_SPLIT_RE.split(content):
        if not part.strip():
            continue
        if _WORD_TAG_RE.fullmatch(part):
            current = parse_timestamp(part)
            continue
        words.extend(TimedWord(text=w, start_time=current, is_background=bg) for w in part.split())
    return words


def _is_parenthesized(content: str) -> bool:
    bare = _WORD_TAG_RE.sub("", content).strip()
    return bare.startswith("(") and bare.endswith(")")


def _infer_end_times(lines: tuple[TimedLine, ...], last_line_duration: float) -> tuple[TimedLine, ...]:
    out: list[TimedLine] = []
    for i, line in enumerate(lines):
        if i + 1 < len(lines):
            end = lines[i + 1].start_time
        else:
            end = line.start_time + last_line_duration
        words = line.words
        timed = tuple(
            replace(w, end_time=words[j + 1].start_time if j + 1 < len(words) else end)
            for j, w in enumerate(words)
        )
        out.append(replace(line, end_time=end, words=timed))
    return tuple(out)


def _apply_meta(fields: dict[str, object], custom: dict[str, str], key: str, value: str) -> None:
    if key in _META_FIELDS:
        fields[_META_FIELDS[key]] = value
    elif key == "offset":
        try:
            fields["offset_ms"] = int(value)
        except ValueError:
            logger.warning("Ignoring invalid LRC offset: %r", value)
    else:
        custom[key] = value


def parse_lrc_with_stats(
    text: str,
    fmt: LyricsFormat = LyricsFormat.LRC,
    last_line_duration: float = DEFAULT_LAST_LINE_DURATION,
) -> tuple[LyricsDocument, LrcParseStats]:
    """
    Supported:
    - [mm:ss], [mm:ss.xx], [mm:ss.xxx], [h:mm:ss.xxx]
    - multiple leading timestamps per line (one TimedLine each)
    - metadata tags [ti:], [ar:], [al:], [au:], [by:], [re:], [ve:], [offset:], [la:], others kept as custom
    - "Name: text" voice prefix, "(text)" background lines
    - inline <mm:ss.xx> word tags (ELRC)

    End times are inferred: next line start, last line +last_line_duration.
    """
    fields: dict[str, object] = {}
    custom: dict[str, str] = {}
    lines: list[TimedLine] = []

    total = 0
    lines_with_ts = 0
    meta_lines = 0
    ignored = 0

    for raw in text.splitlines():
        total += 1
        content = raw.strip()
        if not content:
            ignored += 1
            continue

        meta = _META_RE.match(content)
        if meta and not meta.group(1)[0].isdigit():
            meta_lines += 1
            _apply_meta(fields, custom, meta.group(1).strip().lower(), meta.group(2).strip())
            continue

        stamps, content = _split_timestamps(content)
        if not stamps:
            ignored += 1
            continue
        lines_with_ts += 1

        voice: str | None = None
        vm = _VOICE_RE.match(content)
        if vm:
            voice = vm.group(1).strip()
            content = vm.group(2).strip()
        bg = _is_parenthesized(content)

        for start in stamps:
            words = tuple(_words_for(content, start, bg))
            raw_text = " ".join(w.text for w in words) or content
            lines.append(
                TimedLine(start_time=start, words=words, raw_text=raw_text, voice=voice, is_background=bg)
            )

    ordered = _infer_end_times(sort_lines(lines), last_line_duration)

    author = str(fields.get("author", ""))
    if author and "songwriters" not in fields:
        fields["songwriters"] = tuple(s.strip() for s in author.split(",") if s.strip())

    doc = LyricsDocument(format=fmt, lines=ordered, metadata=LyricsMetadata(custom=custom, **fields))
    stats = LrcParseStats(
        lines_total=total,
        lines_with_timestamps=lines_with_ts,
        metadata_lines=meta_lines,
        lines_ignored=ignored,
        lines_out=len(ordered),
    )
    logger.debug("Parsed %s: %s", fmt.value, stats)
    return doc, stats


def parse_lrc(
    text: str,
    fmt: LyricsFormat = LyricsFormat.LRC,
    last_line_duration: float = DEFAULT_LAST_LINE_DURATION,
) -> LyricsDocument:
    doc, _stats = parse_lrc_with_stats(text, fmt=fmt, last_line_duration=last_line_duration)
    return doc


def parse_elrc(text: str, last_line_duration: float = DEFAULT_LAST_LINE_DURATION) -> LyricsDocument:
    # same grammar; word tags are simply expected
    return parse_lrc(text, fmt=LyricsFormat.ELRC, last_line_duration=last_line_duration)
