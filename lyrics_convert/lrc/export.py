from __future__ import annotations

import difflib
import json

from lyrics_convert.config import DEFAULT_CONFIG, ConvertConfig
from lyrics_convert.model import LyricsDocument, LyricsMetadata
from lyrics_convert.timecode import format_timestamp


def export_json(doc: LyricsDocument) -> str:
    m = doc.metadata
    return json.dumps(
        {
            "format": doc.format.value,
            "metadata": {
                "title": m.title,
                "artist": m.artist,
                "album": m.album,
                "author": m.author,
                "songwriters": list(m.songwriters),
                "language": m.language,
                "offset_ms": m.offset_ms,
                "created_by": m.created_by,
                "creator": m.creator,
                "version": m.version,
                "custom": m.custom,
            },
            "lines": [
                {
                    "start": ln.start_time,
                    "end": ln.end_time,
                    "text": ln.raw_text,
                    "voice": ln.voice,
                    "background": ln.is_background,
                    "attributes": ln.attributes,
                    "words": [
                        {"text": w.text, "start": w.start_time, "end": w.end_time, "background": w.is_background}
                        for w in ln.words
                    ],
                }
                for ln in doc.lines
            ],
        },
        ensure_ascii=False,
        indent=2,
    )


def _metadata_lines(m: LyricsMetadata) -> list[str]:
    author = m.author or ", ".join(m.songwriters)
    pairs = [
        ("ti", m.title),
        ("ar", m.artist),
        ("al", m.album),
        ("au", author),
        ("by", m.created_by),
        ("re", m.creator),
        ("ve", m.version),
        ("offset", str(m.offset_ms) if m.offset_ms else ""),
        ("la", m.language),
    ]
    out = [f"[{k}:{v}]" for k, v in pairs if v]
    out.extend(f"[{k}:{v}]" for k, v in m.custom.items())
    return out


def generate_lrc(doc: LyricsDocument, cfg: ConvertConfig = DEFAULT_CONFIG) -> str:
    out = _metadata_lines(doc.metadata)
    for line in doc.lines:
        out.append(f"[{format_timestamp(line.start_time, cfg.lrc_precision)}]{line.raw_text}")
    return "".join(s + "\n" for s in out)


def generate_elrc(doc: LyricsDocument, cfg: ConvertConfig = DEFAULT_CONFIG) -> str:
    p = cfg.lrc_precision
    out = _metadata_lines(doc.metadata)
    for line in doc.lines:
        stamp = f"[{format_timestamp(line.start_time, p)}]"
        if line.words:
            out.append(stamp + "".join(f" <{format_timestamp(w.start_time, p)}>{w.text}" for w in line.words))
        else:
            out.append(stamp + line.raw_text)
    return "".join(s + "\n" for s in out)


def generate_plain(doc: LyricsDocument) -> str:
    return "".join(line.raw_text + "\n" for line in doc.lines)


def diff_lrc(old: LyricsDocument, new: LyricsDocument, cfg: ConvertConfig = DEFAULT_CONFIG) -> str:
    """Unified diff of the LRC renderings, empty when nothing changed."""
    a = generate_lrc(old, cfg).splitlines(keepends=True)
    b = generate_lrc(new, cfg).splitlines(keepends=True)
    return "".join(difflib.unified_diff(a, b, fromfile="before.lrc", tofile="after.lrc"))
