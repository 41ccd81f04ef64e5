from __future__ import annotations

import re
import xml.etree.ElementTree as ET

from lyrics_convert.config import DEFAULT_CONFIG, ConvertConfig
from lyrics_convert.model import LyricsDocument
from lyrics_convert.timecode import format_timestamp

from .namespaces import AMLL_NS, ITUNES_NS, TTM_NS, TTML_NS, TTS_NS

# custom metadata keys that can be written as element names
_XML_NAME_RE = re.compile(r"^[A-Za-z_][\w.-]*$")


def timing_mode(doc: LyricsDocument, threshold: float = DEFAULT_CONFIG.word_sync_threshold_s) -> str:
    """
    "Word" when some multi-word line has a word starting more than
    `threshold` seconds after the line itself, else "Line". Informational only.
    """
    for line in doc.lines:
        if len(line.words) > 1 and any(w.start_time > line.start_time + threshold for w in line.words):
            return "Word"
    return "Line"


def _agent_ids(doc: LyricsDocument, default_voice: str) -> dict[str, str]:
    ids: dict[str, str] = {}
    for line in doc.lines:
        voice = line.voice or default_voice
        if voice not in ids:
            ids[voice] = f"v{len(ids) + 1}"
    if not ids:
        ids[default_voice] = "v1"
    return ids


def _agent(parent: ET.Element, agent_id: str, name: str) -> None:
    agent = ET.SubElement(parent, "ttm:agent", {"type": "person", "xml:id": agent_id})
    ET.SubElement(agent, "ttm:name", {"type": "full"}).text = name


def _head(tt: ET.Element, doc: LyricsDocument, agents: dict[str, str]) -> None:
    m = doc.metadata
    head = ET.SubElement(tt, "head")
    meta = ET.SubElement(head, "metadata")
    if m.title:
        ET.SubElement(meta, "title").text = m.title
    if m.artist:
        _agent(meta, "artist", m.artist)
    for voice, agent_id in agents.items():
        _agent(meta, agent_id, voice)

    songwriters = m.songwriters or tuple(s.strip() for s in m.author.split(",") if s.strip())
    custom = {k: v for k, v in m.custom.items() if k != "songwriters" and _XML_NAME_RE.match(k)}
    if songwriters or custom:
        itunes = ET.SubElement(meta, "iTunesMetadata")
        if songwriters:
            container = ET.SubElement(itunes, "songwriters")
            for s in songwriters:
                ET.SubElement(container, "songwriter").text = s
        for key, value in custom.items():
            ET.SubElement(itunes, key).text = value

    styling = ET.SubElement(head, "styling")
    ET.SubElement(
        styling,
        "style",
        {"xml:id": "default", "tts:color": "#FFFFFF", "tts:fontSize": "32px", "tts:fontFamily": "sans-serif"},
    )
    layout = ET.SubElement(head, "layout")
    ET.SubElement(
        layout, "region", {"xml:id": "bottom", "tts:textAlign": "center", "tts:displayAlign": "after"}
    )


def generate_ttml(doc: LyricsDocument, cfg: ConvertConfig = DEFAULT_CONFIG) -> str:
    p = cfg.ttml_precision
    agents = _agent_ids(doc, cfg.default_voice)

    tt = ET.Element(
        "tt",
        {
            "xmlns": TTML_NS,
            "xmlns:itunes": ITUNES_NS,
            "xmlns:amll": AMLL_NS,
            "xmlns:ttm": TTM_NS,
            "xmlns:tts": TTS_NS,
            "itunes:timing": timing_mode(doc, cfg.word_sync_threshold_s),
            "xml:lang": doc.metadata.language or cfg.default_language,
        },
    )
    _head(tt, doc, agents)
    body = ET.SubElement(tt, "body", {"region": "bottom"})
    div = ET.SubElement(body, "div", {"itunes:songPart": "Verse"})

    lines = doc.lines
    for i, line in enumerate(lines):
        if line.end_time is not None:
            end = line.end_time
        elif i + 1 < len(lines):
            end = lines[i + 1].start_time
        else:
            end = line.start_time + cfg.last_line_duration_s

        attrib = {
            "begin": format_timestamp(line.start_time, p),
            "end": format_timestamp(end, p),
            "ttm:agent": agents[line.voice or cfg.default_voice],
        }
        attrib.update(line.attributes or {"itunes:key": f"L{i + 1}"})
        el = ET.SubElement(div, "p", attrib)

        if not line.words and line.raw_text:
            el.text = line.raw_text
        for w in line.words:
            w_end = w.end_time if w.end_time is not None else w.start_time + cfg.default_word_duration_s
            span_attrib = {"begin": format_timestamp(w.start_time, p), "end": format_timestamp(w_end, p)}
            if w.is_background:
                span_attrib["ttm:role"] = "x-bg"
            ET.SubElement(el, "span", span_attrib).text = w.text

    ET.indent(tt, space="  ")
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(tt, encoding="unicode") + "\n"
