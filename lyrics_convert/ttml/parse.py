from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import replace

from lyrics_convert.model import (
    LyricsDocument,
    LyricsFormat,
    LyricsMetadata,
    TimedLine,
    TimedWord,
    sort_lines,
)
from lyrics_convert.timecode import parse_clock_value

from .namespaces import AMLL_NS, ITUNES_NS, TTM_NS, TTS_NS, VENDOR_PREFIXES

logger = logging.getLogger(__name__)

BG_ROLE = "x-bg"

# URIs for prefixes commonly used without an xmlns declaration
_KNOWN_PREFIXES = {
    "ttm": TTM_NS,
    "tts": TTS_NS,
    "itunes": ITUNES_NS,
    "amll": AMLL_NS,
}

_PREFIX_RE = re.compile(r"[<\s/]([A-Za-z_][\w.-]*):[A-Za-z_]")
_DECLARED_RE = re.compile(r"xmlns:([A-Za-z_][\w.-]*)\s*=")
_ROOT_TAG_RE = re.compile(r"<(?![?!])[^\s>/]+")


def _local(name: str) -> str:
    # "{uri}local" -> "local", "prefix:local" -> "local"
    return name.rsplit("}", 1)[-1].rsplit(":", 1)[-1]


def _namespace(name: str) -> str | None:
    if name.startswith("{"):
        return name[1:].split("}", 1)[0]
    return None


def _attr(el: ET.Element, local: str) -> str | None:
    if local in el.attrib:
        return el.attrib[local]
    for k, v in el.attrib.items():
        if _local(k) == local:
            return v
    return None


def _find(el: ET.Element, local: str) -> ET.Element | None:
    for node in el.iter():
        if node is not el and _local(node.tag) == local:
            return node
    return None


def _find_all(el: ET.Element, local: str) -> list[ET.Element]:
    return [node for node in el.iter() if node is not el and _local(node.tag) == local]


def _text(el: ET.Element | None) -> str:
    if el is None:
        return ""
    return "".join(el.itertext()).strip()


def _read_agents(head: ET.Element) -> dict[str, str]:
    agents: dict[str, str] = {}
    for agent in _find_all(head, "agent"):
        agent_id = _attr(agent, "id")
        if not agent_id:
            continue
        agents[agent_id] = _text(_find(agent, "name")) or agent_id
    return agents


def _read_metadata(root: ET.Element, head: ET.Element | None, agents: dict[str, str]) -> LyricsMetadata:
    language = _attr(root, "lang") or ""
    if head is None:
        return LyricsMetadata(language=language)

    title = _text(_find(head, "title"))
    artist = _text(_find(head, "artist")) or agents.get("artist", "")

    songwriters: tuple[str, ...] = ()
    custom: dict[str, str] = {}
    itunes = _find(head, "iTunesMetadata")
    if itunes is not None:
        container = _find(itunes, "songwriters")
        if container is not None:
            songwriters = tuple(t for t in (_text(sw) for sw in _find_all(container, "songwriter")) if t)
        for child in itunes:
            key = _local(child.tag)
            value = _text(child)
            if key != "songwriters" and len(child) == 0 and value:
                custom[key] = value

    return LyricsMetadata(
        title=title,
        artist=artist,
        songwriters=songwriters,
        language=language,
        custom=custom,
    )


def _vendor_attributes(el: ET.Element) -> dict[str, str]:
    out: dict[str, str] = {}
    for k, v in el.attrib.items():
        prefix = VENDOR_PREFIXES.get(_namespace(k) or "")
        if prefix:
            out[f"{prefix}:{_local(k)}"] = v
        elif k == "key":
            out[k] = v
    return out


def _backfill_end(
    words: tuple[TimedWord, ...], since: float, end: float
) -> tuple[TimedWord, ...]:
    """
    Give `end` to the trailing words that started inside the group and have
    no end yet; stop at the first word that doesn't qualify.
    """
    cut = len(words)
    while cut > 0 and words[cut - 1].start_time >= since and words[cut - 1].end_time is None:
        cut -= 1
    if cut == len(words):
        return words
    return words[:cut] + tuple(replace(w, end_time=end) for w in words[cut:])


def _add_text(words: tuple[TimedWord, ...], text: str | None, bg: bool, start: float) -> tuple[TimedWord, ...]:
    t = (text or "").strip()
    if not t:
        return words
    return words + (TimedWord(text=t, start_time=start, is_background=bg),)


def _walk(
    el: ET.Element, words: tuple[TimedWord, ...], bg: bool, start: float
) -> tuple[TimedWord, ...]:
    """
    Depth-first word extraction below a line element.
    `bg` and `start` are what this element inherits; returns the word list
    extended with everything found in the element (its tail excluded).
    """
    if _local(el.tag) == "br":
        return words

    role = _attr(el, "role")
    begin = parse_clock_value(_attr(el, "begin"))
    end = parse_clock_value(_attr(el, "end"))

    # background only ever switches on going deeper
    sub_bg = bg or role == BG_ROLE
    sub_start = begin if begin is not None else start

    words = _add_text(words, el.text, sub_bg, sub_start)
    for child in el:
        words = _walk(child, words, sub_bg, sub_start)
        # text after a child belongs to this element
        words = _add_text(words, child.tail, sub_bg, sub_start)

    if end is not None:
        words = _backfill_end(words, sub_start, end)
    return words


def _parse_line(p: ET.Element, agents: dict[str, str]) -> TimedLine | None:
    start = parse_clock_value(_attr(p, "begin")) or 0.0
    end = parse_clock_value(_attr(p, "end"))

    role = _attr(p, "role")
    voice_id = _attr(p, "agent") or (role if role and role != BG_ROLE else None)
    voice = agents.get(voice_id, voice_id) if voice_id else None

    style = _attr(p, "style") or ""
    is_bg = role == BG_ROLE or "bg" in style or _text(p).startswith("(")

    words: tuple[TimedWord, ...] = _add_text((), p.text, is_bg, start)
    for child in p:
        words = _walk(child, words, is_bg, start)
        words = _add_text(words, child.tail, is_bg, start)

    if not words:
        return None
    return TimedLine(
        start_time=start,
        end_time=end,
        words=words,
        raw_text=" ".join(w.text for w in words),
        voice=voice,
        is_background=is_bg,
        attributes=_vendor_attributes(p),
    )


def _line_elements(body: ET.Element) -> list[ET.Element]:
    divs = _find_all(body, "div")
    if not divs:
        return _find_all(body, "p")
    seen: set[int] = set()
    out: list[ET.Element] = []
    for div in divs:
        for p in _find_all(div, "p"):
            # nested divs would otherwise yield the same p twice
            if id(p) not in seen:
                seen.add(id(p))
                out.append(p)
    return out


def _declare_prefixes(text: str) -> str | None:
    """
    Bind prefixes that are used but never declared on the root element.
    Returns None when there is nothing to bind.
    """
    used = set(_PREFIX_RE.findall(text)) - set(_DECLARED_RE.findall(text)) - {"xml", "xmlns"}
    root = _ROOT_TAG_RE.search(text)
    if not used or root is None:
        return None
    decls = "".join(
        f' xmlns:{p}="{_KNOWN_PREFIXES.get(p, "urn:x-" + p)}"' for p in sorted(used)
    )
    return text[: root.end()] + decls + text[root.end() :]


def _fromstring(text: str) -> ET.Element:
    text = text.strip().lstrip("\ufeff")
    try:
        return ET.fromstring(text)
    except ET.ParseError as e:
        patched = _declare_prefixes(text)
        if patched is None:
            raise
        logger.debug("Binding undeclared TTML prefixes after: %s", e)
        return ET.fromstring(patched)


def parse_ttml(text: str) -> LyricsDocument:
    """
    Lenient TTML reader. Elements and attributes are matched by local name,
    so prefixed, default-namespaced and bare documents read the same, as do
    documents that use `ttm:`/`itunes:` prefixes without declaring them.
    Unreadable XML gives a document without lines.
    """
    try:
        root = _fromstring(text)
    except ET.ParseError as e:
        logger.warning("TTML is not well-formed: %s", e)
        return LyricsDocument.empty(LyricsFormat.TTML)

    head = root if _local(root.tag) == "head" else _find(root, "head")
    agents = _read_agents(head) if head is not None else {}
    metadata = _read_metadata(root, head, agents)

    body = root if _local(root.tag) == "body" else _find(root, "body")
    if body is None:
        logger.warning("TTML has no <body>; no lines read")
        return LyricsDocument(format=LyricsFormat.TTML, metadata=metadata)

    lines: list[TimedLine] = []
    for p in _line_elements(body):
        line = _parse_line(p, agents)
        if line is not None:
            lines.append(line)

    logger.debug("Parsed TTML: %d lines, %d agents", len(lines), len(agents))
    return LyricsDocument(format=LyricsFormat.TTML, lines=sort_lines(lines), metadata=metadata)
