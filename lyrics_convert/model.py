from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from enum import Enum

from .errors import UnknownFormatError


def new_id() -> str:
    return uuid.uuid4().hex[:12]


class LyricsFormat(str, Enum):
    PLAIN = "PLAIN"
    LRC = "LRC"
    ELRC = "ELRC"
    TTML = "TTML"

    @classmethod
    def from_name(cls, name: str) -> "LyricsFormat":
        try:
            return cls(name.strip().upper())
        except ValueError as e:
            raise UnknownFormatError(f"Unknown lyrics format: {name!r}") from e


@dataclass(frozen=True, slots=True)
class TimedWord:
    text: str
    start_time: float
    end_time: float | None = None
    is_background: bool = False
    id: str = field(default_factory=new_id, compare=False)


@dataclass(frozen=True, slots=True)
class TimedLine:
    start_time: float
    words: tuple[TimedWord, ...] = ()
    raw_text: str = ""
    end_time: float | None = None
    voice: str | None = None
    is_background: bool = False
    attributes: dict[str, str] = field(default_factory=dict)
    id: str = field(default_factory=new_id, compare=False)

    def with_words(self, words: tuple[TimedWord, ...]) -> "TimedLine":
        """Replace the words and rebuild raw_text from them."""
        words = tuple(words)
        raw = " ".join(w.text for w in words) if words else self.raw_text
        return replace(self, words=words, raw_text=raw, attributes=dict(self.attributes))

    def with_text(self, text: str) -> "TimedLine":
        """
        Re-tokenize edited text. Token i keeps the timing and id of word i;
        tokens past the old word count start at the line start.
        """
        tokens = text.split()
        words: list[TimedWord] = []
        for i, tok in enumerate(tokens):
            if i < len(self.words):
                words.append(replace(self.words[i], text=tok))
            else:
                words.append(
                    TimedWord(text=tok, start_time=self.start_time, is_background=self.is_background)
                )
        return replace(self, words=tuple(words), raw_text=text.strip(), attributes=dict(self.attributes))


@dataclass(frozen=True, slots=True)
class LyricsMetadata:
    title: str = ""
    artist: str = ""
    album: str = ""
    author: str = ""
    songwriters: tuple[str, ...] = ()
    language: str = ""
    offset_ms: int = 0
    created_by: str = ""  # [by:]
    creator: str = ""  # [re:]
    version: str = ""  # [ve:]
    custom: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class LyricsDocument:
    format: LyricsFormat
    lines: tuple[TimedLine, ...] = ()
    metadata: LyricsMetadata = field(default_factory=LyricsMetadata)

    @classmethod
    def empty(cls, fmt: LyricsFormat = LyricsFormat.PLAIN) -> "LyricsDocument":
        return cls(format=fmt)


def sort_lines(lines: list[TimedLine]) -> tuple[TimedLine, ...]:
    # list.sort is stable: ties keep encounter order
    return tuple(sorted(lines, key=lambda ln: ln.start_time))
