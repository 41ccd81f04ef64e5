import pytest

from lyrics_convert.errors import UnknownFormatError
from lyrics_convert.model import LyricsDocument, LyricsFormat, TimedLine, TimedWord


def _line():
    words = (TimedWord("one", 1.0, 1.5), TimedWord("two", 1.5, 2.0))
    return TimedLine(start_time=1.0, end_time=2.0, words=words, raw_text="one two")


def test_ids_are_unique_and_ignored_by_equality():
    a = TimedWord("x", 1.0)
    b = TimedWord("x", 1.0)
    assert a.id != b.id
    assert a == b


def test_with_text_keeps_existing_word_timing():
    original = _line()
    line = original.with_text("uno dos tres")
    assert line.raw_text == "uno dos tres"
    assert [w.text for w in line.words] == ["uno", "dos", "tres"]
    assert [w.start_time for w in line.words] == [1.0, 1.5, 1.0]
    assert line.words[0].id == original.words[0].id
    assert line.words[0].end_time == 1.5
    assert line.words[2].end_time is None


def test_with_text_shrinks():
    line = _line().with_text("  solo ")
    assert line.raw_text == "solo"
    assert len(line.words) == 1


def test_with_words_rebuilds_raw_text():
    line = _line().with_words((TimedWord("a", 1.0), TimedWord("b", 1.2)))
    assert line.raw_text == "a b"


def test_with_words_empty_keeps_raw_text():
    line = _line().with_words(())
    assert line.words == ()
    assert line.raw_text == "one two"


def test_empty_document():
    doc = LyricsDocument.empty(LyricsFormat.TTML)
    assert doc.format is LyricsFormat.TTML
    assert doc.lines == ()
    assert doc.metadata.custom == {}


def test_format_from_name():
    assert LyricsFormat.from_name("elrc") is LyricsFormat.ELRC
    with pytest.raises(UnknownFormatError):
        LyricsFormat.from_name("srt")


def test_edits_copy_attributes():
    line = TimedLine(start_time=0.0, raw_text="a", attributes={"itunes:key": "L1"})
    edited = line.with_text("b c")
    edited.attributes["itunes:key"] = "L7"
    assert line.attributes == {"itunes:key": "L1"}
