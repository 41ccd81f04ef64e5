import pytest

from lyrics_convert import parse
from lyrics_convert.model import LyricsFormat
from lyrics_convert.ttml.parse import parse_ttml

NS = (
    'xmlns="http://www.w3.org/ns/ttml" '
    'xmlns:ttm="http://www.w3.org/ns/ttml#metadata" '
    'xmlns:itunes="http://music.apple.com/lyric-ttml-internal"'
)


def _tt(body: str, head: str = "", lang: str = "en") -> str:
    return f'<tt {NS} xml:lang="{lang}"><head><metadata>{head}</metadata></head><body>{body}</body></tt>'


LEAD = '<ttm:agent type="person" xml:id="v1"><ttm:name type="full">Lead</ttm:name></ttm:agent>'


def test_agent_resolves_to_voice():
    doc = parse(
        _tt(
            '<div><p begin="00:01.000" end="00:03.000" ttm:agent="v1">'
            '<span begin="00:01.000">Hello</span></p></div>',
            head=LEAD,
        )
    )
    assert doc.format is LyricsFormat.TTML
    line = doc.lines[0]
    assert line.voice == "Lead"
    assert line.start_time == pytest.approx(1.0)
    assert line.end_time == pytest.approx(3.0)
    assert [(w.text, w.start_time) for w in line.words] == [("Hello", pytest.approx(1.0))]


def test_agent_without_name_uses_id_and_unknown_passes_through():
    head = '<ttm:agent type="person" xml:id="v2"/>'
    doc = parse_ttml(
        _tt('<p begin="1" ttm:agent="v2">a</p><p begin="2" ttm:agent="ghost">b</p>', head=head)
    )
    assert [ln.voice for ln in doc.lines] == ["v2", "ghost"]


def test_metadata_from_head():
    head = (
        "<ttm:title>Song</ttm:title>"
        '<ttm:agent type="person" xml:id="artist"><ttm:name>Band</ttm:name></ttm:agent>'
        "<iTunesMetadata><songwriters><songwriter>A</songwriter><songwriter>B</songwriter></songwriters>"
        "<isrc>US1234567890</isrc></iTunesMetadata>"
    )
    doc = parse_ttml(_tt('<p begin="1">x</p>', head=head, lang="ko"))
    m = doc.metadata
    assert m.title == "Song"
    assert m.artist == "Band"
    assert m.songwriters == ("A", "B")
    assert m.language == "ko"
    assert m.custom == {"isrc": "US1234567890"}


def test_time_expressions():
    doc = parse_ttml(_tt('<p begin="1.5s" end="2500ms"><span begin="00:00:01.750">x</span></p>'))
    line = doc.lines[0]
    assert line.start_time == pytest.approx(1.5)
    assert line.end_time == pytest.approx(2.5)
    assert line.words[0].start_time == pytest.approx(1.75)


def test_lines_sorted_without_divs():
    doc = parse_ttml(_tt('<p begin="2">b</p><p begin="1">a</p><p begin="1">a2</p>'))
    assert [ln.raw_text for ln in doc.lines] == ["a", "a2", "b"]


def test_nested_divs_read_each_line_once():
    doc = parse_ttml(_tt('<div><div><p begin="1">inner</p></div><p begin="2">outer</p></div>'))
    assert [ln.raw_text for ln in doc.lines] == ["inner", "outer"]


def test_vendor_attributes_captured():
    doc = parse_ttml(_tt('<p begin="1" itunes:key="L7" key="k" region="r">x</p>'))
    assert doc.lines[0].attributes == {"itunes:key": "L7", "key": "k"}


def test_background_span_subtree():
    doc = parse_ttml(
        _tt(
            '<p begin="0" ttm:agent="v1"><span begin="0">Main</span>'
            '<span ttm:role="x-bg"><span begin="1">(ooh</span><span begin="1.5">yeah)</span></span></p>',
            head=LEAD,
        )
    )
    line = doc.lines[0]
    assert not line.is_background
    assert [(w.text, w.is_background) for w in line.words] == [
        ("Main", False),
        ("(ooh", True),
        ("yeah)", True),
    ]
    assert line.raw_text == "Main (ooh yeah)"


def test_line_background_markers():
    doc = parse_ttml(
        _tt(
            '<p begin="1" ttm:role="x-bg">a</p>'
            '<p begin="2" style="bgStyle">b</p>'
            '<p begin="3"><span begin="3">(c)</span></p>'
            '<p begin="4">d</p>'
        )
    )
    assert [ln.is_background for ln in doc.lines] == [True, True, True, False]
    assert doc.lines[0].words[0].is_background
    assert doc.lines[0].voice is None


def test_group_end_backfills_trailing_words():
    doc = parse_ttml(
        _tt(
            '<p begin="1" end="4"><span begin="1" end="2.5">'
            '<span begin="1">Hel</span><span begin="1.5">lo</span></span>'
            '<span begin="3">there</span></p>'
        )
    )
    hel, lo, there = doc.lines[0].words
    assert hel.end_time == pytest.approx(2.5)
    assert lo.end_time == pytest.approx(2.5)
    assert there.end_time is None


def test_backfill_stops_before_group_start():
    doc = parse_ttml(_tt('<p begin="0"><span begin="0.5">a</span><span begin="1" end="2">b</span></p>'))
    a, b = doc.lines[0].words
    assert a.end_time is None
    assert b.end_time == pytest.approx(2.0)


def test_backfill_stops_at_word_with_end():
    doc = parse_ttml(
        _tt(
            '<p begin="0"><span begin="0" end="3">'
            '<span begin="0" end="0.4">a</span><span begin="0.5">b</span></span></p>'
        )
    )
    a, b = doc.lines[0].words
    assert a.end_time == pytest.approx(0.4)
    assert b.end_time == pytest.approx(3.0)


def test_br_skipped_but_following_text_read():
    doc = parse_ttml(_tt('<p begin="1">one<br/>two</p>'))
    assert [w.text for w in doc.lines[0].words] == ["one", "two"]


def test_lines_without_words_dropped():
    doc = parse_ttml(_tt('<p begin="1">   </p><p begin="2">x</p>'))
    assert [ln.raw_text for ln in doc.lines] == ["x"]


def test_malformed_xml_gives_empty_document():
    doc = parse_ttml("<tt><body><p begin='1'>unclosed")
    assert doc.format is LyricsFormat.TTML
    assert doc.lines == ()


def test_missing_body_keeps_metadata():
    doc = parse_ttml(f'<tt {NS} xml:lang="de"><head><metadata><ttm:title>T</ttm:title></metadata></head></tt>')
    assert doc.lines == ()
    assert doc.metadata.title == "T"
    assert doc.metadata.language == "de"


def test_unprefixed_document():
    doc = parse_ttml('<tt><head><agent id="a"><name>Solo</name></agent></head>'
                     '<body><p begin="00:02.000" agent="a">hi</p></body></tt>')
    assert doc.lines[0].voice == "Solo"


def test_undeclared_prefixes_are_bound():
    doc = parse(
        '<tt><head><metadata><ttm:agent xml:id="v1"><ttm:name>Lead</ttm:name></ttm:agent>'
        "<iTunesMetadata><isrc>X1</isrc></iTunesMetadata></metadata></head>"
        '<body><div><p begin="00:01.000" end="00:03.000" ttm:agent="v1" itunes:key="L1">'
        '<span begin="00:01.000">Hello</span></p></div></body></tt>'
    )
    assert doc.format is LyricsFormat.TTML
    assert len(doc.lines) == 1
    line = doc.lines[0]
    assert line.voice == "Lead"
    assert line.end_time == pytest.approx(3.0)
    assert line.attributes == {"itunes:key": "L1"}
    assert [w.text for w in line.words] == ["Hello"]
    assert doc.metadata.custom == {"isrc": "X1"}


def test_undeclared_unknown_prefix():
    doc = parse_ttml('<tt xmlns="http://www.w3.org/ns/ttml"><body><p begin="1" foo:bar="x">hi</p></body></tt>')
    assert [ln.raw_text for ln in doc.lines] == ["hi"]
