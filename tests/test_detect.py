from lyrics_convert import detect
from lyrics_convert.model import LyricsFormat


def test_detect_ttml_by_root_tag():
    assert detect('<?xml version="1.0"?>\n<tt xml:lang="en"><body/></tt>') is LyricsFormat.TTML
    assert detect("<tt:tt xmlns:tt='x'></tt:tt>") is LyricsFormat.TTML


def test_detect_ttml_by_namespace():
    assert detect('<root xmlns="http://www.w3.org/ns/ttml"/>') is LyricsFormat.TTML


def test_detect_elrc_before_lrc():
    assert detect("[00:01.00] <00:01.00>Hello <00:01.50>world") is LyricsFormat.ELRC


def test_detect_lrc():
    assert detect("[ti:Song]\n[00:12.34]Hello world\n") is LyricsFormat.LRC
    assert detect("[100:00]long song") is LyricsFormat.LRC


def test_detect_plain():
    assert detect("Hello world\nsecond line") is LyricsFormat.PLAIN
    assert detect("") is LyricsFormat.PLAIN
    assert detect("<table>no tt here</table>") is LyricsFormat.PLAIN
