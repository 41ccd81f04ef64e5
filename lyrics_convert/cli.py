from __future__ import annotations

from dataclasses import asdict
from pathlib import Path

import typer

from lyrics_convert.api import detect as detect_text
from lyrics_convert.api import generate, parse
from lyrics_convert.config import load_config, save_config
from lyrics_convert.errors import UnknownFormatError
from lyrics_convert.logging_setup import setup_logging
from lyrics_convert.lrc.export import diff_lrc, export_json
from lyrics_convert.lrc.parse import parse_lrc_with_stats
from lyrics_convert.model import LyricsFormat
from lyrics_convert.sync.shift import shift as shift_doc
from lyrics_convert.timecode import parse_offset


app = typer.Typer(no_args_is_help=True, add_completion=False)

_TARGETS = ("lrc", "elrc", "ttml", "plain", "json")


def _format_option(name: str | None) -> LyricsFormat | None:
    if name is None:
        return None
    try:
        return LyricsFormat.from_name(name)
    except UnknownFormatError as e:
        raise typer.BadParameter(str(e)) from e


def _write(data: str, out: Path | None) -> None:
    if out:
        out.write_text(data, encoding="utf-8")
    else:
        typer.echo(data, nl=False)


@app.callback()
def main_options(
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
):
    """Convert lyrics between plain text, LRC, ELRC and TTML."""
    setup_logging(debug)


@app.command()
def detect(path: Path):
    """Print the detected format of a lyrics file."""
    typer.echo(detect_text(path.read_text(encoding="utf-8")).value)


@app.command()
def convert(
    path: Path,
    to: str = typer.Option(..., "--to", case_sensitive=False, help="lrc|elrc|ttml|plain|json"),
    src_fmt: str | None = typer.Option(None, "--from", help="Input format (default: detect)"),
    offset: str | None = typer.Option(None, "--shift", help="Shift all times, e.g. -1.5, 250ms, 00:01.200"),
    out: Path | None = typer.Option(None, "--out", help="Output file (default: stdout)"),
):
    """Convert a lyrics file to another format."""
    cfg = load_config()
    target = to.lower()
    if target not in _TARGETS:
        raise typer.BadParameter("format must be one of: " + ", ".join(_TARGETS))

    doc = parse(path.read_text(encoding="utf-8"), _format_option(src_fmt), cfg)
    if offset:
        doc = shift_doc(doc, parse_offset(offset))

    if target == "json":
        data = export_json(doc)
    else:
        data = generate(doc, LyricsFormat.from_name(target), cfg)
    _write(data, out)


@app.command()
def shift(
    path: Path,
    offset: str = typer.Argument(..., help="Seconds, 250ms or a timestamp; may be negative"),
    out: Path | None = typer.Option(None, "--out", help="Output file (default: stdout)"),
):
    """Shift every timestamp and write the file back in its own format."""
    cfg = load_config()
    doc = parse(path.read_text(encoding="utf-8"), cfg=cfg)
    shifted = shift_doc(doc, parse_offset(offset))
    _write(generate(shifted, shifted.format, cfg), out)


@app.command()
def info(path: Path):
    """Show format, metadata and line counts."""
    text = path.read_text(encoding="utf-8")
    fmt = detect_text(text)
    typer.echo(f"format={fmt.value}")

    if fmt in (LyricsFormat.LRC, LyricsFormat.ELRC):
        doc, stats = parse_lrc_with_stats(text, fmt=fmt)
        typer.echo(f"lines_total={stats.lines_total}")
        typer.echo(f"lines_with_timestamps={stats.lines_with_timestamps}")
        typer.echo(f"metadata_lines={stats.metadata_lines}")
        typer.echo(f"lines_ignored={stats.lines_ignored}")
    else:
        doc = parse(text, fmt)

    m = doc.metadata
    for key, value in (("title", m.title), ("artist", m.artist), ("album", m.album), ("language", m.language)):
        if value:
            typer.echo(f"{key}={value}")
    if m.songwriters:
        typer.echo(f"songwriters={', '.join(m.songwriters)}")
    voices = sorted({ln.voice for ln in doc.lines if ln.voice})
    if voices:
        typer.echo(f"voices={', '.join(voices)}")
    typer.echo(f"lines={len(doc.lines)}")
    typer.echo(f"words={sum(len(ln.words) for ln in doc.lines)}")


@app.command()
def diff(old: Path, new: Path):
    """Show what changed between two lyrics files, as LRC."""
    cfg = load_config()
    a = parse(old.read_text(encoding="utf-8"), cfg=cfg)
    b = parse(new.read_text(encoding="utf-8"), cfg=cfg)
    changes = diff_lrc(a, b, cfg)
    if not changes:
        typer.echo("No changes")
        return
    typer.echo(changes, nl=False)


@app.command()
def config(
    init: bool = typer.Option(False, "--init", help="Write the effective settings to the config file"),
):
    """Show the effective settings."""
    cfg = load_config()
    for key, value in asdict(cfg).items():
        typer.echo(f"{key}={value}")
    if init:
        typer.echo(f"Saved: {save_config(cfg)}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
