import logging
import re
import sys
from pathlib import Path

import click

from .chordpro import ChordProFormatter
from .exceptions import FetchError, ParseError, SongColumnsError, TemplateError, UnsupportedSourceError
from .layout import distribute_content
from .models import ParsedSong
from .registry import get_importer
from .template import (
    BUILT_IN_TEMPLATES,
    ChordPositioningStyle,
    ColumnBalancingStrategy,
    Template,
    load_template,
)
from .textview import format_columns
from .transpose import transpose_song


def _slugify(text: str) -> str:
    """Convert a string to a lowercase hyphenated slug suitable for filenames."""
    text = text.lower()
    text = re.sub(r"[^\w\s-]", "", text)   # drop punctuation
    text = re.sub(r"[\s_]+", "-", text)     # spaces/underscores → hyphens
    text = re.sub(r"-{2,}", "-", text)      # collapse multiple hyphens
    return text.strip("-")


def _default_filename(song: ParsedSong) -> str:
    parts = [_slugify(part) for part in (song.artist, song.title) if part]
    parts = [part for part in parts if part]
    return "-".join(parts or ["song"]) + ".cho"


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _import(source: str) -> ParsedSong:
    """Resolve an importer for *source* and parse it, exiting on failure."""
    try:
        return get_importer(source).import_song(source)
    except UnsupportedSourceError as exc:
        click.echo(f"Error: {exc}", err=True)
        click.echo("Supported: .cho/.chordpro/.chopro/.crd/.pro/.txt/.onsong files, http(s) URLs", err=True)
        sys.exit(1)
    except FetchError as exc:
        msg = f"Could not fetch {exc.url}"
        if exc.status_code:
            msg += f" (HTTP {exc.status_code})"
        _fail(msg)
    except ParseError as exc:
        _fail(str(exc))


def _resolve_template(name: str) -> Template:
    factory = BUILT_IN_TEMPLATES.get(name)
    if factory is not None:
        return factory()
    return load_template(name)


def _song_header(song: ParsedSong) -> list[str]:
    rows = []
    if song.title:
        rows.append(song.title)
    if song.artist:
        rows.append(song.artist)
    details = []
    if song.key:
        details.append(f"Key: {song.key}")
    if song.capo:
        details.append(f"Capo: {song.capo}")
    if song.tempo:
        details.append(f"Tempo: {song.tempo}")
    if details:
        rows.append("   ".join(details))
    if rows:
        rows.append("")
    return rows


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log debug output to stderr.")
def main(verbose: bool) -> None:
    """Lay out chord charts in columns and convert them to ChordPro."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("source")
@click.option("-t", "--template", "template_name", default="single", show_default=True, metavar="PATH|NAME",
              help="Template JSON file or built-in name (single, two, three).")
@click.option("-c", "--columns", type=click.IntRange(1, 4), default=None,
              help="Override the template's column count.")
@click.option("--strategy", type=click.Choice([s.value for s in ColumnBalancingStrategy]), default=None,
              help="Override the column balancing strategy.")
@click.option("--style", type=click.Choice([s.value for s in ChordPositioningStyle]), default=None,
              help="Override the chord positioning style.")
@click.option("-w", "--width", type=click.IntRange(min=1), default=100, show_default=True,
              help="Output width in characters.")
@click.option("--transpose", "semitones", type=int, default=0, show_default=True,
              help="Transpose by N semitones.")
def render(
    source: str,
    template_name: str,
    columns: int | None,
    strategy: str | None,
    style: str | None,
    width: int,
    semitones: int,
) -> None:
    """Print SOURCE laid out in columns."""
    try:
        template = _resolve_template(template_name)
        changes = {}
        if columns is not None:
            changes["column_count"] = columns
        if strategy is not None:
            changes["column_balancing_strategy"] = ColumnBalancingStrategy(strategy)
        if style is not None:
            changes["chord_positioning_style"] = ChordPositioningStyle(style)
        if changes:
            template = template.replace(**changes)
            template.validate()
    except TemplateError as exc:
        _fail(str(exc))

    song = _import(source)
    if semitones:
        song = transpose_song(song, semitones)

    try:
        layout = distribute_content(song.sections, template, width * template.chord_char_width)
    except SongColumnsError as exc:
        _fail(str(exc))

    rows = _song_header(song)
    rows.append(format_columns(layout, template, width))
    click.echo("\n".join(rows))


@main.command()
@click.argument("source")
@click.option("-o", "--output", "output_path", default=None, metavar="PATH",
              help="Output file path (default: <artist>-<title>.cho)")
@click.option("--stdout", is_flag=True, default=False,
              help="Print to stdout instead of writing a file.")
@click.option("--transpose", "semitones", type=int, default=0, show_default=True,
              help="Transpose by N semitones.")
def convert(source: str, output_path: str | None, stdout: bool, semitones: int) -> None:
    """Convert SOURCE to ChordPro format.

    \b
    Supported sources:
      - ChordPro files (.cho, .chordpro, .chopro, .crd, .pro)
      - plain chord charts (.txt)
      - OnSong files (.onsong)
      - web pages with the chart in a <pre> block
    """
    song = _import(source)
    if semitones:
        song = transpose_song(song, semitones)

    chordpro_text = ChordProFormatter().render(song)

    if stdout:
        click.echo(chordpro_text, nl=False)
        return

    dest = Path(output_path) if output_path else Path(_default_filename(song))
    dest.write_text(chordpro_text, encoding="utf-8")
    click.echo(f"Written to {dest}")
