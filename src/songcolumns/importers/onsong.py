"""Importer for OnSong (``.onsong``) files.

An OnSong file starts with a header block, terminated by the first blank
line::

    Amazing Grace
    Artist: John Newton
    Key: G
    Capo: 2

    Verse 1:
    G          C        G
    Amazing grace, how sweet the sound

The first header line without a colon is the title. ``Name: value`` header
lines become ChordPro metadata directives; the body is converted like any
other chord chart.
"""

import logging
import re
from pathlib import Path

from ..exceptions import ParseError
from .base import SongImporter
from .textfile import TextFileImporter, title_from_path
from .utils import ChartLineType, chart_to_chordpro, classify_line, detect_style

logger = logging.getLogger(__name__)

_HEADER_RE = re.compile(r"^([A-Za-z][A-Za-z ]*):\s*(.*)$")

# OnSong header name → ChordPro directive
_HEADER_DIRECTIVES = {
    "title": "title",
    "artist": "artist",
    "author": "artist",
    "album": "album",
    "key": "key",
    "capo": "capo",
    "tempo": "tempo",
    "time": "time",
    "year": "year",
    "copyright": "copyright",
    "ccli": "ccli",
}


class OnSongImporter(SongImporter):
    """Importer for OnSong chord files."""

    @classmethod
    def can_handle(cls, source: str) -> bool:
        return Path(source).suffix.lower() == ".onsong"

    def load(self, source: str) -> str:
        return TextFileImporter().load(source)

    def convert(self, raw: str, source: str) -> str:
        lines = raw.splitlines()
        if not any(line.strip() for line in lines):
            raise ParseError(source, "File is empty")

        directives, body_start = _read_header(lines)
        if "title" not in directives:
            directives["title"] = title_from_path(source)
        logger.debug("OnSong header for %s: %s", source, directives)

        header = "\n".join(f"{{{name}: {value}}}" for name, value in directives.items())
        body = chart_to_chordpro("\n".join(lines[body_start:]))
        return f"{header}\n\n{body}"


def _read_header(lines: list[str]) -> tuple[dict[str, str], int]:
    """Return the header directives and the index of the first body line."""
    directives: dict[str, str] = {}
    i = 0
    while i < len(lines) and not lines[i].strip():
        i += 1

    while i < len(lines) and lines[i].strip():
        stripped = lines[i].strip()
        m = _HEADER_RE.match(stripped)
        if m and m.group(2):
            directive = _HEADER_DIRECTIVES.get(m.group(1).strip().lower())
            if directive is None:
                break  # a section header such as "Verse 1:" starts the body
            directives[directive] = m.group(2).strip()
        elif "title" not in directives and not m and _is_title_line(stripped):
            directives["title"] = stripped
        else:
            break
        i += 1

    return directives, i


def _is_title_line(line: str) -> bool:
    return classify_line(line, detect_style(line)) is ChartLineType.LYRIC
