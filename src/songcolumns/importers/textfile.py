"""Importer for chord charts stored as local text files.

Handles ChordPro files (``.cho``, ``.chordpro``, ``.chopro``, ``.crd``,
``.pro``) and plain ``.txt`` charts. ChordPro content is passed through
untouched; anything else goes through :func:`chart_to_chordpro`, with the
file name as the title when the chart does not provide one.
"""

import logging
from pathlib import Path

from ..exceptions import ParseError
from .base import SongImporter
from .utils import ChartFormat, chart_to_chordpro, detect_format

logger = logging.getLogger(__name__)

SUFFIXES = {".txt", ".cho", ".chordpro", ".chopro", ".crd", ".pro"}


class TextFileImporter(SongImporter):
    """Importer for ChordPro and plain-text chart files."""

    @classmethod
    def can_handle(cls, source: str) -> bool:
        return not _is_url(source) and Path(source).suffix.lower() in SUFFIXES

    def load(self, source: str) -> str:
        try:
            return Path(source).read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise ParseError(source, f"Could not read file ({exc.strerror or exc})") from exc

    def convert(self, raw: str, source: str) -> str:
        if not raw.strip():
            raise ParseError(source, "File is empty")

        chart_format = detect_format(raw)
        logger.debug("Detected %s in %s", chart_format.name, source)
        if chart_format is ChartFormat.CHORDPRO:
            return raw
        return chart_to_chordpro(raw, title=title_from_path(source))


def title_from_path(source: str) -> str:
    """Derive a song title from a file name: ``amazing-grace.txt`` → ``Amazing Grace``."""
    stem = Path(source).stem
    return stem.replace("-", " ").replace("_", " ").strip().title()


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))
