"""Plain-text rendering of a column layout, for terminals and logs.

Every character is one chord-font glyph wide, so the pixel geometry of
:mod:`songcolumns.render` maps straight onto text columns::

    Verse 1                    Chorus
    G          C        G      D         G
    Amazing grace, how sweet   Twas grace that taught
"""

from itertools import zip_longest

from .layout import ColumnContent
from .models import LineType, SongLine, SongSection
from .render import inline_text
from .template import ChordPositioningStyle, SectionBreakBehavior, Template


def chord_row(line: SongLine) -> str:
    """Place each chord at its lyric column, one space past a chord it would overlap."""
    row = ""
    for segment in line.segments:
        chord = segment.display_chord
        if chord is None:
            continue
        column = segment.position
        if row and column <= len(row):
            column = len(row) + 1
        row = row.ljust(column) + chord
    return row


def format_line(line: SongLine, style: ChordPositioningStyle) -> list[str]:
    """Return the text rows for *line*; directives produce none."""
    if line.type is LineType.DIRECTIVE:
        return []
    if line.type is LineType.BLANK:
        return [""]
    if line.type is LineType.COMMENT:
        return [f"({line.text})"]
    if line.type is LineType.CHORDS_ONLY:
        return [chord_row(line)]
    if not line.has_chords:
        return [line.text]
    if style is ChordPositioningStyle.INLINE:
        return [inline_text(line)]
    return [chord_row(line), line.text]


def format_section(section: SongSection, style: ChordPositioningStyle) -> list[str]:
    rows = [section.label]
    for line in section.lines:
        rows.extend(format_line(line, style))
    return rows


def format_column(column: ColumnContent, template: Template) -> list[str]:
    rows: list[str] = []
    for section in column.sections:
        if rows and template.section_break_behavior is SectionBreakBehavior.SPACE_BEFORE:
            rows.append("")
        rows.extend(format_section(section, template.chord_positioning_style))
    return rows


def column_char_widths(template: Template, total_chars: int) -> tuple[list[int], int]:
    """Return ``(column widths, gap)`` in characters for a *total_chars* wide view."""
    gap = round(template.column_gap / template.chord_char_width)
    widths = template.replace(column_gap=gap).effective_column_widths(total_chars)
    return [int(width) for width in widths], gap


def format_columns(columns: list[ColumnContent], template: Template, total_chars: int) -> str:
    """Lay *columns* out side by side, cutting rows that overflow their column."""
    widths, gap = column_char_widths(template, total_chars)
    blocks = [format_column(column, template) for column in columns]

    out = []
    for row in zip_longest(*blocks, fillvalue=""):
        cells = [text[:width].ljust(width) for text, width in zip(row, widths)]
        out.append((" " * gap).join(cells).rstrip())
    return "\n".join(out)
