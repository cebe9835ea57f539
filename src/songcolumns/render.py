"""Per-line rendering for the template's chord positioning style.

Chord alignment relies on a monospaced chord font: a chord annotating the
lyric character at ``position`` is drawn ``position * char_width`` pixels
from the start of the line, with ``char_width = chord_font_size * 0.6``.

+----------------------+----------------------------------------------------+
| Line / style         | Result                                             |
+======================+====================================================+
| lyrics + chords,     | ``TWO_LAYER``: lyric text verbatim plus a chord    |
| chordsOverLyrics or  | layer of offset chord placements                   |
| separateLines        |                                                    |
+----------------------+----------------------------------------------------+
| lyrics + chords,     | ``INLINE``: one text run, ``[Chord]`` re-inserted  |
| inline               | before each segment's text                         |
+----------------------+----------------------------------------------------+
| lyrics, no chords    | ``TEXT``                                           |
+----------------------+----------------------------------------------------+
| chords only          | ``CHORDS_ONLY``: chord layer sized to the last     |
|                      | chord's extent                                     |
+----------------------+----------------------------------------------------+
| blank / comment /    | ``BLANK`` (one body row) / ``COMMENT`` (smaller,   |
| directive            | de-emphasised) / ``EMPTY`` (zero height)           |
+----------------------+----------------------------------------------------+
"""

from dataclasses import dataclass
from enum import Enum

from .layout import DEFAULT_HEIGHT_MODEL
from .models import LineType, Segment, SongLine
from .template import ChordAlignment, ChordPositioningStyle, Template

COMMENT_SIZE_REDUCTION = 2.0


class RenderKind(Enum):
    TWO_LAYER = "twoLayer"
    INLINE = "inline"
    TEXT = "text"
    CHORDS_ONLY = "chordsOnly"
    BLANK = "blank"
    COMMENT = "comment"
    EMPTY = "empty"


@dataclass(frozen=True)
class ChordPlacement:
    chord: str
    position: int
    offset: float  # pixels from the line's left edge


@dataclass(frozen=True)
class RenderedLine:
    kind: RenderKind
    text: str = ""
    chords: tuple[ChordPlacement, ...] = ()
    font_size: float = 0.0
    chord_font_size: float = 0.0
    chord_layer_width: float = 0.0
    height: float = 0.0

    @property
    def has_chord_layer(self) -> bool:
        return self.kind in (RenderKind.TWO_LAYER, RenderKind.CHORDS_ONLY)


def char_width(template: Template) -> float:
    return template.chord_char_width


def chord_offset(segment: Segment, template: Template) -> float:
    return segment.position * char_width(template)


def inline_text(line: SongLine) -> str:
    """Flatten *line* to ChordPro inline form: ``[C]Amazing [F]grace``."""
    parts: list[str] = []
    for segment in line.segments:
        chord = segment.display_chord
        if chord is not None:
            parts.append(f"[{chord}]")
        parts.append(segment.text)
    return "".join(parts)


def render_line(line: SongLine, template: Template) -> RenderedLine:
    """Return the visual description of *line* under *template*.

    Raises :class:`~songcolumns.exceptions.SegmentError` if the line's
    segments are malformed.
    """
    line.validate()
    height = DEFAULT_HEIGHT_MODEL.line_height(line, template)

    if line.type is LineType.DIRECTIVE:
        return RenderedLine(kind=RenderKind.EMPTY)

    if line.type is LineType.BLANK:
        return RenderedLine(kind=RenderKind.BLANK, text=" ", font_size=template.body_font_size, height=height)

    if line.type is LineType.COMMENT:
        return RenderedLine(
            kind=RenderKind.COMMENT,
            text=line.text,
            font_size=max(template.body_font_size - COMMENT_SIZE_REDUCTION, 0.0),
            height=height,
        )

    placements = _place_chords(line, template)
    chord_extent = max((p.position + len(p.chord) for p in placements), default=0)

    if line.type is LineType.CHORDS_ONLY:
        return RenderedLine(
            kind=RenderKind.CHORDS_ONLY,
            chords=placements,
            chord_font_size=template.chord_font_size,
            chord_layer_width=chord_extent * char_width(template),
            height=height,
        )

    if not line.has_chords:
        return RenderedLine(kind=RenderKind.TEXT, text=line.text, font_size=template.body_font_size, height=height)

    if template.chord_positioning_style is ChordPositioningStyle.INLINE:
        return RenderedLine(
            kind=RenderKind.INLINE,
            text=inline_text(line),
            font_size=template.body_font_size,
            height=height,
        )

    # chordsOverLyrics and separateLines share the two-layer geometry.
    # Lyric characters are counted at the chord glyph width, not the body
    # font's, so with a body font larger than the chord font a long lyric
    # is wider than chord_layer_width and centered or right alignment gets
    # more spare room than the lyric really leaves.
    layer_chars = max(len(line.text), chord_extent)
    return RenderedLine(
        kind=RenderKind.TWO_LAYER,
        text=line.text,
        chords=placements,
        font_size=template.body_font_size,
        chord_font_size=template.chord_font_size,
        chord_layer_width=layer_chars * char_width(template),
        height=height,
    )


def chord_layer_origin(rendered: RenderedLine, column_width: float, alignment: ChordAlignment) -> float:
    """X position of the chord block inside a column of *column_width* pixels.

    Only the block moves; offsets between chords and syllables are unchanged.
    """
    spare = max(column_width - rendered.chord_layer_width, 0.0)
    if alignment is ChordAlignment.CENTERED:
        return spare / 2
    if alignment is ChordAlignment.RIGHT_ALIGNED:
        return spare
    return 0.0


def _place_chords(line: SongLine, template: Template) -> tuple[ChordPlacement, ...]:
    return tuple(
        ChordPlacement(chord=segment.display_chord, position=segment.position, offset=chord_offset(segment, template))
        for segment in line.segments
        if segment.display_chord is not None
    )
