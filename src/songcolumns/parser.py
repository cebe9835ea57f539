"""ChordPro parser.

Turns ChordPro text into an immutable :class:`~songcolumns.models.ParsedSong`.

Supported syntax
----------------

* Metadata directives: ``{title: ...}`` / ``{t: ...}``, ``{subtitle}`` /
  ``{st}``, ``{artist}``, ``{album}``, ``{key}`` / ``{k}``, ``{tempo}``,
  ``{time}``, ``{capo}``, ``{year}``, ``{copyright}``, ``{ccli}``.
* Sections: ``{start_of_chorus}`` ... ``{end_of_chorus}``, the ``{soc}`` /
  ``{sov}`` / ``{sob}`` shorthands, and bare names such as ``{verse}``.
  ``{start_of_verse: Verse 3}`` sets the label explicitly.
* Comments: ``{comment: ...}`` (``c``, ``ci``, ``cb``, ``highlight``) and
  lines starting with ``#``.
* Inline chords: ``[G]Amazing [D]grace``.
* A chords-only line (``[G]      [D]``) directly above a plain lyric line is
  merged into it, each chord landing on the lyric column under its ``[``.

Any other directive is kept as a ``DIRECTIVE`` line, which is never drawn.
Comments and directives that follow an ``{end_of_...}`` directive, before
the next section has any content, stay with the section that just ended.
"""

import logging
import re
from dataclasses import dataclass, field

from .models import LineType, ParsedSong, Segment, SectionType, SongLine, SongSection

logger = logging.getLogger(__name__)

_DIRECTIVE_RE = re.compile(r"^\{([^:}]*)(?::(.*))?\}$")
_CHORD_RE = re.compile(r"\[([^\]]*)\]")

_COMMENT_DIRECTIVES = {"comment", "c", "comment_italic", "ci", "comment_box", "cb", "highlight"}

_METADATA_FIELDS = {
    "title": "title",
    "t": "title",
    "subtitle": "subtitle",
    "st": "subtitle",
    "artist": "artist",
    "a": "artist",
    "album": "album",
    "key": "key",
    "k": "key",
    "tempo": "tempo",
    "time": "time_signature",
    "capo": "capo",
    "year": "year",
    "copyright": "copyright",
    "ccli": "ccli_number",
}
_INT_FIELDS = {"tempo", "capo", "year"}

_SHORTHAND_STARTS = {"soc": SectionType.CHORUS, "sov": SectionType.VERSE, "sob": SectionType.BRIDGE}
_SHORTHAND_ENDS = {"eoc", "eov", "eob"}


@dataclass
class _Draft:
    """A section still being collected."""

    type: SectionType
    label: str | None = None  # explicit label; numbered default otherwise
    lines: list[SongLine] = field(default_factory=list)


class ChordProParser:
    """Parse ChordPro text into a :class:`~songcolumns.models.ParsedSong`."""

    def parse(self, text: str) -> ParsedSong:
        metadata: dict[str, object] = {}
        drafts: list[_Draft] = []
        current = _Draft(SectionType.VERSE)
        pending: SongLine | None = None  # chords-only line waiting for lyrics
        closed: _Draft | None = None  # section just ended by an end_of directive

        for raw in text.splitlines():
            line_text = raw.expandtabs().rstrip()
            stripped = line_text.strip()

            if not drafts and not current.lines and pending is None and not stripped:
                continue  # leading blank lines

            directive = _parse_directive(stripped)
            if directive is not None:
                name, value = directive
                key = name.lower()
                if pending is not None:
                    current.lines.append(pending)
                    pending = None

                if key in _COMMENT_DIRECTIVES:
                    _owner(current, closed).lines.append(SongLine.comment(value))
                elif key in _METADATA_FIELDS:
                    _set_metadata(metadata, _METADATA_FIELDS[key], value)
                elif _is_section_end(key):
                    _close(current, drafts)
                    current = _Draft(SectionType.VERSE)
                    closed = drafts[-1] if drafts else None
                else:
                    start = _section_start(key)
                    if start is None:
                        _owner(current, closed).lines.append(SongLine.directive(stripped))
                    else:
                        _close(current, drafts)
                        closed = None
                        section_type, fallback_label = start
                        current = _Draft(section_type, value or fallback_label)
                continue

            if stripped.startswith("#") or not stripped:
                if pending is not None:
                    current.lines.append(pending)
                    pending = None
                if stripped:
                    _owner(current, closed).lines.append(SongLine.comment(stripped[1:].strip()))
                elif closed is None or current.lines:
                    current.lines.append(SongLine.blank())
                continue

            closed = None
            line = parse_line(line_text)

            if line.type is LineType.CHORDS_ONLY:
                if pending is not None:
                    current.lines.append(pending)
                pending = line
                continue

            if pending is not None:
                if line.has_chords:
                    current.lines.append(pending)
                else:
                    line = merge_chord_line(pending, line)
                pending = None
            current.lines.append(line)

        if pending is not None:
            current.lines.append(pending)
        _close(current, drafts)

        sections = _label_sections(drafts)
        logger.debug("Parsed %d sections from %d characters", len(sections), len(text))
        return ParsedSong(sections=sections, raw_text=text, **metadata)


def parse_chordpro(text: str) -> ParsedSong:
    """Convenience wrapper around :meth:`ChordProParser.parse`."""
    return ChordProParser().parse(text)


# ---------------------------------------------------------------------------
# Line parsing
# ---------------------------------------------------------------------------


def parse_line(text: str) -> SongLine:
    """Split one line of inline ChordPro into positioned segments.

    A ``[`` with no closing ``]`` is kept as lyric text.
    """
    segments: list[Segment] = []
    position = 0
    last = 0
    chord: str | None = None

    for m in _CHORD_RE.finditer(text):
        lyric = text[last:m.start()]
        if lyric or chord is not None:
            segments.append(Segment(text=lyric, position=position, chord=chord))
            position += len(lyric)
        chord = m.group(1)
        last = m.end()

    tail = text[last:]
    if tail or chord is not None:
        segments.append(Segment(text=tail, position=position, chord=chord))

    if not segments:
        line_type = LineType.BLANK
    elif any(s.has_chord for s in segments) and all(not s.text.strip() for s in segments):
        line_type = LineType.CHORDS_ONLY
    else:
        line_type = LineType.LYRICS
    return SongLine(type=line_type, segments=tuple(segments), raw_text=text)


def merge_chord_line(chord_line: SongLine, lyric_line: SongLine) -> SongLine:
    """Combine a chords-only line with the lyric line below it.

    Each chord is attached at the column its ``[`` occupies in the chord
    line's raw text, bracket characters included, so a chord lands on the
    lyric character printed under its ``[``. This is not the chord's
    lyric-stream position: in ``[G]      [D]`` the ``D`` goes to column 9,
    not 6. Lyrics shorter than the last chord are padded with spaces so
    trailing chords keep their columns.
    """
    columns = [
        (m.start(), m.group(1).strip())
        for m in _CHORD_RE.finditer(chord_line.raw_text)
        if m.group(1).strip()
    ]
    if not columns:
        return lyric_line

    text = lyric_line.text.ljust(columns[-1][0])
    segments: list[Segment] = []
    if columns[0][0] > 0:
        segments.append(Segment(text=text[:columns[0][0]], position=0))
    for i, (column, name) in enumerate(columns):
        end = columns[i + 1][0] if i + 1 < len(columns) else len(text)
        segments.append(Segment(text=text[column:end], position=column, chord=name))

    return SongLine(type=LineType.LYRICS, segments=tuple(segments), raw_text=lyric_line.raw_text)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _parse_directive(line: str) -> tuple[str, str] | None:
    m = _DIRECTIVE_RE.match(line)
    if not m:
        return None
    return m.group(1).strip(), (m.group(2) or "").strip()


def _set_metadata(metadata: dict[str, object], name: str, value: str) -> None:
    if name in _INT_FIELDS:
        try:
            metadata[name] = int(value)
        except ValueError:
            logger.debug("Ignoring non-numeric %s value %r", name, value)
        return
    metadata[name] = value


def _normalise(name: str) -> str:
    return name.replace("_", "").replace("-", "").replace(" ", "")


def _is_section_end(name: str) -> bool:
    normalised = _normalise(name)
    return normalised.startswith("endof") or normalised in _SHORTHAND_ENDS


def _section_start(name: str) -> tuple[SectionType, str | None] | None:
    """Return ``(type, fallback_label)`` if *name* opens a section."""
    normalised = _normalise(name)
    if normalised.startswith("startof"):
        rest = normalised[len("startof"):]
        section_type = SectionType.from_name(rest)
        fallback = rest.title() if section_type is SectionType.UNKNOWN else None
        return section_type, fallback
    if normalised in _SHORTHAND_STARTS:
        return _SHORTHAND_STARTS[normalised], None
    section_type = SectionType.from_name(name)
    if section_type is not SectionType.UNKNOWN:
        return section_type, None
    return None


def _owner(current: _Draft, closed: _Draft | None) -> _Draft:
    """Comments and directives between an end_of directive and the next
    section's content stay with the section that just ended."""
    if closed is not None and not current.lines:
        return closed
    return current


def _close(draft: _Draft, drafts: list[_Draft]) -> None:
    """Trim surrounding blank lines and keep *draft* if anything is left."""
    lines = draft.lines
    while lines and lines[0].type is LineType.BLANK:
        lines.pop(0)
    while lines and lines[-1].type is LineType.BLANK:
        lines.pop()
    if lines:
        drafts.append(draft)


def _label_sections(drafts: list[_Draft]) -> list[SongSection]:
    totals: dict[SectionType, int] = {}
    for draft in drafts:
        totals[draft.type] = totals.get(draft.type, 0) + 1

    seen: dict[SectionType, int] = {}
    sections = []
    for draft in drafts:
        index = seen.get(draft.type, 0) + 1
        seen[draft.type] = index
        label = draft.label
        if not label:
            label = draft.type.display_name
            if totals[draft.type] > 1:
                label = f"{label} {index}"
        sections.append(SongSection(label=label, lines=tuple(draft.lines), type=draft.type, index=index))
    return sections
