from dataclasses import dataclass
from enum import Enum

from .exceptions import SegmentError


class LineType(Enum):
    LYRICS = "lyrics"  # lyric text, possibly with inline chords
    CHORDS_ONLY = "chordsOnly"  # [D] [G] [A] with no lyric text
    BLANK = "blank"
    COMMENT = "comment"  # {comment: ...} or "# ..."
    DIRECTIVE = "directive"  # structural, never drawn


class SectionType(Enum):
    INTRO = "intro"
    VERSE = "verse"
    PRECHORUS = "prechorus"
    CHORUS = "chorus"
    BRIDGE = "bridge"
    INTERLUDE = "interlude"
    SOLO = "solo"
    INSTRUMENTAL = "instrumental"
    OUTRO = "outro"
    TAG = "tag"
    CODA = "coda"
    UNKNOWN = "unknown"

    @classmethod
    def from_name(cls, name: str) -> "SectionType":
        """Map a ChordPro section name (``verse``, ``pre_chorus``, ``Refrain``) to a type."""
        key = "".join(ch for ch in name.lower() if ch.isalpha())
        key = _SECTION_ALIASES.get(key, key)
        for member in cls:
            if member.value == key and member is not cls.UNKNOWN:
                return member
        return cls.UNKNOWN

    @property
    def display_name(self) -> str:
        return _SECTION_TITLES.get(self, self.value.title())


_SECTION_ALIASES = {
    "refrain": "chorus",
    "hook": "chorus",
    "pre": "prechorus",
    "instr": "instrumental",
    "ending": "outro",
}

_SECTION_TITLES = {
    SectionType.PRECHORUS: "Pre-Chorus",
    SectionType.UNKNOWN: "Section",
}


@dataclass(frozen=True)
class Segment:
    """A run of lyric text, optionally preceded by a chord.

    ``position`` is the character offset of ``text`` within the line's lyric
    stream. Chord brackets do not count towards it.
    """

    text: str
    position: int
    chord: str | None = None

    @property
    def display_chord(self) -> str | None:
        if self.chord is None:
            return None
        chord = self.chord.strip()
        return chord or None

    @property
    def has_chord(self) -> bool:
        return self.display_chord is not None

    @property
    def end(self) -> int:
        return self.position + len(self.text)


@dataclass(frozen=True)
class SongLine:
    """One parsed line of a song."""

    type: LineType
    segments: tuple[Segment, ...] = ()
    raw_text: str = ""

    def __post_init__(self):
        object.__setattr__(self, "segments", tuple(self.segments))

    @classmethod
    def blank(cls) -> "SongLine":
        return cls(LineType.BLANK)

    @classmethod
    def comment(cls, text: str) -> "SongLine":
        return cls(LineType.COMMENT, (Segment(text=text, position=0),), raw_text=text)

    @classmethod
    def directive(cls, raw_text: str) -> "SongLine":
        return cls(LineType.DIRECTIVE, raw_text=raw_text)

    @property
    def text(self) -> str:
        """The lyric stream with chords removed."""
        if self.type is LineType.DIRECTIVE:
            return ""
        return "".join(segment.text for segment in self.segments)

    @property
    def has_chords(self) -> bool:
        return any(segment.has_chord for segment in self.segments)

    @property
    def chords(self) -> list[str]:
        return [s.display_chord for s in self.segments if s.display_chord is not None]

    def validate(self) -> None:
        """Raise :class:`SegmentError` unless segments are ordered and non-overlapping."""
        previous: Segment | None = None
        for segment in self.segments:
            if segment.position < 0:
                raise SegmentError(segment.position, "position is negative")
            if previous is not None:
                if segment.position < previous.position:
                    raise SegmentError(segment.position, "segments are not in position order")
                if previous.end > segment.position:
                    raise SegmentError(segment.position, "overlaps the previous segment")
            previous = segment


@dataclass(frozen=True)
class SongSection:
    """A labelled group of lines (verse, chorus, bridge, etc.)."""

    label: str
    lines: tuple[SongLine, ...] = ()
    type: SectionType = SectionType.VERSE
    index: int = 1  # 1-based occurrence of this type within the song

    def __post_init__(self):
        object.__setattr__(self, "lines", tuple(self.lines))

    @property
    def line_count(self) -> int:
        return len(self.lines)

    @property
    def has_chords(self) -> bool:
        return any(line.has_chords for line in self.lines)

    @property
    def unique_chords(self) -> set[str]:
        return {chord for line in self.lines for chord in line.chords}

    @property
    def text(self) -> str:
        return "\n".join(line.text for line in self.lines if line.type is not LineType.DIRECTIVE)


@dataclass(frozen=True)
class ParsedSong:
    """Immutable snapshot of a parsed song.

    Re-parsing or transposing always produces a new value.
    """

    sections: tuple[SongSection, ...] = ()
    title: str | None = None
    subtitle: str | None = None
    artist: str | None = None
    album: str | None = None
    key: str | None = None
    tempo: int | None = None
    time_signature: str | None = None
    capo: int | None = None
    year: int | None = None
    copyright: str | None = None
    ccli_number: str | None = None
    raw_text: str = ""

    def __post_init__(self):
        object.__setattr__(self, "sections", tuple(self.sections))

    @property
    def unique_chords(self) -> set[str]:
        chords: set[str] = set()
        for section in self.sections:
            chords |= section.unique_chords
        return chords

    @property
    def all_chords(self) -> list[str]:
        """Every chord in the order it is played."""
        return [chord for section in self.sections for line in section.lines for chord in line.chords]

    def sections_of_type(self, section_type: SectionType) -> list[SongSection]:
        return [section for section in self.sections if section.type is section_type]

    @property
    def verses(self) -> list[SongSection]:
        return self.sections_of_type(SectionType.VERSE)

    @property
    def choruses(self) -> list[SongSection]:
        return self.sections_of_type(SectionType.CHORUS)

    @property
    def bridges(self) -> list[SongSection]:
        return self.sections_of_type(SectionType.BRIDGE)

    @property
    def has_chords(self) -> bool:
        return any(section.has_chords for section in self.sections)

    @property
    def total_lines(self) -> int:
        return sum(section.line_count for section in self.sections)

    @property
    def lyrics_only(self) -> str:
        return "\n\n".join(f"{section.label}\n{section.text}" for section in self.sections)
