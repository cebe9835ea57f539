"""Chord transposition.

Transposing never edits a song in place: :func:`transpose_song` returns a new
:class:`~songcolumns.models.ParsedSong` whose segments carry the transposed
chords, which is what the renderer shows as each segment's display chord.
"""

import dataclasses
import re

from .models import ParsedSong, SongLine, SongSection

SHARP_NOTES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
FLAT_NOTES = ["C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B"]

# Major keys written with flats: Db, Eb, F, Ab, Bb.
_FLAT_MAJOR_INDICES = {1, 3, 5, 8, 10}

# Spellings outside both chromatic lists.
_ENHARMONIC = {"Cb": "B", "Fb": "E", "E#": "F", "B#": "C"}

# root, quality, optional slash bass
_CHORD_RE = re.compile(r"^([A-G][#b]?)([^/]*)(?:/([A-G][#b]?))?$")


def note_index(note: str) -> int | None:
    note = _ENHARMONIC.get(note, note)
    if note in SHARP_NOTES:
        return SHARP_NOTES.index(note)
    if note in FLAT_NOTES:
        return FLAT_NOTES.index(note)
    return None


def transpose_note(note: str, semitones: int, prefer_sharps: bool = True) -> str:
    index = note_index(note)
    if index is None:
        return note
    scale = SHARP_NOTES if prefer_sharps else FLAT_NOTES
    return scale[(index + semitones) % 12]


def transpose_chord(chord: str, semitones: int, prefer_sharps: bool = True) -> str:
    """Transpose *chord* (``Am7``, ``D/F#``) by *semitones*.

    Anything that does not look like a chord (``N.C.``, ``x2``) is returned
    unchanged.
    """
    m = _CHORD_RE.match(chord.strip())
    if not m or semitones % 12 == 0:
        return chord
    root, quality, bass = m.groups()
    result = transpose_note(root, semitones, prefer_sharps) + quality
    if bass:
        result += "/" + transpose_note(bass, semitones, prefer_sharps)
    return result


def prefers_sharps(key: str | None) -> bool:
    """True unless *key* is conventionally written with flats.

    Minor keys use their relative major.
    """
    if not key:
        return True
    m = _CHORD_RE.match(key.strip())
    if not m:
        return True
    root, quality, _ = m.groups()
    if root.endswith("b"):
        return False
    return _prefers_sharps_at(note_index(root), _is_minor(quality))


def semitones_between(from_key: str | None, to_key: str | None) -> int:
    """Shortest distance from *from_key* to *to_key*, in the range -5..6."""
    if not from_key or not to_key:
        return 0
    start = _key_root_index(from_key)
    end = _key_root_index(to_key)
    if start is None or end is None:
        return 0
    diff = (end - start) % 12
    return diff - 12 if diff > 6 else diff


def transpose_song(song: ParsedSong, semitones: int, prefer_sharps: bool | None = None) -> ParsedSong:
    """Return a copy of *song* with every chord and the key moved by *semitones*.

    When *prefer_sharps* is None the spelling follows the transposed key.
    """
    if semitones % 12 == 0:
        return song

    key_match = _CHORD_RE.match(song.key.strip()) if song.key else None
    if prefer_sharps is None:
        if key_match:
            root, quality, _ = key_match.groups()
            prefer_sharps = _prefers_sharps_at((note_index(root) + semitones) % 12, _is_minor(quality))
        else:
            prefer_sharps = True
    new_key = transpose_chord(song.key, semitones, prefer_sharps) if key_match else song.key

    sections = tuple(_transpose_section(s, semitones, prefer_sharps) for s in song.sections)
    return dataclasses.replace(song, sections=sections, key=new_key)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _is_minor(quality: str) -> bool:
    return quality.startswith("m") and not quality.startswith("maj")


def _prefers_sharps_at(index: int, minor: bool) -> bool:
    major_index = (index + 3) % 12 if minor else index
    return major_index not in _FLAT_MAJOR_INDICES


def _key_root_index(key: str) -> int | None:
    m = _CHORD_RE.match(key.strip())
    return note_index(m.group(1)) if m else None


def _transpose_section(section: SongSection, semitones: int, prefer_sharps: bool) -> SongSection:
    lines = tuple(_transpose_line(line, semitones, prefer_sharps) for line in section.lines)
    return dataclasses.replace(section, lines=lines)


def _transpose_line(line: SongLine, semitones: int, prefer_sharps: bool) -> SongLine:
    if not line.has_chords:
        return line
    segments = tuple(
        dataclasses.replace(segment, chord=transpose_chord(segment.chord, semitones, prefer_sharps))
        if segment.chord
        else segment
        for segment in line.segments
    )
    return dataclasses.replace(line, segments=segments)

