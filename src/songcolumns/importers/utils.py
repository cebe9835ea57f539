"""Chart text to ChordPro, used by every importer.

A chart is guessed to be ChordPro already, inline ``[C]word`` text,
chords written on their own line above the lyric, or bare lyrics
(:func:`detect_format`). Each line is then classified (blank, section
header, chord line, guitar tab, lyric) and :func:`chart_to_chordpro` folds
every chord line into the lyric below it::

    G          C        G
    Amazing grace, how sweet the sound

becomes ``[G]Amazing gra[C]ce, how s[G]weet the sound``.

Chord lines may be written with brackets (``[D]  [Am7]  [G/B]``) or as
space-aligned bare names (``D    Am7    G/B``).
"""

import re
from enum import Enum, auto

from ..models import SectionType

# ---------------------------------------------------------------------------
# Regexes
# ---------------------------------------------------------------------------

_CHORD_BODY = (
    r"[A-G][#b]?"
    r"(?:maj|min|m|dim|aug|sus|add|\+|°|ø)?"
    r"(?:\d+|maj\d+|sus\d|add\d+|b\d+|#\d+|\(\w+\))*"
    r"(?:\/[A-Ga-g][#b]?)?"
)

# Valid chord name without brackets: A, Am, Am7, Amaj7, Asus4, G/B, C#m7b5, N.C.
CHORD_NAME_RE = re.compile(rf"^(?:{_CHORD_BODY}|N\.?C\.?)$")

# A bracketed chord token: [D], [Am7], [G/B]
BRACKETED_CHORD_TOKEN_RE = re.compile(rf"\[({_CHORD_BODY})\]")

# Any [token] group regardless of content
ANY_BRACKET_RE = re.compile(r"\[([^\]]+)\]")

# A ChordPro directive line: {title: ...}, {soc}
DIRECTIVE_LINE_RE = re.compile(r"^\s*\{[^{}]+\}\s*$")

# Known section-header keywords (case-insensitive)
SECTION_KEYWORDS_RE = re.compile(
    r"^(?:Verse|Chorus|Bridge|Intro|Outro|Solo|Interlude|Instrumental|"
    r"Pre-?Chorus|Tag|Coda|Refrain|Hook|Ending)(?:\s+\d+)?$",
    re.IGNORECASE,
)

# ASCII guitar tab line, "e|--0--1--" or "E------2--"
TAB_LINE_RE = re.compile(r"^[eEBGDAd](?:\|[-\d]|--)")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ChartFormat(Enum):
    CHORDPRO = auto()  # already has {directives}
    INLINE_CHORDS = auto()  # [C]word lines, no directives
    CHORDS_OVER_LYRICS = auto()  # chord lines above lyric lines
    PLAIN_TEXT = auto()  # lyrics only


class ChartLineType(Enum):
    BLANK = auto()  # empty or whitespace only
    SECTION = auto()  # section header: [Verse 1], Chorus:
    CHORD = auto()  # chord-only line: [D]  [G]  or  D  G  Am7
    TAB = auto()  # ASCII guitar tab line
    LYRIC = auto()  # everything else


# ---------------------------------------------------------------------------
# Format detection
# ---------------------------------------------------------------------------


def detect_style(text: str) -> str:
    """Return ``"bracketed"`` if *text* writes chords as ``[D]``, else ``"unbracketed"``."""
    return "bracketed" if BRACKETED_CHORD_TOKEN_RE.search(text) else "unbracketed"


def detect_format(text: str) -> ChartFormat:
    """Guess how *text* notates its chords."""
    lines = text.splitlines()
    if any(DIRECTIVE_LINE_RE.match(line) for line in lines):
        return ChartFormat.CHORDPRO

    style = detect_style(text)
    kinds = [classify_line(line, style) for line in lines]
    if ChartLineType.CHORD in kinds:
        return ChartFormat.CHORDS_OVER_LYRICS
    if style == "bracketed":
        return ChartFormat.INLINE_CHORDS
    return ChartFormat.PLAIN_TEXT


# ---------------------------------------------------------------------------
# Line classification
# ---------------------------------------------------------------------------


def classify_line(line: str, style: str) -> ChartLineType:
    """Classify a single line of chart text.

    Args:
        line:  A single line of raw text.
        style: ``"bracketed"`` or ``"unbracketed"``.
    """
    stripped = line.strip()
    if not stripped:
        return ChartLineType.BLANK
    if TAB_LINE_RE.match(stripped):
        return ChartLineType.TAB
    if style == "bracketed":
        return _classify_bracketed(stripped)
    return _classify_unbracketed(stripped)


def _classify_bracketed(line: str) -> ChartLineType:
    tokens = ANY_BRACKET_RE.findall(line)
    remainder = ANY_BRACKET_RE.sub("", line).strip()

    if not tokens:
        return _classify_unbracketed(line)
    if remainder:
        # Brackets mixed with words: inline chords already merged
        return ChartLineType.LYRIC
    if len(tokens) == 1 and not CHORD_NAME_RE.match(tokens[0]):
        return ChartLineType.SECTION
    if all(CHORD_NAME_RE.match(t) for t in tokens):
        return ChartLineType.CHORD
    return ChartLineType.LYRIC


def _classify_unbracketed(line: str) -> ChartLineType:
    m = re.match(r"^\[([^\]]+)\]$", line)
    if m and not CHORD_NAME_RE.match(m.group(1)):
        return ChartLineType.SECTION

    candidate = line.rstrip(":").strip()
    if SECTION_KEYWORDS_RE.match(candidate):
        return ChartLineType.SECTION

    tokens = [t for t in line.split() if t not in ("|", "-", "/")]
    if tokens and all(CHORD_NAME_RE.match(t.strip("()")) for t in tokens):
        return ChartLineType.CHORD
    return ChartLineType.LYRIC


# ---------------------------------------------------------------------------
# Chord extraction and merging
# ---------------------------------------------------------------------------


def extract_chords_with_offsets(line: str, style: str) -> list[tuple[int, str]]:
    """Return ``(column, chord_name)`` pairs from a chord line, left to right.

    The column is the position of the opening ``[`` (bracketed) or the
    chord's first letter (unbracketed).
    """
    if style == "bracketed" and BRACKETED_CHORD_TOKEN_RE.search(line):
        return [(m.start(), m.group(1)) for m in BRACKETED_CHORD_TOKEN_RE.finditer(line)]
    return [
        (m.start(), m.group().strip("()"))
        for m in re.finditer(r"\S+", line)
        if CHORD_NAME_RE.match(m.group().strip("()"))
    ]


def merge_chord_lyric_lines(chord_line: str, lyric_line: str, style: str) -> str:
    """Merge a chord line and the lyric line below it into one inline line.

    Example::

        chord_line = "G          C        G"
        lyric_line = "Amazing grace, how sweet the sound"
        result     = "[G]Amazing gra[C]ce, how s[G]weet the sound"

    A chord past the end of the lyric is appended after padding the lyric
    with spaces, so it keeps its column.
    """
    chords = extract_chords_with_offsets(chord_line, style)
    if not chords:
        return lyric_line

    result = lyric_line.rstrip()
    inserted = 0  # characters added so far; shifts later offsets

    for offset, name in chords:
        if offset > len(result) - inserted:
            result = result.ljust(offset + inserted)
        bracket = f"[{name}]"
        pos = offset + inserted
        result = result[:pos] + bracket + result[pos:]
        inserted += len(bracket)

    return result


def extract_section_label(line: str) -> str:
    """Return the human-readable label from a SECTION line.

    Handles ``[Verse 1]``, ``Chorus:``, and bare ``Bridge`` formats.
    """
    stripped = line.strip()
    m = re.match(r"^\[([^\]]+)\]$", stripped)
    if m:
        return m.group(1).strip()
    return stripped.rstrip(":").strip()


# ---------------------------------------------------------------------------
# Full conversion
# ---------------------------------------------------------------------------


def chart_to_chordpro(
    text: str,
    style: str | None = None,
    title: str | None = None,
    artist: str | None = None,
) -> str:
    """Convert a plain chord chart to ChordPro text.

    Algorithm
    ---------
    1. Classify each line (``style`` is detected when not given).
    2. SECTION lines open a ``{start_of_<type>: Label}`` block, closing the
       previous one; labels without a known type become ``{comment: ...}``.
    3. A CHORD line directly followed by a LYRIC line is merged into it;
       any other CHORD line is written as a chords-only line ``[D] [G]``.
    4. TAB lines are dropped; BLANK lines are kept.
    """
    style = style or detect_style(text)
    out: list[str] = []
    if title:
        out.append(f"{{title: {title}}}")
    if artist:
        out.append(f"{{artist: {artist}}}")
    if out:
        out.append("")

    lines = [line.expandtabs().rstrip() for line in text.splitlines()]
    open_section: str | None = None

    i = 0
    while i < len(lines):
        kind = classify_line(lines[i], style)

        if kind is ChartLineType.TAB:
            i += 1
            continue

        if kind is ChartLineType.BLANK:
            out.append("")
            i += 1
            continue

        if kind is ChartLineType.SECTION:
            if open_section:
                out.append(f"{{end_of_{open_section}}}")
                open_section = None
            label = extract_section_label(lines[i])
            section_type = SectionType.from_name(label)
            if section_type is SectionType.UNKNOWN:
                out.append(f"{{comment: {label}}}")
            else:
                open_section = section_type.value
                out.append(f"{{start_of_{open_section}: {label}}}")
            i += 1
            continue

        if kind is ChartLineType.CHORD:
            next_kind = classify_line(lines[i + 1], style) if i + 1 < len(lines) else None
            if next_kind is ChartLineType.LYRIC:
                out.append(merge_chord_lyric_lines(lines[i], lines[i + 1], style))
                i += 2
            else:
                names = [name for _, name in extract_chords_with_offsets(lines[i], style)]
                out.append(" ".join(f"[{name}]" for name in names))
                i += 1
            continue

        out.append(lines[i])
        i += 1

    if open_section:
        out.append(f"{{end_of_{open_section}}}")

    return "\n".join(out) + "\n"
