"""ChordPro formatter.

Renders a :class:`~songcolumns.models.ParsedSong` back to ChordPro (``.cho``)
text.

Section type → ChordPro directive mapping
-----------------------------------------

+--------------------------------------+------------------------------------+
| Section type                         | Directive pair                     |
+======================================+====================================+
| ``VERSE``                            | ``{start_of_verse: <label>}`` /    |
|                                      | ``{end_of_verse}``                 |
+--------------------------------------+------------------------------------+
| ``CHORUS``                           | ``{start_of_chorus: <label>}`` /   |
|                                      | ``{end_of_chorus}``                |
+--------------------------------------+------------------------------------+
| ``BRIDGE``                           | ``{start_of_bridge: <label>}`` /   |
|                                      | ``{end_of_bridge}``                |
+--------------------------------------+------------------------------------+
| Other known types (intro, solo, …)   | ``{start_of_<type>: <label>}`` /   |
|                                      | ``{end_of_<type>}`` (ChordPro 6    |
|                                      | custom environments)               |
+--------------------------------------+------------------------------------+
| ``UNKNOWN``                          | ``{comment: <label>}``             |
+--------------------------------------+------------------------------------+

Lines are written in inline form (``[G]Amazing [D]grace``), so parsing the
output again yields the same segments.

Usage::

    from songcolumns.chordpro import ChordProFormatter
    text = ChordProFormatter().render(song)
    Path("output.cho").write_text(text)
"""

from .models import LineType, ParsedSong, SectionType, SongLine, SongSection
from .render import inline_text

# Section types whose directives ChordPro has standardised.
_STRUCTURED = {
    SectionType.VERSE: ("start_of_verse", "end_of_verse"),
    SectionType.CHORUS: ("start_of_chorus", "end_of_chorus"),
    SectionType.BRIDGE: ("start_of_bridge", "end_of_bridge"),
}

# (attribute, directive) in output order
_METADATA = [
    ("title", "title"),
    ("subtitle", "subtitle"),
    ("artist", "artist"),
    ("album", "album"),
    ("key", "key"),
    ("capo", "capo"),
    ("tempo", "tempo"),
    ("time_signature", "time"),
    ("year", "year"),
    ("copyright", "copyright"),
    ("ccli_number", "ccli"),
]


class ChordProFormatter:
    """Render a :class:`~songcolumns.models.ParsedSong` to ChordPro text."""

    def render(self, song: ParsedSong) -> str:
        """Return ChordPro text for *song*.

        The returned string ends with a single newline and uses Unix line
        endings (``\\n``) throughout.
        """
        parts: list[str] = []

        # --- Metadata block ---
        for attribute, directive in _METADATA:
            value = getattr(song, attribute)
            if value is not None and value != "":
                parts.append(f"{{{directive}: {value}}}")

        # --- Section blocks ---
        for section in song.sections:
            if parts:
                parts.append("")  # blank line before every section
            parts.extend(_render_section(section))

        return "\n".join(parts) + "\n"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _render_section(section: SongSection) -> list[str]:
    """Return a list of lines for one section (no trailing blank line)."""
    lines = [text for text in (_render_line(line) for line in section.lines) if text is not None]

    if section.type in _STRUCTURED:
        start_dir, end_dir = _STRUCTURED[section.type]
        return [f"{{{start_dir}: {section.label}}}", *lines, f"{{{end_dir}}}"]

    if section.type is not SectionType.UNKNOWN:
        name = section.type.value
        return [f"{{start_of_{name}: {section.label}}}", *lines, f"{{end_of_{name}}}"]

    return [f"{{comment: {section.label}}}", *lines]


def _render_line(line: SongLine) -> str | None:
    if line.type is LineType.DIRECTIVE:
        return None
    if line.type is LineType.BLANK:
        return ""
    if line.type is LineType.COMMENT:
        return f"{{comment: {line.text}}}"
    return inline_text(line)
