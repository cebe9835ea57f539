from songcolumns.models import LineType, SectionType, Segment
from songcolumns.parser import ChordProParser, merge_chord_line, parse_chordpro, parse_line
from songcolumns.render import inline_text

AMAZING_GRACE = """\
{title: Amazing Grace}
{artist: John Newton}
{key: G}
{tempo: 90}
{capo: two}

{start_of_verse}
[G]Amazing [C]grace
{end_of_verse}

{soc}
[D]Sing
{eoc}
"""

# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


def test_metadata():
    song = parse_chordpro(AMAZING_GRACE)
    assert song.title == "Amazing Grace"
    assert song.artist == "John Newton"
    assert song.key == "G"
    assert song.tempo == 90
    assert song.raw_text == AMAZING_GRACE


def test_non_numeric_integer_field_is_ignored():
    assert parse_chordpro(AMAZING_GRACE).capo is None


def test_short_metadata_names():
    song = parse_chordpro("{t: Hymn}\n{st: Traditional}\n{a: Anon}\n{k: D}\n{time: 3/4}\n{ccli: 22025}\nla")
    assert (song.title, song.subtitle, song.artist, song.key) == ("Hymn", "Traditional", "Anon", "D")
    assert song.time_signature == "3/4"
    assert song.ccli_number == "22025"


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


def test_sections_and_labels():
    song = parse_chordpro(AMAZING_GRACE)
    assert [(s.label, s.type) for s in song.sections] == [
        ("Verse", SectionType.VERSE),
        ("Chorus", SectionType.CHORUS),
    ]


def test_repeated_types_are_numbered():
    text = "{sov}\none\n{eov}\n{soc}\nchorus\n{eoc}\n{sov}\ntwo\n{eov}\n"
    song = parse_chordpro(text)
    assert [s.label for s in song.sections] == ["Verse 1", "Chorus", "Verse 2"]
    assert [s.index for s in song.sections] == [1, 1, 2]


def test_explicit_label_wins():
    song = parse_chordpro("{start_of_verse: Verse 3}\nla la\n{end_of_verse}")
    assert song.sections[0].label == "Verse 3"


def test_content_without_sections_is_one_verse():
    song = parse_chordpro("[G]Hello\nworld")
    assert len(song.sections) == 1
    assert song.sections[0].label == "Verse"
    assert song.sections[0].line_count == 2


def test_bare_section_names():
    song = parse_chordpro("{chorus}\nsing\n{bridge}\nhum")
    assert [s.type for s in song.sections] == [SectionType.CHORUS, SectionType.BRIDGE]


def test_custom_environment():
    song = parse_chordpro("{start_of_intro}\n[G] [C]\n{end_of_intro}\n{start_of_grid}\n| G . |\n{end_of_grid}")
    assert [(s.label, s.type) for s in song.sections] == [
        ("Intro", SectionType.INTRO),
        ("Grid", SectionType.UNKNOWN),
    ]


def test_content_after_end_starts_new_section():
    song = parse_chordpro("{soc}\nsing\n{eoc}\nafter")
    assert [s.type for s in song.sections] == [SectionType.CHORUS, SectionType.VERSE]


def test_comment_between_sections_stays_with_previous_section():
    song = parse_chordpro("{sov}\n[G]Amazing grace\n{eov}\n{c: Chorus x2}\n{sov}\nHow sweet\n{eov}\n")
    assert [s.label for s in song.sections] == ["Verse 1", "Verse 2"]
    first = song.sections[0]
    assert [line.type for line in first.lines] == [LineType.LYRICS, LineType.COMMENT]
    assert first.lines[-1].text == "Chorus x2"


def test_hash_comment_and_directive_between_sections():
    song = parse_chordpro("{soc}\nSing\n{eoc}\n\n# softly\n{new_page}\n\n{sov}\nla\n{eov}\n")
    assert [s.type for s in song.sections] == [SectionType.CHORUS, SectionType.VERSE]
    assert [line.type for line in song.sections[0].lines] == [
        LineType.LYRICS,
        LineType.COMMENT,
        LineType.DIRECTIVE,
    ]


def test_comment_after_section_start_belongs_to_new_section():
    song = parse_chordpro("{sov}\none\n{eov}\n{soc}\n{c: all together}\nSing\n{eoc}\n")
    assert [line.type for line in song.sections[1].lines] == [LineType.COMMENT, LineType.LYRICS]
    assert song.sections[0].line_count == 1


def test_blank_lines_trimmed_at_section_edges():
    song = parse_chordpro("\n\n{sov}\n\none\n\ntwo\n\n{eov}")
    lines = song.sections[0].lines
    assert [line.type for line in lines] == [LineType.LYRICS, LineType.BLANK, LineType.LYRICS]


def test_empty_text():
    song = parse_chordpro("")
    assert song.sections == ()


# ---------------------------------------------------------------------------
# Line types
# ---------------------------------------------------------------------------


def test_comments():
    song = parse_chordpro("{c: Slowly}\n{comment_italic: Softly}\n# capo 2\nla")
    lines = song.sections[0].lines
    assert [(line.type, line.text) for line in lines[:3]] == [
        (LineType.COMMENT, "Slowly"),
        (LineType.COMMENT, "Softly"),
        (LineType.COMMENT, "capo 2"),
    ]


def test_unknown_directive_kept_as_directive_line():
    song = parse_chordpro("la\n{new_page}\nla")
    line = song.sections[0].lines[1]
    assert line.type is LineType.DIRECTIVE
    assert line.raw_text == "{new_page}"


def test_parse_line_segments():
    line = parse_line("[G]Amazing [C]grace")
    assert line.type is LineType.LYRICS
    assert line.segments == (Segment("Amazing ", 0, "G"), Segment("grace", 8, "C"))


def test_parse_line_leading_text():
    line = parse_line("Oh [Em]Lord")
    assert line.segments == (Segment("Oh ", 0), Segment("Lord", 3, "Em"))


def test_parse_line_chords_only():
    line = parse_line("[G]   [C]")
    assert line.type is LineType.CHORDS_ONLY
    assert line.chords == ["G", "C"]


def test_parse_line_unmatched_bracket_is_lyric():
    line = parse_line("Hello [world")
    assert line.type is LineType.LYRICS
    assert line.text == "Hello [world"
    assert not line.has_chords


def test_inline_reconstruction():
    assert inline_text(parse_line("[G]Amazing [C]grace, how [D]sweet")) == "[G]Amazing [C]grace, how [D]sweet"


# ---------------------------------------------------------------------------
# Chords-only line above lyrics
# ---------------------------------------------------------------------------


def test_chord_line_merged_into_lyrics():
    song = parse_chordpro("[G]       [C]\nAmazing grace")
    lines = song.sections[0].lines
    assert len(lines) == 1
    assert inline_text(lines[0]) == "[G]Amazing gr[C]ace"


def test_merge_pads_short_lyrics():
    merged = merge_chord_line(parse_line("[G]      [D]"), parse_line("Go"))
    assert merged.segments == (Segment("Go       ", 0, "G"), Segment("", 9, "D"))


def test_chord_line_before_chorded_line_is_kept():
    song = parse_chordpro("[G]   [C]\n[D]Sing")
    assert [line.type for line in song.sections[0].lines] == [LineType.CHORDS_ONLY, LineType.LYRICS]


def test_trailing_chord_line_is_kept():
    song = parse_chordpro("la la\n[G] [D]")
    assert song.sections[0].lines[-1].type is LineType.CHORDS_ONLY


def test_parser_class():
    assert ChordProParser().parse("la").sections[0].text == "la"


def test_merged_chord_uses_bracket_column():
    merged = merge_chord_line(parse_line("[G]      [D]"), parse_line("Amazing grace"))
    # "[D]" starts at raw column 9, its lyric-stream position is 6
    assert [(s.chord, s.position) for s in merged.segments] == [("G", 0), ("D", 9)]
    assert inline_text(merged) == "[G]Amazing g[D]race"
