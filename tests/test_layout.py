from unittest.mock import patch

import pytest

from songcolumns import layout
from songcolumns.exceptions import LayoutError, TemplateError
from songcolumns.layout import (
    ColumnContent,
    ColumnLayout,
    HeightModel,
    distribute_content,
    estimate_section_height,
    estimate_total_height,
)
from songcolumns.models import LineType, SectionType, Segment, SongLine, SongSection
from songcolumns.template import (
    ChordPositioningStyle,
    ColumnBalancingStrategy,
    SectionBreakBehavior,
    Template,
)

WIDTH = 800.0

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _section(label: str, line_count: int = 1) -> SongSection:
    lines = [SongLine(LineType.LYRICS, [Segment(f"{label} line {i}", 0)]) for i in range(line_count)]
    return SongSection(label=label, lines=lines)


def _sections(*line_counts: int) -> list[SongSection]:
    return [_section(f"S{i}", count) for i, count in enumerate(line_counts)]


def _by_lines(section: SongSection, template: Template) -> float:
    return float(section.line_count)


def _labels(columns: list[ColumnContent]) -> list[list[str]]:
    return [[s.label for s in column.sections] for column in columns]


def _template(count: int, strategy=ColumnBalancingStrategy.EQUAL_COUNT) -> Template:
    return Template(column_count=count, column_balancing_strategy=strategy)


# ---------------------------------------------------------------------------
# Preconditions
# ---------------------------------------------------------------------------


def test_zero_columns_rejected():
    with pytest.raises(TemplateError):
        distribute_content(_sections(1), _template(0), WIDTH)


@pytest.mark.parametrize("width", [0, -10])
def test_non_positive_width_rejected(width):
    with pytest.raises(LayoutError):
        distribute_content(_sections(1), _template(2), width)


# ---------------------------------------------------------------------------
# Equal count
# ---------------------------------------------------------------------------


def test_equal_count_three_sections_two_columns():
    columns = distribute_content(_sections(1, 1, 1), _template(2), WIDTH)
    assert _labels(columns) == [["S0", "S1"], ["S2"]]
    assert [c.index for c in columns] == [0, 1]


def test_equal_count_empty_song():
    columns = distribute_content([], _template(3), WIDTH)
    assert len(columns) == 3
    assert all(column.is_empty for column in columns)


def test_equal_count_fewer_sections_than_columns():
    columns = distribute_content(_sections(1, 1), _template(4), WIDTH)
    assert _labels(columns) == [["S0"], ["S1"], [], []]
    assert [c.is_empty for c in columns] == [False, False, True, True]


def test_equal_count_ignores_heights():
    columns = distribute_content(_sections(10, 1, 1, 1), _template(2), WIDTH)
    assert _labels(columns) == [["S0", "S1"], ["S2", "S3"]]


def test_single_column_takes_everything():
    columns = distribute_content(_sections(1, 2, 3), _template(1), WIDTH)
    assert _labels(columns) == [["S0", "S1", "S2"]]


# ---------------------------------------------------------------------------
# Equal height
# ---------------------------------------------------------------------------


def test_equal_height_shortest_column_first():
    columns = distribute_content(
        _sections(3, 1, 1, 1),
        _template(2, ColumnBalancingStrategy.EQUAL_HEIGHT),
        WIDTH,
        height_estimator=_by_lines,
    )
    assert _labels(columns) == [["S0"], ["S1", "S2", "S3"]]


def test_equal_height_ties_go_to_lowest_index():
    columns = distribute_content(
        _sections(1, 1, 1, 1),
        _template(2, ColumnBalancingStrategy.EQUAL_HEIGHT),
        WIDTH,
        height_estimator=_by_lines,
    )
    assert _labels(columns) == [["S0", "S2"], ["S1", "S3"]]


def test_equal_height_uses_default_height_model():
    # A long first section outweighs two short ones.
    columns = distribute_content(
        _sections(12, 1, 1), _template(2, ColumnBalancingStrategy.EQUAL_HEIGHT), WIDTH
    )
    assert _labels(columns) == [["S0"], ["S1", "S2"]]


# ---------------------------------------------------------------------------
# Section based
# ---------------------------------------------------------------------------


def test_section_based_advances_past_target():
    columns = distribute_content(
        _sections(1, 1, 1, 1, 1, 1),
        _template(3, ColumnBalancingStrategy.SECTION_BASED),
        WIDTH,
        height_estimator=_by_lines,
    )
    # target 2, limit 3
    assert _labels(columns) == [["S0", "S1", "S2"], ["S3", "S4", "S5"], []]


def test_section_based_oversized_first_section_stays_in_first_column():
    columns = distribute_content(
        _sections(1000, 1, 1),
        _template(2, ColumnBalancingStrategy.SECTION_BASED),
        WIDTH,
        height_estimator=_by_lines,
    )
    assert _labels(columns) == [["S0"], ["S1", "S2"]]


def test_section_based_can_leave_trailing_column_empty():
    columns = distribute_content(
        _sections(100, 100, 100, 100),
        _template(3, ColumnBalancingStrategy.SECTION_BASED),
        WIDTH,
        height_estimator=_by_lines,
    )
    # limit 200: two sections fit exactly
    assert _labels(columns) == [["S0", "S1"], ["S2", "S3"], []]


# ---------------------------------------------------------------------------
# Properties shared by every strategy
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("strategy", list(ColumnBalancingStrategy))
@pytest.mark.parametrize("count", [1, 2, 3, 4])
@pytest.mark.parametrize("line_counts", [(), (1,), (4, 1, 2), (2, 2, 2, 2, 2), (9, 1, 1, 3, 1, 7, 2)])
def test_distribution_properties(strategy, count, line_counts):
    sections = _sections(*line_counts)
    template = _template(count, strategy)
    columns = distribute_content(sections, template, WIDTH)

    assert len(columns) == count
    placed = [s.label for column in columns for s in column.sections]
    assert sorted(placed) == sorted(s.label for s in sections)
    for column in columns:
        assert column.is_empty == (len(column.sections) == 0)
        # each column keeps song order
        labels = [s.label for s in column.sections]
        assert labels == sorted(labels, key=lambda label: int(label[1:]))
    if strategy is not ColumnBalancingStrategy.EQUAL_HEIGHT:
        assert placed == [s.label for s in sections]

    assert distribute_content(sections, template, WIDTH) == columns


def test_column_line_count():
    columns = distribute_content(_sections(2, 3, 4), _template(2), WIDTH)
    assert [c.line_count for c in columns] == [5, 4]


# ---------------------------------------------------------------------------
# HeightModel
# ---------------------------------------------------------------------------


def _chord_line() -> SongLine:
    return SongLine(LineType.LYRICS, [Segment("Amazing ", 0, "C"), Segment("grace", 8, "F")])


def test_line_heights():
    model = HeightModel()
    template = Template()
    assert model.line_height(_chord_line(), template) == pytest.approx(14 * 1.2 + 16 * 1.2)
    assert model.line_height(SongLine(LineType.LYRICS, [Segment("x", 0)]), template) == pytest.approx(19.2)
    assert model.line_height(SongLine.blank(), template) == pytest.approx(19.2)
    assert model.line_height(SongLine(LineType.CHORDS_ONLY, [Segment("", 0, "G")]), template) == pytest.approx(16.8)
    assert model.line_height(SongLine.comment("x2"), template) == pytest.approx(16.8)
    assert model.line_height(SongLine.directive("{new_page}"), template) == 0.0


def test_inline_style_single_row():
    template = Template(chord_positioning_style=ChordPositioningStyle.INLINE)
    assert HeightModel().line_height(_chord_line(), template) == pytest.approx(19.2)


def test_section_height():
    section = SongSection(label="Verse", lines=[_chord_line()])
    # heading 21.6 + padding 4 + space before 20 + line 36
    assert estimate_section_height(section, Template()) == pytest.approx(81.6)
    compact = Template(section_break_behavior=SectionBreakBehavior.COMPACT)
    assert estimate_section_height(section, compact) == pytest.approx(73.6)


def test_total_height():
    sections = [SongSection(label="Verse", lines=[_chord_line()]), SongSection(label="Chorus", type=SectionType.CHORUS)]
    assert estimate_total_height(sections, Template()) == pytest.approx(81.6 + 45.6)


# ---------------------------------------------------------------------------
# ColumnLayout
# ---------------------------------------------------------------------------


def test_layout_defers_until_width_known():
    host = ColumnLayout()
    assert host.update(_sections(1, 1), _template(2), 0) == []
    assert host.columns == []


def test_layout_keeps_previous_result_on_zero_width():
    host = ColumnLayout()
    first = host.update(_sections(1, 1), _template(2), WIDTH)
    assert host.update(_sections(1, 1, 1), _template(2), 0) == first


def test_layout_recomputes_only_on_change():
    host = ColumnLayout()
    sections = _sections(1, 1, 1)
    template = _template(2, ColumnBalancingStrategy.EQUAL_HEIGHT)
    with patch.object(layout, "distribute_content", wraps=distribute_content) as spy:
        host.update(sections, template, WIDTH)
        host.update(sections, template, WIDTH)
        assert spy.call_count == 1

        host.update(sections, template, WIDTH + 1)
        assert spy.call_count == 2

        host.update(sections, template.replace(body_font_size=20), WIDTH + 1)
        assert spy.call_count == 3

        host.update(sections[:2], template.replace(body_font_size=20), WIDTH + 1)
        assert spy.call_count == 4


def test_layout_ignores_fields_equal_count_does_not_read():
    host = ColumnLayout()
    sections = _sections(1, 1, 1)
    template = _template(2)
    with patch.object(layout, "distribute_content", wraps=distribute_content) as spy:
        host.update(sections, template, WIDTH)
        host.update(sections, template.replace(body_font_size=30, name="Big"), WIDTH)
        assert spy.call_count == 1

        host.update(sections, template.replace(column_count=3), WIDTH)
        assert spy.call_count == 2


def test_layout_invalidate_forces_recompute():
    host = ColumnLayout()
    sections = _sections(1, 1)
    with patch.object(layout, "distribute_content", wraps=distribute_content) as spy:
        host.update(sections, _template(2), WIDTH)
        host.invalidate()
        host.update(sections, _template(2), WIDTH)
        assert spy.call_count == 2


def test_layout_custom_estimator_recomputes_on_any_field():
    host = ColumnLayout(height_estimator=_by_lines)
    sections = _sections(1, 1)
    template = _template(2, ColumnBalancingStrategy.EQUAL_HEIGHT)
    with patch.object(layout, "distribute_content", wraps=distribute_content) as spy:
        host.update(sections, template, WIDTH)
        host.update(sections, template.replace(title_font_size=40), WIDTH)
        assert spy.call_count == 2


def test_layout_column_widths():
    assert ColumnLayout.column_widths(Template(column_count=2, column_gap=20), 420) == pytest.approx([200.0, 200.0])
