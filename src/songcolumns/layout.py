"""Distribute song sections across template columns.

A section is the unit of assignment: its heading always stays with its
lines, so sections are never split between columns. Three balancing
strategies are supported:

``EQUAL_COUNT``
    Sequential fill. Each column takes ``ceil(n / columns)`` sections in
    song order, so reading the columns left to right reproduces the song.

``EQUAL_HEIGHT``
    Greedy bin packing. Sections are visited in song order and each goes to
    the column with the smallest estimated height so far (lowest index wins
    ties).

``SECTION_BASED``
    Sequential fill against a height target. A column is closed once the
    next section would take it past 1.5x the average column height.

Height estimates come from :class:`HeightModel` unless a different
estimator is passed in.
"""

import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from .exceptions import LayoutError, TemplateError
from .models import LineType, SongLine, SongSection
from .template import ChordPositioningStyle, ColumnBalancingStrategy, SectionBreakBehavior, Template

logger = logging.getLogger(__name__)

HeightEstimator = Callable[[SongSection, Template], float]

# A column stops accepting sections past this multiple of the target height.
SECTION_BASED_OVERFLOW = 1.5


@dataclass(frozen=True)
class ColumnContent:
    """The sections assigned to one column. Recomputed on every layout pass."""

    index: int
    sections: tuple[SongSection, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "sections", tuple(self.sections))

    @property
    def is_empty(self) -> bool:
        return not self.sections

    @property
    def line_count(self) -> int:
        return sum(section.line_count for section in self.sections)


@dataclass(frozen=True)
class HeightModel:
    """Estimate rendered section heights from a template's typography.

    Every text row is ``font_size * line_height_factor`` tall. A section is
    its heading row plus label padding, the break spacing chosen by
    ``section_break_behavior``, and the sum of its line heights.
    """

    line_height_factor: float = 1.2
    label_padding: float = 4.0
    space_before: float = 20.0
    compact_spacing: float = 12.0
    comment_size_reduction: float = 2.0

    def __call__(self, section: SongSection, template: Template) -> float:
        return self.section_height(section, template)

    def line_height(self, line: SongLine, template: Template) -> float:
        body = template.body_font_size * self.line_height_factor
        chord = template.chord_font_size * self.line_height_factor

        if line.type is LineType.DIRECTIVE:
            return 0.0
        if line.type is LineType.CHORDS_ONLY:
            return chord
        if line.type is LineType.COMMENT:
            return max(template.body_font_size - self.comment_size_reduction, 0.0) * self.line_height_factor
        if line.type is LineType.LYRICS and line.has_chords:
            if template.chord_positioning_style is ChordPositioningStyle.INLINE:
                return body
            return chord + body
        return body

    def section_height(self, section: SongSection, template: Template) -> float:
        height = template.heading_font_size * self.line_height_factor + self.label_padding
        if template.section_break_behavior is SectionBreakBehavior.SPACE_BEFORE:
            height += self.space_before
        else:
            height += self.compact_spacing
        return height + sum(self.line_height(line, template) for line in section.lines)


DEFAULT_HEIGHT_MODEL = HeightModel()


def estimate_section_height(section: SongSection, template: Template) -> float:
    return DEFAULT_HEIGHT_MODEL.section_height(section, template)


def estimate_total_height(sections: Sequence[SongSection], template: Template) -> float:
    return sum(estimate_section_height(section, template) for section in sections)


def distribute_content(
    sections: Sequence[SongSection],
    template: Template,
    available_width: float,
    *,
    height_estimator: HeightEstimator | None = None,
) -> list[ColumnContent]:
    """Assign *sections* to ``template.column_count`` columns.

    *available_width* is the pixel width left after outer padding. It must be
    positive; callers should wait for a real width before laying out.

    Returns exactly ``template.column_count`` :class:`ColumnContent` values,
    trailing ones empty when there are fewer sections than columns.

    Raises :class:`TemplateError` if the column count is below 1 and
    :class:`LayoutError` if *available_width* is not positive.
    """
    count = template.column_count
    if count < 1:
        raise TemplateError("column_count", "must be at least 1")
    if available_width <= 0:
        raise LayoutError(f"available width must be positive, got {available_width}")

    sections = tuple(sections)
    strategy = template.column_balancing_strategy

    if strategy is ColumnBalancingStrategy.EQUAL_COUNT:
        buckets = _fill_equal_count(sections, count)
    else:
        estimate = height_estimator or DEFAULT_HEIGHT_MODEL
        heights = [estimate(section, template) for section in sections]
        if strategy is ColumnBalancingStrategy.EQUAL_HEIGHT:
            buckets = _fill_equal_height(sections, heights, count)
        else:
            buckets = _fill_section_based(sections, heights, count)

    logger.debug(
        "Distributed %d sections into %d columns (%s): %s",
        len(sections),
        count,
        strategy.value,
        [len(bucket) for bucket in buckets],
    )
    return [ColumnContent(index=i, sections=bucket) for i, bucket in enumerate(buckets)]


class ColumnLayout:
    """Hold the current columns for a display surface and recompute them on change.

    The host calls :meth:`update` from its own change detection (resize,
    template edit, new parse). The distribution is recomputed only when the
    width, the sections, or a template field the distribution reads has
    changed.
    """

    def __init__(self, height_estimator: HeightEstimator | None = None):
        self._height_estimator = height_estimator
        self._key: tuple | None = None
        self._columns: list[ColumnContent] = []

    @property
    def columns(self) -> list[ColumnContent]:
        return list(self._columns)

    def update(
        self,
        sections: Sequence[SongSection],
        template: Template,
        available_width: float,
    ) -> list[ColumnContent]:
        if available_width <= 0:
            # No usable width yet (first pass before the host has measured).
            logger.debug("Deferring layout: available width is %s", available_width)
            return list(self._columns)

        sections = tuple(sections)
        key = (available_width, sections, self._template_key(template))
        if key == self._key:
            return list(self._columns)

        self._columns = distribute_content(
            sections,
            template,
            available_width,
            height_estimator=self._height_estimator,
        )
        self._key = key
        return list(self._columns)

    def invalidate(self) -> None:
        """Force the next :meth:`update` to recompute."""
        self._key = None

    @staticmethod
    def column_widths(template: Template, total_width: float) -> list[float]:
        return template.effective_column_widths(total_width)

    def _template_key(self, template: Template) -> tuple:
        if self._height_estimator is not None:
            # A custom estimator may read any field.
            return (template,)
        key = (template.column_count, template.column_balancing_strategy)
        if template.column_balancing_strategy is ColumnBalancingStrategy.EQUAL_COUNT:
            return key
        return key + (
            template.heading_font_size,
            template.body_font_size,
            template.chord_font_size,
            template.section_break_behavior,
            template.chord_positioning_style,
        )


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


def _fill_equal_count(sections: tuple[SongSection, ...], count: int) -> list[list[SongSection]]:
    per_column = math.ceil(len(sections) / count)
    return [list(sections[i * per_column:(i + 1) * per_column]) for i in range(count)]


def _fill_equal_height(
    sections: tuple[SongSection, ...], heights: list[float], count: int
) -> list[list[SongSection]]:
    buckets: list[list[SongSection]] = [[] for _ in range(count)]
    totals = [0.0] * count
    for section, height in zip(sections, heights):
        shortest = min(range(count), key=lambda i: (totals[i], i))
        buckets[shortest].append(section)
        totals[shortest] += height
    return buckets


def _fill_section_based(
    sections: tuple[SongSection, ...], heights: list[float], count: int
) -> list[list[SongSection]]:
    buckets: list[list[SongSection]] = [[] for _ in range(count)]
    totals = [0.0] * count
    target = sum(heights) / count
    current = 0
    for section, height in zip(sections, heights):
        if (
            current < count - 1
            and buckets[current]
            and totals[current] + height > target * SECTION_BASED_OVERFLOW
        ):
            current += 1
        buckets[current].append(section)
        totals[current] += height
    return buckets
