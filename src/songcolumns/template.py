"""Layout templates.

A :class:`Template` is the whole configuration of a layout pass: how many
columns, how they are balanced, font sizes, and how chords are drawn.
Templates are immutable; use :meth:`Template.replace` to derive a new one.

Templates can be stored as JSON::

    {
        "name": "Two Column",
        "columnCount": 2,
        "columnGap": 24,
        "columnBalancingStrategy": "equalHeight",
        "chordPositioningStyle": "chordsOverLyrics"
    }

Keys may be camelCase (as above) or snake_case. Unknown keys are ignored.
"""

import dataclasses
import json
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .exceptions import TemplateError

# Monospaced glyph width as a fraction of the font size.
CHAR_WIDTH_RATIO = 0.6

MAX_COLUMNS = 4


class ColumnBalancingStrategy(Enum):
    EQUAL_COUNT = "equalCount"  # sequential fill, ceil(n / columns) sections each
    EQUAL_HEIGHT = "equalHeight"  # greedy, shortest column first
    SECTION_BASED = "sectionBased"  # sequential fill against a height target


class ChordPositioningStyle(Enum):
    CHORDS_OVER_LYRICS = "chordsOverLyrics"
    INLINE = "inline"
    SEPARATE_LINES = "separateLines"


class ChordAlignment(Enum):
    LEFT_ALIGNED = "leftAligned"
    CENTERED = "centered"
    RIGHT_ALIGNED = "rightAligned"


class SectionBreakBehavior(Enum):
    SPACE_BEFORE = "spaceBefore"
    COMPACT = "compact"


class ColumnWidthMode(Enum):
    EQUAL = "equal"
    CUSTOM = "custom"


_ENUM_FIELDS = {
    "column_width_mode": ColumnWidthMode,
    "column_balancing_strategy": ColumnBalancingStrategy,
    "chord_positioning_style": ChordPositioningStyle,
    "chord_alignment": ChordAlignment,
    "section_break_behavior": SectionBreakBehavior,
}


@dataclass(frozen=True)
class Template:
    """Column, typography and chord-style configuration for one layout pass."""

    name: str = "Custom"
    column_count: int = 1
    column_gap: float = 20.0
    column_width_mode: ColumnWidthMode = ColumnWidthMode.EQUAL
    custom_column_widths: tuple[float, ...] | None = None  # relative weights
    column_balancing_strategy: ColumnBalancingStrategy = ColumnBalancingStrategy.EQUAL_COUNT
    chord_positioning_style: ChordPositioningStyle = ChordPositioningStyle.CHORDS_OVER_LYRICS
    chord_alignment: ChordAlignment = ChordAlignment.LEFT_ALIGNED
    title_font_size: float = 24.0
    heading_font_size: float = 18.0
    body_font_size: float = 16.0
    chord_font_size: float = 14.0
    section_break_behavior: SectionBreakBehavior = SectionBreakBehavior.SPACE_BEFORE

    def __post_init__(self):
        if self.custom_column_widths is not None:
            object.__setattr__(self, "custom_column_widths", tuple(self.custom_column_widths))

    # --- Derived values ---

    @property
    def chord_char_width(self) -> float:
        """Width of one chord character, assuming a monospaced chord font."""
        return self.chord_font_size * CHAR_WIDTH_RATIO

    def effective_column_widths(self, total_width: float) -> list[float]:
        """Split *total_width* into per-column widths after subtracting the gaps.

        Custom weights are used only when they are present, one per column,
        and sum to a positive number; otherwise columns are equal. Widths
        never go below zero.
        """
        if self.column_count < 1:
            return []

        total_gap = (self.column_count - 1) * self.column_gap
        available = max(total_width - total_gap, 0.0)

        weights = self.custom_column_widths
        if (
            self.column_width_mode is ColumnWidthMode.CUSTOM
            and weights is not None
            and len(weights) == self.column_count
            and sum(weights) > 0
        ):
            total_weight = sum(weights)
            return [available * weight / total_weight for weight in weights]

        return [available / self.column_count] * self.column_count

    # --- Validation ---

    def validate(self) -> None:
        """Raise :class:`TemplateError` if the configuration cannot be laid out."""
        if not 1 <= self.column_count <= MAX_COLUMNS:
            raise TemplateError("column_count", f"must be between 1 and {MAX_COLUMNS}")
        if self.column_gap < 0:
            raise TemplateError("column_gap", "must not be negative")
        for field_name in ("title_font_size", "heading_font_size", "body_font_size", "chord_font_size"):
            if getattr(self, field_name) <= 0:
                raise TemplateError(field_name, "must be positive")
        if self.column_width_mode is ColumnWidthMode.CUSTOM:
            weights = self.custom_column_widths
            if not weights or len(weights) != self.column_count:
                raise TemplateError("custom_column_widths", "need one weight per column")
            if any(weight <= 0 for weight in weights):
                raise TemplateError("custom_column_widths", "weights must be positive")

    @property
    def is_valid(self) -> bool:
        try:
            self.validate()
        except TemplateError:
            return False
        return True

    # --- Copies and serialisation ---

    def replace(self, **changes) -> "Template":
        return dataclasses.replace(self, **changes)

    def duplicate(self, new_name: str) -> "Template":
        return self.replace(name=new_name)

    def to_dict(self) -> dict:
        data = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, tuple):
                value = list(value)
            data[_camel(f.name)] = value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Template":
        """Build a template from a JSON-style mapping, ignoring unknown keys.

        Raises :class:`TemplateError` for unknown enum values or an invalid
        resulting configuration.
        """
        known = {f.name for f in dataclasses.fields(cls)}
        kwargs = {}
        for raw_key, value in data.items():
            key = _snake(raw_key)
            if key not in known:
                continue
            enum_type = _ENUM_FIELDS.get(key)
            if enum_type is not None:
                try:
                    value = enum_type(value)
                except ValueError:
                    allowed = ", ".join(member.value for member in enum_type)
                    raise TemplateError(key, f"{value!r} is not one of: {allowed}") from None
            kwargs[key] = value

        template = cls(**kwargs)
        template.validate()
        return template


def load_template(path: str | Path) -> Template:
    """Read and validate a template stored as JSON at *path*."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise TemplateError("file", f"cannot read {path} ({exc.strerror or exc})") from exc
    except json.JSONDecodeError as exc:
        raise TemplateError("file", f"{path} is not valid JSON ({exc.msg})") from exc
    if not isinstance(data, dict):
        raise TemplateError("file", f"{path} must contain a JSON object")
    return Template.from_dict(data)


# ---------------------------------------------------------------------------
# Built-in templates
# ---------------------------------------------------------------------------


def single_column() -> Template:
    return Template(name="Single Column", column_count=1, column_gap=0.0)


def two_column() -> Template:
    return Template(
        name="Two Column",
        column_count=2,
        column_gap=24.0,
        column_balancing_strategy=ColumnBalancingStrategy.EQUAL_HEIGHT,
    )


def three_column() -> Template:
    return Template(
        name="Three Column",
        column_count=3,
        column_gap=20.0,
        column_balancing_strategy=ColumnBalancingStrategy.EQUAL_HEIGHT,
    )


BUILT_IN_TEMPLATES = {
    "single": single_column,
    "two": two_column,
    "three": three_column,
}


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _snake(key: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def _camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part.title() for part in rest)
