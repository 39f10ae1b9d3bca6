"""Semantic widget tree and the value types used to configure it.

Widget fields are ``None`` when the author did not set them; property
resolution fills them from caller defaults later on.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Tuple

from banner_layout.model.errors import SourcePosition


class Direction(enum.Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"

    def orthogonal(self) -> "Direction":
        if self is Direction.HORIZONTAL:
            return Direction.VERTICAL
        return Direction.HORIZONTAL


class Position(enum.Enum):
    START = "start"
    CENTER = "center"
    END = "end"
    SPACE_BETWEEN = "space-between"

    def initial_offset(self, available: int, length: int) -> int:
        """Offset of a block of ``length`` inside ``available`` space."""
        free = max(available - length, 0)
        if self is Position.CENTER:
            return free // 2
        if self is Position.END:
            return free
        return 0


class TextKind(enum.Enum):
    TITLE = "title"
    BODY = "body"


class EllipsizeAt(enum.Enum):
    END = "end"
    MIDDLE = "middle"


class FontStyle(enum.Enum):
    REGULAR = "regular"
    BOLD = "bold"
    ITALIC = "italic"
    BOLD_ITALIC = "bold-italic"

    @property
    def bold(self) -> bool:
        return self in (FontStyle.BOLD, FontStyle.BOLD_ITALIC)

    @property
    def italic(self) -> bool:
        return self in (FontStyle.ITALIC, FontStyle.BOLD_ITALIC)


class Justification(enum.Enum):
    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"
    SPACE_BETWEEN = "space-between"


class ResizingMethod(enum.Enum):
    """Resampling filter the presentation layer uses when scaling an image."""

    NEAREST = "nearest"
    TRIANGLE = "triangle"
    GAUSSIAN = "gaussian"
    CATMULL_ROM = "catmull-rom"
    LANCZOS3 = "lanczos3"


@dataclass(frozen=True, slots=True)
class Color:
    """Straight (non premultiplied) RGBA colour with 8-bit channels."""

    red: int
    green: int
    blue: int
    alpha: int = 255

    @classmethod
    def from_hex(cls, value: str) -> "Color":
        """Parse ``#rgb``, ``#rrggbb`` or ``#rrggbbaa`` (the ``#`` is optional)."""
        digits = value[1:] if value.startswith("#") else value
        if len(digits) not in (3, 6, 8) or any(ch not in "0123456789abcdefABCDEF" for ch in digits):
            raise ValueError(f"Not a hex colour: {value!r}")
        if len(digits) == 3:
            red, green, blue = (int(ch * 2, 16) for ch in digits)
            return cls(red, green, blue)
        channels = [int(digits[index : index + 2], 16) for index in range(0, len(digits), 2)]
        return cls(*channels)

    @property
    def is_transparent(self) -> bool:
        return self.alpha == 0

    def to_hex(self) -> str:
        return f"#{self.red:02x}{self.green:02x}{self.blue:02x}{self.alpha:02x}"


BLACK = Color(0, 0, 0)
WHITE = Color(255, 255, 255)
RED = Color(255, 0, 0)


# ----------------------------------------------------------------------
# Value types
@dataclass(frozen=True, slots=True)
class Spacing:
    """Resolved per-side insets."""

    top: int = 0
    right: int = 0
    bottom: int = 0
    left: int = 0

    @classmethod
    def all_directional(cls, value: int) -> "Spacing":
        return cls(value, value, value, value)

    @classmethod
    def cross(cls, vertical: int, horizontal: int) -> "Spacing":
        return cls(vertical, horizontal, vertical, horizontal)

    @property
    def horizontal(self) -> int:
        return self.left + self.right

    @property
    def vertical(self) -> int:
        return self.top + self.bottom

    def __add__(self, other: "Spacing") -> "Spacing":
        return Spacing(
            self.top + other.top,
            self.right + other.right,
            self.bottom + other.bottom,
            self.left + other.left,
        )


@dataclass(frozen=True, slots=True)
class SpacingSpec:
    """Spacing as authored: explicit sides and/or vertical/horizontal shorthand."""

    top: Optional[int] = None
    right: Optional[int] = None
    bottom: Optional[int] = None
    left: Optional[int] = None
    vertical: Optional[int] = None
    horizontal: Optional[int] = None

    @classmethod
    def all_sides(cls, value: int) -> "SpacingSpec":
        return cls(vertical=value, horizontal=value)

    @classmethod
    def from_spacing(cls, spacing: Spacing) -> "SpacingSpec":
        return cls(top=spacing.top, right=spacing.right, bottom=spacing.bottom, left=spacing.left)


@dataclass(frozen=True, slots=True)
class Alignment:
    horizontal: Position
    vertical: Position


@dataclass(frozen=True, slots=True)
class Border:
    size: int = 0
    radius: int = 0
    color: Optional[Color] = None

    @property
    def inner_radius(self) -> int:
        return max(self.radius - self.size, 0)


ValueType = SpacingSpec | Alignment | Border


# ----------------------------------------------------------------------
# Widgets
@dataclass(frozen=True, slots=True)
class FlexContainer:
    direction: Direction
    children: Tuple["Widget", ...] = ()
    max_width: Optional[int] = None
    max_height: Optional[int] = None
    spacing: Optional[SpacingSpec] = None
    border: Optional[Border] = None
    alignment: Optional[Alignment] = None
    background_color: Optional[Color] = None
    transparent_background: Optional[bool] = None
    position: Optional[SourcePosition] = None

    type_name = "FlexContainer"


@dataclass(frozen=True, slots=True)
class Text:
    kind: TextKind
    wrap: Optional[bool] = None
    ellipsize_at: Optional[EllipsizeAt] = None
    style: Optional[FontStyle] = None
    margin: Optional[SpacingSpec] = None
    justification: Optional[Justification] = None
    line_spacing: Optional[int] = None
    font_size: Optional[int] = None
    foreground: Optional[Color] = None
    position: Optional[SourcePosition] = None

    type_name = "Text"


@dataclass(frozen=True, slots=True)
class Image:
    max_size: Optional[int] = None
    rounding: Optional[int] = None
    margin: Optional[SpacingSpec] = None
    resizing_method: Optional[ResizingMethod] = None
    position: Optional[SourcePosition] = None

    type_name = "Image"


Widget = FlexContainer | Text | Image


def describe_widget(widget: Widget) -> str:
    """Short identity used in diagnostics, e.g. ``Text(title) at 4:5``."""
    label = widget.type_name
    if isinstance(widget, Text):
        label = f"{label}({widget.kind.value})"
    if widget.position is not None:
        label = f"{label} at {widget.position.describe()}"
    return label
