"""Caller-supplied style layers and the fully resolved per-widget styles."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from banner_layout.model.widgets import (
    BLACK,
    WHITE,
    Alignment,
    Border,
    Color,
    Direction,
    EllipsizeAt,
    FontStyle,
    Justification,
    Position,
    ResizingMethod,
    Spacing,
    SpacingSpec,
    Widget,
)

DEFAULT_FONT_SIZE = 12
DEFAULT_IMAGE_MAX_SIZE = 64


@dataclass(frozen=True, slots=True)
class TextStyleLayer:
    """Partial text properties; ``None`` means "not set by this layer"."""

    wrap: Optional[bool] = None
    ellipsize_at: Optional[EllipsizeAt] = None
    style: Optional[FontStyle] = None
    margin: Optional[SpacingSpec] = None
    justification: Optional[Justification] = None
    line_spacing: Optional[int] = None
    font_size: Optional[int] = None
    foreground: Optional[Color] = None


@dataclass(frozen=True, slots=True)
class ImageStyleLayer:
    max_size: Optional[int] = None
    rounding: Optional[int] = None
    margin: Optional[SpacingSpec] = None
    resizing_method: Optional[ResizingMethod] = None


@dataclass(frozen=True, slots=True)
class ThemeColors:
    foreground: Color = BLACK
    background: Color = WHITE
    border: Color = BLACK


@dataclass(frozen=True, slots=True)
class StyleDefaults:
    """Everything the caller may configure around a compiled layout."""

    title: TextStyleLayer = field(default_factory=TextStyleLayer)
    body: TextStyleLayer = field(default_factory=TextStyleLayer)
    text: TextStyleLayer = field(default_factory=TextStyleLayer)
    image: ImageStyleLayer = field(default_factory=ImageStyleLayer)
    theme: ThemeColors = field(default_factory=ThemeColors)
    markup: bool = True
    padding: Spacing = field(default_factory=Spacing)
    border: Border = field(default_factory=Border)


# Built-in layers, consulted after every caller layer.
BUILTIN_TEXT_LAYER = TextStyleLayer(
    wrap=True,
    ellipsize_at=EllipsizeAt.END,
    style=FontStyle.REGULAR,
    margin=SpacingSpec.from_spacing(Spacing()),
    justification=Justification.LEFT,
    line_spacing=0,
    font_size=DEFAULT_FONT_SIZE,
)
BUILTIN_TITLE_LAYER = TextStyleLayer(style=FontStyle.BOLD, justification=Justification.CENTER)
BUILTIN_IMAGE_LAYER = ImageStyleLayer(
    max_size=DEFAULT_IMAGE_MAX_SIZE,
    rounding=0,
    margin=SpacingSpec.from_spacing(Spacing()),
    resizing_method=ResizingMethod.GAUSSIAN,
)
DEFAULT_ALIGNMENT = Alignment(horizontal=Position.CENTER, vertical=Position.CENTER)


# ----------------------------------------------------------------------
# Resolved styles
@dataclass(frozen=True, slots=True)
class ContainerStyle:
    direction: Direction
    max_width: Optional[int]
    max_height: Optional[int]
    spacing: Spacing
    border: Border
    alignment: Alignment
    background_color: Color
    transparent_background: bool


@dataclass(frozen=True, slots=True)
class TextStyle:
    wrap: bool
    ellipsize_at: EllipsizeAt
    style: FontStyle
    margin: Spacing
    justification: Justification
    line_spacing: int
    font_size: int
    foreground: Color


@dataclass(frozen=True, slots=True)
class ImageStyle:
    max_size: int
    rounding: int
    margin: Spacing
    resizing_method: ResizingMethod


ResolvedStyle = ContainerStyle | TextStyle | ImageStyle


@dataclass(frozen=True, slots=True)
class StyledNode:
    """Widget paired with its resolved style; mirrors the widget tree."""

    widget: Widget
    style: ResolvedStyle
    children: Tuple["StyledNode", ...] = ()
