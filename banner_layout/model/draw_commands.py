"""Flat paint instructions consumed by presentation layers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from banner_layout.model.layout_model import ImageData
from banner_layout.model.widgets import Color, ResizingMethod


@dataclass(frozen=True, slots=True)
class FilledRect:
    x: int
    y: int
    width: int
    height: int
    color: Color

    command_name = "filled_rect"


@dataclass(frozen=True, slots=True)
class RoundedRect:
    """Rounded rectangle; ``border_width == 0`` fills the whole shape."""

    x: int
    y: int
    width: int
    height: int
    color: Color
    radius: int
    border_width: int = 0
    inner_radius: int = 0

    command_name = "rounded_rect"

    @property
    def is_outline(self) -> bool:
        return self.border_width > 0


@dataclass(frozen=True, slots=True)
class DrawText:
    x: int
    y: int
    width: int
    height: int
    text: str
    font_size: int
    color: Color
    bold: bool = False
    italic: bool = False
    underline: bool = False
    link: Optional[str] = None

    command_name = "text"


@dataclass(frozen=True, slots=True)
class ImageBlit:
    x: int
    y: int
    width: int
    height: int
    handle: Optional[ImageData]
    resizing_method: ResizingMethod
    rounding: int = 0
    source: Optional[str] = None

    command_name = "image"


DrawCommand = FilledRect | RoundedRect | DrawText | ImageBlit
