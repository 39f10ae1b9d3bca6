"""Positioned boxes produced by the layout solver."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from banner_layout.model.style_model import ResolvedStyle
from banner_layout.model.text_model import TextRun
from banner_layout.model.widgets import Border, Color, ResizingMethod

DEFAULT_BANNER_WIDTH = 300
DEFAULT_BANNER_HEIGHT = 150


@dataclass(frozen=True, slots=True)
class ImageData:
    """Opaque image handle; only its pixel size matters to layout."""

    width: int
    height: int
    source: Optional[str] = None


@dataclass(frozen=True, slots=True)
class NotificationContent:
    title: str = ""
    body: str = ""
    image: Optional[ImageData] = None


# ----------------------------------------------------------------------
# Paint payloads
@dataclass(frozen=True, slots=True)
class TextFragment:
    """Piece of a run placed on a line, in absolute coordinates."""

    x: int
    y: int
    width: int
    height: int
    run: TextRun


@dataclass(frozen=True, slots=True)
class TextLine:
    x: int
    y: int
    width: int
    height: int
    fragments: Tuple[TextFragment, ...] = ()

    @property
    def text(self) -> str:
        return "".join(fragment.run.text for fragment in self.fragments)


@dataclass(frozen=True, slots=True)
class TextContent:
    lines: Tuple[TextLine, ...]
    font_size: int
    foreground: Color
    truncated: bool = False

    @property
    def text(self) -> str:
        return "\n".join(line.text for line in self.lines)


@dataclass(frozen=True, slots=True)
class ImageContent:
    handle: Optional[ImageData]
    width: int
    height: int
    rounding: int
    resizing_method: ResizingMethod


@dataclass(frozen=True, slots=True)
class ContainerContent:
    """Background and border of a container after radius clamping."""

    background: Optional[Color]
    border: Border
    border_color: Color


BoxContent = ContainerContent | TextContent | ImageContent


@dataclass(frozen=True, slots=True)
class LayoutBox:
    """Absolute positioned box mirroring one widget of the tree."""

    element_type: str
    x: int
    y: int
    width: int
    height: int
    content_x: int
    content_y: int
    content_width: int
    content_height: int
    content: BoxContent
    style: ResolvedStyle
    children: Tuple["LayoutBox", ...] = ()

    @property
    def origin(self) -> Tuple[int, int]:
        return (self.x, self.y)

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @property
    def content_origin(self) -> Tuple[int, int]:
        return (self.content_x, self.content_y)

    @property
    def content_size(self) -> Tuple[int, int]:
        return (self.content_width, self.content_height)

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def walk(self):
        """Yield this box and every descendant in paint order."""
        yield self
        for child in self.children:
            yield from child.walk()
