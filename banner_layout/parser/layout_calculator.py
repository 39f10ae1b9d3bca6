"""Compute absolute geometry for a styled widget tree."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from banner_layout.model.layout_model import (
    DEFAULT_BANNER_HEIGHT,
    DEFAULT_BANNER_WIDTH,
    ContainerContent,
    ImageContent,
    ImageData,
    LayoutBox,
    NotificationContent,
)
from banner_layout.model.style_model import ContainerStyle, ImageStyle, StyledNode, TextStyle
from banner_layout.model.text_model import StyleMask, TextRun, plain_runs
from banner_layout.model.widgets import Border, Direction, FlexContainer, Position, Text, TextKind, describe_widget
from banner_layout.parser.markup_parser import parse_markup
from banner_layout.parser.text_layout import ShapedText, TextShaper
from banner_layout.utils.logger import get_logger
from banner_layout.utils.metrics import TextMetrics

LOGGER = get_logger(__name__)


def round_half_up(value: float) -> int:
    return int(value + 0.5)


def limit_size(width: int, height: int, max_size: int) -> Tuple[int, int]:
    """Scale ``width``x``height`` down so neither side exceeds ``max_size``."""
    if width <= max_size and height <= max_size:
        return width, height
    if width >= height:
        return max_size, round_half_up(height * max_size / width)
    return round_half_up(width * max_size / height), max_size


def fit_within(width: int, height: int, max_width: int, max_height: int) -> Tuple[int, int]:
    """Shrink (never grow) to fit a box, preserving the aspect ratio."""
    if width <= max_width and height <= max_height:
        return width, height
    if width == 0 or height == 0:
        return min(width, max_width), min(height, max_height)
    scale = min(max_width / width, max_height / height)
    return min(round_half_up(width * scale), max_width), min(round_half_up(height * scale), max_height)


@dataclass(slots=True)
class _Measured:
    """Size decided for a node before its position is known."""

    node: StyledNode
    width: int
    height: int
    children: List["_Measured"] = field(default_factory=list)
    shaper: Optional[TextShaper] = None
    shaped: Optional[ShapedText] = None
    image_size: Tuple[int, int] = (0, 0)


class LayoutCalculator:
    """Two pass solver: measure every node top-down, then assign positions.

    A container's box is its cap (or what it is offered when uncapped);
    children are offered the remaining main-axis length and the full
    cross-axis length and never overflow it.
    """

    def __init__(self, metrics: TextMetrics, *, markup: bool = True) -> None:
        self._metrics = metrics
        self._markup = markup
        self._content = NotificationContent()

    def calculate(
        self,
        tree: StyledNode,
        content: NotificationContent,
        width: int = DEFAULT_BANNER_WIDTH,
        height: int = DEFAULT_BANNER_HEIGHT,
    ) -> LayoutBox:
        self._content = content
        measured = self._measure(tree, width, height)
        box = self._arrange(measured, 0, 0)
        LOGGER.debug("Laid out %s into %dx%d", tree.widget.type_name, box.width, box.height)
        return box

    # ------------------------------------------------------------------
    # Measuring
    def _measure(self, node: StyledNode, available_width: int, available_height: int) -> _Measured:
        available_width = max(available_width, 0)
        available_height = max(available_height, 0)
        if isinstance(node.style, ContainerStyle):
            measured = self._measure_container(node, node.style, available_width, available_height)
        elif isinstance(node.style, TextStyle):
            measured = self._measure_text(node, node.style, available_width, available_height)
        else:
            measured = self._measure_image(node, node.style, available_width, available_height)

        if (measured.width == 0 or measured.height == 0) and self._has_content(node):
            LOGGER.warning(
                "%s doesn't fit the available space (%dx%d)",
                describe_widget(node.widget),
                available_width,
                available_height,
            )
        return measured

    def _measure_container(
        self, node: StyledNode, style: ContainerStyle, available_width: int, available_height: int
    ) -> _Measured:
        width = available_width if style.max_width is None else min(style.max_width, available_width)
        height = available_height if style.max_height is None else min(style.max_height, available_height)
        inner_width, inner_height = self._content_size(style, width, height)

        horizontal = style.direction is Direction.HORIZONTAL
        remaining = inner_width if horizontal else inner_height
        children: List[_Measured] = []
        for child in node.children:
            if horizontal:
                measured = self._measure(child, remaining, inner_height)
                remaining -= measured.width
            else:
                measured = self._measure(child, inner_width, remaining)
                remaining -= measured.height
            children.append(measured)
        return _Measured(node=node, width=width, height=height, children=children)

    def _measure_text(
        self, node: StyledNode, style: TextStyle, available_width: int, available_height: int
    ) -> _Measured:
        margin = style.margin
        inner_width = max(available_width - margin.horizontal, 0)
        inner_height = max(available_height - margin.vertical, 0)
        shaper = TextShaper(self._metrics, style.font_size, style.line_spacing)
        shaped = shaper.shape(self._runs_for(node.widget, style), style, inner_width, inner_height)
        if not shaped.lines:
            return _Measured(node=node, width=0, height=0, shaper=shaper, shaped=shaped)
        width = min(shaped.width + margin.horizontal, available_width)
        height = min(shaped.height + margin.vertical, available_height)
        return _Measured(node=node, width=width, height=height, shaper=shaper, shaped=shaped)

    def _measure_image(
        self, node: StyledNode, style: ImageStyle, available_width: int, available_height: int
    ) -> _Measured:
        natural = self._metrics.natural_image_size(self._content.image)
        if not natural or 0 in natural:
            return _Measured(node=node, width=0, height=0)
        width, height = limit_size(natural[0], natural[1], style.max_size)
        margin = style.margin
        width, height = fit_within(
            width,
            height,
            max(available_width - margin.horizontal, 0),
            max(available_height - margin.vertical, 0),
        )
        if width == 0 or height == 0:
            return _Measured(node=node, width=0, height=0)
        return _Measured(
            node=node,
            width=min(width + margin.horizontal, available_width),
            height=min(height + margin.vertical, available_height),
            image_size=(width, height),
        )

    # ------------------------------------------------------------------
    # Arranging
    def _arrange(self, measured: _Measured, x: int, y: int) -> LayoutBox:
        style = measured.node.style
        if isinstance(style, ContainerStyle):
            return self._arrange_container(measured, style, x, y)
        if isinstance(style, TextStyle):
            return self._arrange_text(measured, style, x, y)
        return self._arrange_image(measured, style, x, y)

    def _arrange_container(self, measured: _Measured, style: ContainerStyle, x: int, y: int) -> LayoutBox:
        inset = style.border.size
        content_x = x + style.spacing.left + inset
        content_y = y + style.spacing.top + inset
        content_width, content_height = self._content_size(style, measured.width, measured.height)

        horizontal = style.direction is Direction.HORIZONTAL
        main_length = content_width if horizontal else content_height
        cross_length = content_height if horizontal else content_width
        main_position = style.alignment.horizontal if horizontal else style.alignment.vertical
        cross_position = style.alignment.vertical if horizontal else style.alignment.horizontal

        sizes = [(child.width, child.height) if horizontal else (child.height, child.width) for child in measured.children]
        offsets = self._main_offsets(main_position, main_length, [main for main, _ in sizes])

        children: List[LayoutBox] = []
        for child, (main, cross), offset in zip(measured.children, sizes, offsets):
            cross_offset = cross_position.initial_offset(cross_length, cross)
            if horizontal:
                children.append(self._arrange(child, content_x + offset, content_y + cross_offset))
            else:
                children.append(self._arrange(child, content_x + cross_offset, content_y + offset))

        radius = min(style.border.radius, min(measured.width, measured.height) // 2)
        border = Border(size=style.border.size, radius=radius, color=style.border.color)
        background = style.background_color
        if style.transparent_background or background.is_transparent:
            background = None

        return LayoutBox(
            element_type="container",
            x=x,
            y=y,
            width=measured.width,
            height=measured.height,
            content_x=content_x,
            content_y=content_y,
            content_width=content_width,
            content_height=content_height,
            content=ContainerContent(background=background, border=border, border_color=style.border.color),
            style=style,
            children=tuple(children),
        )

    def _arrange_text(self, measured: _Measured, style: TextStyle, x: int, y: int) -> LayoutBox:
        margin = style.margin
        content_x = x + margin.left
        content_y = y + margin.top
        content_width = max(measured.width - margin.horizontal, 0)
        content_height = max(measured.height - margin.vertical, 0)
        text = measured.shaper.place(
            measured.shaped,
            style.justification,
            content_x,
            content_y,
            content_width,
            style.foreground,
        )
        return LayoutBox(
            element_type="text",
            x=x,
            y=y,
            width=measured.width,
            height=measured.height,
            content_x=content_x,
            content_y=content_y,
            content_width=content_width,
            content_height=content_height,
            content=text,
            style=style,
        )

    def _arrange_image(self, measured: _Measured, style: ImageStyle, x: int, y: int) -> LayoutBox:
        width, height = measured.image_size
        content_x = x + style.margin.left
        content_y = y + style.margin.top
        handle: Optional[ImageData] = self._content.image if width and height else None
        return LayoutBox(
            element_type="image",
            x=x,
            y=y,
            width=measured.width,
            height=measured.height,
            content_x=content_x,
            content_y=content_y,
            content_width=width,
            content_height=height,
            content=ImageContent(
                handle=handle,
                width=width,
                height=height,
                rounding=style.rounding,
                resizing_method=style.resizing_method,
            ),
            style=style,
        )

    # ------------------------------------------------------------------
    # Helpers
    @staticmethod
    def _content_size(style: ContainerStyle, width: int, height: int) -> Tuple[int, int]:
        inset = style.border.size * 2
        return (
            max(width - style.spacing.horizontal - inset, 0),
            max(height - style.spacing.vertical - inset, 0),
        )

    @staticmethod
    def _main_offsets(position: Position, available: int, lengths: Sequence[int]) -> List[int]:
        total = sum(lengths)
        if position is Position.SPACE_BETWEEN and len(lengths) > 1:
            gap = max(available - total, 0) // (len(lengths) - 1)
            start = 0
        else:
            gap = 0
            start = position.initial_offset(available, total)

        offsets: List[int] = []
        cursor = start
        for length in lengths:
            offsets.append(cursor)
            cursor += length + gap
        return offsets

    def _runs_for(self, widget: Text, style: TextStyle) -> Tuple[TextRun, ...]:
        base = StyleMask.NONE
        if style.style.bold:
            base |= StyleMask.BOLD
        if style.style.italic:
            base |= StyleMask.ITALIC

        if widget.kind is TextKind.TITLE:
            return plain_runs(self._content.title, base)
        if not self._markup:
            return plain_runs(self._content.body, base)
        runs = parse_markup(self._content.body).runs
        return tuple(TextRun(run.text, run.mask | base, run.link, run.image) for run in runs)

    def _has_content(self, node: StyledNode) -> bool:
        widget = node.widget
        if isinstance(widget, FlexContainer):
            return False
        if isinstance(widget, Text):
            text = self._content.title if widget.kind is TextKind.TITLE else self._content.body
            return bool(text.strip())
        return self._content.image is not None


def calculate_layout(
    tree: StyledNode,
    content: NotificationContent,
    metrics: TextMetrics,
    width: int = DEFAULT_BANNER_WIDTH,
    height: int = DEFAULT_BANNER_HEIGHT,
    *,
    markup: bool = True,
) -> LayoutBox:
    return LayoutCalculator(metrics, markup=markup).calculate(tree, content, width, height)
