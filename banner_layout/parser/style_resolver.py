"""Resolve widget properties against caller defaults and built-in fallbacks."""
from __future__ import annotations

from dataclasses import fields
from typing import Optional, TypeVar

from banner_layout.model.errors import AmbiguousSpacing
from banner_layout.model.style_model import (
    BUILTIN_IMAGE_LAYER,
    BUILTIN_TEXT_LAYER,
    BUILTIN_TITLE_LAYER,
    DEFAULT_ALIGNMENT,
    ContainerStyle,
    ImageStyle,
    ImageStyleLayer,
    StyleDefaults,
    StyledNode,
    TextStyle,
    TextStyleLayer,
)
from banner_layout.model.widgets import (
    Border,
    FlexContainer,
    Image,
    Spacing,
    SpacingSpec,
    Text,
    TextKind,
    Widget,
    describe_widget,
)
from banner_layout.utils.logger import get_logger

LOGGER = get_logger(__name__)

LayerT = TypeVar("LayerT", TextStyleLayer, ImageStyleLayer)


def merge_layers(*layers: Optional[LayerT]) -> LayerT:
    """Fold layers right to left: the first layer that sets a field wins.

    Values are taken whole, so a spacing set by a more specific layer is
    never mixed side by side with one from a less specific layer.
    """
    present = [layer for layer in layers if layer is not None]
    layer_type = type(present[0])
    merged = {}
    for spec in fields(layer_type):
        merged[spec.name] = None
        for layer in present:
            value = getattr(layer, spec.name)
            if value is not None:
                merged[spec.name] = value
                break
    return layer_type(**merged)


def resolve_spacing(spec: Optional[SpacingSpec], widget: str, field_name: str) -> Spacing:
    """Turn authored sides/shorthand into concrete insets."""
    if spec is None:
        return Spacing()
    if spec.vertical is not None and (spec.top is not None or spec.bottom is not None):
        raise AmbiguousSpacing(widget, field_name, "vertical")
    if spec.horizontal is not None and (spec.left is not None or spec.right is not None):
        raise AmbiguousSpacing(widget, field_name, "horizontal")

    if spec.vertical is not None:
        top = bottom = spec.vertical
    else:
        top, bottom = spec.top or 0, spec.bottom or 0
    if spec.horizontal is not None:
        left = right = spec.horizontal
    else:
        left, right = spec.left or 0, spec.right or 0
    return Spacing(top=top, right=right, bottom=bottom, left=left)


class StyleResolver:
    """Attach a fully populated style to every widget of a tree."""

    def __init__(self, defaults: Optional[StyleDefaults] = None) -> None:
        self._defaults = defaults or StyleDefaults()

    def resolve(self, widget: Widget) -> StyledNode:
        if isinstance(widget, FlexContainer):
            children = tuple(self.resolve(child) for child in widget.children)
            return StyledNode(widget=widget, style=self.container_style(widget), children=children)
        if isinstance(widget, Text):
            return StyledNode(widget=widget, style=self.text_style(widget))
        return StyledNode(widget=widget, style=self.image_style(widget))

    # ------------------------------------------------------------------
    # Per widget type
    def container_style(self, widget: FlexContainer) -> ContainerStyle:
        theme = self._defaults.theme
        border = widget.border or Border()
        return ContainerStyle(
            direction=widget.direction,
            max_width=widget.max_width,
            max_height=widget.max_height,
            spacing=resolve_spacing(widget.spacing, describe_widget(widget), "spacing"),
            border=Border(size=border.size, radius=border.radius, color=border.color or theme.border),
            alignment=widget.alignment or DEFAULT_ALIGNMENT,
            background_color=widget.background_color or theme.background,
            transparent_background=bool(widget.transparent_background),
        )

    def text_style(self, widget: Text) -> TextStyle:
        explicit = TextStyleLayer(
            wrap=widget.wrap,
            ellipsize_at=widget.ellipsize_at,
            style=widget.style,
            margin=widget.margin,
            justification=widget.justification,
            line_spacing=widget.line_spacing,
            font_size=widget.font_size,
            foreground=widget.foreground,
        )
        defaults = self._defaults
        if widget.kind is TextKind.TITLE:
            merged = merge_layers(explicit, defaults.title, defaults.text, BUILTIN_TITLE_LAYER, BUILTIN_TEXT_LAYER)
        else:
            merged = merge_layers(explicit, defaults.body, defaults.text, BUILTIN_TEXT_LAYER)

        return TextStyle(
            wrap=merged.wrap,
            ellipsize_at=merged.ellipsize_at,
            style=merged.style,
            margin=resolve_spacing(merged.margin, describe_widget(widget), "margin"),
            justification=merged.justification,
            line_spacing=merged.line_spacing,
            font_size=merged.font_size,
            foreground=merged.foreground or defaults.theme.foreground,
        )

    def image_style(self, widget: Image) -> ImageStyle:
        explicit = ImageStyleLayer(
            max_size=widget.max_size,
            rounding=widget.rounding,
            margin=widget.margin,
            resizing_method=widget.resizing_method,
        )
        merged = merge_layers(explicit, self._defaults.image, BUILTIN_IMAGE_LAYER)
        return ImageStyle(
            max_size=merged.max_size,
            rounding=merged.rounding,
            margin=resolve_spacing(merged.margin, describe_widget(widget), "margin"),
            resizing_method=merged.resizing_method,
        )


def resolve_styles(widget: Widget, defaults: Optional[StyleDefaults] = None) -> StyledNode:
    return StyleResolver(defaults).resolve(widget)
