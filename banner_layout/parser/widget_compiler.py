"""Turn alias-free raw nodes into typed widgets and value types."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from banner_layout.model.errors import (
    DuplicateProperty,
    MissingDiscriminator,
    TypeMismatch,
    UnexpectedChildren,
    UnknownProperty,
    UnknownType,
    ValueOutOfRange,
)
from banner_layout.model.syntax import Literal, Nested, RawNode, RawProperty, UInt
from banner_layout.model.widgets import (
    Alignment,
    Border,
    Color,
    Direction,
    EllipsizeAt,
    FlexContainer,
    FontStyle,
    Image,
    Justification,
    Position,
    ResizingMethod,
    SpacingSpec,
    Text,
    TextKind,
    Widget,
)
from banner_layout.utils.logger import get_logger

LOGGER = get_logger(__name__)

U8_MAX = 0xFF
U16_MAX = 0xFFFF
U32_MAX = 0xFFFFFFFF

DIRECTIONS = {"horizontal": Direction.HORIZONTAL, "vertical": Direction.VERTICAL}
TEXT_KINDS = {"title": TextKind.TITLE, "summary": TextKind.TITLE, "body": TextKind.BODY}
POSITIONS = {
    "start": Position.START,
    "center": Position.CENTER,
    "end": Position.END,
    "space-between": Position.SPACE_BETWEEN,
    "space_between": Position.SPACE_BETWEEN,
}
ELLIPSIZE_AT = {"end": EllipsizeAt.END, "middle": EllipsizeAt.MIDDLE}
FONT_STYLES = {
    "regular": FontStyle.REGULAR,
    "bold": FontStyle.BOLD,
    "italic": FontStyle.ITALIC,
    "bold-italic": FontStyle.BOLD_ITALIC,
    "bold_italic": FontStyle.BOLD_ITALIC,
}
JUSTIFICATIONS = {
    "left": Justification.LEFT,
    "right": Justification.RIGHT,
    "center": Justification.CENTER,
    "space-between": Justification.SPACE_BETWEEN,
    "space_between": Justification.SPACE_BETWEEN,
}
RESIZING_METHODS = {
    "nearest": ResizingMethod.NEAREST,
    "triangle": ResizingMethod.TRIANGLE,
    "gaussian": ResizingMethod.GAUSSIAN,
    "catmull-rom": ResizingMethod.CATMULL_ROM,
    "catmull_rom": ResizingMethod.CATMULL_ROM,
    "lanczos3": ResizingMethod.LANCZOS3,
}

Coercer = Callable[["WidgetCompiler", str, RawProperty], object]


@dataclass(frozen=True, slots=True)
class FieldSpec:
    coerce: Coercer
    required: bool = False


@dataclass(frozen=True, slots=True)
class TypeSpec:
    """Catalog entry: accepted fields and whether the type is a widget."""

    name: str
    fields: Mapping[str, FieldSpec]
    is_widget: bool
    accepts_children: bool = False


# ----------------------------------------------------------------------
# Coercions
def _enum_field(vocabulary: Mapping[str, object], required: bool = False) -> FieldSpec:
    expected = "one of " + ", ".join(vocabulary)

    def coerce(compiler: "WidgetCompiler", node_type: str, prop: RawProperty) -> object:
        value = prop.value
        if isinstance(value, Literal):
            matched = vocabulary.get(value.text.lower())
            if matched is not None:
                return matched
        raise TypeMismatch(node_type, prop.name, expected, value.describe(), value.position or prop.position)

    return FieldSpec(coerce, required)


def _uint_field(maximum: int) -> FieldSpec:
    def coerce(compiler: "WidgetCompiler", node_type: str, prop: RawProperty) -> object:
        value = prop.value
        if not isinstance(value, UInt):
            raise TypeMismatch(
                node_type, prop.name, "an unsigned integer", value.describe(), value.position or prop.position
            )
        if value.value > maximum:
            raise ValueOutOfRange(node_type, prop.name, value.value, maximum, value.position)
        return value.value

    return FieldSpec(coerce)


def _bool_field() -> FieldSpec:
    def coerce(compiler: "WidgetCompiler", node_type: str, prop: RawProperty) -> object:
        value = prop.value
        if isinstance(value, Literal) and value.text in ("true", "false"):
            return value.text == "true"
        raise TypeMismatch(node_type, prop.name, "true or false", value.describe(), value.position or prop.position)

    return FieldSpec(coerce)


def _color_field() -> FieldSpec:
    def coerce(compiler: "WidgetCompiler", node_type: str, prop: RawProperty) -> object:
        value = prop.value
        text: Optional[str] = None
        if isinstance(value, Literal):
            text = value.text
        elif isinstance(value, UInt):
            text = value.text or str(value.value)
        try:
            return Color.from_hex(text or "")
        except ValueError as error:
            raise TypeMismatch(
                node_type, prop.name, "a hex colour (#rgb, #rrggbb or #rrggbbaa)", value.describe(), value.position
            ) from error

    return FieldSpec(coerce)


def _value_field(type_name: str, allow_uint: bool = False) -> FieldSpec:
    def coerce(compiler: "WidgetCompiler", node_type: str, prop: RawProperty) -> object:
        value = prop.value
        if allow_uint and isinstance(value, UInt):
            if value.value > U8_MAX:
                raise ValueOutOfRange(node_type, prop.name, value.value, U8_MAX, value.position)
            return SpacingSpec.all_sides(value.value)
        if isinstance(value, Nested):
            return compiler.compile_value(value.node, type_name, owner=node_type, field_name=prop.name)
        expected = f"a {type_name}(...) value" + (" or an unsigned integer" if allow_uint else "")
        raise TypeMismatch(node_type, prop.name, expected, value.describe(), value.position)

    return FieldSpec(coerce)


CATALOG: Dict[str, TypeSpec] = {
    "FlexContainer": TypeSpec(
        name="FlexContainer",
        fields={
            "direction": _enum_field(DIRECTIONS, required=True),
            "max_width": _uint_field(U32_MAX),
            "max_height": _uint_field(U32_MAX),
            "spacing": _value_field("Spacing", allow_uint=True),
            "border": _value_field("Border"),
            "alignment": _value_field("Alignment"),
            "background_color": _color_field(),
            "transparent_background": _bool_field(),
        },
        is_widget=True,
        accepts_children=True,
    ),
    "Text": TypeSpec(
        name="Text",
        fields={
            "kind": _enum_field(TEXT_KINDS, required=True),
            "wrap": _bool_field(),
            "ellipsize_at": _enum_field(ELLIPSIZE_AT),
            "style": _enum_field(FONT_STYLES),
            "margin": _value_field("Spacing", allow_uint=True),
            "justification": _enum_field(JUSTIFICATIONS),
            "line_spacing": _uint_field(U8_MAX),
            "font_size": _uint_field(U16_MAX),
            "foreground": _color_field(),
        },
        is_widget=True,
    ),
    "Image": TypeSpec(
        name="Image",
        fields={
            "max_size": _uint_field(U16_MAX),
            "rounding": _uint_field(U16_MAX),
            "margin": _value_field("Spacing", allow_uint=True),
            "resizing_method": _enum_field(RESIZING_METHODS),
        },
        is_widget=True,
    ),
    "Spacing": TypeSpec(
        name="Spacing",
        fields={name: _uint_field(U8_MAX) for name in ("top", "right", "bottom", "left", "vertical", "horizontal")},
        is_widget=False,
    ),
    "Alignment": TypeSpec(
        name="Alignment",
        fields={
            "horizontal": _enum_field(POSITIONS, required=True),
            "vertical": _enum_field(POSITIONS, required=True),
        },
        is_widget=False,
    ),
    "Border": TypeSpec(
        name="Border",
        fields={
            "size": _uint_field(U8_MAX),
            "radius": _uint_field(U8_MAX),
            "color": _color_field(),
        },
        is_widget=False,
    ),
}

KNOWN_TYPES = frozenset(CATALOG)


class WidgetCompiler:
    """Validate raw nodes against the catalog and build typed widgets."""

    def __init__(self, root: RawNode) -> None:
        self._root = root

    def compile(self) -> Widget:
        widget = self._compile_widget(self._root, owner="document", field_name="root")
        LOGGER.debug("Compiled root widget %s", widget.type_name)
        return widget

    def compile_value(self, node: RawNode, type_name: str, *, owner: str, field_name: str) -> object:
        spec = self._lookup(node)
        if spec.name != type_name:
            kind = "widget" if spec.is_widget else "value"
            raise TypeMismatch(owner, field_name, type_name, f"{kind} '{spec.name}'", node.position)
        if node.children is not None:
            raise UnexpectedChildren(spec.name, node.position)
        values = self._compile_fields(node, spec)
        if spec.name == "Spacing":
            return SpacingSpec(**values)
        if spec.name == "Alignment":
            return Alignment(**values)
        return Border(**values)

    # ------------------------------------------------------------------
    # Widgets
    def _compile_widget(self, node: RawNode, *, owner: str, field_name: str) -> Widget:
        spec = self._lookup(node)
        if not spec.is_widget:
            raise TypeMismatch(owner, field_name, "a widget", f"value '{spec.name}'", node.position)
        if node.children is not None and not spec.accepts_children:
            raise UnexpectedChildren(spec.name, node.position)

        values = self._compile_fields(node, spec)
        if spec.name == "FlexContainer":
            children: List[Widget] = [
                self._compile_widget(child, owner=spec.name, field_name="children") for child in node.children or ()
            ]
            return FlexContainer(children=tuple(children), position=node.position, **values)
        if spec.name == "Text":
            return Text(position=node.position, **values)
        return Image(position=node.position, **values)

    # ------------------------------------------------------------------
    # Helpers
    def _lookup(self, node: RawNode) -> TypeSpec:
        spec = CATALOG.get(node.identifier)
        if spec is None:
            raise UnknownType(node.identifier, node.position)
        return spec

    def _compile_fields(self, node: RawNode, spec: TypeSpec) -> Dict[str, object]:
        values: Dict[str, object] = {}
        for prop in node.properties:
            field_spec = spec.fields.get(prop.name)
            if field_spec is None:
                raise UnknownProperty(spec.name, prop.name, prop.position)
            if prop.name in values:
                raise DuplicateProperty(spec.name, prop.name, prop.position)
            values[prop.name] = field_spec.coerce(self, spec.name, prop)

        missing: Tuple[str, ...] = tuple(
            name for name, field_spec in spec.fields.items() if field_spec.required and name not in values
        )
        if missing:
            raise MissingDiscriminator(spec.name, missing[0], node.position)
        return values


def compile_widget(root: RawNode) -> Widget:
    """Compile an alias-free raw tree into its root widget."""
    return WidgetCompiler(root).compile()
