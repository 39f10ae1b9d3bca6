"""Structured error taxonomy for the layout compiler.

Every failure the pipeline can raise derives from :class:`LayoutError` and
carries enough context (node type, field name, source position) for a caller
to print a precise diagnostic without re-parsing the document.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass(frozen=True, slots=True)
class SourcePosition:
    """1-based line/column of a token inside the layout source."""

    line: int
    column: int

    def describe(self) -> str:
        return f"{self.line}:{self.column}"


class LayoutError(Exception):
    """Base class for every error surfaced by the layout pipeline."""

    def __init__(self, message: str, *, position: Optional[SourcePosition] = None) -> None:
        super().__init__(message)
        self.message = message
        self.position = position

    @property
    def line(self) -> Optional[int]:
        return self.position.line if self.position else None

    @property
    def column(self) -> Optional[int]:
        return self.position.column if self.position else None

    def format(self) -> str:
        """Human readable message including the source location when known."""
        if self.position is None:
            return self.message
        return f"{self.message} (at {self.position.describe()})"

    def __str__(self) -> str:
        return self.format()


# ----------------------------------------------------------------------
# Grammar level
class ParseError(LayoutError):
    """The source text does not match the constructor grammar."""

    def __init__(self, expected: str, found: str, position: SourcePosition) -> None:
        super().__init__(f"Expected {expected}, found {found}", position=position)
        self.expected = expected
        self.found = found


class DocumentStructureError(LayoutError):
    """The document does not contain exactly one root constructor."""


class NoRootWidget(DocumentStructureError):
    def __init__(self, position: Optional[SourcePosition] = None) -> None:
        super().__init__("Layout document does not declare a root widget", position=position)


class MultipleRootWidgets(DocumentStructureError):
    def __init__(self, type_name: str, position: SourcePosition) -> None:
        super().__init__(
            f"Layout document declares a second root widget '{type_name}'; only one is allowed",
            position=position,
        )
        self.type_name = type_name


# ----------------------------------------------------------------------
# Alias expansion
class AliasError(LayoutError):
    """Alias table cannot be expanded."""


class CyclicAlias(AliasError):
    def __init__(self, cycle: Sequence[str], position: Optional[SourcePosition] = None) -> None:
        chain = " -> ".join(cycle)
        super().__init__(f"Cyclic alias definition: {chain}", position=position)
        self.cycle = tuple(cycle)


class UndefinedAlias(AliasError):
    def __init__(self, name: str, alias: str, position: Optional[SourcePosition] = None) -> None:
        super().__init__(
            f"Alias '{alias}' refers to '{name}', which is neither a known type nor a defined alias",
            position=position,
        )
        self.name = name
        self.alias = alias


# ----------------------------------------------------------------------
# Semantic compilation
class CompileError(LayoutError):
    """A raw node cannot be turned into a typed widget or value."""

    def __init__(self, message: str, node_type: str, *, position: Optional[SourcePosition] = None) -> None:
        super().__init__(message, position=position)
        self.node_type = node_type


class UnknownType(CompileError):
    def __init__(self, node_type: str, position: Optional[SourcePosition] = None) -> None:
        super().__init__(f"Unknown type: {node_type}", node_type, position=position)


class UnknownProperty(CompileError):
    def __init__(self, node_type: str, field_name: str, position: Optional[SourcePosition] = None) -> None:
        super().__init__(f"The {node_type} type has no '{field_name}' property", node_type, position=position)
        self.field_name = field_name


class DuplicateProperty(CompileError):
    def __init__(self, node_type: str, field_name: str, position: Optional[SourcePosition] = None) -> None:
        super().__init__(
            f"The '{field_name}' property of {node_type} is set more than once", node_type, position=position
        )
        self.field_name = field_name


class MissingDiscriminator(CompileError):
    def __init__(self, node_type: str, field_name: str, position: Optional[SourcePosition] = None) -> None:
        super().__init__(
            f"The {node_type} type requires the '{field_name}' property", node_type, position=position
        )
        self.field_name = field_name


class TypeMismatch(CompileError):
    def __init__(
        self,
        node_type: str,
        field_name: str,
        expected: str,
        found: str,
        position: Optional[SourcePosition] = None,
    ) -> None:
        super().__init__(
            f"Invalid value for '{field_name}' of {node_type}: expected {expected}, found {found}",
            node_type,
            position=position,
        )
        self.field_name = field_name
        self.expected = expected
        self.found = found


class ValueOutOfRange(CompileError):
    def __init__(
        self,
        node_type: str,
        field_name: str,
        value: int,
        maximum: int,
        position: Optional[SourcePosition] = None,
    ) -> None:
        super().__init__(
            f"Value {value} of '{field_name}' for {node_type} exceeds the maximum {maximum}",
            node_type,
            position=position,
        )
        self.field_name = field_name
        self.value = value
        self.maximum = maximum


class UnexpectedChildren(CompileError):
    def __init__(self, node_type: str, position: Optional[SourcePosition] = None) -> None:
        super().__init__(f"The {node_type} type cannot contain child widgets", node_type, position=position)


# ----------------------------------------------------------------------
# Property resolution
class AmbiguousSpacing(LayoutError):
    def __init__(
        self,
        widget: str,
        field_name: str,
        axis: str,
        position: Optional[SourcePosition] = None,
    ) -> None:
        super().__init__(
            f"The '{field_name}' spacing of {widget} sets both a side and the '{axis}' shorthand",
            position=position,
        )
        self.widget = widget
        self.field_name = field_name
        self.axis = axis


__all__ = [
    "AliasError",
    "AmbiguousSpacing",
    "CompileError",
    "CyclicAlias",
    "DocumentStructureError",
    "DuplicateProperty",
    "LayoutError",
    "MissingDiscriminator",
    "MultipleRootWidgets",
    "NoRootWidget",
    "ParseError",
    "SourcePosition",
    "TypeMismatch",
    "UndefinedAlias",
    "UnexpectedChildren",
    "UnknownProperty",
    "UnknownType",
    "ValueOutOfRange",
]
