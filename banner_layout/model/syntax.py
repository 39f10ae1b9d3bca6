"""Raw syntax tree produced by the layout grammar."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from banner_layout.model.errors import SourcePosition


@dataclass(frozen=True, slots=True)
class Literal:
    """Bare token such as an enum word or a ``#rrggbb`` colour."""

    text: str
    position: Optional[SourcePosition] = None

    def describe(self) -> str:
        return f"literal '{self.text}'"


@dataclass(frozen=True, slots=True)
class UInt:
    """Unsigned integer token; range is checked against the target field later."""

    value: int
    position: Optional[SourcePosition] = None
    text: Optional[str] = None

    def describe(self) -> str:
        return f"integer {self.value}"


@dataclass(frozen=True, slots=True)
class Nested:
    """Constructor used as a property value."""

    node: "RawNode"

    @property
    def position(self) -> Optional[SourcePosition]:
        return self.node.position

    def describe(self) -> str:
        return f"constructor '{self.node.identifier}'"


RawValue = Literal | UInt | Nested


@dataclass(frozen=True, slots=True)
class RawProperty:
    """``name = value`` pair inside a constructor's parentheses."""

    name: str
    value: RawValue
    position: Optional[SourcePosition] = None


@dataclass(frozen=True, slots=True)
class RawNode:
    """Constructor call with ordered properties and optional children."""

    identifier: str
    properties: Tuple[RawProperty, ...] = ()
    children: Optional[Tuple["RawNode", ...]] = None
    position: Optional[SourcePosition] = None

    def property_names(self) -> List[str]:
        return [prop.name for prop in self.properties]


@dataclass(slots=True)
class Document:
    """Alias table plus the single root node of a layout source."""

    root: RawNode
    aliases: Dict[str, RawNode] = field(default_factory=dict)
