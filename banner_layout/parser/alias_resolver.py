"""Expand alias references into an alias-free raw tree."""
from __future__ import annotations

from typing import Dict, List, Optional

from banner_layout.model.errors import CyclicAlias, UndefinedAlias
from banner_layout.model.syntax import Document, Literal, Nested, RawNode, RawProperty, RawValue
from banner_layout.parser.widget_compiler import KNOWN_TYPES
from banner_layout.utils.logger import get_logger

LOGGER = get_logger(__name__)


class AliasResolver:
    """Substitute alias definitions at their points of use.

    An alias is referenced either as a bare property value (``margin =
    Wide``) or as a constructor head (``Row(max_width = 10) { ... }``). In
    the second form the use site's properties replace the alias's
    same-named ones and the use site's children are attached. Only aliases
    reached from the root are expanded, each at most once, so forward
    references work and cycles are reported with the full chain.
    """

    def __init__(self, document: Document) -> None:
        self._aliases = document.aliases
        self._root = document.root
        self._resolved: Dict[str, RawNode] = {}

    def resolve(self) -> RawNode:
        root = self._expand_node(self._root, [])
        if self._aliases:
            LOGGER.debug("Expanded %d of %d aliases", len(self._resolved), len(self._aliases))
        return root

    def _resolve_alias(self, name: str, stack: List[str]) -> RawNode:
        if name in self._resolved:
            return self._resolved[name]
        definition = self._aliases[name]
        if name in stack:
            cycle = stack[stack.index(name):] + [name]
            raise CyclicAlias(cycle, definition.position)

        stack.append(name)
        resolved = self._expand_node(definition, stack, alias_name=name)
        stack.pop()
        self._resolved[name] = resolved
        return resolved

    def _expand_node(self, node: RawNode, stack: List[str], alias_name: Optional[str] = None) -> RawNode:
        properties = tuple(self._expand_property(prop, stack) for prop in node.properties)
        children = None
        if node.children is not None:
            children = tuple(self._expand_node(child, stack) for child in node.children)

        if node.identifier in self._aliases:
            base = self._resolve_alias(node.identifier, stack)
            overridden = {prop.name for prop in properties}
            inherited = tuple(prop for prop in base.properties if prop.name not in overridden)
            return RawNode(
                identifier=base.identifier,
                properties=inherited + properties,
                children=children if children is not None else base.children,
                position=node.position,
            )

        if alias_name is not None and node.identifier not in KNOWN_TYPES:
            raise UndefinedAlias(node.identifier, alias_name, node.position)
        return RawNode(node.identifier, properties, children, node.position)

    def _expand_property(self, prop: RawProperty, stack: List[str]) -> RawProperty:
        value: RawValue = prop.value
        if isinstance(value, Literal) and value.text in self._aliases:
            base = self._resolve_alias(value.text, stack)
            value = Nested(RawNode(base.identifier, base.properties, base.children, value.position))
        elif isinstance(value, Nested):
            value = Nested(self._expand_node(value.node, stack))
        return RawProperty(prop.name, value, prop.position)


def resolve_aliases(document: Document) -> RawNode:
    """Return the document's root with every alias reference expanded."""
    return AliasResolver(document).resolve()
