"""Tokenize and parse layout source text into a raw syntax tree."""
from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from banner_layout.model.errors import MultipleRootWidgets, NoRootWidget, ParseError, SourcePosition
from banner_layout.model.syntax import Document, Literal, Nested, RawNode, RawProperty, RawValue, UInt
from banner_layout.utils.logger import get_logger

LOGGER = get_logger(__name__)

ALIAS_KEYWORD = "alias"

_WORD_PATTERN = re.compile(r"#?[A-Za-z0-9_\-]+")
_UINT_PATTERN = re.compile(r"[0-9]+")
_IDENTIFIER_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9_]*")
_SPACE_PATTERN = re.compile(r"[ \t\r\f\v]+")
_PUNCTUATION = "(){}=,"


class TokenKind(enum.Enum):
    IDENTIFIER = "identifier"
    UINT = "integer"
    LITERAL = "literal"
    PUNCTUATION = "punctuation"
    EOF = "end of input"


@dataclass(frozen=True, slots=True)
class Token:
    kind: TokenKind
    text: str
    position: SourcePosition

    def describe(self) -> str:
        if self.kind is TokenKind.EOF:
            return "end of input"
        if self.kind is TokenKind.PUNCTUATION:
            return f"'{self.text}'"
        return f"{self.kind.value} '{self.text}'"

    def is_punct(self, char: str) -> bool:
        return self.kind is TokenKind.PUNCTUATION and self.text == char


class Tokenizer:
    """Split source text into tokens, dropping whitespace and comments."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._offset = 0
        self._line = 1
        self._line_start = 0

    def tokenize(self) -> List[Token]:
        tokens: List[Token] = []
        text = self._text
        while self._offset < len(text):
            char = text[self._offset]
            if char == "\n":
                self._newline(self._offset)
                self._offset += 1
                continue
            space = _SPACE_PATTERN.match(text, self._offset)
            if space:
                self._offset = space.end()
                continue
            if text.startswith("//", self._offset):
                end = text.find("\n", self._offset)
                self._offset = len(text) if end == -1 else end
                continue
            if text.startswith("/*", self._offset):
                self._skip_block_comment()
                continue
            if char in _PUNCTUATION:
                tokens.append(Token(TokenKind.PUNCTUATION, char, self._position()))
                self._offset += 1
                continue
            word = _WORD_PATTERN.match(text, self._offset)
            if word is None:
                raise ParseError("a token", f"unexpected character {char!r}", self._position())
            tokens.append(Token(self._classify(word.group(0)), word.group(0), self._position()))
            self._offset = word.end()
        tokens.append(Token(TokenKind.EOF, "", self._position()))
        return tokens

    def _skip_block_comment(self) -> None:
        start = self._position()
        end = self._text.find("*/", self._offset + 2)
        if end == -1:
            raise ParseError("'*/' closing the block comment", "end of input", start)
        for index in range(self._offset, end):
            if self._text[index] == "\n":
                self._newline(index)
        self._offset = end + 2

    def _newline(self, offset: int) -> None:
        self._line += 1
        self._line_start = offset + 1

    def _position(self) -> SourcePosition:
        return SourcePosition(self._line, self._offset - self._line_start + 1)

    @staticmethod
    def _classify(word: str) -> TokenKind:
        if _UINT_PATTERN.fullmatch(word):
            return TokenKind.UINT
        if _IDENTIFIER_PATTERN.fullmatch(word):
            return TokenKind.IDENTIFIER
        return TokenKind.LITERAL


class LayoutParser:
    """Recursive-descent parser for the constructor grammar.

    The grammar is strict: any structural mismatch aborts with a
    :class:`ParseError` pointing at the offending token, there is no
    recovery.
    """

    def __init__(self, text: str) -> None:
        self._tokens = Tokenizer(text).tokenize()
        self._index = 0

    def parse(self) -> Document:
        """Parse the whole source into a :class:`Document`."""
        aliases: Dict[str, RawNode] = {}
        while self._peek_keyword(ALIAS_KEYWORD):
            name, node = self._parse_alias()
            if name.text in aliases:
                raise ParseError("a new alias name", f"alias '{name.text}' defined twice", name.position)
            aliases[name.text] = node

        if self._peek().kind is TokenKind.EOF:
            raise NoRootWidget(self._peek().position)

        root = self._parse_node(allow_children=True)
        self._expect_end(root)
        LOGGER.debug("Parsed layout with root %s and %d aliases", root.identifier, len(aliases))
        return Document(root=root, aliases=aliases)

    # ------------------------------------------------------------------
    # Grammar rules
    def _parse_alias(self) -> tuple[Token, RawNode]:
        self._advance()
        name = self._expect(TokenKind.IDENTIFIER, "an alias name")
        self._expect_punct("=")
        if not self._peek_constructor():
            token = self._peek()
            raise ParseError("a constructor after '='", token.describe(), token.position)
        return name, self._parse_node(allow_children=False)

    def _parse_node(self, allow_children: bool) -> RawNode:
        identifier = self._expect(TokenKind.IDENTIFIER, "a type name")
        if identifier.text == ALIAS_KEYWORD:
            raise ParseError("a type name", "keyword 'alias'", identifier.position)
        self._expect_punct("(")
        properties = self._parse_properties()
        self._expect_punct(")")

        children: Optional[List[RawNode]] = None
        if allow_children and self._peek().is_punct("{"):
            self._advance()
            children = []
            while not self._peek().is_punct("}"):
                if self._peek().kind is TokenKind.EOF:
                    token = self._peek()
                    raise ParseError("'}'", token.describe(), token.position)
                children.append(self._parse_node(allow_children=True))
            self._advance()

        return RawNode(
            identifier=identifier.text,
            properties=tuple(properties),
            children=tuple(children) if children is not None else None,
            position=identifier.position,
        )

    def _parse_properties(self) -> List[RawProperty]:
        properties: List[RawProperty] = []
        while self._peek().kind is TokenKind.IDENTIFIER:
            name = self._advance()
            self._expect_punct("=")
            properties.append(RawProperty(name=name.text, value=self._parse_value(), position=name.position))
            if not self._peek().is_punct(","):
                break
            self._advance()
        return properties

    def _parse_value(self) -> RawValue:
        token = self._peek()
        if token.kind is TokenKind.UINT:
            self._advance()
            return UInt(int(token.text), token.position, token.text)
        if self._peek_constructor():
            return Nested(self._parse_node(allow_children=False))
        if token.kind in (TokenKind.IDENTIFIER, TokenKind.LITERAL):
            self._advance()
            return Literal(token.text, token.position)
        raise ParseError("a value", token.describe(), token.position)

    def _expect_end(self, root: RawNode) -> None:
        token = self._peek()
        if token.kind is TokenKind.EOF:
            return
        if self._peek_keyword(ALIAS_KEYWORD):
            raise ParseError("end of input", "alias definition after the root widget", token.position)
        if self._peek_constructor():
            raise MultipleRootWidgets(token.text, token.position)
        raise ParseError(f"end of input after '{root.identifier}'", token.describe(), token.position)

    # ------------------------------------------------------------------
    # Token helpers
    def _peek(self, ahead: int = 0) -> Token:
        index = min(self._index + ahead, len(self._tokens) - 1)
        return self._tokens[index]

    def _advance(self) -> Token:
        token = self._peek()
        if token.kind is not TokenKind.EOF:
            self._index += 1
        return token

    def _peek_keyword(self, keyword: str) -> bool:
        token = self._peek()
        return token.kind is TokenKind.IDENTIFIER and token.text == keyword

    def _peek_constructor(self) -> bool:
        return self._peek().kind is TokenKind.IDENTIFIER and self._peek(1).is_punct("(")

    def _expect(self, kind: TokenKind, expected: str) -> Token:
        token = self._peek()
        if token.kind is not kind:
            raise ParseError(expected, token.describe(), token.position)
        return self._advance()

    def _expect_punct(self, char: str) -> Token:
        token = self._peek()
        if not token.is_punct(char):
            raise ParseError(f"'{char}'", token.describe(), token.position)
        return self._advance()


def parse(text: str) -> Document:
    """Parse layout source text into a raw :class:`Document`."""
    return LayoutParser(text).parse()
