"""Parse the small HTML-like markup allowed in notification bodies."""
from __future__ import annotations

import html
import re
from typing import List, Optional, Tuple

from banner_layout.model.text_model import InlineImage, ParsedMarkup, StyleMask, TextRun
from banner_layout.utils.logger import get_logger

LOGGER = get_logger(__name__)

_TAG_PATTERN = re.compile(
    r"""<(?P<closing>/?)(?P<name>[A-Za-z]+)
        (?P<attrs>(?:\s+[A-Za-z_:-]+(?:\s*=\s*(?:"[^"]*"|'[^']*'|(?:[^\s"'<>/]|/(?!>))+))?)*)
        \s*(?P<void>/?)>""",
    re.VERBOSE,
)
_ATTR_PATTERN = re.compile(r"""([A-Za-z_:-]+)(?:\s*=\s*("[^"]*"|'[^']*'|(?:[^\s"'<>/]|/(?!>))+))?""")

_STYLE_TAGS = {"b": StyleMask.BOLD, "i": StyleMask.ITALIC, "u": StyleMask.UNDERLINE}
_CONTAINER_TAGS = frozenset(("b", "i", "u", "a"))


class MarkupParser:
    """Stack based matcher for ``b``, ``i``, ``u``, ``a`` and ``img`` tags.

    Malformed input never raises: anything that is not a well formed,
    known tag is kept as literal text and reported in ``warnings``.
    """

    def __init__(self, text: str) -> None:
        self._text = text
        self._runs: List[TextRun] = []
        self._warnings: List[str] = []
        self._stack: List[Tuple[str, Optional[str]]] = []

    def parse(self) -> ParsedMarkup:
        text = self._text
        offset = 0
        literal_start = 0
        while True:
            index = text.find("<", offset)
            if index == -1:
                break
            match = _TAG_PATTERN.match(text, index)
            if match is None:
                self._warn(f"Unterminated or malformed tag at offset {index}; kept as text")
                offset = index + 1
                continue
            self._emit_text(text[literal_start:index])
            if not self._apply_tag(match):
                self._emit_text(match.group(0), decode=False)
            offset = literal_start = match.end()
        self._emit_text(text[literal_start:])

        for name, _ in reversed(self._stack):
            self._warn(f"Tag <{name}> is never closed; closing it at the end of the text")
        self._stack.clear()

        runs = self._trim(self._runs)
        return ParsedMarkup(runs=tuple(runs), warnings=tuple(self._warnings))

    # ------------------------------------------------------------------
    # Tags
    def _apply_tag(self, match: re.Match) -> bool:
        name = match.group("name").lower()
        attributes = self._parse_attributes(match.group("attrs"))

        if match.group("closing"):
            for position in range(len(self._stack) - 1, -1, -1):
                if self._stack[position][0] == name:
                    del self._stack[position]
                    return True
            self._warn(f"Closing tag </{name}> has no matching opening tag; kept as text")
            return False

        if name == "img":
            src = attributes.get("src")
            alt = attributes.get("alt", "")
            if not src:
                self._warn("Image tag without src; showing its alt text")
                self._emit_text(alt, decode=False)
                return True
            mask, link = self._current_style()
            self._runs.append(TextRun(text="", mask=mask, link=link, image=InlineImage(src=src, alt=alt)))
            return True

        if name not in _CONTAINER_TAGS:
            self._warn(f"Unknown tag <{name}>; kept as text")
            return False

        if match.group("void"):
            return True
        self._stack.append((name, attributes.get("href") if name == "a" else None))
        return True

    @staticmethod
    def _parse_attributes(source: str) -> dict:
        attributes = {}
        for attr in _ATTR_PATTERN.finditer(source):
            value = attr.group(2) or ""
            if value[:1] in ("'", '"'):
                value = value[1:-1]
            attributes[attr.group(1).lower()] = html.unescape(value)
        return attributes

    def _current_style(self) -> Tuple[StyleMask, Optional[str]]:
        mask = StyleMask.NONE
        link = None
        for name, href in self._stack:
            if name == "a":
                link = href
            else:
                mask |= _STYLE_TAGS[name]
        return mask, link

    # ------------------------------------------------------------------
    # Runs
    def _emit_text(self, text: str, decode: bool = True) -> None:
        if not text:
            return
        if decode:
            text = html.unescape(text)
        mask, link = self._current_style()
        run = TextRun(text=text, mask=mask, link=link)
        if self._runs and not self._runs[-1].is_image and self._runs[-1].same_style(run):
            self._runs[-1] = self._runs[-1].with_text(self._runs[-1].text + text)
        else:
            self._runs.append(run)

    @staticmethod
    def _trim(runs: List[TextRun]) -> List[TextRun]:
        while runs and not runs[0].is_image and not runs[0].text.strip():
            runs.pop(0)
        while runs and not runs[-1].is_image and not runs[-1].text.strip():
            runs.pop()
        if runs and not runs[0].is_image:
            runs[0] = runs[0].with_text(runs[0].text.lstrip())
        if runs and not runs[-1].is_image:
            runs[-1] = runs[-1].with_text(runs[-1].text.rstrip())
        return runs

    def _warn(self, message: str) -> None:
        LOGGER.warning("Markup: %s", message)
        self._warnings.append(message)


def parse_markup(text: str) -> ParsedMarkup:
    """Split markup text into styled runs plus non-fatal diagnostics."""
    return MarkupParser(text).parse()
