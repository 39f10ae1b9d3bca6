"""Styled text runs produced by the markup parser."""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Tuple


class StyleMask(enum.IntFlag):
    NONE = 0
    BOLD = 1
    ITALIC = 2
    UNDERLINE = 4


@dataclass(frozen=True, slots=True)
class InlineImage:
    """``<img>`` reference embedded in body text."""

    src: str
    alt: str = ""


@dataclass(frozen=True, slots=True)
class TextRun:
    """Contiguous slice of text sharing one style mask and link target.

    A run carrying ``image`` is an inline image and has empty ``text``.
    """

    text: str
    mask: StyleMask = StyleMask.NONE
    link: Optional[str] = None
    image: Optional[InlineImage] = None

    @property
    def is_image(self) -> bool:
        return self.image is not None

    def with_text(self, text: str) -> "TextRun":
        return TextRun(text=text, mask=self.mask, link=self.link, image=self.image)

    def same_style(self, other: "TextRun") -> bool:
        return self.mask == other.mask and self.link == other.link


@dataclass(frozen=True, slots=True)
class ParsedMarkup:
    runs: Tuple[TextRun, ...] = ()
    warnings: Tuple[str, ...] = ()

    @property
    def plain_text(self) -> str:
        return "".join(run.text for run in self.runs)


def plain_runs(text: str, mask: StyleMask = StyleMask.NONE) -> Tuple[TextRun, ...]:
    """Wrap unstyled text in a single run (none for empty text)."""
    if not text:
        return ()
    return (TextRun(text=text, mask=mask),)
