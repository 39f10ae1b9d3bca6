"""Text and image measurement collaborators used by the layout solver."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from banner_layout.model.layout_model import ImageData
from banner_layout.model.text_model import InlineImage, StyleMask, TextRun

SEGMENT_PATTERN = re.compile(r"\n|[^\S\n]+|\S+")

WORD = "word"
SPACE = "space"
NEWLINE = "newline"
IMAGE = "image"


@dataclass(frozen=True, slots=True)
class TextMeasurement:
    """Result of wrapping runs at a width.

    ``line_breaks`` holds the character offsets (into the concatenated run
    text) at which every line after the first begins. A line started by a
    newline begins just after it.
    """

    line_breaks: Tuple[int, ...]
    width: int
    height: int


class TextMetrics:
    """Measurement protocol.

    Implementations provide :meth:`text_width` and :meth:`line_height`.
    :meth:`measure_text` decides where lines break; the layout solver takes
    its breaks from here, so an implementation may override it with its own
    shaping.
    """

    def text_width(self, text: str, font_size: int, mask: StyleMask = StyleMask.NONE) -> int:
        raise NotImplementedError

    def line_height(self, font_size: int) -> int:
        raise NotImplementedError

    def natural_image_size(self, handle: Optional[ImageData | InlineImage]) -> Optional[Tuple[int, int]]:
        """Pixel size of an image handle, ``None`` when it is unknown."""
        if isinstance(handle, ImageData):
            return (handle.width, handle.height)
        return None

    def inline_image_width(self, image: Optional[InlineImage], line_height: int) -> int:
        """Width of an inline image scaled to the line height."""
        natural = self.natural_image_size(image)
        if not natural or natural[1] == 0:
            return line_height
        width, height = natural
        return max(int(width * line_height / height + 0.5), 1)

    def measure_text(self, runs: Sequence[TextRun], max_width: int, font_size: int) -> TextMeasurement:
        """Greedy word wrap; a unit that would overflow ``max_width`` starts a new line."""
        line_height = self.line_height(font_size)
        breaks: List[int] = []
        widths: List[int] = [0]
        filled: List[bool] = [False]
        pending = 0
        for kind, start, width in self._units(runs, font_size, line_height):
            if kind == NEWLINE:
                breaks.append(start + 1)
                widths.append(0)
                filled.append(False)
                pending = 0
                continue
            if kind == SPACE:
                pending = width if filled[-1] else 0
                continue
            if filled[-1] and widths[-1] + pending + width > max_width:
                breaks.append(start)
                widths.append(0)
                filled.append(False)
                pending = 0
            widths[-1] += pending + width
            filled[-1] = True
            pending = 0

        if len(filled) > 1 and not filled[-1]:
            breaks.pop()
            widths.pop()
            filled.pop()
        if len(filled) == 1 and not filled[0]:
            return TextMeasurement(line_breaks=(), width=0, height=0)
        return TextMeasurement(line_breaks=tuple(breaks), width=max(widths), height=len(filled) * line_height)

    def _units(self, runs: Sequence[TextRun], font_size: int, line_height: int) -> List[List]:
        """Group pieces so adjacent words of different runs wrap together."""
        units: List[List] = []
        for kind, start, width in self._pieces(runs, font_size, line_height):
            if units and kind in (WORD, IMAGE) and units[-1][0] in (WORD, IMAGE):
                units[-1][2] += width
            elif units and kind == SPACE and units[-1][0] == SPACE:
                units[-1][2] += width
            else:
                units.append([kind, start, width])
        return units

    def _pieces(self, runs: Sequence[TextRun], font_size: int, line_height: int) -> Iterator[Tuple[str, int, int]]:
        offset = 0
        for run in runs:
            if run.is_image:
                yield IMAGE, offset, self.inline_image_width(run.image, line_height)
                continue
            for match in SEGMENT_PATTERN.finditer(run.text):
                token = match.group(0)
                start = offset + match.start()
                if token == "\n":
                    yield NEWLINE, start, 0
                elif token.isspace():
                    yield SPACE, start, self.text_width(" ", font_size, run.mask)
                else:
                    yield WORD, start, self.text_width(token, font_size, run.mask)
            offset += len(run.text)


class FixedWidthMetrics(TextMetrics):
    """Deterministic metrics: every character has the same advance."""

    def __init__(self, char_width: Optional[int] = None, line_height: Optional[int] = None) -> None:
        self._char_width = char_width
        self._line_height = line_height

    def text_width(self, text: str, font_size: int, mask: StyleMask = StyleMask.NONE) -> int:
        advance = self._char_width if self._char_width is not None else max(font_size // 2, 1)
        return len(text) * advance

    def line_height(self, font_size: int) -> int:
        if self._line_height is not None:
            return self._line_height
        return font_size * 4 // 3
