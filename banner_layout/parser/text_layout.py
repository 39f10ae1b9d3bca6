"""Line breaking, ellipsizing and justification of styled text runs."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from banner_layout.model.layout_model import TextContent, TextFragment, TextLine
from banner_layout.model.style_model import TextStyle
from banner_layout.model.text_model import TextRun
from banner_layout.model.widgets import Color, EllipsizeAt, Justification
from banner_layout.utils.metrics import IMAGE, NEWLINE, SEGMENT_PATTERN, SPACE, WORD, TextMetrics

ELLIPSIS = "…"


@dataclass(slots=True, eq=False)
class Piece:
    """Unbreakable unit of text: a word, a space, a newline or an image."""

    kind: str
    text: str
    run: TextRun
    width: int
    offset: int = 0


@dataclass(slots=True)
class ShapedText:
    """Lines chosen for a text block before they are positioned."""

    lines: List[List[Piece]] = field(default_factory=list)
    width: int = 0
    height: int = 0
    line_height: int = 0
    truncated: bool = False


class TextShaper:
    """Break runs into lines that fit a box, ellipsizing what does not fit.

    Line breaks come from the metrics collaborator's ``measure_text``; the
    shaper only maps them back onto pieces and handles what overflows.
    """

    def __init__(self, metrics: TextMetrics, font_size: int, line_spacing: int = 0) -> None:
        self._metrics = metrics
        self._font_size = font_size
        self._line_spacing = line_spacing
        self._line_height = metrics.line_height(font_size)

    # ------------------------------------------------------------------
    # Splitting and measuring
    def split(self, runs: Sequence[TextRun]) -> List[Piece]:
        pieces: List[Piece] = []
        offset = 0
        for run in runs:
            if run.is_image:
                width = self._metrics.inline_image_width(run.image, self._line_height)
                pieces.append(Piece(IMAGE, "", run, width, offset))
                continue
            for match in SEGMENT_PATTERN.finditer(run.text):
                token = match.group(0)
                if token == "\n":
                    pieces.append(Piece(NEWLINE, token, run, 0, offset + match.start()))
                elif token.isspace():
                    pieces.append(Piece(SPACE, " ", run, self._width(" ", run), offset + match.start()))
                else:
                    pieces.append(Piece(WORD, token, run, self._width(token, run), offset + match.start()))
            offset += len(run.text)
        return pieces

    def line_width(self, line: Sequence[Piece]) -> int:
        return sum(piece.width for piece in line)

    def _width(self, text: str, run: TextRun) -> int:
        return self._metrics.text_width(text, self._font_size, run.mask)

    # ------------------------------------------------------------------
    # Line breaking
    def break_lines(self, runs: Sequence[TextRun], pieces: Sequence[Piece], max_width: int) -> List[List[Piece]]:
        """Distribute pieces over the lines ``measure_text`` breaks into.

        Spaces at either end of a line are dropped; newlines never appear in
        a line.
        """
        breaks = self._metrics.measure_text(runs, max_width, self._font_size).line_breaks
        lines: List[List[Piece]] = [[] for _ in range(len(breaks) + 1)]
        index = 0
        for piece in pieces:
            while index < len(breaks) and piece.offset >= breaks[index]:
                index += 1
            if piece.kind != NEWLINE:
                lines[index].append(piece)
        lines = [self._strip_spaces(line) for line in lines]
        if len(lines) > 1 and not lines[-1]:
            lines.pop()
        return lines if lines[0] or len(lines) > 1 else []

    @staticmethod
    def _strip_spaces(line: List[Piece]) -> List[Piece]:
        start, end = 0, len(line)
        while start < end and line[start].kind == SPACE:
            start += 1
        while end > start and line[end - 1].kind == SPACE:
            end -= 1
        return line[start:end]

    # ------------------------------------------------------------------
    # Fitting a box
    def max_lines(self, max_height: int) -> int:
        step = self._line_height + self._line_spacing
        if step <= 0 or max_height < self._line_height:
            return 0
        return (max_height + self._line_spacing) // step

    def block_height(self, count: int) -> int:
        if count == 0:
            return 0
        return count * self._line_height + (count - 1) * self._line_spacing

    def shape(self, runs: Sequence[TextRun], style: TextStyle, max_width: int, max_height: int) -> ShapedText:
        pieces = self.split(runs)
        if not pieces:
            return ShapedText(line_height=self._line_height)

        if style.wrap:
            lines = self.break_lines(runs, pieces, max_width)
        else:
            flat = self._flatten(pieces)
            lines = [flat] if flat else []

        limit = self.max_lines(max_height)
        if not style.wrap:
            limit = min(limit, 1)

        cut: Optional[int] = None
        for index, line in enumerate(lines):
            if self.line_width(line) > max_width:
                cut = index
                break
        if len(lines) > limit:
            cut = limit - 1 if cut is None else min(cut, limit - 1)

        truncated = False
        if limit == 0:
            lines, truncated = [], bool(lines)
        elif cut is not None:
            rest, following = self._remaining(pieces, lines, cut)
            if following is not None:
                last, truncated = self._ellipsize_end(self._atoms(rest), max_width, following.run), True
            elif rest:
                last, truncated = self.ellipsize(rest, max_width, style.ellipsize_at)
            else:
                last, truncated = [], True
            lines = lines[:cut] + ([last] if last else [])

        width = max((self.line_width(line) for line in lines), default=0)
        return ShapedText(
            lines=lines,
            width=width,
            height=self.block_height(len(lines)),
            line_height=self._line_height,
            truncated=truncated,
        )

    def _flatten(self, pieces: Sequence[Piece]) -> List[Piece]:
        """Join pieces onto a single line, newlines becoming spaces."""
        flat: List[Piece] = []
        for piece in pieces:
            if piece.kind == NEWLINE:
                piece = Piece(SPACE, " ", piece.run, self._width(" ", piece.run), piece.offset)
            if piece.kind == SPACE and (not flat or flat[-1].kind == SPACE):
                continue
            flat.append(piece)
        while flat and flat[-1].kind == SPACE:
            flat.pop()
        return flat

    def _remaining(
        self, pieces: Sequence[Piece], lines: List[List[Piece]], cut: int
    ) -> Tuple[List[Piece], Optional[Piece]]:
        """The rest of the paragraph holding line ``cut``, flattened.

        Also returns the first visible piece of any later paragraph, since
        the last line then needs an ellipsis even if the paragraph fits.
        """
        first = next((line[0] for line in lines[cut:] if line), None)
        if first is None:
            return [], None
        start = next(index for index, piece in enumerate(pieces) if piece is first)
        if not lines[cut]:
            return [], first
        end = next((index for index in range(start, len(pieces)) if pieces[index].kind == NEWLINE), len(pieces))
        following = next((piece for piece in pieces[end:] if piece.kind in (WORD, IMAGE)), None)
        return self._flatten(pieces[start:end]), following

    # ------------------------------------------------------------------
    # Ellipsis
    def ellipsize(self, line: List[Piece], max_width: int, at: EllipsizeAt) -> Tuple[List[Piece], bool]:
        """Cut ``line`` to ``max_width`` with an ellipsis; returns (pieces, cut)."""
        if self.line_width(line) <= max_width:
            return line, False
        units = self._atoms(line)
        if at is EllipsizeAt.MIDDLE:
            middle = self._ellipsize_middle(units, max_width)
            if middle is not None:
                return middle, True
        return self._ellipsize_end(units, max_width), True

    def _atoms(self, line: Sequence[Piece]) -> List[Piece]:
        atoms: List[Piece] = []
        for piece in line:
            if piece.kind == IMAGE:
                atoms.append(piece)
                continue
            for index, char in enumerate(piece.text):
                atoms.append(Piece(WORD, char, piece.run, self._width(char, piece.run), piece.offset + index))
        return atoms

    def _ellipsis_piece(self, run: TextRun) -> Piece:
        run = TextRun(text=ELLIPSIS, mask=run.mask, link=run.link)
        return Piece(WORD, ELLIPSIS, run, self._width(ELLIPSIS, run))

    def _ellipsize_end(self, atoms: List[Piece], max_width: int, run: Optional[TextRun] = None) -> List[Piece]:
        head = list(atoms)
        ellipsis = self._ellipsis_piece(atoms[0].run if atoms else run)
        while head and (self.line_width(head) + ellipsis.width > max_width or head[-1].text.isspace()):
            head.pop()
        if ellipsis.width > max_width:
            return []
        if head:
            ellipsis = self._ellipsis_piece(head[-1].run)
        return self._merge(head + [ellipsis])

    def _ellipsize_middle(self, atoms: List[Piece], max_width: int) -> Optional[List[Piece]]:
        ellipsis = self._ellipsis_piece(atoms[0].run)
        budget = max_width - ellipsis.width
        head: List[Piece] = []
        tail: List[Piece] = []
        used = 0
        left, right = 0, len(atoms) - 1
        while left <= right:
            take_left = len(head) <= len(tail)
            candidate = atoms[left] if take_left else atoms[right]
            if used + candidate.width > budget:
                break
            used += candidate.width
            if take_left:
                head.append(candidate)
                left += 1
            else:
                tail.insert(0, candidate)
                right -= 1
        while head and head[-1].text.isspace():
            head.pop()
        while tail and tail[0].text.isspace():
            tail.pop(0)
        if not head or not tail:
            return None
        return self._merge(head + [self._ellipsis_piece(head[-1].run)] + tail)

    def _merge(self, atoms: Sequence[Piece]) -> List[Piece]:
        """Re-join single characters that share a run into word pieces."""
        merged: List[Piece] = []
        for atom in atoms:
            previous = merged[-1] if merged else None
            if (
                previous is not None
                and atom.kind == WORD
                and previous.kind == WORD
                and previous.run.same_style(atom.run)
            ):
                previous.text += atom.text
                previous.width += atom.width
            else:
                merged.append(Piece(atom.kind, atom.text, atom.run, atom.width, atom.offset))
        return merged

    # ------------------------------------------------------------------
    # Positioning
    def place(
        self,
        shaped: ShapedText,
        justification: Justification,
        x: int,
        y: int,
        width: int,
        foreground: Color,
    ) -> TextContent:
        lines: List[TextLine] = []
        for index, pieces in enumerate(shaped.lines):
            line_y = y + index * (self._line_height + self._line_spacing)
            lines.append(self._place_line(pieces, justification, x, line_y, width))
        return TextContent(
            lines=tuple(lines),
            font_size=self._font_size,
            foreground=foreground,
            truncated=shaped.truncated,
        )

    def _place_line(self, pieces: List[Piece], justification: Justification, x: int, y: int, width: int) -> TextLine:
        line_width = self.line_width(pieces)
        free = max(width - line_width, 0)
        gaps = sum(1 for piece in pieces if piece.kind == SPACE)
        extra = 0
        if justification is Justification.RIGHT:
            start = x + free
        elif justification is Justification.CENTER:
            start = x + free // 2
        elif justification is Justification.SPACE_BETWEEN and gaps:
            start = x
            extra = free // gaps
        else:
            start = x

        fragments: List[TextFragment] = []
        cursor = start
        split_at_spaces = extra > 0
        for piece in pieces:
            if piece.kind == SPACE and split_at_spaces:
                cursor += piece.width + extra
                continue
            previous = fragments[-1] if fragments else None
            if (
                previous is not None
                and piece.kind != IMAGE
                and not previous.run.is_image
                and previous.run.same_style(piece.run)
                and previous.x + previous.width == cursor
            ):
                fragments[-1] = TextFragment(
                    x=previous.x,
                    y=y,
                    width=previous.width + piece.width,
                    height=self._line_height,
                    run=previous.run.with_text(previous.run.text + piece.text),
                )
            else:
                run = piece.run if piece.kind == IMAGE else piece.run.with_text(piece.text)
                fragments.append(TextFragment(x=cursor, y=y, width=piece.width, height=self._line_height, run=run))
            cursor += piece.width
        return TextLine(x=start, y=y, width=cursor - start, height=self._line_height, fragments=tuple(fragments))
