"""Flatten a LayoutBox tree into ordered draw commands."""
from __future__ import annotations

from typing import List

from banner_layout.model.draw_commands import DrawCommand, DrawText, FilledRect, ImageBlit, RoundedRect
from banner_layout.model.layout_model import ContainerContent, ImageContent, LayoutBox, TextContent
from banner_layout.model.text_model import StyleMask
from banner_layout.model.widgets import ResizingMethod
from banner_layout.utils.logger import get_logger

LOGGER = get_logger(__name__)


class PaintComposer:
    """Walk boxes in painter's order: background, border, then children."""

    def compose(self, root: LayoutBox) -> List[DrawCommand]:
        commands: List[DrawCommand] = []
        self._compose_box(root, commands)
        LOGGER.debug("Composed %d draw commands", len(commands))
        return commands

    def _compose_box(self, box: LayoutBox, commands: List[DrawCommand]) -> None:
        content = box.content
        if isinstance(content, ContainerContent):
            self._compose_container(box, content, commands)
            for child in box.children:
                self._compose_box(child, commands)
        elif isinstance(content, TextContent):
            self._compose_text(content, commands)
        elif isinstance(content, ImageContent):
            self._compose_image(box, content, commands)

    def _compose_container(self, box: LayoutBox, content: ContainerContent, commands: List[DrawCommand]) -> None:
        if box.is_empty:
            return
        border = content.border
        if content.background is not None:
            if border.radius > 0:
                commands.append(
                    RoundedRect(box.x, box.y, box.width, box.height, content.background, radius=border.radius)
                )
            else:
                commands.append(FilledRect(box.x, box.y, box.width, box.height, content.background))
        if border.size > 0:
            commands.append(
                RoundedRect(
                    box.x,
                    box.y,
                    box.width,
                    box.height,
                    content.border_color,
                    radius=border.radius,
                    border_width=border.size,
                    inner_radius=border.inner_radius,
                )
            )

    def _compose_text(self, content: TextContent, commands: List[DrawCommand]) -> None:
        for line in content.lines:
            for fragment in line.fragments:
                run = fragment.run
                if run.image is not None:
                    commands.append(
                        ImageBlit(
                            fragment.x,
                            fragment.y,
                            fragment.width,
                            fragment.height,
                            handle=None,
                            resizing_method=ResizingMethod.GAUSSIAN,
                            source=run.image.src,
                        )
                    )
                    continue
                commands.append(
                    DrawText(
                        fragment.x,
                        fragment.y,
                        fragment.width,
                        fragment.height,
                        text=run.text,
                        font_size=content.font_size,
                        color=content.foreground,
                        bold=bool(run.mask & StyleMask.BOLD),
                        italic=bool(run.mask & StyleMask.ITALIC),
                        underline=bool(run.mask & StyleMask.UNDERLINE),
                        link=run.link,
                    )
                )

    def _compose_image(self, box: LayoutBox, content: ImageContent, commands: List[DrawCommand]) -> None:
        if content.handle is None or not content.width or not content.height:
            return
        commands.append(
            ImageBlit(
                box.content_x,
                box.content_y,
                content.width,
                content.height,
                handle=content.handle,
                resizing_method=content.resizing_method,
                rounding=content.rounding,
                source=content.handle.source,
            )
        )


def compose(root: LayoutBox) -> List[DrawCommand]:
    """Return the draw commands for a laid out tree, in painter's order."""
    return PaintComposer().compose(root)
