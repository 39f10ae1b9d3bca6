"""Rasterize draw commands into a PNG preview with Pillow."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

from PIL import Image, ImageDraw

from banner_layout.model.draw_commands import DrawCommand, DrawText, FilledRect, ImageBlit, RoundedRect
from banner_layout.model.layout_model import DEFAULT_BANNER_HEIGHT, DEFAULT_BANNER_WIDTH
from banner_layout.model.text_model import StyleMask
from banner_layout.model.widgets import ResizingMethod
from banner_layout.renderer.pillow_metrics import PillowMetrics
from banner_layout.renderer.utils import color_to_rgba
from banner_layout.utils.logger import get_logger

LOGGER = get_logger(__name__)

RESAMPLING = {
    ResizingMethod.NEAREST: Image.Resampling.NEAREST,
    ResizingMethod.TRIANGLE: Image.Resampling.BILINEAR,
    ResizingMethod.GAUSSIAN: Image.Resampling.HAMMING,
    ResizingMethod.CATMULL_ROM: Image.Resampling.BICUBIC,
    ResizingMethod.LANCZOS3: Image.Resampling.LANCZOS,
}

_PLACEHOLDER = (200, 200, 200, 255)


class RasterRenderer:
    """Paint commands in order onto a transparent RGBA canvas."""

    def __init__(self, output_path: Path, metrics: Optional[PillowMetrics] = None) -> None:
        self._output_path = output_path
        self._metrics = metrics or PillowMetrics()

    def render(
        self,
        commands: Iterable[DrawCommand],
        width: int = DEFAULT_BANNER_WIDTH,
        height: int = DEFAULT_BANNER_HEIGHT,
    ) -> None:
        image = self.paint(commands, width, height)
        image.save(self._output_path, format="PNG")
        LOGGER.info("Wrote PNG preview to %s", self._output_path)

    def paint(self, commands: Iterable[DrawCommand], width: int, height: int) -> Image.Image:
        canvas = Image.new("RGBA", (max(width, 1), max(height, 1)), (0, 0, 0, 0))
        draw = ImageDraw.Draw(canvas)
        for command in commands:
            if command.width <= 0 or command.height <= 0:
                continue
            box = [command.x, command.y, command.x + command.width - 1, command.y + command.height - 1]
            if isinstance(command, FilledRect):
                draw.rectangle(box, fill=color_to_rgba(command.color))
            elif isinstance(command, RoundedRect):
                if command.is_outline:
                    draw.rounded_rectangle(
                        box, radius=command.radius, outline=color_to_rgba(command.color), width=command.border_width
                    )
                else:
                    draw.rounded_rectangle(box, radius=command.radius, fill=color_to_rgba(command.color))
            elif isinstance(command, DrawText):
                self._draw_text(draw, command)
            elif isinstance(command, ImageBlit):
                self._blit(canvas, draw, command, box)
        return canvas

    def _draw_text(self, draw: ImageDraw.ImageDraw, command: DrawText) -> None:
        mask = StyleMask.BOLD if command.bold else StyleMask.NONE
        font = self._metrics.font(command.font_size, mask)
        fill = color_to_rgba(command.color)
        draw.text((command.x, command.y), command.text, font=font, fill=fill)
        if command.underline:
            baseline = command.y + command.height - 1
            draw.line([(command.x, baseline), (command.x + command.width, baseline)], fill=fill, width=1)

    def _blit(self, canvas: Image.Image, draw: ImageDraw.ImageDraw, command: ImageBlit, box: list) -> None:
        source = self._open(command.source)
        if source is None:
            draw.rectangle(box, fill=_PLACEHOLDER)
            return
        resized = source.resize((command.width, command.height), resample=RESAMPLING[command.resizing_method])
        mask = None
        if command.rounding:
            mask = Image.new("L", resized.size, 0)
            ImageDraw.Draw(mask).rounded_rectangle(
                [0, 0, command.width - 1, command.height - 1], radius=command.rounding, fill=255
            )
        canvas.alpha_composite(self._apply_mask(resized, mask), dest=(command.x, command.y))

    @staticmethod
    def _apply_mask(image: Image.Image, mask: Optional[Image.Image]) -> Image.Image:
        if mask is None:
            return image
        layer = Image.new("RGBA", image.size, (0, 0, 0, 0))
        layer.paste(image, (0, 0), mask)
        return layer

    @staticmethod
    def _open(source: Optional[str]) -> Optional[Image.Image]:
        if not source:
            return None
        try:
            with Image.open(Path(source).expanduser()) as image:
                return image.convert("RGBA")
        except OSError:
            LOGGER.warning("Image %s could not be opened; drawing a placeholder", source)
            return None
