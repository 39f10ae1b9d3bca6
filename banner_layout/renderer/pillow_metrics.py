"""Text metrics backed by Pillow fonts."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Tuple

from PIL import Image, ImageFont

from banner_layout.model.layout_model import ImageData
from banner_layout.model.text_model import InlineImage, StyleMask
from banner_layout.utils.logger import get_logger
from banner_layout.utils.metrics import TextMetrics

LOGGER = get_logger(__name__)

FALLBACK_FONT = "DejaVuSans.ttf"
FALLBACK_BOLD_FONT = "DejaVuSans-Bold.ttf"


class PillowMetrics(TextMetrics):
    """Measure with TrueType fonts, falling back to Pillow's bundled font.

    Loaded fonts are cached per (path, size); loading is idempotent so the
    cache does not change results.
    """

    def __init__(
        self,
        font_path: Optional[str] = None,
        bold_font_path: Optional[str] = None,
        image_root: Optional[Path] = None,
    ) -> None:
        self._font_path = font_path or FALLBACK_FONT
        self._bold_font_path = bold_font_path or (FALLBACK_BOLD_FONT if font_path is None else font_path)
        self._image_root = image_root
        self._font_cache: Dict[Tuple[str, int], ImageFont.ImageFont | ImageFont.FreeTypeFont] = {}

    def font(self, font_size: int, mask: StyleMask = StyleMask.NONE) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
        path = self._bold_font_path if mask & StyleMask.BOLD else self._font_path
        size = max(1, font_size)
        cache_key = (path, size)
        if cache_key not in self._font_cache:
            try:
                font = ImageFont.truetype(path, size)
            except OSError:
                LOGGER.debug("Font %s not found; using Pillow's default font", path)
                font = ImageFont.load_default(size=size)
            self._font_cache[cache_key] = font
        return self._font_cache[cache_key]

    def text_width(self, text: str, font_size: int, mask: StyleMask = StyleMask.NONE) -> int:
        if not text:
            return 0
        return int(round(self.font(font_size, mask).getlength(text)))

    def line_height(self, font_size: int) -> int:
        font = self.font(font_size)
        if isinstance(font, ImageFont.FreeTypeFont):
            ascent, descent = font.getmetrics()
            return ascent + descent
        left, top, right, bottom = font.getbbox("Ag")
        return bottom - top

    def natural_image_size(self, handle: Optional[ImageData | InlineImage]) -> Optional[Tuple[int, int]]:
        if not isinstance(handle, InlineImage):
            return super().natural_image_size(handle)
        path = Path(handle.src).expanduser()
        if self._image_root is not None and not path.is_absolute():
            path = self._image_root / path
        try:
            with Image.open(path) as image:
                return image.size
        except OSError:
            LOGGER.debug("Inline image %s could not be opened", handle.src)
            return None


def load_image_data(path: Path) -> ImageData:
    """Read just enough of an image file to build a layout handle."""
    with Image.open(path) as image:
        width, height = image.size
    return ImageData(width=width, height=height, source=str(path))
