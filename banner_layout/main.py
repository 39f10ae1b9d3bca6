"""Entry-point for the banner layout pipeline."""
from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import List, Optional, Sequence

from banner_layout.model.draw_commands import DrawCommand
from banner_layout.model.errors import LayoutError
from banner_layout.model.layout_model import (
    DEFAULT_BANNER_HEIGHT,
    DEFAULT_BANNER_WIDTH,
    LayoutBox,
    NotificationContent,
)
from banner_layout.model.style_model import StyleDefaults
from banner_layout.model.widgets import (
    Alignment,
    Direction,
    FlexContainer,
    Image,
    Position,
    SpacingSpec,
    Text,
    TextKind,
    Widget,
)
from banner_layout.parser.alias_resolver import AliasResolver
from banner_layout.parser.layout_calculator import LayoutCalculator
from banner_layout.parser.layout_parser import LayoutParser
from banner_layout.parser.style_resolver import StyleResolver
from banner_layout.parser.widget_compiler import WidgetCompiler
from banner_layout.renderer.html_renderer import HtmlRenderer
from banner_layout.renderer.paint_composer import PaintComposer
from banner_layout.renderer.pillow_metrics import PillowMetrics, load_image_data
from banner_layout.renderer.raster_renderer import RasterRenderer
from banner_layout.utils.debug import DebugDumper
from banner_layout.utils.logger import get_logger, set_verbosity
from banner_layout.utils.metrics import TextMetrics

LOGGER = get_logger(__name__)


def compile_layout(source: str) -> Widget:
    """Parse, expand aliases and compile layout source into its root widget."""
    document = LayoutParser(source).parse()
    root = AliasResolver(document).resolve()
    return WidgetCompiler(root).compile()


def compile_layout_file(path: str | Path) -> Widget:
    """Compile a layout file; ``~`` and ``$VARS`` in the path are expanded."""
    resolved = Path(os.path.expandvars(os.path.expanduser(str(path))))
    LOGGER.debug("Compiling layout file %s", resolved)
    return compile_layout(resolved.read_text(encoding="utf-8"))


def default_layout(defaults: Optional[StyleDefaults] = None) -> FlexContainer:
    """Image on the left, title above body on the right."""
    defaults = defaults or StyleDefaults()
    column = FlexContainer(
        direction=Direction.VERTICAL,
        children=(Text(kind=TextKind.TITLE), Text(kind=TextKind.BODY)),
        alignment=Alignment(horizontal=Position.CENTER, vertical=Position.CENTER),
        transparent_background=True,
    )
    return FlexContainer(
        direction=Direction.HORIZONTAL,
        children=(Image(), column),
        spacing=SpacingSpec.from_spacing(defaults.padding),
        border=defaults.border,
        alignment=Alignment(horizontal=Position.START, vertical=Position.CENTER),
    )


def compile_or_default(source: Optional[str], defaults: Optional[StyleDefaults] = None) -> Widget:
    """Compile ``source``, falling back to :func:`default_layout` on any layout error."""
    if source is None:
        return default_layout(defaults)
    try:
        return compile_layout(source)
    except LayoutError as error:
        LOGGER.warning("Layout failed to compile, using the default layout: %s", error.format())
        return default_layout(defaults)


def layout_banner(
    widget: Widget,
    content: NotificationContent,
    metrics: TextMetrics,
    defaults: Optional[StyleDefaults] = None,
    width: int = DEFAULT_BANNER_WIDTH,
    height: int = DEFAULT_BANNER_HEIGHT,
) -> LayoutBox:
    defaults = defaults or StyleDefaults()
    styled = StyleResolver(defaults).resolve(widget)
    return LayoutCalculator(metrics, markup=defaults.markup).calculate(styled, content, width, height)


def render_banner(
    widget: Widget,
    content: NotificationContent,
    metrics: TextMetrics,
    defaults: Optional[StyleDefaults] = None,
    width: int = DEFAULT_BANNER_WIDTH,
    height: int = DEFAULT_BANNER_HEIGHT,
) -> List[DrawCommand]:
    """Run property resolution, layout and paint composition for one banner."""
    layout = layout_banner(widget, content, metrics, defaults, width, height)
    return PaintComposer().compose(layout)


def main(
    layout_file: Optional[str],
    output_dir: Optional[str] = None,
    *,
    content: Optional[NotificationContent] = None,
    width: int = DEFAULT_BANNER_WIDTH,
    height: int = DEFAULT_BANNER_HEIGHT,
    png: bool = False,
    font: Optional[str] = None,
) -> List[DrawCommand]:
    """Compile a layout file and write HTML/PNG previews plus a debug dump."""
    defaults = StyleDefaults()
    if layout_file is None:
        widget = default_layout(defaults)
    else:
        widget = compile_layout_file(layout_file)

    content = content or NotificationContent(title="Notification", body="Hello from <b>banner-layout</b>")
    metrics = PillowMetrics(font_path=font)
    layout = layout_banner(widget, content, metrics, defaults, width, height)
    commands = PaintComposer().compose(layout)

    output_path = Path(output_dir or "banner_preview").resolve()
    output_path.mkdir(parents=True, exist_ok=True)
    LOGGER.info("Rendering outputs into %s", output_path)
    HtmlRenderer(output_path / "banner.html").render(commands, width, height)
    if png:
        RasterRenderer(output_path / "banner.png", metrics).render(commands, width, height)
    DebugDumper(output_path / "debug").dump(layout, commands)
    return commands


def cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Compile a banner layout and render previews of it")
    parser.add_argument("layout_file", nargs="?", help="Path to the layout file (default layout when omitted)")
    parser.add_argument("--output", help="Directory to write generated artifacts")
    parser.add_argument("--title", default="Notification", help="Sample notification title")
    parser.add_argument("--body", default="Hello from <b>banner-layout</b>", help="Sample notification body")
    parser.add_argument("--image", help="Image file shown by Image widgets")
    parser.add_argument("--width", type=int, default=DEFAULT_BANNER_WIDTH, help="Banner width in pixels")
    parser.add_argument("--height", type=int, default=DEFAULT_BANNER_HEIGHT, help="Banner height in pixels")
    parser.add_argument("--font", help="TrueType font used for measuring and drawing text")
    parser.add_argument("--png", action="store_true", help="Generate a PNG preview as well as HTML")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    set_verbosity(args.verbose)
    image = None
    if args.image:
        image = load_image_data(Path(args.image).expanduser())
    content = NotificationContent(title=args.title, body=args.body, image=image)
    try:
        main(
            args.layout_file,
            args.output,
            content=content,
            width=args.width,
            height=args.height,
            png=args.png,
            font=args.font,
        )
    except LayoutError as error:
        LOGGER.error("%s", error.format())
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(cli())
