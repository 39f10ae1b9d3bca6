"""Render draw commands into an HTML preview."""
from __future__ import annotations

import html
from pathlib import Path
from typing import Dict, Iterable

from banner_layout.model.draw_commands import DrawCommand, DrawText, FilledRect, ImageBlit, RoundedRect
from banner_layout.model.layout_model import DEFAULT_BANNER_HEIGHT, DEFAULT_BANNER_WIDTH
from banner_layout.renderer.utils import color_to_css, text_to_css


class HtmlRenderer:
    """Produce an absolutely positioned HTML representation of a banner."""

    def __init__(self, output_path: Path) -> None:
        self._output_path = output_path

    def render(
        self,
        commands: Iterable[DrawCommand],
        width: int = DEFAULT_BANNER_WIDTH,
        height: int = DEFAULT_BANNER_HEIGHT,
    ) -> None:
        self._output_path.write_text(self.build_html(commands, width, height), encoding="utf-8")

    def build_html(self, commands: Iterable[DrawCommand], width: int, height: int) -> str:
        elements = [self._command_to_element(command) for command in commands]
        body = "\n".join(elements)
        return f"""<!DOCTYPE html>
<html lang=\"en\">
<head>
  <meta charset=\"utf-8\" />
  <title>Banner Preview</title>
  <style>
    body {{ margin: 0; padding: 0; }}
    .banner {{ position: relative; width: {width}px; height: {height}px; overflow: hidden; }}
    .banner-item {{ position: absolute; box-sizing: border-box; white-space: pre; }}
  </style>
</head>
<body>
<div class=\"banner\">
{body}
</div>
</body>
</html>
"""

    def _command_to_element(self, command: DrawCommand) -> str:
        style: Dict[str, str] = {
            "left": f"{command.x}px",
            "top": f"{command.y}px",
            "width": f"{command.width}px",
            "height": f"{command.height}px",
        }
        if isinstance(command, FilledRect):
            style["background"] = color_to_css(command.color)
            return self._element("div", style)
        if isinstance(command, RoundedRect):
            style["border-radius"] = f"{command.radius}px"
            if command.is_outline:
                style["border"] = f"{command.border_width}px solid {color_to_css(command.color)}"
            else:
                style["background"] = color_to_css(command.color)
            return self._element("div", style)
        if isinstance(command, DrawText):
            style.update(text_to_css(command))
            style["line-height"] = f"{command.height}px"
            content = html.escape(command.text)
            if command.link:
                content = f"<a href=\"{html.escape(command.link, quote=True)}\">{content}</a>"
            return self._element("span", style, content)
        if command.rounding:
            style["border-radius"] = f"{command.rounding}px"
        return self._image_element(command, style)

    def _image_element(self, command: ImageBlit, style: Dict[str, str]) -> str:
        if not command.source:
            style["background"] = "repeating-linear-gradient(45deg, #ccc, #ccc 4px, #eee 4px, #eee 8px)"
            return self._element("div", style)
        style_str = "; ".join(f"{k}: {v}" for k, v in style.items())
        source = html.escape(command.source, quote=True)
        return f"  <img class=\"banner-item\" src=\"{source}\" style=\"{style_str}\" alt=\"\" />"

    @staticmethod
    def _element(tag: str, style: Dict[str, str], content: str = "") -> str:
        style_str = "; ".join(f"{k}: {v}" for k, v in style.items())
        return f"  <{tag} class=\"banner-item\" style=\"{style_str}\">{content}</{tag}>"
