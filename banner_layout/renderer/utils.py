"""Common helpers shared by renderer implementations."""
from __future__ import annotations

from typing import Dict, Tuple

from banner_layout.model.draw_commands import DrawText
from banner_layout.model.widgets import Color


def color_to_css(color: Color) -> str:
    return f"rgba({color.red}, {color.green}, {color.blue}, {color.alpha / 255:.3g})"


def color_to_rgba(color: Color) -> Tuple[int, int, int, int]:
    return (color.red, color.green, color.blue, color.alpha)


def text_to_css(command: DrawText) -> Dict[str, str]:
    """Convert the style flags of a text command into CSS properties."""
    css: Dict[str, str] = {
        "font-size": f"{command.font_size}px",
        "color": color_to_css(command.color),
    }
    if command.bold:
        css["font-weight"] = "700"
    if command.italic:
        css["font-style"] = "italic"
    if command.underline:
        css["text-decoration"] = "underline"
    return css
