"""
Integration tests for the complete banner pipeline.

Covers source text through to draw commands and the files the CLI writes.
"""

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from banner_layout.main import (
    cli,
    compile_layout,
    compile_layout_file,
    compile_or_default,
    default_layout,
    layout_banner,
    main,
    render_banner,
)
from banner_layout.model.draw_commands import DrawText, FilledRect, ImageBlit, RoundedRect
from banner_layout.model.errors import LayoutError, ParseError
from banner_layout.model.layout_model import ImageData, NotificationContent
from banner_layout.model.style_model import StyleDefaults, TextStyleLayer
from banner_layout.model.widgets import Border, Direction, FlexContainer, Image, Spacing, SpacingSpec, Text
from banner_layout.utils.metrics import FixedWidthMetrics

METRICS = FixedWidthMetrics(char_width=10, line_height=20)

SAMPLE_LAYOUT = """
// Image on the left, text column on the right.
alias Column = FlexContainer(direction = vertical, transparent_background = true)

FlexContainer(
    direction = horizontal,
    spacing = 4,
    border = Border(size = 1, radius = 6, color = #202020),
    alignment = Alignment(horizontal = start, vertical = center),
) {
    Image(max_size = 48, rounding = 4)
    Column() {
        Text(kind = summary)
        Text(kind = body, margin = Spacing(top = 2))
    }
}
"""


class PipelineTest(unittest.TestCase):
    """End-to-end runs of the compile, layout and paint stages."""

    def setUp(self) -> None:
        self.content = NotificationContent(
            title="Build finished",
            body="All <b>42</b> checks passed",
            image=ImageData(96, 96, source="icon.png"),
        )

    def test_compile_sample_layout(self) -> None:
        widget = compile_layout(SAMPLE_LAYOUT)
        self.assertIsInstance(widget, FlexContainer)
        self.assertIsInstance(widget.children[0], Image)
        column = widget.children[1]
        self.assertTrue(column.transparent_background)
        self.assertEqual([type(child) for child in column.children], [Text, Text])

    def test_render_sample_layout(self) -> None:
        commands = render_banner(compile_layout(SAMPLE_LAYOUT), self.content, METRICS)
        self.assertIsInstance(commands[0], RoundedRect)
        self.assertFalse(commands[0].is_outline)
        self.assertTrue(commands[1].is_outline)

        blit = commands[2]
        self.assertIsInstance(blit, ImageBlit)
        self.assertEqual((blit.x, blit.y, blit.width, blit.height), (5, 51, 48, 48))
        self.assertEqual(blit.rounding, 4)

        texts = [command.text for command in commands if isinstance(command, DrawText)]
        self.assertEqual(texts[0], "Build finished")
        self.assertIn("42", texts)

    def test_layout_is_deterministic(self) -> None:
        widget = compile_layout(SAMPLE_LAYOUT)
        first = layout_banner(widget, self.content, METRICS)
        second = layout_banner(compile_layout(SAMPLE_LAYOUT), self.content, METRICS)
        self.assertEqual(first, second)
        self.assertEqual(
            render_banner(widget, self.content, METRICS),
            render_banner(widget, self.content, METRICS),
        )

    def test_default_layout(self) -> None:
        commands = render_banner(default_layout(), self.content, METRICS)
        self.assertEqual(commands[0], FilledRect(0, 0, 300, 150, commands[0].color))
        blit = commands[1]
        self.assertIsInstance(blit, ImageBlit)
        self.assertEqual((blit.x, blit.y, blit.width, blit.height), (0, 43, 64, 64))
        title = commands[2]
        self.assertEqual(title.text, "Build finished")
        self.assertTrue(title.bold)

    def test_default_layout_uses_caller_padding_and_border(self) -> None:
        defaults = StyleDefaults(padding=Spacing.all_directional(6), border=Border(size=2, radius=4))
        layout = default_layout(defaults)
        self.assertEqual(layout.direction, Direction.HORIZONTAL)
        self.assertEqual(layout.spacing, SpacingSpec(top=6, right=6, bottom=6, left=6))
        self.assertEqual(layout.border, Border(size=2, radius=4))

    def test_caller_defaults_reach_the_layout(self) -> None:
        defaults = StyleDefaults(title=TextStyleLayer(font_size=20))
        layout = layout_banner(compile_layout(SAMPLE_LAYOUT), self.content, METRICS, defaults)
        title = layout.children[1].children[0]
        self.assertEqual(title.content.font_size, 20)

    def test_compile_or_default_falls_back(self) -> None:
        with self.assertLogs("banner_layout.main", level="WARNING") as logs:
            widget = compile_or_default("FlexContainer(direction = vertical")
        self.assertEqual(widget, default_layout())
        self.assertIn("default layout", logs.output[0])
        self.assertEqual(compile_or_default(None), default_layout())

    def test_compile_or_default_keeps_valid_layouts(self) -> None:
        self.assertEqual(compile_or_default(SAMPLE_LAYOUT), compile_layout(SAMPLE_LAYOUT))

    def test_errors_share_a_base_class(self) -> None:
        with self.assertRaises(LayoutError):
            compile_layout("Text(kind = title, kind = body)")
        with self.assertRaises(ParseError):
            compile_layout("Text(kind = title")


class EntryPointTest(unittest.TestCase):
    def test_compile_layout_file_expands_variables(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            Path(tmp, "banner.layout").write_text("Text(kind = title)", encoding="utf-8")
            with mock.patch.dict(os.environ, {"BANNER_DIR": tmp}):
                widget = compile_layout_file("$BANNER_DIR/banner.layout")
        self.assertIsInstance(widget, Text)

    def test_main_writes_artifacts(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            layout_file = Path(tmp) / "banner.layout"
            layout_file.write_text(SAMPLE_LAYOUT, encoding="utf-8")
            output = Path(tmp) / "out"
            with mock.patch("banner_layout.main.PillowMetrics", return_value=METRICS):
                commands = main(str(layout_file), str(output), content=NotificationContent(title="Hi"))
            self.assertTrue((output / "banner.html").exists())
            self.assertTrue((output / "debug" / "layout.json").exists())
            self.assertTrue((output / "debug" / "draw_commands.json").exists())
        self.assertTrue(any(isinstance(command, DrawText) and command.text == "Hi" for command in commands))

    def test_cli_reports_layout_errors(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            layout_file = Path(tmp) / "broken.layout"
            layout_file.write_text("Button()", encoding="utf-8")
            with self.assertLogs("banner_layout.main", level="ERROR") as logs:
                status = cli([str(layout_file), "--output", str(Path(tmp) / "out")])
        self.assertEqual(status, 1)
        self.assertIn("Unknown type: Button", logs.output[0])

    def test_cli_success(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            output = Path(tmp) / "out"
            with mock.patch("banner_layout.main.PillowMetrics", return_value=METRICS):
                status = cli(["--output", str(output), "--title", "Hello", "--body", "World"])
            self.assertEqual(status, 0)
            self.assertTrue((output / "banner.html").exists())


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
