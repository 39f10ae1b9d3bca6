"""Tests for the layout solver and text shaping."""
import unittest

from banner_layout.model.layout_model import ImageData, NotificationContent
from banner_layout.model.text_model import TextRun
from banner_layout.model.widgets import Border
from banner_layout.parser.alias_resolver import AliasResolver
from banner_layout.parser.layout_calculator import LayoutCalculator, fit_within, limit_size
from banner_layout.parser.layout_parser import LayoutParser
from banner_layout.parser.style_resolver import StyleResolver
from banner_layout.parser.widget_compiler import WidgetCompiler
from banner_layout.utils.metrics import FixedWidthMetrics, TextMeasurement

METRICS = FixedWidthMetrics(char_width=10, line_height=20)


class WordPerLineMetrics(FixedWidthMetrics):
    """Breaks before every word and records what it was asked to measure."""

    def __init__(self) -> None:
        super().__init__(char_width=10, line_height=20)
        self.calls = []

    def measure_text(self, runs, max_width, font_size):
        text = "".join(run.text for run in runs)
        self.calls.append((text, max_width))
        starts = [index for index, char in enumerate(text) if not char.isspace() and index and text[index - 1].isspace()]
        height = (len(starts) + 1) * self.line_height(font_size)
        return TextMeasurement(line_breaks=tuple(starts), width=max_width, height=height)


def _layout(
    source: str,
    content: NotificationContent,
    width: int = 300,
    height: int = 150,
    markup: bool = True,
    metrics=METRICS,
):
    widget = WidgetCompiler(AliasResolver(LayoutParser(source).parse()).resolve()).compile()
    styled = StyleResolver().resolve(widget)
    return LayoutCalculator(metrics, markup=markup).calculate(styled, content, width, height)


def _body(source_body: str, text: str, **kwargs):
    """Lay out a single body text inside a top-left aligned column."""
    source = (
        "FlexContainer(direction = vertical, alignment = Alignment(horizontal = start, vertical = start), "
        + source_body
    )
    return _layout(source, NotificationContent(body=text), **kwargs)


class SizingHelpersTest(unittest.TestCase):
    def test_limit_size_keeps_aspect_ratio(self) -> None:
        self.assertEqual(limit_size(200, 100, 64), (64, 32))
        self.assertEqual(limit_size(100, 200, 64), (32, 64))
        self.assertEqual(limit_size(50, 50, 64), (50, 50))

    def test_fit_within_never_grows(self) -> None:
        self.assertEqual(fit_within(64, 32, 32, 150), (32, 16))
        self.assertEqual(fit_within(10, 10, 100, 100), (10, 10))

    def test_inner_radius(self) -> None:
        self.assertEqual(Border(size=4, radius=10).inner_radius, 6)
        self.assertEqual(Border(size=5, radius=3).inner_radius, 0)


class ContainerLayoutTest(unittest.TestCase):
    """Box geometry for containers and images."""

    def test_image_is_centred_by_default(self) -> None:
        content = NotificationContent(image=ImageData(200, 100))
        root = _layout("FlexContainer(direction = horizontal) { Image() }", content)
        image = root.children[0]
        self.assertEqual(root.size, (300, 150))
        self.assertEqual(image.size, (64, 32))
        self.assertEqual(image.origin, (118, 59))
        self.assertEqual(image.content.handle, content.image)

    def test_spacing_and_border_inset_content(self) -> None:
        root = _layout(
            "FlexContainer(direction = vertical, spacing = 10, border = Border(size = 2))",
            NotificationContent(),
        )
        self.assertEqual(root.content_origin, (12, 12))
        self.assertEqual(root.content_size, (276, 126))

    def test_radius_is_clamped_to_half_the_short_side(self) -> None:
        root = _layout(
            "FlexContainer(direction = vertical, max_height = 10, border = Border(radius = 20))",
            NotificationContent(),
        )
        self.assertEqual(root.size, (300, 10))
        self.assertEqual(root.content.border.radius, 5)

    def test_max_size_caps_the_container(self) -> None:
        root = _layout("FlexContainer(direction = vertical, max_width = 500, max_height = 40)", NotificationContent())
        self.assertEqual(root.size, (300, 40))

    def test_main_axis_positions(self) -> None:
        content = NotificationContent(image=ImageData(50, 50))
        expected = {
            "start": [0, 50],
            "center": [100, 150],
            "end": [200, 250],
            "space-between": [0, 250],
        }
        for position, xs in expected.items():
            with self.subTest(position=position):
                source = (
                    "FlexContainer(direction = horizontal, "
                    f"alignment = Alignment(horizontal = {position}, vertical = start)) {{ Image() Image() }}"
                )
                root = _layout(source, content)
                self.assertEqual([child.x for child in root.children], xs)
                self.assertEqual([child.y for child in root.children], [0, 0])

    def test_children_share_the_remaining_main_axis(self) -> None:
        content = NotificationContent(image=ImageData(64, 64))
        root = _layout(
            "FlexContainer(direction = horizontal, max_width = 100) { Image() Image() }",
            content,
        )
        first, second = root.children
        self.assertEqual(first.size, (64, 64))
        self.assertEqual(second.size, (36, 36))

    def test_image_is_squished_to_fit(self) -> None:
        content = NotificationContent(image=ImageData(200, 100), body="x")
        with self.assertLogs("banner_layout.parser.layout_calculator", level="WARNING") as logs:
            root = _layout(
                "FlexContainer(direction = vertical, max_width = 32) { Image() Text(kind = body) }",
                content,
                height=16,
            )
        self.assertEqual(root.children[0].size, (32, 16))
        self.assertTrue(root.children[1].is_empty)
        self.assertIn("Text(body)", logs.output[0])

    def test_missing_image_collapses(self) -> None:
        root = _layout("FlexContainer(direction = horizontal) { Image() }", NotificationContent())
        self.assertEqual(root.children[0].size, (0, 0))
        self.assertIsNone(root.children[0].content.handle)

    def test_transparent_background(self) -> None:
        root = _layout("FlexContainer(direction = vertical, transparent_background = true)", NotificationContent())
        self.assertIsNone(root.content.background)
        root = _layout("FlexContainer(direction = vertical, background_color = #ffffff00)", NotificationContent())
        self.assertIsNone(root.content.background)

    def test_layout_is_deterministic(self) -> None:
        source = "FlexContainer(direction = horizontal) { Image() FlexContainer(direction = vertical) { Text(kind = title) Text(kind = body) } }"
        content = NotificationContent(title="Hi", body="Some <b>bold</b> words", image=ImageData(10, 20))
        self.assertEqual(_layout(source, content), _layout(source, content))


class TextLayoutTest(unittest.TestCase):
    """Wrapping, ellipsizing and justification through the solver."""

    def test_wraps_at_word_boundaries(self) -> None:
        root = _body("max_width = 70) { Text(kind = body) }", "aaa bbb ccc")
        text = root.children[0]
        self.assertEqual(text.content.text, "aaa bbb\nccc")
        self.assertEqual(text.size, (70, 40))
        self.assertFalse(text.content.truncated)

    def test_newlines_start_paragraphs(self) -> None:
        root = _body("max_width = 200) { Text(kind = body) }", "one\ntwo")
        self.assertEqual(root.children[0].content.text, "one\ntwo")

    def test_end_ellipsis(self) -> None:
        root = _body("max_width = 60) { Text(kind = body, wrap = false) }", "abcdefghij")
        text = root.children[0].content
        self.assertEqual(text.text, "abcde…")
        self.assertTrue(text.truncated)
        self.assertEqual(root.children[0].width, 60)

    def test_middle_ellipsis(self) -> None:
        root = _body("max_width = 60) { Text(kind = body, wrap = false, ellipsize_at = middle) }", "abcdefghij")
        self.assertEqual(root.children[0].content.text, "abc…ij")

    def test_height_limit_ellipsizes_last_line(self) -> None:
        root = _body("max_width = 40, max_height = 40) { Text(kind = body) }", "aaa bbb ccc")
        text = root.children[0]
        self.assertEqual([line.text for line in text.content.lines], ["aaa", "bbb…"])
        self.assertTrue(text.content.truncated)
        self.assertEqual(text.height, 40)

    def test_line_spacing_counts_against_height(self) -> None:
        root = _body("max_width = 40, max_height = 40) { Text(kind = body, line_spacing = 5) }", "aaa bbb ccc")
        self.assertEqual([line.text for line in root.children[0].content.lines], ["aaa…"])

    def test_second_line_is_placed_below_the_first(self) -> None:
        root = _body("max_width = 70) { Text(kind = body, line_spacing = 4) }", "aaa bbb ccc")
        lines = root.children[0].content.lines
        self.assertEqual([line.y for line in lines], [0, 24])
        self.assertEqual(root.children[0].height, 44)

    def test_justification(self) -> None:
        expected = {"left": 0, "center": 10, "right": 20}
        for justification, x in expected.items():
            with self.subTest(justification=justification):
                root = _body(
                    f"max_width = 40) {{ Text(kind = body, justification = {justification}) }}",
                    "aaaa bb",
                )
                lines = root.children[0].content.lines
                self.assertEqual(lines[0].x, 0)
                self.assertEqual(lines[1].fragments[0].x, x)

    def test_space_between_spreads_words(self) -> None:
        root = _body("max_width = 70) { Text(kind = body, justification = space-between) }", "aaaaaaa\nb c")
        fragments = root.children[0].content.lines[1].fragments
        self.assertEqual([(fragment.run.text, fragment.x) for fragment in fragments], [("b", 0), ("c", 60)])

    def test_markup_runs_are_kept_apart(self) -> None:
        root = _body("max_width = 200) { Text(kind = body) }", "a <b>bold</b> c")
        fragments = root.children[0].content.lines[0].fragments
        self.assertEqual([fragment.run.text for fragment in fragments], ["a ", "bold", " c"])
        self.assertEqual([fragment.x for fragment in fragments], [0, 20, 60])

    def test_markup_can_be_disabled(self) -> None:
        root = _body("max_width = 200) { Text(kind = body) }", "<b>x</b>", markup=False)
        self.assertEqual(root.children[0].content.text, "<b>x</b>")

    def test_inline_image_takes_the_line_height(self) -> None:
        root = _body("max_width = 200) { Text(kind = body) }", 'x <img src="missing.png"/>')
        fragments = root.children[0].content.lines[0].fragments
        self.assertEqual(fragments[-1].run.image.src, "missing.png")
        self.assertEqual((fragments[-1].x, fragments[-1].width), (20, 20))

    def test_text_that_cannot_fit_a_line_is_dropped(self) -> None:
        with self.assertLogs("banner_layout.parser.layout_calculator", level="WARNING"):
            root = _body("max_height = 10) { Text(kind = body) }", "hello")
        self.assertTrue(root.children[0].is_empty)
        self.assertEqual(root.children[0].content.lines, ())

    def test_empty_title_has_no_box(self) -> None:
        root = _layout("FlexContainer(direction = vertical) { Text(kind = title) }", NotificationContent())
        self.assertEqual(root.children[0].size, (0, 0))

    def test_measure_text_reports_breaks(self) -> None:
        measurement = METRICS.measure_text((TextRun("aaa bbb ccc"),), 70, 12)
        self.assertEqual(measurement.line_breaks, (8,))
        self.assertEqual((measurement.width, measurement.height), (70, 40))

    def test_measure_text_breaks_after_newlines(self) -> None:
        measurement = METRICS.measure_text((TextRun("one\n\ntwo"),), 200, 12)
        self.assertEqual(measurement.line_breaks, (4, 5))
        self.assertEqual((measurement.width, measurement.height), (30, 60))

    def test_line_breaks_come_from_the_metrics(self) -> None:
        metrics = WordPerLineMetrics()
        root = _body("max_width = 200) { Text(kind = body) }", "hello world", metrics=metrics)
        text = root.children[0]
        self.assertEqual([line.text for line in text.content.lines], ["hello", "world"])
        self.assertEqual(text.size, (50, 40))
        self.assertFalse(text.content.truncated)
        self.assertIn(("hello world", 200), metrics.calls)

    def test_height_limit_ellipsizes_at_paragraph_break(self) -> None:
        root = _body("max_width = 100, max_height = 20) { Text(kind = body) }", "a\nb")
        text = root.children[0].content
        self.assertEqual([line.text for line in text.lines], ["a…"])
        self.assertTrue(text.truncated)

    def test_hidden_paragraph_after_blank_line_leaves_an_ellipsis(self) -> None:
        root = _body("max_width = 100, max_height = 40) { Text(kind = body) }", "a\n\nb")
        text = root.children[0].content
        self.assertEqual([line.text for line in text.lines], ["a", "…"])
        self.assertTrue(text.truncated)

    def test_single_line_text_still_flattens_paragraphs(self) -> None:
        root = _body("max_width = 100) { Text(kind = body, wrap = false) }", "a\nb")
        text = root.children[0].content
        self.assertEqual(text.text, "a b")
        self.assertFalse(text.truncated)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
