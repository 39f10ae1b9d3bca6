"""Tests for body markup parsing."""
import unittest

from banner_layout.model.text_model import InlineImage, StyleMask, TextRun
from banner_layout.parser.markup_parser import MarkupParser, parse_markup


class MarkupParserTest(unittest.TestCase):
    def test_plain_text_is_one_run(self) -> None:
        parsed = parse_markup("Hello world")
        self.assertEqual(parsed.runs, (TextRun("Hello world"),))
        self.assertEqual(parsed.warnings, ())

    def test_bold_span(self) -> None:
        parsed = parse_markup("Hello <b>world</b>!")
        self.assertEqual(
            parsed.runs,
            (TextRun("Hello "), TextRun("world", StyleMask.BOLD), TextRun("!")),
        )

    def test_nested_styles_combine(self) -> None:
        parsed = parse_markup("<b>a<i>b</i></b><U>c</U>")
        self.assertEqual(
            parsed.runs,
            (
                TextRun("a", StyleMask.BOLD),
                TextRun("b", StyleMask.BOLD | StyleMask.ITALIC),
                TextRun("c", StyleMask.UNDERLINE),
            ),
        )

    def test_links_carry_their_target(self) -> None:
        parsed = parse_markup('see <a href="https://example.org/?a=1&amp;b=2">docs</a>')
        self.assertEqual(parsed.runs[1], TextRun("docs", link="https://example.org/?a=1&b=2"))

    def test_bare_attribute_values_may_contain_slashes(self) -> None:
        parsed = parse_markup("see <a href=https://example.org/docs>docs</a>")
        self.assertEqual(parsed.runs[1], TextRun("docs", link="https://example.org/docs"))
        self.assertEqual(parsed.plain_text, "see docs")
        self.assertEqual(parsed.warnings, ())

    def test_bare_attribute_before_self_closing_slash(self) -> None:
        parsed = parse_markup("<img src=icons/star.png/>")
        self.assertEqual(parsed.runs[0].image, InlineImage(src="icons/star.png"))
        self.assertEqual(parsed.warnings, ())

    def test_inline_image(self) -> None:
        parsed = parse_markup('icon <img src="icons/star.png" alt="star"/> here')
        self.assertEqual(len(parsed.runs), 3)
        self.assertTrue(parsed.runs[1].is_image)
        self.assertEqual(parsed.runs[1].image, InlineImage(src="icons/star.png", alt="star"))

    def test_image_without_src_shows_alt(self) -> None:
        with self.assertLogs("banner_layout.parser.markup_parser", level="WARNING"):
            parsed = parse_markup('<img alt="missing">')
        self.assertEqual(parsed.plain_text, "missing")
        self.assertEqual(len(parsed.warnings), 1)

    def test_unmatched_closing_tag_is_literal(self) -> None:
        with self.assertLogs("banner_layout.parser.markup_parser", level="WARNING") as logs:
            parsed = parse_markup("a</b>c")
        self.assertEqual(parsed.plain_text, "a</b>c")
        self.assertEqual(len(parsed.warnings), 1)
        self.assertIn("</b>", logs.output[0])

    def test_unknown_tag_is_literal(self) -> None:
        with self.assertLogs("banner_layout.parser.markup_parser", level="WARNING"):
            parsed = parse_markup("<span>x</span>")
        self.assertEqual(parsed.plain_text, "<span>x</span>")
        self.assertEqual(len(parsed.warnings), 2)

    def test_stray_angle_bracket(self) -> None:
        with self.assertLogs("banner_layout.parser.markup_parser", level="WARNING"):
            parsed = parse_markup("1 < 2 and <b")
        self.assertEqual(parsed.plain_text, "1 < 2 and <b")
        self.assertEqual(len(parsed.warnings), 2)

    def test_tag_left_open_is_closed_at_end(self) -> None:
        with self.assertLogs("banner_layout.parser.markup_parser", level="WARNING"):
            parsed = parse_markup("<i>slanted")
        self.assertEqual(parsed.runs, (TextRun("slanted", StyleMask.ITALIC),))
        self.assertIn("<i>", parsed.warnings[0])

    def test_mis_nested_close_removes_matching_tag(self) -> None:
        parsed = parse_markup("<b><i>x</b>y</i>z")
        self.assertEqual(
            parsed.runs,
            (
                TextRun("x", StyleMask.BOLD | StyleMask.ITALIC),
                TextRun("y", StyleMask.ITALIC),
                TextRun("z"),
            ),
        )
        self.assertEqual(parsed.warnings, ())

    def test_entities_are_decoded(self) -> None:
        parsed = parse_markup("Tom &amp; Jerry &lt;3")
        self.assertEqual(parsed.plain_text, "Tom & Jerry <3")

    def test_outer_whitespace_is_trimmed(self) -> None:
        parsed = MarkupParser("  <b> </b> hi there \n").parse()
        self.assertEqual(parsed.runs, (TextRun("hi there"),))

    def test_empty_input(self) -> None:
        parsed = parse_markup("")
        self.assertEqual(parsed.runs, ())
        self.assertEqual(parsed.plain_text, "")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
