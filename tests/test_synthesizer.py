"""Synthesis behavior tests.

Checks confidence labelling, undefined results, and that recoloring leaves
text and language metadata untouched.
"""

from __future__ import annotations

import unittest
from dataclasses import replace

from codetext.colors import ColorScheme, CustomStylesheet, Theme, palette_for
from codetext.engine import EngineOutcome, MarkupRun, no_match_outcome
from codetext.synthesizer import CONFIDENCE_THRESHOLD, language_display_name, synthesize
from highlight_samples import CUSTOM_CSS

OUTCOME = EngineOutcome(
    markup=(
        MarkupRun("def", "keyword"),
        MarkupRun(" ", None),
        MarkupRun("main", "title.function"),
        MarkupRun("():\n    return ", None),
        MarkupRun('"x"', "string"),
        MarkupRun("\n", None),
    ),
    language_id="python",
    relevance=9,
    matched_requested_language=True,
)


class LanguageDisplayNameTests(unittest.TestCase):
    def test_confident_match_uses_plain_name(self) -> None:
        self.assertEqual(language_display_name("python", CONFIDENCE_THRESHOLD + 1, is_undefined=False), "Python")

    def test_threshold_is_inclusive_for_uncertain_label(self) -> None:
        self.assertEqual(language_display_name("python", CONFIDENCE_THRESHOLD, is_undefined=False), "Python?")
        self.assertEqual(language_display_name("swift", 0, is_undefined=False), "Swift?")

    def test_undefined_is_unknown(self) -> None:
        self.assertEqual(language_display_name("python", 50, is_undefined=True), "Unknown")


class SynthesizeTests(unittest.TestCase):
    def test_result_preserves_text_and_metadata(self) -> None:
        result = synthesize(OUTCOME, Theme("xcode"))

        self.assertEqual(result.text, OUTCOME.text)
        self.assertEqual(len(result.styled_text), len(OUTCOME.text))
        self.assertEqual(result.language_id, "python")
        self.assertEqual(result.language_display_name, "Python")
        self.assertEqual(result.relevance, 9)
        self.assertFalse(result.is_undefined)
        self.assertFalse(result.is_uncertain)
        self.assertEqual(result.background_color, "#ffffff")

    def test_low_relevance_is_uncertain(self) -> None:
        result = synthesize(replace(OUTCOME, relevance=2), Theme("xcode"))

        self.assertEqual(result.language_display_name, "Python?")
        self.assertTrue(result.is_uncertain)

    def test_no_match_is_undefined_with_zero_relevance(self) -> None:
        result = synthesize(no_match_outcome("plain words"), Theme("xcode"))

        self.assertTrue(result.is_undefined)
        self.assertEqual(result.relevance, 0)
        self.assertEqual(result.language_id, "unknown")
        self.assertEqual(result.language_display_name, "Unknown")
        self.assertEqual(result.text, "plain words")
        self.assertFalse(result.is_uncertain)

    def test_keyword_and_plain_runs_get_different_styles(self) -> None:
        result = synthesize(OUTCOME, Theme("xcode"))
        palette = palette_for(Theme("xcode"))
        def_run = next(run for run in result.styled_text if "def" in run.text)

        self.assertEqual(def_run.style, palette.style_for("keyword"))
        self.assertNotEqual(palette.style_for("keyword"), palette.default)
        self.assertEqual(def_run.text, "def")

    def test_synthesis_is_deterministic(self) -> None:
        self.assertEqual(synthesize(OUTCOME, Theme("github")), synthesize(OUTCOME, Theme("github")))

    def test_recoloring_changes_only_color_fields(self) -> None:
        light = synthesize(OUTCOME, Theme("xcode"), ColorScheme.LIGHT)
        dark = synthesize(OUTCOME, Theme("xcode"), ColorScheme.DARK)
        custom = synthesize(OUTCOME, CustomStylesheet(CUSTOM_CSS))

        for other in (dark, custom):
            self.assertEqual(other.text, light.text)
            self.assertEqual(other.language_id, light.language_id)
            self.assertEqual(other.language_display_name, light.language_display_name)
            self.assertEqual(other.relevance, light.relevance)
            self.assertEqual(other.is_undefined, light.is_undefined)
        self.assertNotEqual(dark.background_color, light.background_color)

    def test_custom_stylesheet_colors_strings(self) -> None:
        result = synthesize(OUTCOME, CustomStylesheet(CUSTOM_CSS))
        string_runs = [run for run in result.styled_text if run.text == '"x"']

        self.assertEqual(len(string_runs), 1)
        self.assertEqual(string_runs[0].style.color, "#880000")


if __name__ == "__main__":
    unittest.main()
