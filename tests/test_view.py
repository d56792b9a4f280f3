"""CodeText view model tests."""

from __future__ import annotations

import unittest

from codetext import CodeText, CustomStylesheet, ExplicitLanguage, HighlightRefresher, Theme
from codetext.ansi import ANSI_ESCAPE_RE
from codetext.colors import ColorScheme
from codetext.runtime.refresh import RefreshTrigger
from highlight_samples import CUSTOM_CSS, SWIFT_CODE, FakeEngine, InlineExecutor


class CodeTextTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = FakeEngine()
        self.refresher = HighlightRefresher(self.engine, executor=InlineExecutor())
        self.view = CodeText(SWIFT_CODE, refresher=self.refresher)

    def test_changes_before_appear_do_not_refresh(self) -> None:
        self.view.code = "let x = 1"
        self.view.mode = ExplicitLanguage("swift")

        self.assertEqual(self.engine.calls, [])
        self.assertIsNone(self.view.highlight_result)

    def test_appear_then_update_applies_result(self) -> None:
        session = self.view.appear()

        self.assertIsNotNone(session)
        self.assertIs(session.trigger, RefreshTrigger.APPEAR)
        result = self.view.update()
        self.assertIs(self.view.highlight_result, result)
        self.assertEqual(result.text, SWIFT_CODE)

    def test_setting_equal_value_does_not_refresh(self) -> None:
        self.view.appear()
        self.view.update()

        self.view.code = SWIFT_CODE
        self.view.color_scheme = ColorScheme.LIGHT
        self.view.colors = Theme("xcode")

        self.assertEqual(len(self.engine.calls), 1)

    def test_each_changed_property_triggers_refresh(self) -> None:
        self.view.appear()
        self.view.update()

        self.view.code = "let y = 2"
        self.view.update()
        self.view.mode = ExplicitLanguage("swift")
        self.view.update()
        self.view.colors = CustomStylesheet(CUSTOM_CSS)
        self.view.update()
        self.view.color_scheme = ColorScheme.DARK
        self.view.update()

        self.assertEqual(len(self.engine.calls), 5)
        self.assertEqual(self.view.highlight_result.text, "let y = 2")
        self.assertEqual(self.refresher.applied_request, self.view.request())

    def test_scene_became_active_refreshes_only_while_visible(self) -> None:
        self.assertIsNone(self.view.scene_became_active())

        self.view.appear()
        self.view.update()
        session = self.view.scene_became_active()

        self.assertIsNotNone(session)
        self.assertIs(session.trigger, RefreshTrigger.RESUMED)

    def test_disappear_abandons_pending_highlight(self) -> None:
        self.view.appear()
        self.view.disappear()

        self.assertFalse(self.view.visible)
        self.assertIsNone(self.view.update())
        self.assertIsNone(self.view.highlight_result)

    def test_change_while_hidden_refreshes_on_next_appear(self) -> None:
        self.view.appear()
        self.view.update()
        self.view.disappear()

        self.view.mode = ExplicitLanguage("python")
        self.assertEqual(len(self.engine.calls), 1)

        session = self.view.appear()

        self.assertIsNotNone(session)
        result = self.view.update()
        self.assertEqual(result.language_id, "python")
        self.assertEqual(self.refresher.applied_request, self.view.request())
        self.assertEqual(len(self.engine.calls), 2)

    def test_reappear_without_changes_keeps_result(self) -> None:
        self.view.appear()
        first = self.view.update()
        self.view.disappear()

        self.assertIsNone(self.view.appear())
        self.assertIs(self.view.highlight_result, first)
        self.assertEqual(len(self.engine.calls), 1)

    def test_render_shows_plain_code_before_result(self) -> None:
        rendered = self.view.render(horizontal_padding=0)
        self.assertEqual(ANSI_ESCAPE_RE.sub("", rendered).splitlines()[0].rstrip(), "import SwiftUI")

    def test_render_uses_result_background(self) -> None:
        self.view.appear()
        self.view.update()

        rendered = self.view.render(width=40)

        self.assertIn("\033[48;2;255;255;255m", rendered)
        lines = rendered.split("\n")
        self.assertEqual(len(lines), SWIFT_CODE.count("\n") + 1)


if __name__ == "__main__":
    unittest.main()
