"""Highlight refresher lifecycle tests.

Covers trigger de-duplication, supersession and teardown of in-flight
sessions, error propagation, and timeout expiry.
"""

from __future__ import annotations

import threading
import unittest
from concurrent.futures import ThreadPoolExecutor

from codetext.colors import ColorScheme, Theme
from codetext.errors import HighlightEngineError
from codetext.highlight import HighlightRequest
from codetext.languages import Candidates, FullCorpus
from codetext.modes import ExplicitLanguage
from codetext.runtime.refresh import HighlightRefresher, RefreshState, RefreshTrigger
from highlight_samples import SWIFT_CODE, FailingEngine, FakeEngine, InlineExecutor


def _request(code: str = SWIFT_CODE, **kwargs) -> HighlightRequest:
    return HighlightRequest(code=code, **kwargs)


class InlineRefreshTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = FakeEngine()
        self.results = []
        self.refresher = HighlightRefresher(
            self.engine,
            executor=InlineExecutor(),
            on_result=self.results.append,
        )

    def test_initial_state_is_idle(self) -> None:
        self.assertIs(self.refresher.state, RefreshState.IDLE)
        self.assertIsNone(self.refresher.result)

    def test_appear_applies_result_after_processing(self) -> None:
        session = self.refresher.request_refresh(_request())

        self.assertIsNotNone(session)
        self.assertTrue(session.done)
        self.assertIs(self.refresher.state, RefreshState.PENDING)
        self.assertIsNone(self.refresher.result)

        result = self.refresher.process_completions()

        self.assertIsNotNone(result)
        self.assertIs(self.refresher.state, RefreshState.APPLIED)
        self.assertEqual(result.language_id, "swift")
        self.assertEqual(result.text, SWIFT_CODE)
        self.assertEqual(self.results, [result])
        self.assertEqual(self.refresher.applied_request, _request())
        self.assertIsInstance(self.engine.calls[0][1], FullCorpus)

    def test_second_appear_with_unchanged_request_is_skipped(self) -> None:
        self.refresher.request_refresh(_request())
        self.refresher.process_completions()

        self.assertIsNone(self.refresher.request_refresh(_request(), RefreshTrigger.APPEAR))
        self.assertEqual(len(self.engine.calls), 1)

    def test_appear_with_changed_request_refreshes_stale_result(self) -> None:
        self.refresher.request_refresh(_request())
        self.refresher.process_completions()

        session = self.refresher.request_refresh(_request("other"), RefreshTrigger.APPEAR)

        self.assertIsNotNone(session)
        result = self.refresher.process_completions()
        self.assertEqual(result.text, "other")
        self.assertEqual(self.refresher.applied_request, _request("other"))
        self.assertEqual(len(self.engine.calls), 2)

    def test_resumed_always_refreshes(self) -> None:
        self.refresher.request_refresh(_request())
        self.refresher.process_completions()

        session = self.refresher.request_refresh(_request(), RefreshTrigger.RESUMED)

        self.assertIsNotNone(session)
        self.refresher.process_completions()
        self.assertEqual(len(self.engine.calls), 2)
        self.assertEqual(len(self.results), 2)

    def test_unchanged_property_trigger_is_skipped(self) -> None:
        self.refresher.request_refresh(_request())
        self.refresher.process_completions()

        self.assertIsNone(self.refresher.request_refresh(_request(), RefreshTrigger.CODE_CHANGED))
        self.assertEqual(len(self.engine.calls), 1)

    def test_changed_mode_refreshes_with_candidates(self) -> None:
        self.refresher.request_refresh(_request())
        self.refresher.process_completions()

        new_request = _request(mode=ExplicitLanguage("python"))
        self.refresher.request_refresh(new_request, RefreshTrigger.MODE_CHANGED)
        result = self.refresher.process_completions()

        self.assertEqual(self.engine.calls[-1][1], Candidates(("python",)))
        self.assertEqual(result.language_id, "python")
        self.assertEqual(self.refresher.applied_request, new_request)

    def test_color_only_change_keeps_language(self) -> None:
        self.refresher.request_refresh(_request())
        first = self.refresher.process_completions()

        self.refresher.request_refresh(
            _request(colors=Theme("xcode"), color_scheme=ColorScheme.DARK),
            RefreshTrigger.COLOR_SCHEME_CHANGED,
        )
        second = self.refresher.process_completions()

        self.assertEqual(second.language_id, first.language_id)
        self.assertEqual(second.text, first.text)
        self.assertNotEqual(second.background_color, first.background_color)

    def test_engine_error_is_raised_from_process_completions(self) -> None:
        refresher = HighlightRefresher(FailingEngine(RuntimeError("boom")), executor=InlineExecutor())
        refresher.request_refresh(_request())

        with self.assertRaises(HighlightEngineError):
            refresher.process_completions()
        self.assertIs(refresher.state, RefreshState.IDLE)
        self.assertIsNone(refresher.result)

    def test_engine_error_instances_propagate_unchanged(self) -> None:
        error = HighlightEngineError("broken")
        refresher = HighlightRefresher(FailingEngine(error), executor=InlineExecutor())
        refresher.request_refresh(_request())

        with self.assertRaises(HighlightEngineError) as ctx:
            refresher.process_completions()
        self.assertIs(ctx.exception, error)

    def test_teardown_before_processing_discards_completion(self) -> None:
        self.refresher.request_refresh(_request())
        self.refresher.teardown()

        self.assertIsNone(self.refresher.process_completions())
        self.assertIsNone(self.refresher.result)
        self.assertIs(self.refresher.state, RefreshState.IDLE)
        self.assertEqual(self.results, [])


class ThreadedRefreshTests(unittest.TestCase):
    def setUp(self) -> None:
        self.executor = ThreadPoolExecutor(max_workers=2)
        self.addCleanup(self.executor.shutdown, wait=True)
        self.gate = threading.Event()
        self.addCleanup(self.gate.set)

    def test_superseded_session_never_applies(self) -> None:
        slow = FakeEngine(gate=self.gate)
        refresher = HighlightRefresher(slow, executor=self.executor)

        first = refresher.request_refresh(_request("first"))
        self.assertTrue(slow.started.wait(2.0))
        second = refresher.request_refresh(_request("second"), RefreshTrigger.CODE_CHANGED)

        self.assertTrue(first.cancelled)
        self.assertIs(refresher.current_session, second)
        self.gate.set()

        result = refresher.wait(2.0)

        self.assertTrue(first.wait(2.0))
        refresher.process_completions()
        self.assertIsNotNone(result)
        self.assertEqual(result.text, "second")
        self.assertEqual(refresher.result.text, "second")
        self.assertIs(refresher.state, RefreshState.APPLIED)

    def test_teardown_during_engine_call_keeps_previous_result(self) -> None:
        engine = FakeEngine(gate=self.gate)
        refresher = HighlightRefresher(engine, executor=self.executor)
        self.gate.set()
        refresher.request_refresh(_request("kept"))
        kept = refresher.wait(2.0)
        self.assertIsNotNone(kept)

        self.gate.clear()
        engine.started.clear()
        session = refresher.request_refresh(_request("dropped"), RefreshTrigger.CODE_CHANGED)
        self.assertTrue(engine.started.wait(2.0))
        refresher.teardown()
        self.gate.set()
        self.assertTrue(session.wait(2.0))

        self.assertIsNone(refresher.process_completions())
        self.assertIs(refresher.result, kept)
        self.assertIs(refresher.state, RefreshState.APPLIED)

    def test_wait_without_pending_session_returns_current_result(self) -> None:
        refresher = HighlightRefresher(FakeEngine(), executor=self.executor)
        self.assertIsNone(refresher.wait(0.1))


class TimeoutRefreshTests(unittest.TestCase):
    def test_overdue_session_is_abandoned(self) -> None:
        gate = threading.Event()
        executor = ThreadPoolExecutor(max_workers=1)
        self.addCleanup(executor.shutdown, wait=True)
        self.addCleanup(gate.set)
        clock = [100.0]
        refresher = HighlightRefresher(
            FakeEngine(gate=gate),
            executor=executor,
            timeout_seconds=5.0,
            monotonic=lambda: clock[0],
        )

        session = refresher.request_refresh(_request())
        refresher.process_completions()
        self.assertIs(refresher.state, RefreshState.PENDING)

        clock[0] = 106.0
        with self.assertLogs("codetext.runtime.refresh", level="WARNING"):
            refresher.process_completions()

        self.assertTrue(session.cancelled)
        self.assertIsNone(refresher.current_session)
        self.assertIs(refresher.state, RefreshState.IDLE)

        gate.set()
        self.assertTrue(session.wait(2.0))
        self.assertIsNone(refresher.process_completions())
        self.assertIsNone(refresher.result)


if __name__ == "__main__":
    unittest.main()
