"""Cancellation-safe highlight refresh for one view instance.

Each refresh is a ``RefreshSession``. Starting a session cancels the previous
one; the engine call runs on a worker pool and posts its completion to a queue.
The owning thread drains that queue with ``process_completions`` and applies a
completion only if its session is still current and not cancelled, so a
superseded or torn-down request can never overwrite newer state.
"""

from __future__ import annotations

import enum
import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, field
from queue import Empty, Queue

from ..engine import EngineOutcome, HighlightEngine, PygmentsEngine
from ..errors import CodeTextError, HighlightEngineError
from ..highlight import HighlightRequest, run_engine, synthesize_request
from ..results import HighlightResult

logger = logging.getLogger(__name__)

_EXECUTOR_LOCK = threading.Lock()
_SHARED_EXECUTOR: ThreadPoolExecutor | None = None
SHARED_POOL_WORKERS = 4


class RefreshState(enum.Enum):
    IDLE = "idle"
    PENDING = "pending"
    APPLIED = "applied"


class RefreshTrigger(enum.Enum):
    """Why a refresh was requested."""

    APPEAR = "appear"
    CODE_CHANGED = "code-changed"
    MODE_CHANGED = "mode-changed"
    COLORS_CHANGED = "colors-changed"
    COLOR_SCHEME_CHANGED = "color-scheme-changed"
    RESUMED = "resumed"


@dataclass(eq=False)
class RefreshSession:
    """Lifecycle token for one refresh attempt."""

    session_id: int
    request: HighlightRequest
    trigger: RefreshTrigger
    started_at: float
    _cancelled: threading.Event = field(default_factory=threading.Event, repr=False)
    _done: threading.Event = field(default_factory=threading.Event, repr=False)

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the engine call finished (applied or not)."""
        return self._done.wait(timeout)


@dataclass(frozen=True)
class RefreshCompletion:
    """Engine completion posted by a worker for the owner to apply or discard."""

    session: RefreshSession
    outcome: EngineOutcome | None = None
    error: BaseException | None = None


def shared_executor() -> ThreadPoolExecutor:
    """Return the process-wide worker pool used when no executor is injected."""
    global _SHARED_EXECUTOR
    with _EXECUTOR_LOCK:
        if _SHARED_EXECUTOR is None:
            _SHARED_EXECUTOR = ThreadPoolExecutor(
                max_workers=SHARED_POOL_WORKERS,
                thread_name_prefix="codetext-highlight",
            )
        return _SHARED_EXECUTOR


class HighlightRefresher:
    """Own the highlight state machine (idle / pending / applied) for one view.

    All methods except the worker body must be called from the owning
    (coordination) thread.
    """

    def __init__(
        self,
        engine: HighlightEngine | None = None,
        *,
        executor: Executor | None = None,
        on_result: Callable[[HighlightResult], None] | None = None,
        timeout_seconds: float | None = None,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._engine: HighlightEngine = engine if engine is not None else PygmentsEngine()
        self._executor = executor
        self._on_result = on_result
        self._timeout_seconds = timeout_seconds
        self._monotonic = monotonic
        self._completions: Queue[RefreshCompletion] = Queue()
        self._next_session_id = 1
        self._session: RefreshSession | None = None
        self._result: HighlightResult | None = None
        self._applied_request: HighlightRequest | None = None
        self._state = RefreshState.IDLE

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def result(self) -> HighlightResult | None:
        return self._result

    @property
    def applied_request(self) -> HighlightRequest | None:
        return self._applied_request

    @property
    def current_session(self) -> RefreshSession | None:
        return self._session

    def _should_skip(self, request: HighlightRequest, trigger: RefreshTrigger) -> bool:
        pending_request = self._session.request if self._session is not None else None
        if trigger is RefreshTrigger.RESUMED:
            return False
        # Re-appearing is a no-op only when nothing changed while hidden.
        latest = pending_request if pending_request is not None else self._applied_request
        return latest == request

    def request_refresh(
        self,
        request: HighlightRequest,
        trigger: RefreshTrigger = RefreshTrigger.APPEAR,
    ) -> RefreshSession | None:
        """Start a new session for ``request`` unless nothing relevant changed.

        Returns the new session, or ``None`` when the trigger was a no-op. Any
        previously pending session is cancelled and its completion discarded.
        """
        if self._should_skip(request, trigger):
            logger.debug("skipping %s refresh: request unchanged", trigger.value)
            return None

        self._cancel_pending()
        session = RefreshSession(
            session_id=self._next_session_id,
            request=request,
            trigger=trigger,
            started_at=self._monotonic(),
        )
        self._next_session_id += 1
        self._session = session
        self._state = RefreshState.PENDING
        logger.debug("starting highlight session %d (%s)", session.session_id, trigger.value)

        executor = self._executor if self._executor is not None else shared_executor()
        executor.submit(self._worker, session)
        return session

    def _worker(self, session: RefreshSession) -> None:
        completion = RefreshCompletion(session=session)
        try:
            # Work that has not started yet is skipped; running engine calls are never interrupted.
            if not session.cancelled:
                completion = RefreshCompletion(session=session, outcome=run_engine(self._engine, session.request))
        except Exception as exc:
            completion = RefreshCompletion(session=session, error=exc)
        finally:
            self._completions.put(completion)
            session._done.set()

    def _cancel_pending(self) -> None:
        session = self._session
        if session is None:
            return
        session.cancel()
        self._session = None
        self._state = RefreshState.APPLIED if self._result is not None else RefreshState.IDLE
        logger.debug("cancelled highlight session %d", session.session_id)

    def teardown(self) -> None:
        """Cancel any pending session; an already applied result is kept."""
        self._cancel_pending()

    def _expire_overdue(self) -> None:
        session = self._session
        if session is None or self._timeout_seconds is None:
            return
        elapsed = self._monotonic() - session.started_at
        if elapsed < self._timeout_seconds:
            return
        logger.warning(
            "abandoning highlight session %d after %.1fs without engine completion",
            session.session_id,
            elapsed,
        )
        self._cancel_pending()

    def process_completions(self) -> HighlightResult | None:
        """Apply the current session's completion if it has arrived.

        Stale and cancelled completions are discarded. Returns the newly
        applied result, or ``None`` when nothing was applied. Engine failures
        of the current session are raised as ``HighlightEngineError``.
        """
        applied: HighlightResult | None = None
        while True:
            try:
                completion = self._completions.get_nowait()
            except Empty:
                break

            session = completion.session
            if session is not self._session:
                logger.debug("discarding completion of stale session %d", session.session_id)
                continue

            self._session = None
            self._state = RefreshState.APPLIED if self._result is not None else RefreshState.IDLE
            if session.cancelled:
                logger.debug("discarding completion of cancelled session %d", session.session_id)
                continue
            if completion.error is not None:
                error = completion.error
                if isinstance(error, CodeTextError):
                    raise error
                raise HighlightEngineError(f"highlight engine failed: {error}") from error

            assert completion.outcome is not None
            result = synthesize_request(completion.outcome, session.request)
            self._result = result
            self._applied_request = session.request
            self._state = RefreshState.APPLIED
            applied = result
            logger.debug(
                "applied session %d: %s (relevance %d)",
                session.session_id,
                result.language_id,
                result.relevance,
            )
            if self._on_result is not None:
                self._on_result(result)

        self._expire_overdue()
        return applied

    def wait(self, timeout: float | None = None) -> HighlightResult | None:
        """Block until the current session completes, then apply it.

        Returns the current result (which may be an older one when the wait
        timed out or nothing was pending).
        """
        session = self._session
        if session is not None:
            session.wait(timeout)
        self.process_completions()
        return self._result


__all__ = [
    "HighlightRefresher",
    "RefreshCompletion",
    "RefreshSession",
    "RefreshState",
    "RefreshTrigger",
    "shared_executor",
]
