"""Runtime pieces: refresh orchestration and persisted settings."""

from __future__ import annotations

from .refresh import (
    HighlightRefresher,
    RefreshCompletion,
    RefreshSession,
    RefreshState,
    RefreshTrigger,
    shared_executor,
)

__all__ = [
    "HighlightRefresher",
    "RefreshCompletion",
    "RefreshSession",
    "RefreshState",
    "RefreshTrigger",
    "shared_executor",
]
