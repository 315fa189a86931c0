"""Cooperative cancellation for long Monte-Carlo runs."""

from __future__ import annotations

import threading

from .exceptions import EstimationCancelledError


class CancellationToken:
    """Thread-safe flag polled between trial blocks and exceedance rows."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, stage: str) -> None:
        if self._event.is_set():
            raise EstimationCancelledError(f"Estimation cancelled during {stage}", {"stage": stage})


def check_cancelled(token: CancellationToken | None, stage: str) -> None:
    """No-op when no token was supplied."""
    if token is not None:
        token.raise_if_cancelled(stage)
