from __future__ import annotations

import logging
from concurrent.futures import Executor
from typing import Any, Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class DeadLetterSink(Protocol):
    def record(self, *, description: str, error: str) -> None:
        raise NotImplementedError


class SideEffectDispatcher:
    """Runs fire-and-forget side effects (notifications, audit) after the primary write.

    Failures never reach the caller: they are logged and written to the
    dead-letter sink. With an executor the work runs in the background,
    otherwise inline.
    """

    def __init__(self, dead_letters: Optional[DeadLetterSink] = None, *, executor: Optional[Executor] = None):
        self._dead_letters = dead_letters
        self._executor = executor

    def submit(self, description: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        if self._executor is None:
            self._run(description, fn, args, kwargs)
            return
        try:
            self._executor.submit(self._run, description, fn, args, kwargs)
        except RuntimeError as exc:
            # Executor already shut down.
            logger.error("Could not schedule side effect %s: %s", description, exc)
            self._dead_letter(description, exc)

    def shutdown(self, *, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)

    def _run(self, description: str, fn: Callable[..., Any], args: tuple, kwargs: dict) -> None:
        try:
            fn(*args, **kwargs)
        except Exception as exc:
            logger.exception("Side effect failed: %s", description)
            self._dead_letter(description, exc)

    def _dead_letter(self, description: str, exc: BaseException) -> None:
        if self._dead_letters is None:
            return
        try:
            self._dead_letters.record(description=description, error=f"{type(exc).__name__}: {exc}")
        except Exception:
            logger.exception("Failed to write dead letter for %s", description)
