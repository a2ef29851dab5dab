"""
Elapsed-time tracking for quiz sessions.

Provides:
- Timer: monotonic elapsed-time clock with reset and capture-and-reset
- QuizTimers: the cumulative + per-question pair used by one quiz attempt

Each timer can run a background refresh thread that publishes the elapsed
value for live display. The thread is always stopped by ``stop()`` or by
leaving the ``with`` block.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from ..config import config

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class Timer:
    """
    Thread-safe elapsed-time clock.

    Starts on creation. ``elapsed_ms()`` is an exact on-demand read;
    ``display_ms`` is the last value published by the refresh thread.

    Usage:
        with Timer(on_tick=render) as timer:
            ...
            duration = timer.capture_and_reset()
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        refresh_ms: Optional[int] = None,
        on_tick: Optional[Callable[[int], None]] = None,
    ):
        """
        Initialize timer.

        Args:
            clock: Millisecond clock (default: time.monotonic based)
            refresh_ms: Display refresh interval (default: config.quiz.timer_refresh_ms)
            on_tick: Callback receiving the elapsed milliseconds on every refresh
        """
        self._clock = clock or _monotonic_ms
        self.refresh_ms = refresh_ms or config.quiz.timer_refresh_ms
        self.on_tick = on_tick

        self._lock = threading.Lock()
        self._start = self._clock()
        self.display_ms = 0

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def _read(self) -> int:
        # Never report negative time if the injected clock misbehaves
        return max(0, int(self._clock() - self._start))

    def elapsed_ms(self) -> int:
        """Milliseconds since creation or the last reset."""
        with self._lock:
            return self._read()

    def reset(self):
        """Re-base the reference timestamp to now."""
        with self._lock:
            self._start = self._clock()
            self.display_ms = 0

    def capture_and_reset(self) -> int:
        """Return the elapsed milliseconds as of this call, then reset (atomic)."""
        with self._lock:
            captured = self._read()
            self._start = self._clock()
            self.display_ms = 0
        return captured

    # Live display ---------------------------------------------------------

    def _publish(self) -> int:
        with self._lock:
            self.display_ms = self._read()
            return self.display_ms

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> "Timer":
        """Start the display refresh thread (idempotent)."""
        if self.running:
            return self
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._refresh_loop, name="telstudy-timer", daemon=True)
        self._thread.start()
        return self

    def stop(self):
        """Stop the display refresh thread and wait for it to exit."""
        self._stop_event.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def _refresh_loop(self):
        interval = self.refresh_ms / 1000.0
        while not self._stop_event.wait(interval):
            value = self._publish()
            if self.on_tick is not None:
                try:
                    self.on_tick(value)
                except Exception:
                    logger.exception("Timer tick callback failed; stopping refresh")
                    return

    def __enter__(self) -> "Timer":
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False


class QuizTimers:
    """
    Cumulative and per-question timers of one quiz attempt.

    The cumulative timer is never reset during the session; the per-question
    timer is reset whenever a question's time is captured or a new question starts.
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        refresh_ms: Optional[int] = None,
        on_tick: Optional[Callable[[int, int], None]] = None,
    ):
        self._on_tick = on_tick
        self.cumulative = Timer(clock=clock, refresh_ms=refresh_ms)
        self.per_question = Timer(
            clock=clock,
            refresh_ms=refresh_ms,
            on_tick=self._tick if on_tick else None,
        )

    def _tick(self, per_question_ms: int):
        self._on_tick(self.cumulative.elapsed_ms(), per_question_ms)

    @property
    def cumulative_ms(self) -> int:
        return self.cumulative.elapsed_ms()

    @property
    def per_question_ms(self) -> int:
        return self.per_question.elapsed_ms()

    def capture_question_time(self) -> int:
        """Snapshot the current question's duration and restart the per-question timer."""
        return self.per_question.capture_and_reset()

    def start_question(self):
        self.per_question.reset()

    def start(self) -> "QuizTimers":
        self.cumulative.start()
        self.per_question.start()
        return self

    def stop(self):
        self.per_question.stop()
        self.cumulative.stop()

    def __enter__(self) -> "QuizTimers":
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False
