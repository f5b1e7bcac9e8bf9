import logging
import threading
import time
from typing import Callable, Optional


def _spawn_thread(target, *args):
    worker = threading.Thread(target=target, args=args, daemon=True)
    worker.start()
    return worker


class RoundTimer:
    """Countdown for a single play or pause phase.

    Progress is reported as ``elapsed / duration`` clamped to [0, 1] at a
    fixed cadence, strictly increasing and ending at exactly 1.0, followed by
    a single ``on_complete``. Callbacks run while holding ``lock``;
    ``cancel()`` takes the same lock, so once it returns no further callback
    can fire. Pass the scheduler's lock to serialize ticks with its
    transitions.
    """

    def __init__(
        self,
        interval_ms: int = 16,
        lock=None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        spawn: Callable = _spawn_thread,
        logger: Optional[logging.Logger] = None,
        heartbeat_sec: int = 0,
    ):
        self.interval_ms = max(1, int(interval_ms))
        self._lock = lock if lock is not None else threading.RLock()
        self._clock = clock
        self._sleep = sleep
        self._spawn = spawn
        self._logger = logger or logging.getLogger(__name__)
        self._heartbeat_sec = heartbeat_sec
        self.duration_ms: Optional[int] = None
        self.started_at: Optional[float] = None
        self.cancelled = False
        self.finished = False
        self._last_progress = -1.0
        self._on_tick = None
        self._on_complete = None

    @property
    def elapsed_ms(self) -> float:
        if self.started_at is None:
            return 0.0
        return (self._clock() - self.started_at) * 1000.0

    @property
    def remaining_ms(self) -> float:
        if self.duration_ms is None:
            return 0.0
        return max(0.0, self.duration_ms - self.elapsed_ms)

    @property
    def progress(self) -> float:
        if self.duration_ms is None:
            return 0.0
        if self.duration_ms <= 0:
            return 1.0
        return min(1.0, max(0.0, self.elapsed_ms / self.duration_ms))

    def start(self, duration_ms: int, on_tick: Callable[[float], None], on_complete: Callable[[], None]) -> 'RoundTimer':
        with self._lock:
            if self.started_at is not None:
                raise RuntimeError('RoundTimer can only be started once')
            self.duration_ms = max(0, int(duration_ms))
            self._on_tick = on_tick
            self._on_complete = on_complete
            self.started_at = self._clock()
        self._spawn(self._run)
        return self

    def cancel(self) -> None:
        with self._lock:
            self.cancelled = True

    def _run(self) -> None:
        next_heartbeat = self._heartbeat_sec
        while True:
            with self._lock:
                if self.cancelled:
                    return
                progress = self.progress
                if progress > self._last_progress:
                    self._last_progress = progress
                    self._on_tick(progress)
                    if self.cancelled:
                        return
                if progress >= 1.0:
                    self.finished = True
                    self._on_complete()
                    return
                remaining = self.remaining_ms
            if next_heartbeat and self.elapsed_ms >= next_heartbeat * 1000:
                self._logger.info(f"[timer-heartbeat] duration={self.duration_ms}ms remaining={remaining / 1000.0:.1f}s")
                next_heartbeat += self._heartbeat_sec
            self._sleep(min(self.interval_ms, max(remaining, 1.0)) / 1000.0)
