import logging
import threading
import time
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Callable, List, Optional

from .errors import InvalidPauseRange, InvalidPlayRange, NoAudioActive, ResumeInWrongPhase
from .intervals import IntervalGenerator
from .timer import RoundTimer


class GameMode(str, Enum):
    STATUES = 'statues'
    CHAIRS = 'chairs'


class Phase(str, Enum):
    IDLE = 'idle'
    PLAYING = 'playing'
    PAUSED = 'paused'
    AWAITING_NEXT_ROUND = 'awaiting_next_round'
    STOPPED = 'stopped'


RUNNING_PHASES = (Phase.PLAYING, Phase.PAUSED, Phase.AWAITING_NEXT_ROUND)


@dataclass(frozen=True)
class GameConfiguration:
    mode: GameMode = GameMode.STATUES
    play_min_seconds: int = 10
    play_max_seconds: int = 40
    pause_min_seconds: int = 3
    pause_max_seconds: int = 8
    haptic_enabled: bool = False

    def validate(self) -> None:
        if self.play_min_seconds > self.play_max_seconds:
            raise InvalidPlayRange('Min play time cannot be greater than max play time!')
        if self.mode == GameMode.STATUES and self.pause_min_seconds > self.pause_max_seconds:
            raise InvalidPauseRange('Min pause time cannot be greater than max pause time!')

    def to_dict(self):
        data = asdict(self)
        data['mode'] = self.mode.value
        return data


def _default_timer_factory(lock):
    return RoundTimer(lock=lock)


class GameScheduler:
    """Alternate play and pause phases for one game at a time.

    - Statues: play -> pause -> play ... until stopped
    - Chairs: every play phase ends at an elimination checkpoint
      (``awaiting_next_round``) and only ``resume_round`` continues

    All transitions and timer callbacks run under one re-entrant lock.
    Every phase bumps a generation counter; a callback carrying an older
    generation is discarded, so nothing fires into a run that was stopped
    or has moved on.
    """

    def __init__(
        self,
        media,
        sensor,
        settings_provider: Callable[[], GameConfiguration],
        intervals: Optional[IntervalGenerator] = None,
        timer_factory: Callable = _default_timer_factory,
        settle_delay_ms: int = 0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.time,
        logger: Optional[logging.Logger] = None,
    ):
        self.media = media
        self.sensor = sensor
        self.settings_provider = settings_provider
        self.intervals = intervals or IntervalGenerator()
        self.timer_factory = timer_factory
        self.settle_delay_ms = settle_delay_ms
        self._sleep = sleep
        self._clock = clock
        self.logger = logger or logging.getLogger(__name__)
        self.lock = threading.RLock()
        self._listeners: List[Callable] = []

        self._phase = Phase.IDLE
        self._timer = None
        self._config: Optional[GameConfiguration] = None
        self._generation = 0
        self._pending_start: Optional[int] = None
        self._round = 0
        self._progress = 0.0
        self._phase_duration_ms: Optional[int] = None
        self._phase_deadline: Optional[float] = None

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def active_timer(self):
        return self._timer

    def subscribe(self, listener: Callable[[str, dict], None]) -> Callable[[], None]:
        """Register ``listener(event, payload)`` for 'state' and 'progress' events."""
        with self.lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self.lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)
        return unsubscribe

    def snapshot(self) -> dict:
        with self.lock:
            return {
                'phase': self._phase.value,
                'starting': self._pending_start is not None,
                'round': self._round,
                'progress': self._progress,
                'phase_duration_ms': self._phase_duration_ms,
                'phase_deadline': self._phase_deadline,
                'config': self._config.to_dict() if self._config else None,
            }

    # ---- operator commands ----

    def start(self) -> dict:
        with self.lock:
            if self._phase != Phase.IDLE or self._pending_start is not None:
                self.logger.info(f"[start-skip] phase={self._phase.value} starting={self._pending_start is not None}")
                return self.snapshot()
            config = self.settings_provider()
            try:
                config.validate()
            except (InvalidPlayRange, InvalidPauseRange) as exc:
                self.logger.info(f"[start-rejected] reason={exc.code}")
                raise
            self._generation += 1
            token = self._generation
            self._pending_start = token
            # Nudge a paused source; this is also the first play phase's signal
            self.media.send_play()
            self._publish('state', self.snapshot())

        if self.settle_delay_ms:
            self._sleep(self.settle_delay_ms / 1000.0)

        with self.lock:
            if self._pending_start != token:
                # A stop (and maybe a newer start) arrived while settling
                self.logger.info("[start-abort] superseded while settling")
                return self.snapshot()
            self._pending_start = None
            if not self.sensor.is_active():
                self.logger.info(f"[start-rejected] reason={NoAudioActive.code}")
                self._publish('state', self.snapshot())
                raise NoAudioActive('No music playing')
            self._config = config
            self._round = 1
            self.logger.info(f"[start] mode={config.mode.value} play={config.play_min_seconds}..{config.play_max_seconds}s")
            self._begin_phase(Phase.PLAYING, self.intervals.draw(config.play_min_seconds, config.play_max_seconds))
            return self.snapshot()

    def resume_round(self) -> dict:
        with self.lock:
            if self._phase != Phase.AWAITING_NEXT_ROUND:
                raise ResumeInWrongPhase(f"Cannot resume a round while {self._phase.value}")
            config = self._config
            self._round += 1
            self.media.send_play()
            self._begin_phase(Phase.PLAYING, self.intervals.draw(config.play_min_seconds, config.play_max_seconds))
            return self.snapshot()

    def primary_action(self) -> dict:
        """Single start/stop button: resume at a checkpoint, stop a live run, otherwise start."""
        with self.lock:
            if self._phase == Phase.AWAITING_NEXT_ROUND:
                return self.resume_round()
            if self._phase in RUNNING_PHASES or self._pending_start is not None:
                return self.stop()
        return self.start()

    def stop(self) -> dict:
        with self.lock:
            if self._pending_start is not None:
                # The settling start sees its token is gone and backs off
                self._pending_start = None
                self._generation += 1
                self.media.send_pause()
                self.logger.info("[stop] cancelled pending start")
                self._publish('state', self.snapshot())
                return self.snapshot()
            if self._phase not in RUNNING_PHASES:
                return self.snapshot()
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._phase = Phase.STOPPED
            self.media.send_pause()
            self._progress = 0.0
            self._phase_duration_ms = None
            self._phase_deadline = None
            self.logger.info(f"[stop] round={self._round}")
            self._publish('state', self.snapshot())
            self._phase = Phase.IDLE
            self._config = None
            self._round = 0
            self._publish('progress', {'progress': 0.0})
            self._publish('state', self.snapshot())
            return self.snapshot()

    # ---- transitions ----

    def _begin_phase(self, phase: Phase, duration_ms: int) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._generation += 1
        generation = self._generation
        self._phase = phase
        self._progress = 0.0
        self._phase_duration_ms = duration_ms
        self._phase_deadline = self._clock() + duration_ms / 1000.0
        self._timer = self.timer_factory(lock=self.lock)
        self.logger.info(f"[timer-set] phase={phase.value} round={self._round} duration={duration_ms}ms deadline={self._phase_deadline}")
        self._publish('state', self.snapshot())
        self._timer.start(
            duration_ms,
            lambda progress: self._on_tick(generation, progress),
            lambda: self._on_phase_elapsed(generation),
        )

    def _on_tick(self, generation: int, progress: float) -> None:
        with self.lock:
            if generation != self._generation:
                return
            self._progress = progress
            self._publish('progress', {'progress': progress})

    def _on_phase_elapsed(self, generation: int) -> None:
        with self.lock:
            if generation != self._generation or self._phase not in (Phase.PLAYING, Phase.PAUSED):
                self.logger.info(f"[timer-abort] generation={generation} current={self._generation} phase={self._phase.value}")
                return
            self.logger.info(f"[timer-fire] phase={self._phase.value} round={self._round}")
            self._timer = None
            config = self._config
            if self._phase == Phase.PAUSED:
                self._round += 1
                self.media.send_play()
                self._begin_phase(Phase.PLAYING, self.intervals.draw(config.play_min_seconds, config.play_max_seconds))
                return

            self.media.send_pause()
            if config.haptic_enabled:
                self.media.pulse_haptic()
            if config.mode == GameMode.CHAIRS:
                self._generation += 1
                self._phase = Phase.AWAITING_NEXT_ROUND
                self._progress = 0.0
                self._phase_duration_ms = None
                self._phase_deadline = None
                self._publish('progress', {'progress': 0.0})
                self._publish('state', self.snapshot())
                return
            self._begin_phase(Phase.PAUSED, self.intervals.draw(config.pause_min_seconds, config.pause_max_seconds))

    def _publish(self, event: str, payload: dict) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, payload)
            except Exception as exc:
                self.logger.warning(f"[listener-error] event={event} error={exc}")
