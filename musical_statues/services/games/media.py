import logging
import queue
import threading
import time
from typing import Optional

MEDIA_AGENT_ROOM = 'media_agents'


class MediaController:
    """Fire-and-forget commands for the external audio transport.

    Nothing acknowledges delivery, so implementations never return a value
    and never retry.
    """

    def send_play(self) -> None:
        raise NotImplementedError

    def send_pause(self) -> None:
        raise NotImplementedError

    def pulse_haptic(self) -> None:
        raise NotImplementedError


class SocketIOMediaController(MediaController):
    """Relay media commands to connected media agents over Socket.IO."""

    def __init__(self, socketio, room: str = MEDIA_AGENT_ROOM, namespace: str = '/ws',
                 haptic_ms: int = 100, logger: Optional[logging.Logger] = None):
        self.socketio = socketio
        self.room = room
        self.namespace = namespace
        self.haptic_ms = haptic_ms
        self.logger = logger or logging.getLogger(__name__)

    def _emit(self, payload) -> None:
        try:
            self.socketio.emit('media_control', payload, to=self.room, namespace=self.namespace)
        except Exception as exc:
            self.logger.warning(f"[media-drop] action={payload.get('action')} error={exc}")
            return
        self.logger.info(f"[media] action={payload.get('action')}")

    def send_play(self) -> None:
        self._emit({'action': 'play'})

    def send_pause(self) -> None:
        self._emit({'action': 'pause'})

    def pulse_haptic(self) -> None:
        self._emit({'action': 'haptic', 'duration_ms': self.haptic_ms})


class EventRelay:
    """Forward scheduler events to Socket.IO clients from a background task.

    Scheduler listeners run under the scheduler lock, so they only enqueue;
    a single drain task emits in order, off the lock.
    """

    def __init__(self, socketio, namespace: str = '/ws', logger: Optional[logging.Logger] = None):
        self.socketio = socketio
        self.namespace = namespace
        self.logger = logger or logging.getLogger(__name__)
        self._queue: queue.Queue = queue.Queue()
        self._task = None

    def __call__(self, event: str, payload: dict) -> None:
        if self._task is None:
            self._task = self.socketio.start_background_task(self._drain)
        self._queue.put((event, payload))

    def _drain(self) -> None:
        while True:
            event, payload = self._queue.get()
            name = 'state_update' if event == 'state' else event
            try:
                self.socketio.emit(name, payload, namespace=self.namespace)
            except Exception as exc:
                self.logger.warning(f"[relay-drop] event={name} error={exc}")


class PlaybackActivitySensor:
    """Last known answer to "is audio output currently active".

    Media agents push reports; the scheduler only reads.
    """

    def __init__(self, active: bool = False):
        self._lock = threading.Lock()
        self._active = bool(active)
        self._updated_at: Optional[float] = None

    def report(self, active: bool) -> None:
        with self._lock:
            self._active = bool(active)
            self._updated_at = time.time()

    def is_active(self) -> bool:
        with self._lock:
            return self._active

    def to_dict(self):
        with self._lock:
            return {'active': self._active, 'updated_at': self._updated_at}
