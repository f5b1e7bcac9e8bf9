from flask_socketio import join_room, leave_room, emit
from musical_statues import socketio, get_runtime
from musical_statues.services.games.errors import GameError
from musical_statues.services.games.media import MEDIA_AGENT_ROOM
from flask import current_app, request
from typing import Dict, Any
import time


def handle_connect(auth=None):
    emit('connected', {'message': 'Connected to /ws'})
    emit('state_update', get_runtime().scheduler.snapshot())


def handle_disconnect(reason=None):
    # Losing the last media agent means nothing can play or pause the music
    ctx = _sid_to_ctx.pop(_get_sid(), None)
    if not ctx or not ctx.get('is_media_agent'):
        return
    app = current_app._get_current_object()
    # In tests, stop immediately for determinism; in prod, allow grace period
    immediate = app.config.get('TESTING') and not app.config.get('ENABLE_AGENT_GRACE_IN_TESTS')
    _agent_left(app, immediate=bool(immediate))


def handle_register_media_agent(data):
    join_room(MEDIA_AGENT_ROOM)
    ctx = _sid_to_ctx.setdefault(_get_sid(), {})
    if not ctx.get('is_media_agent'):
        ctx['is_media_agent'] = True
        _agent_state['count'] += 1
    _agent_state['deadline'] = None
    if isinstance((data or {}).get('active'), bool):
        get_runtime().sensor.report(data['active'])
    emit('registered', {'room': MEDIA_AGENT_ROOM})


def handle_unregister_media_agent(data=None):
    leave_room(MEDIA_AGENT_ROOM)
    ctx = _sid_to_ctx.get(_get_sid())
    emit('unregistered', {'room': MEDIA_AGENT_ROOM})
    if ctx and ctx.pop('is_media_agent', False):
        # Explicit sign-off: no reconnect is coming, stop right away
        _agent_left(current_app._get_current_object(), immediate=True)


def handle_playback_state(data):
    active = (data or {}).get('active')
    if not isinstance(active, bool):
        emit('error', {'message': 'active must be a boolean'})
        return
    get_runtime().sensor.report(active)
    current_app.logger.info(f"[playback] active={active} source=socket")


def _run_command(command: str) -> None:
    scheduler = get_runtime().scheduler
    try:
        if command == 'start':
            scheduler.start()
        elif command == 'stop':
            scheduler.stop()
        elif command == 'primary':
            scheduler.primary_action()
        else:
            scheduler.resume_round()
    except GameError as exc:
        emit('error', {'message': str(exc), 'code': exc.code})
        return
    # Re-sync the caller even when the command changed nothing
    emit('state_update', scheduler.snapshot())


def handle_start(data=None):
    _run_command('start')


def handle_stop(data=None):
    _run_command('stop')


def handle_resume_round(data=None):
    _run_command('resume_round')


def handle_primary(data=None):
    _run_command('primary')


def handle_ping(data):
    emit('pong', data or {})

# ---- Media agent presence helpers ----

_sid_to_ctx: Dict[str, Dict[str, Any]] = {}
_agent_state: Dict[str, Any] = {'count': 0, 'deadline': None}

def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore

def _agent_left(app, immediate: bool) -> None:
    _agent_state['count'] = max(0, _agent_state['count'] - 1)
    if _agent_state['count'] > 0:
        return
    get_runtime(app).sensor.report(False)
    if immediate:
        _stop_for_missing_agent(app)
        return
    _schedule_stop_if_no_agent(app, float(app.config.get('MEDIA_AGENT_GRACE_SEC', 2.0)))

def _stop_for_missing_agent(app) -> None:
    app.logger.info("[agent-lost] no media agent connected, stopping game")
    get_runtime(app).scheduler.stop()
    _agent_state['deadline'] = None

def _schedule_stop_if_no_agent(app, delay_sec: float) -> None:
    deadline = time.time() + delay_sec
    _agent_state['deadline'] = deadline

    def _runner(expected: float):
        sleep_for = max(0.0, expected - time.time())
        if sleep_for:
            socketio.sleep(sleep_for)
        if _agent_state['count'] == 0 and _agent_state['deadline'] == expected:
            _stop_for_missing_agent(app)

    socketio.start_background_task(_runner, deadline)


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    _sid_to_ctx.clear()
    _agent_state.update(count=0, deadline=None)
    handlers = {
        'connect': handle_connect,
        'disconnect': handle_disconnect,
        'register_media_agent': handle_register_media_agent,
        'unregister_media_agent': handle_unregister_media_agent,
        'playback_state': handle_playback_state,
        'start': handle_start,
        'stop': handle_stop,
        'resume_round': handle_resume_round,
        'primary': handle_primary,
        'ping': handle_ping,
    }
    for name, handler in handlers.items():
        socketio.on_event(name, handler, namespace='/ws')
        if testing:
            # Test-only mirror on default namespace
            socketio.on_event(name, handler, namespace='/')
