from flask import Blueprint, jsonify, current_app
from musical_statues import get_runtime
from musical_statues.services.games.errors import GameError
import time


game = Blueprint('game', __name__)

_last_controller_action: dict[str, float] = {}


def _debounced(action: str) -> bool:
    """Swallow repeated taps of the primary button within CONTROLLER_DEBOUNCE_MS."""
    try:
        debounce_ms = int(current_app.config.get('CONTROLLER_DEBOUNCE_MS', 0))
    except Exception:
        debounce_ms = 0
    if debounce_ms <= 0:
        return False
    now = time.time() * 1000.0
    last = _last_controller_action.get(action, 0)
    if now - last < debounce_ms:
        return True
    _last_controller_action[action] = now
    return False


def _error_response(exc: GameError):
    return jsonify(exc.to_dict()), exc.status


@game.route('/state', methods=['GET'])
def get_state():
    runtime = get_runtime()
    payload = runtime.scheduler.snapshot()
    payload['audio_active'] = runtime.sensor.is_active()
    return jsonify(payload)


@game.route('/start', methods=['POST'])
def start_game():
    if _debounced('start'):
        return jsonify({'message': 'debounced'}), 202
    try:
        state = get_runtime().scheduler.start()
    except GameError as exc:
        return _error_response(exc)
    return jsonify(state)


@game.route('/stop', methods=['POST'])
def stop_game():
    if _debounced('stop'):
        return jsonify({'message': 'debounced'}), 202
    return jsonify(get_runtime().scheduler.stop())


@game.route('/resume', methods=['POST'])
def resume_round():
    if _debounced('resume'):
        return jsonify({'message': 'debounced'}), 202
    try:
        state = get_runtime().scheduler.resume_round()
    except GameError as exc:
        return _error_response(exc)
    return jsonify(state)


@game.route('/primary', methods=['POST'])
def primary_action():
    """The single start/stop button: start, stop, or resume at a chairs checkpoint."""
    if _debounced('primary'):
        return jsonify({'message': 'debounced'}), 202
    try:
        state = get_runtime().scheduler.primary_action()
    except GameError as exc:
        return _error_response(exc)
    return jsonify(state)
