from flask import Blueprint, jsonify, request, current_app
from musical_statues import db, socketio, get_runtime
from musical_statues.models import GameSettings, SLIDER_FIELDS
from musical_statues.services.games.scheduler import GameMode


settings = Blueprint('settings', __name__)


@settings.route('', methods=['GET'])
def get_settings():
    return jsonify(GameSettings.load().to_dict())


@settings.route('', methods=['PUT', 'PATCH'])
def update_settings():
    """Partially update the stored settings.

    Values are checked individually; min/max ordering is only enforced when a
    game starts, so sliders can be dragged past each other in between.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'JSON object body is required'}), 400

    max_seconds = int(current_app.config.get('MAX_SLIDER_SECONDS', 120))
    changes = {}
    for field in SLIDER_FIELDS:
        if field not in data:
            continue
        value = data[field]
        if isinstance(value, bool) or not isinstance(value, int):
            return jsonify({'error': f'{field} must be an integer'}), 400
        if not 0 <= value <= max_seconds:
            return jsonify({'error': f'{field} must be between 0 and {max_seconds}'}), 400
        changes[field] = value

    if 'mode' in data:
        try:
            changes['mode'] = GameMode(data['mode']).value
        except ValueError:
            return jsonify({'error': 'mode must be one of: ' + ', '.join(m.value for m in GameMode)}), 400

    if 'haptic_enabled' in data:
        if not isinstance(data['haptic_enabled'], bool):
            return jsonify({'error': 'haptic_enabled must be a boolean'}), 400
        changes['haptic_enabled'] = data['haptic_enabled']

    current = GameSettings.load()
    for field, value in changes.items():
        setattr(current, field, value)
    db.session.add(current)
    db.session.commit()
    payload = current.to_dict()
    current_app.logger.info(f"[settings] updated fields={sorted(changes)}")
    socketio.emit('settings_update', payload, namespace='/ws')
    # A running game keeps the snapshot it started with
    payload['applies_next_run'] = get_runtime().scheduler.phase.value != 'idle'
    return jsonify(payload)
