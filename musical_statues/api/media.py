from flask import Blueprint, jsonify, request, current_app
from musical_statues import get_runtime


media = Blueprint('media', __name__)


@media.route('/playback', methods=['GET'])
def get_playback():
    return jsonify(get_runtime().sensor.to_dict())


@media.route('/playback', methods=['POST'])
def report_playback():
    data = request.get_json(silent=True) or {}
    active = data.get('active')
    if not isinstance(active, bool):
        return jsonify({'error': 'active must be a boolean'}), 400
    sensor = get_runtime().sensor
    sensor.report(active)
    current_app.logger.info(f"[playback] active={active} source=http")
    return jsonify(sensor.to_dict())
