from flask import Blueprint, jsonify
from musical_statues import get_runtime

main = Blueprint('main', __name__)

@main.route('/')
def index():
    runtime = get_runtime()
    return jsonify({
        'message': 'Welcome to the musical statues game server!',
        'phase': runtime.scheduler.phase.value,
        'audio_active': runtime.sensor.is_active(),
    })
