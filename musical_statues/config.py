import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///musical_statues.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Progress tick cadence for the round timer (ms). 16ms is roughly 60Hz.
    TIMER_INTERVAL_MS = int(os.environ.get('TIMER_INTERVAL_MS', '16'))
    # Wait after the start nudge before asking whether audio is flowing (ms)
    START_SETTLE_DELAY_MS = int(os.environ.get('START_SETTLE_DELAY_MS', '500'))
    # Vibration length sent with haptic pulses (ms)
    HAPTIC_PULSE_MS = int(os.environ.get('HAPTIC_PULSE_MS', '100'))
    # Upper bound accepted for any play/pause slider value (sec)
    MAX_SLIDER_SECONDS = int(os.environ.get('MAX_SLIDER_SECONDS', '120'))
    # Stop the game this long after the last media agent disconnects (sec)
    MEDIA_AGENT_GRACE_SEC = float(os.environ.get('MEDIA_AGENT_GRACE_SEC', '2.0'))
    # Optional: debounce controller actions, the primary button included (ms). 0 disables.
    CONTROLLER_DEBOUNCE_MS = int(os.environ.get('CONTROLLER_DEBOUNCE_MS', '0'))
    # Optional: heartbeat interval for timer logs (sec). 0 disables.
    TIMER_HEARTBEAT_SEC = int(os.environ.get('TIMER_HEARTBEAT_SEC', '0'))
