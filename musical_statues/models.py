from datetime import datetime, timezone

from musical_statues import db
from musical_statues.services.games.scheduler import GameConfiguration, GameMode

SETTINGS_ROW_ID = 1


def _utcnow():
    return datetime.now(timezone.utc)


# Slider fields and the defaults a fresh install starts with
SETTINGS_DEFAULTS = {
    'play_min_seconds': 10,
    'play_max_seconds': 40,
    'pause_min_seconds': 3,
    'pause_max_seconds': 8,
    'mode': GameMode.STATUES.value,
    'haptic_enabled': False,
}

SLIDER_FIELDS = ('play_min_seconds', 'play_max_seconds', 'pause_min_seconds', 'pause_max_seconds')


class GameSettings(db.Model):
    __tablename__ = 'game_settings'
    id = db.Column(db.Integer, primary_key=True)
    play_min_seconds = db.Column(db.Integer, nullable=False, default=SETTINGS_DEFAULTS['play_min_seconds'])
    play_max_seconds = db.Column(db.Integer, nullable=False, default=SETTINGS_DEFAULTS['play_max_seconds'])
    pause_min_seconds = db.Column(db.Integer, nullable=False, default=SETTINGS_DEFAULTS['pause_min_seconds'])
    pause_max_seconds = db.Column(db.Integer, nullable=False, default=SETTINGS_DEFAULTS['pause_max_seconds'])
    mode = db.Column(db.String(16), nullable=False, default=SETTINGS_DEFAULTS['mode'])  # statues, chairs
    haptic_enabled = db.Column(db.Boolean, nullable=False, default=SETTINGS_DEFAULTS['haptic_enabled'])
    updated_at = db.Column(db.DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    @classmethod
    def load(cls) -> 'GameSettings':
        """Return the single settings row, creating it with defaults on first use."""
        settings = db.session.get(cls, SETTINGS_ROW_ID)
        if settings is None:
            settings = cls(id=SETTINGS_ROW_ID, **SETTINGS_DEFAULTS)
            db.session.add(settings)
            db.session.commit()
        return settings

    def reset(self) -> None:
        for key, value in SETTINGS_DEFAULTS.items():
            setattr(self, key, value)

    def to_configuration(self) -> GameConfiguration:
        return GameConfiguration(
            mode=GameMode(self.mode),
            play_min_seconds=self.play_min_seconds,
            play_max_seconds=self.play_max_seconds,
            pause_min_seconds=self.pause_min_seconds,
            pause_max_seconds=self.pause_max_seconds,
            haptic_enabled=bool(self.haptic_enabled),
        )

    def to_dict(self):
        return {
            'play_min_seconds': self.play_min_seconds,
            'play_max_seconds': self.play_max_seconds,
            'pause_min_seconds': self.pause_min_seconds,
            'pause_max_seconds': self.pause_max_seconds,
            'mode': self.mode,
            'haptic_enabled': bool(self.haptic_enabled),
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
