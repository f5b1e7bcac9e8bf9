class GameError(Exception):
    """Recoverable rejection of an operator command."""

    code = 'game_error'
    status = 400

    def to_dict(self):
        return {'error': str(self), 'code': self.code}


class NoAudioActive(GameError):
    code = 'no_audio_active'
    status = 409


class InvalidPlayRange(GameError):
    code = 'invalid_play_range'


class InvalidPauseRange(GameError):
    code = 'invalid_pause_range'


class ResumeInWrongPhase(GameError):
    code = 'resume_in_wrong_phase'
    status = 409
