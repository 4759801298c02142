"""Rejection of a command that failed validation."""

INVALID_NAME = "invalid_name"
INVALID_LEVEL = "invalid_level"
INVALID_STATUS = "invalid_status"
UNKNOWN_PLAYER = "unknown_player"
PLAYER_PLAYING = "player_playing"
INVALID_TEAM = "invalid_team"
NO_COURT_AVAILABLE = "no_court_available"
UNKNOWN_COURT = "unknown_court"
COURT_OCCUPIED = "court_occupied"
INVALID_COURT_COUNT = "invalid_court_count"
NOT_CONFIRMED = "not_confirmed"
EMPTY = "empty"
UNKNOWN_COMMAND = "unknown_command"
INVALID_ARGUMENTS = "invalid_arguments"


class CommandRejected(ValueError):
    """Raised before any state is touched; the session stays as it was."""

    def __init__(self, reason: str, detail: str = ""):
        super().__init__(detail or reason)
        self.reason = reason
        self.detail = detail
