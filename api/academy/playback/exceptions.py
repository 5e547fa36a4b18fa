"""Playback errors."""


class PlaybackError(Exception):
    """Base playback error."""

    def __init__(self, message: str, code: str = "playback_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class PlaybackLoadError(PlaybackError):
    """Media source could not be loaded. Fatal for the session."""

    def __init__(self, message: str = "Failed to load video"):
        super().__init__(message, "playback_load_failed")


class InvalidPlaybackSettingError(PlaybackError):
    """Unsupported playback rate or unknown quality level."""

    def __init__(self, message: str = "Invalid playback setting"):
        super().__init__(message, "invalid_playback_setting")


class PlayerNotReadyError(PlaybackError):
    """Transport command issued before load or after close."""

    def __init__(self, message: str = "Video is not loaded"):
        super().__init__(message, "player_not_ready")
