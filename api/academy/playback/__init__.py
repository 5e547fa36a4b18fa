"""Video playback: strategy selection, quality levels and the playback controller."""

from .controller import PlaybackController, PlaybackState
from .exceptions import PlaybackError, PlaybackLoadError
from .manifest import QualityLevel, fetch_quality_levels, parse_master_playlist
from .media import HeadlessMediaElement, MediaElement
from .sources import PlaybackCapabilities, PlaybackStrategy, select_playback_strategy
from .timer import RepeatingTimer


__all__ = [
    "HeadlessMediaElement",
    "MediaElement",
    "PlaybackCapabilities",
    "PlaybackController",
    "PlaybackError",
    "PlaybackLoadError",
    "PlaybackState",
    "PlaybackStrategy",
    "QualityLevel",
    "RepeatingTimer",
    "fetch_quality_levels",
    "parse_master_playlist",
    "select_playback_strategy",
]
