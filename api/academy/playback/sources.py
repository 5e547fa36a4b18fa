"""Playback strategy selection for a media URL."""

from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlparse

from academy.config.settings import Settings

from .exceptions import PlaybackLoadError


MANIFEST_EXTENSION = ".m3u8"


class PlaybackStrategy(str, Enum):
    """How a media URL is played."""

    ADAPTIVE = "adaptive"  # adaptive-bitrate client (MSE)
    NATIVE_HLS = "native_hls"  # platform plays HLS itself
    PROGRESSIVE = "progressive"  # plain file (MP4/WebM)


@dataclass(frozen=True)
class PlaybackCapabilities:
    adaptive_supported: bool = True
    native_hls_supported: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "PlaybackCapabilities":
        return cls(
            adaptive_supported=settings.playback_adaptive_supported,
            native_hls_supported=settings.playback_native_hls_supported,
        )


def is_manifest_url(url: str) -> bool:
    """True for HLS manifests; query string and fragment are ignored."""
    return urlparse(url).path.lower().endswith(MANIFEST_EXTENSION)


def select_playback_strategy(
    url: str, capabilities: PlaybackCapabilities | None = None
) -> PlaybackStrategy:
    """Pick the playback path for ``url``.

    Raises:
        PlaybackLoadError: If the URL is empty or a manifest this platform
            cannot play
    """
    if not url or not url.strip():
        raise PlaybackLoadError
    capabilities = capabilities or PlaybackCapabilities()

    if not is_manifest_url(url):
        return PlaybackStrategy.PROGRESSIVE
    if capabilities.adaptive_supported:
        return PlaybackStrategy.ADAPTIVE
    if capabilities.native_hls_supported:
        return PlaybackStrategy.NATIVE_HLS
    raise PlaybackLoadError
