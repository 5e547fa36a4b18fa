"""Video playback controller.

Drives one playback session on a ``MediaElement``:
- Strategy selection and quality levels on load
- Resume at the stored offset, optional autoplay
- Progress callback every ``progress_interval`` seconds while playing
- Completion callback once per session on natural end
- Transport controls (seek, skip, volume, rate, quality, fullscreen)

Transport controls are UI state only; nothing here persists progress.
"""

from enum import Enum
from typing import TYPE_CHECKING

import structlog

from .exceptions import (
    InvalidPlaybackSettingError,
    PlaybackError,
    PlayerNotReadyError,
)
from .manifest import QualityLevel, fetch_quality_levels
from .sources import PlaybackCapabilities, PlaybackStrategy, select_playback_strategy
from .timer import Callback, RepeatingTimer, invoke_callback


if TYPE_CHECKING:
    import httpx

    from .media import MediaElement

logger = structlog.get_logger(__name__)

PLAYBACK_RATES = (0.5, 0.75, 1.0, 1.25, 1.5, 2.0)
AUTO_QUALITY = -1
SKIP_SECONDS = 10
VOLUME_STEP = 0.1
LOAD_ERROR_MESSAGE = "Failed to load video"


class PlaybackState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    PLAYING = "playing"
    PAUSED = "paused"
    ENDED = "ended"
    ERROR = "error"
    CLOSED = "closed"


class PlaybackController:
    """One playback session of one lesson video."""

    def __init__(
        self,
        media: "MediaElement",
        source_url: str,
        *,
        start_offset: float = 0,
        autoplay: bool = False,
        already_completed: bool = False,
        capabilities: PlaybackCapabilities | None = None,
        on_progress: Callback | None = None,
        on_complete: Callback | None = None,
        progress_interval: float = 10.0,
        http_client: "httpx.AsyncClient | None" = None,
    ):
        self.media = media
        self.source_url = source_url
        self.start_offset = max(0.0, float(start_offset))
        self.autoplay = autoplay
        self.already_completed = already_completed
        self.capabilities = capabilities or PlaybackCapabilities()
        self.on_progress = on_progress
        self.on_complete = on_complete
        self.http_client = http_client

        self.state = PlaybackState.IDLE
        self.strategy: PlaybackStrategy | None = None
        self.quality_levels: list[QualityLevel] = []
        self.current_quality = AUTO_QUALITY
        self.fullscreen = False
        self.error_message: str | None = None

        self._completion_fired = False
        self._timer = RepeatingTimer(progress_interval, self._on_tick)

    @property
    def is_playing(self) -> bool:
        return self.state == PlaybackState.PLAYING

    @property
    def timer_active(self) -> bool:
        return self._timer.active

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    async def load(self) -> None:
        """Load the source, restore the start offset and maybe autoplay.

        Failures leave the controller in ERROR with a user-facing message;
        nothing retries automatically.
        """
        if self.state == PlaybackState.CLOSED:
            raise PlayerNotReadyError
        self._timer.cancel()
        self.state = PlaybackState.LOADING
        self.error_message = None

        try:
            self.strategy = select_playback_strategy(self.source_url, self.capabilities)
            if self.strategy == PlaybackStrategy.ADAPTIVE:
                self.quality_levels = await fetch_quality_levels(
                    self.source_url, self.http_client
                )
            self.media.load(self.source_url)
        except PlaybackError as e:
            self.state = PlaybackState.ERROR
            self.error_message = LOAD_ERROR_MESSAGE
            logger.warning(
                "playback_load_failed",
                source_url=self.source_url,
                strategy=self.strategy.value if self.strategy else None,
                error=e.message,
            )
            return

        # Metadata is available once load returns
        if self.start_offset > 0:
            self.media.seek(self._clamp_position(self.start_offset))
        self.state = PlaybackState.READY

        logger.debug(
            "playback_loaded",
            strategy=self.strategy.value,
            levels=len(self.quality_levels),
            start_offset=self.start_offset,
        )

        if self.autoplay:
            self.play()

    async def retry(self) -> None:
        """Reload after a load error."""
        await self.load()

    def close(self) -> None:
        """Stop the timer and release the session."""
        self._timer.cancel()
        if not self.media.paused:
            self.media.pause()
        self.state = PlaybackState.CLOSED

    # ==========================================================================
    # Play / Pause / End
    # ==========================================================================

    def _ensure_loaded(self) -> None:
        if self.state not in (
            PlaybackState.READY,
            PlaybackState.PLAYING,
            PlaybackState.PAUSED,
            PlaybackState.ENDED,
        ):
            raise PlayerNotReadyError

    def play(self) -> None:
        """Start playback and arm the progress timer."""
        self._ensure_loaded()
        self.media.play()
        self.state = PlaybackState.PLAYING
        self._timer.start()

    def pause(self) -> None:
        """Pause playback. The progress timer never runs while paused."""
        self._ensure_loaded()
        self._timer.cancel()
        self.media.pause()
        if self.state != PlaybackState.ENDED:
            self.state = PlaybackState.PAUSED

    def toggle_play(self) -> None:
        if self.is_playing:
            self.pause()
        else:
            self.play()

    async def _on_tick(self) -> None:
        if self.media.ended:
            await self.handle_ended()
            return
        await invoke_callback(self.on_progress, int(self.media.current_time))

    async def handle_ended(self) -> None:
        """Natural end of the media.

        Fires ``on_complete`` at most once per session, and never when the
        lesson was already completed before the session started.
        """
        self._timer.cancel()
        if not self.media.paused:
            self.media.pause()
        self.state = PlaybackState.ENDED

        if self._completion_fired or self.already_completed:
            return
        self._completion_fired = True
        logger.info("playback_ended", source_url=self.source_url)
        await invoke_callback(self.on_complete)

    # ==========================================================================
    # Transport Controls
    # ==========================================================================

    def _clamp_position(self, position: float) -> float:
        position = max(0.0, position)
        if self.media.duration:
            position = min(position, self.media.duration)
        return position

    def seek(self, position: float) -> None:
        self._ensure_loaded()
        self.media.seek(self._clamp_position(position))

    def skip(self, seconds: float = SKIP_SECONDS) -> None:
        """Relative seek; negative values go back."""
        self.seek(self.media.current_time + seconds)

    def set_volume(self, volume: float) -> None:
        """Set volume in [0, 1]; 0 also mutes."""
        volume = min(1.0, max(0.0, volume))
        self.media.volume = volume
        self.media.muted = volume == 0

    def toggle_mute(self) -> None:
        self.media.muted = not self.media.muted

    def set_playback_rate(self, rate: float) -> None:
        if rate not in PLAYBACK_RATES:
            msg = f"Unsupported playback rate: {rate}"
            raise InvalidPlaybackSettingError(msg)
        self.media.playback_rate = rate

    def select_quality(self, index: int) -> None:
        """Select a quality level; ``AUTO_QUALITY`` (-1) lets the client adapt."""
        if index != AUTO_QUALITY and not any(
            level.index == index for level in self.quality_levels
        ):
            msg = f"Unknown quality level: {index}"
            raise InvalidPlaybackSettingError(msg)
        self.current_quality = index

    def toggle_fullscreen(self) -> None:
        self.fullscreen = not self.fullscreen

    def handle_key(self, key: str) -> bool:
        """Keyboard shortcuts. Returns False for unbound keys."""
        if key in (" ", "k"):
            self.toggle_play()
        elif key == "f":
            self.toggle_fullscreen()
        elif key == "m":
            self.toggle_mute()
        elif key == "ArrowLeft":
            self.skip(-SKIP_SECONDS)
        elif key == "ArrowRight":
            self.skip(SKIP_SECONDS)
        elif key == "ArrowUp":
            self.set_volume(round(self.media.volume + VOLUME_STEP, 2))
        elif key == "ArrowDown":
            self.set_volume(round(self.media.volume - VOLUME_STEP, 2))
        else:
            return False
        return True
