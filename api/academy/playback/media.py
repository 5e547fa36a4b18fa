"""Media surface abstraction.

``MediaElement`` is what the controller drives. ``HeadlessMediaElement``
is an in-process implementation whose clock follows wall time while
playing; it backs server-side sessions and tests.
"""

import time
from typing import Protocol

from .exceptions import PlaybackLoadError


class MediaElement(Protocol):
    source: str | None
    duration: float | None
    paused: bool
    volume: float
    muted: bool
    playback_rate: float

    @property
    def current_time(self) -> float: ...

    @property
    def ended(self) -> bool: ...

    def load(self, source: str) -> None: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def seek(self, position: float) -> None: ...


class HeadlessMediaElement:
    """Media element without a decoder.

    Args:
        duration: Reported duration once loaded
        fail_on_load: Simulate a fatal source error on ``load``
        clock: Monotonic clock in seconds
    """

    def __init__(
        self,
        duration: float | None = None,
        *,
        fail_on_load: bool = False,
        clock=time.monotonic,
    ):
        self._duration = duration
        self.fail_on_load = fail_on_load
        self._clock = clock

        self.source: str | None = None
        self.duration: float | None = None
        self.paused = True
        self.volume = 1.0
        self.muted = False
        self._rate = 1.0
        self.load_count = 0

        self._position = 0.0
        self._anchor: float | None = None

    @property
    def current_time(self) -> float:
        position = self._position
        if self._anchor is not None:
            position += (self._clock() - self._anchor) * self._rate
        if self.duration:
            position = min(position, self.duration)
        return position

    @property
    def ended(self) -> bool:
        # Zero or missing duration means metadata is not known yet
        return bool(self.duration) and self.current_time >= self.duration

    def load(self, source: str) -> None:
        self.load_count += 1
        self.pause()
        self._position = 0.0
        if self.fail_on_load:
            self.source = None
            self.duration = None
            raise PlaybackLoadError
        self.source = source
        self.duration = self._duration

    def play(self) -> None:
        if self.ended:
            self._position = 0.0
        if self._anchor is None:
            self._anchor = self._clock()
        self.paused = False

    def pause(self) -> None:
        self._position = self.current_time
        self._anchor = None
        self.paused = True

    def seek(self, position: float) -> None:
        self._position = max(0.0, position)
        if self.duration:
            self._position = min(self._position, self.duration)
        if self._anchor is not None:
            self._anchor = self._clock()

    @property
    def playback_rate(self) -> float:
        return self._rate

    @playback_rate.setter
    def playback_rate(self, rate: float) -> None:
        self._position = self.current_time
        if self._anchor is not None:
            self._anchor = self._clock()
        self._rate = rate
