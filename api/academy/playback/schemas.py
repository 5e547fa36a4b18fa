"""Pydantic schemas for playback source resolution."""

from uuid import UUID

from pydantic import BaseModel, Field

from .manifest import QualityLevel
from .sources import PlaybackStrategy


class QualityLevelResponse(BaseModel):
    index: int
    height: int | None = None
    width: int | None = None
    bandwidth: int | None = None
    label: str

    @classmethod
    def from_level(cls, level: QualityLevel) -> "QualityLevelResponse":
        return cls(
            index=level.index,
            height=level.height,
            width=level.width,
            bandwidth=level.bandwidth,
            label=level.label,
        )


class PlaybackSourceResponse(BaseModel):
    """How the client should play a lesson video."""

    lesson_id: UUID
    source_url: str
    strategy: PlaybackStrategy
    quality_levels: list[QualityLevelResponse] = Field(
        default_factory=list,
        description="Empty means automatic quality only (index -1)",
    )
    progress_interval_seconds: float = Field(
        description="How often the client reports its position"
    )
    playback_rates: list[float]
