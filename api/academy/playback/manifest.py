"""HLS master playlist parsing.

Only the variant streams are read (``#EXT-X-STREAM-INF``); media playlists
and segments are left to the media surface.
"""

import re
from dataclasses import dataclass

import httpx
import structlog

from .exceptions import PlaybackLoadError


logger = structlog.get_logger(__name__)

STREAM_INF_TAG = "#EXT-X-STREAM-INF:"

# KEY=value pairs; values may be quoted and contain commas
_ATTRIBUTE_PATTERN = re.compile(r'([A-Z0-9-]+)=("[^"]*"|[^,]*)')


@dataclass(frozen=True)
class QualityLevel:
    index: int
    height: int | None
    width: int | None
    bandwidth: int | None
    uri: str | None = None

    @property
    def label(self) -> str:
        return f"{self.height}p" if self.height else f"Level {self.index}"


def _parse_attributes(text: str) -> dict[str, str]:
    return {key: value.strip('"') for key, value in _ATTRIBUTE_PATTERN.findall(text)}


def _to_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def parse_master_playlist(text: str) -> list[QualityLevel]:
    """Parse the variant streams of a master playlist, in playlist order.

    Raises:
        PlaybackLoadError: If the text is not an M3U playlist
    """
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if not lines or not lines[0].startswith("#EXTM3U"):
        raise PlaybackLoadError

    levels: list[QualityLevel] = []
    pending: dict[str, str] | None = None
    for line in lines[1:]:
        if line.startswith(STREAM_INF_TAG):
            pending = _parse_attributes(line[len(STREAM_INF_TAG) :])
            continue
        if pending is None or line.startswith("#"):
            continue

        width, height = None, None
        if "RESOLUTION" in pending:
            w, _, h = pending["RESOLUTION"].lower().partition("x")
            width, height = _to_int(w), _to_int(h)
        levels.append(
            QualityLevel(
                index=len(levels),
                height=height,
                width=width,
                bandwidth=_to_int(pending.get("BANDWIDTH")),
                uri=line,
            )
        )
        pending = None

    return levels


async def fetch_quality_levels(
    url: str,
    client: httpx.AsyncClient | None = None,
    timeout: float = 10.0,
) -> list[QualityLevel]:
    """Download and parse a master playlist.

    A media playlist (no variants) yields an empty list, which means
    automatic quality only.

    Raises:
        PlaybackLoadError: On network errors or non-200 responses
    """
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout) as own_client:
                response = await own_client.get(url)
        else:
            response = await client.get(url, timeout=timeout)
    except httpx.TimeoutException as e:
        logger.warning("manifest_timeout", url=url, error=str(e))
        raise PlaybackLoadError from e
    except httpx.RequestError as e:
        logger.warning("manifest_request_error", url=url, error=str(e))
        raise PlaybackLoadError from e

    if response.status_code != httpx.codes.OK:
        logger.warning("manifest_request_failed", url=url, status_code=response.status_code)
        raise PlaybackLoadError

    levels = parse_master_playlist(response.text)
    logger.debug("manifest_parsed", url=url, levels=len(levels))
    return levels
