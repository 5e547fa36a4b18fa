"""Lesson player host.

Binds a ``PlaybackController`` to ``LessonPlayerService`` for one user and
one lesson. Write failures never interrupt playback: they are logged and
surfaced through the ``Notifier``.
"""

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any
from uuid import UUID

import structlog

from academy.core.context import LessonContext
from academy.playback.controller import PlaybackController
from academy.playback.media import HeadlessMediaElement
from academy.playback.sources import PlaybackCapabilities
from academy.playback.timer import invoke_callback
from academy.progress.exceptions import (
    LessonNotInCourseError,
    NotEnrolledError,
    ProgressError,
)
from academy.progress.navigation import course_path

from .notifier import LoggingNotifier, Notifier


if TYPE_CHECKING:
    import httpx

    from academy.playback.media import MediaElement

    from .service import CompletionResult, LessonPlayerService, LessonView

logger = structlog.get_logger(__name__)

Navigate = Callable[[str], Any | Awaitable[Any]]

MY_COURSES_PATH = "/my-courses"
LESSON_COMPLETED_MESSAGE = "Lesson completed!"
COURSE_FINISHED_MESSAGE = "Congratulations! You completed all the lessons"
PROGRESS_SAVE_FAILED_MESSAGE = "Could not save your progress"
COMPLETION_FAILED_MESSAGE = "Could not mark the lesson as completed"


def _log_navigation(path: str) -> None:
    logger.info("player_navigate", path=path)


class LessonPlayer:
    """Client host of one lesson page."""

    def __init__(
        self,
        service: "LessonPlayerService",
        user_id: UUID,
        course_id: UUID,
        lesson_id: UUID,
        *,
        media: "MediaElement | None" = None,
        notifier: Notifier | None = None,
        navigate: Navigate | None = None,
        capabilities: PlaybackCapabilities | None = None,
        progress_interval: float = 10.0,
        autoplay: bool = True,
        http_client: "httpx.AsyncClient | None" = None,
    ):
        self.service = service
        self.user_id = user_id
        self.course_id = course_id
        self.lesson_id = lesson_id
        self.notifier = notifier or LoggingNotifier()
        self.navigate = navigate or _log_navigation
        self.capabilities = capabilities
        self.progress_interval = progress_interval
        self.autoplay = autoplay
        self.http_client = http_client

        self._media = media
        self.view: LessonView | None = None
        self.controller: PlaybackController | None = None
        self.last_completion: CompletionResult | None = None

    def _context(self) -> LessonContext:
        return LessonContext(self.user_id, self.course_id, self.lesson_id)

    async def open(self) -> PlaybackController | None:
        """Load the lesson and start its playback session.

        Redirects instead of raising: an unenrolled user goes to the course
        list, a lesson missing from the tree goes to the course overview.
        """
        try:
            self.view = await self.service.open_lesson(
                self.user_id, self.course_id, self.lesson_id
            )
        except NotEnrolledError:
            await invoke_callback(self.navigate, MY_COURSES_PATH)
            return None
        except LessonNotInCourseError:
            await invoke_callback(self.navigate, course_path(self.course_id))
            return None

        lesson = self.view.lesson
        # Lessons without a known duration report 0
        media = self._media or HeadlessMediaElement(
            duration=lesson.duration_seconds or None
        )
        self.controller = PlaybackController(
            media,
            lesson.video_url or "",
            start_offset=self.view.resume_position,
            autoplay=self.autoplay,
            already_completed=self.view.is_completed,
            capabilities=self.capabilities,
            on_progress=self._on_progress,
            on_complete=self.mark_complete,
            progress_interval=self.progress_interval,
            http_client=self.http_client,
        )
        await self.controller.load()
        return self.controller

    def _total_seconds(self, media: "MediaElement") -> int:
        if self.view and self.view.lesson.duration_seconds:
            return self.view.lesson.duration_seconds
        return int(media.duration or 0)

    async def _on_progress(self, watched_seconds: int) -> None:
        if self.controller is None:
            return
        with self._context():
            try:
                await self.service.report_progress(
                    self.user_id,
                    self.course_id,
                    self.lesson_id,
                    watched_seconds,
                    self._total_seconds(self.controller.media),
                )
            except ProgressError as e:
                logger.warning("progress_report_failed", error=e.message, code=e.code)
                self.notifier.error(PROGRESS_SAVE_FAILED_MESSAGE)

    async def mark_complete(self) -> "CompletionResult | None":
        """Complete the lesson, then move to the next lesson or the course page."""
        with self._context():
            try:
                result = await self.service.complete_lesson(
                    self.user_id, self.course_id, self.lesson_id
                )
            except ProgressError as e:
                logger.warning("lesson_completion_failed", error=e.message, code=e.code)
                self.notifier.error(COMPLETION_FAILED_MESSAGE)
                return None

        self.last_completion = result
        self.notifier.success(LESSON_COMPLETED_MESSAGE)
        if result.destination.course_finished:
            self.notifier.success(COURSE_FINISHED_MESSAGE)
        await invoke_callback(self.navigate, result.destination.path)
        return result

    def close(self) -> None:
        if self.controller is not None:
            self.controller.close()
