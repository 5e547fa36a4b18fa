"""Lesson player: server orchestration and the playback host."""

from .host import LessonPlayer
from .notifier import LoggingNotifier, Notifier, RecordingNotifier
from .service import CompletionResult, LessonPlayerService, LessonView


__all__ = [
    "CompletionResult",
    "LessonPlayer",
    "LessonPlayerService",
    "LessonView",
    "LoggingNotifier",
    "Notifier",
    "RecordingNotifier",
]
