"""Lesson navigation over the ordered course tree.

Pure functions: sections in sort order, lessons in sort order within each
section, flattened into one sequence.
"""

from dataclasses import dataclass
from uuid import UUID

from academy.courses.models import CourseOutline, Lesson

from .exceptions import LessonNotInCourseError


@dataclass(frozen=True)
class LessonNeighbors:
    index: int
    previous: Lesson | None
    next: Lesson | None


@dataclass(frozen=True)
class NavigationTarget:
    """Where the learner goes after completing a lesson."""

    path: str
    lesson_id: UUID | None = None
    course_finished: bool = False


def course_path(course_id: UUID) -> str:
    return f"/my-courses/{course_id}"


def lesson_path(course_id: UUID, lesson_id: UUID) -> str:
    return f"/my-courses/{course_id}/{lesson_id}"


def flatten_lessons(outline: CourseOutline) -> list[Lesson]:
    return [lesson for section in outline.sections for lesson in section.lessons]


def find_neighbors(outline: CourseOutline, lesson_id: UUID) -> LessonNeighbors:
    """Locate a lesson and its previous/next lessons.

    Raises:
        LessonNotInCourseError: If the lesson is not in the outline
    """
    lessons = flatten_lessons(outline)
    for index, lesson in enumerate(lessons):
        if lesson.id == lesson_id:
            return LessonNeighbors(
                index=index,
                previous=lessons[index - 1] if index > 0 else None,
                next=lessons[index + 1] if index + 1 < len(lessons) else None,
            )
    raise LessonNotInCourseError


def resolve_completion_destination(
    outline: CourseOutline, lesson_id: UUID
) -> NavigationTarget:
    """Next lesson if there is one, otherwise the course overview."""
    neighbors = find_neighbors(outline, lesson_id)
    if neighbors.next is not None:
        return NavigationTarget(
            path=lesson_path(outline.course_id, neighbors.next.id),
            lesson_id=neighbors.next.id,
        )
    return NavigationTarget(path=course_path(outline.course_id), course_finished=True)
