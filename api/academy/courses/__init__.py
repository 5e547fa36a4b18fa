"""Course catalog module (read-only course/section/lesson tree)."""

from .models import (
    COURSES_TABLES_CQL,
    Course,
    CourseOutline,
    Lesson,
    Section,
    SectionOutline,
)


__all__ = [
    "COURSES_TABLES_CQL",
    "Course",
    "CourseOutline",
    "Lesson",
    "Section",
    "SectionOutline",
]
