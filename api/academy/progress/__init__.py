"""Student progress tracking module.

Lesson progress rows, course enrollments with the derived completion
percentage, and lesson navigation.
"""

from .exceptions import (
    AlreadyEnrolledError,
    CatalogUnavailableError,
    EnrollmentSyncError,
    LessonNotInCourseError,
    NotEnrolledError,
    ProgressError,
    ProgressReadError,
    ProgressWriteError,
)
from .models import PROGRESS_TABLES_CQL, Enrollment, EnrollmentStatus, LessonProgress


__all__ = [
    "PROGRESS_TABLES_CQL",
    "AlreadyEnrolledError",
    "CatalogUnavailableError",
    "Enrollment",
    "EnrollmentStatus",
    "EnrollmentSyncError",
    "LessonNotInCourseError",
    "LessonProgress",
    "NotEnrolledError",
    "ProgressError",
    "ProgressReadError",
    "ProgressWriteError",
]
