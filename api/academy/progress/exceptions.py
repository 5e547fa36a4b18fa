"""Progress tracking errors.

Shared by the stores, the catalog, navigation and the player service.
``code`` is mapped to an HTTP status in ``dependencies.handle_progress_error``.
"""


class ProgressError(Exception):
    """Base progress error."""

    def __init__(self, message: str, code: str = "progress_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class NotEnrolledError(ProgressError):
    """User not enrolled in course."""

    def __init__(self, message: str = "User is not enrolled in this course"):
        super().__init__(message, "not_enrolled")


class AlreadyEnrolledError(ProgressError):
    """User already enrolled."""

    def __init__(self, message: str = "User is already enrolled in this course"):
        super().__init__(message, "already_enrolled")


class LessonNotInCourseError(ProgressError):
    """Lesson is not part of the (published) course tree."""

    def __init__(self, message: str = "Lesson not found in course"):
        super().__init__(message, "lesson_not_in_course")


class ProgressWriteError(ProgressError):
    """Progress row could not be read or written."""

    def __init__(self, message: str = "Failed to save lesson progress"):
        super().__init__(message, "progress_write_failed")


class EnrollmentSyncError(ProgressError):
    """Enrollment aggregate could not be persisted.

    The lesson progress row that triggered the recompute stays written.
    """

    def __init__(self, message: str = "Failed to update course progress"):
        super().__init__(message, "enrollment_sync_failed")


class ProgressReadError(ProgressError):
    """Progress or enrollment rows could not be read."""

    def __init__(self, message: str = "Failed to load progress"):
        super().__init__(message, "progress_read_failed")


class CatalogUnavailableError(ProgressError):
    """Course tree could not be read from the catalog."""

    def __init__(self, message: str = "Course catalog is unavailable"):
        super().__init__(message, "catalog_unavailable")
