"""Pydantic schemas for student progress tracking.

Request and response models for:
- Progress reports and lesson completion
- Lesson view (open lesson with neighbors)
- Course enrollment
- Course progress and learning stats
"""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from academy.courses.models import Lesson
from academy.courses.schemas import LessonResponse

from .aggregator import ProgressSummary
from .models import Enrollment, EnrollmentStatus, LessonProgress
from .navigation import NavigationTarget
from .service import CourseProgressView, LearningStats


if TYPE_CHECKING:
    from academy.player.service import CompletionResult, LessonView


# ==============================================================================
# Lesson Progress Schemas
# ==============================================================================


class ReportProgressRequest(BaseModel):
    """Playback position report (sent every 10s while playing)."""

    course_id: UUID = Field(..., description="Course UUID")
    watched_seconds: int = Field(..., ge=0, description="Current position in seconds")
    total_seconds: int = Field(..., ge=0, description="Video duration in seconds")


class CompleteLessonRequest(BaseModel):
    """Request to mark a lesson as complete."""

    course_id: UUID = Field(..., description="Course UUID")


class LessonProgressResponse(BaseModel):
    """Lesson progress response."""

    model_config = ConfigDict(from_attributes=True)

    lesson_id: UUID
    course_id: UUID
    watched_seconds: int = Field(description="Last reported position")
    total_seconds: int
    is_completed: bool
    completed_at: datetime | None = None
    last_watched_at: datetime | None = None

    @classmethod
    def from_entity(cls, entity: LessonProgress) -> "LessonProgressResponse":
        """Create response from entity."""
        return cls(
            lesson_id=entity.lesson_id,
            course_id=entity.course_id,
            watched_seconds=entity.watched_seconds,
            total_seconds=entity.total_seconds,
            is_completed=entity.is_completed,
            completed_at=entity.completed_at,
            last_watched_at=entity.last_watched_at,
        )


class ProgressSummaryResponse(BaseModel):
    completed_count: int
    total_count: int
    percentage: int = Field(ge=0, le=100)

    @classmethod
    def from_summary(cls, summary: ProgressSummary) -> "ProgressSummaryResponse":
        return cls(
            completed_count=summary.completed_count,
            total_count=summary.total_count,
            percentage=summary.percentage,
        )


class NavigationResponse(BaseModel):
    """Where to go after completing a lesson."""

    path: str
    lesson_id: UUID | None = None
    course_finished: bool = False

    @classmethod
    def from_target(cls, target: NavigationTarget) -> "NavigationResponse":
        return cls(
            path=target.path,
            lesson_id=target.lesson_id,
            course_finished=target.course_finished,
        )


class CompletionResponse(BaseModel):
    """Lesson completion result."""

    progress: LessonProgressResponse
    summary: ProgressSummaryResponse
    destination: NavigationResponse

    @classmethod
    def from_result(cls, result: "CompletionResult") -> "CompletionResponse":
        return cls(
            progress=LessonProgressResponse.from_entity(result.progress),
            summary=ProgressSummaryResponse.from_summary(result.summary),
            destination=NavigationResponse.from_target(result.destination),
        )


class LessonLinkResponse(BaseModel):
    id: UUID
    title: str

    @classmethod
    def from_lesson(cls, lesson: Lesson | None) -> "LessonLinkResponse | None":
        return cls(id=lesson.id, title=lesson.title) if lesson else None


class LessonViewResponse(BaseModel):
    """Lesson page payload: lesson, neighbors and resume point."""

    course_id: UUID
    lesson: LessonResponse
    position: int = Field(description="Zero-based index in the course")
    total_lessons: int
    previous: LessonLinkResponse | None = None
    next: LessonLinkResponse | None = None
    progress: LessonProgressResponse | None = None
    resume_position_seconds: int = 0
    course_percentage: int = 0

    @classmethod
    def from_view(cls, view: "LessonView") -> "LessonViewResponse":
        return cls(
            course_id=view.outline.course_id,
            lesson=LessonResponse.from_entity(view.lesson),
            position=view.neighbors.index,
            total_lessons=len(view.outline.lesson_ids()),
            previous=LessonLinkResponse.from_lesson(view.neighbors.previous),
            next=LessonLinkResponse.from_lesson(view.neighbors.next),
            progress=(
                LessonProgressResponse.from_entity(view.progress)
                if view.progress
                else None
            ),
            resume_position_seconds=view.resume_position,
            course_percentage=view.enrollment.progress_percentage,
        )


# ==============================================================================
# Enrollment Schemas
# ==============================================================================


class EnrollRequest(BaseModel):
    """Request to enroll in a course."""

    course_id: UUID = Field(..., description="Course UUID to enroll in")


class EnrollmentResponse(BaseModel):
    """Enrollment response."""

    model_config = ConfigDict(from_attributes=True)

    course_id: UUID
    user_id: UUID
    status: EnrollmentStatus
    progress_percentage: int
    enrolled_at: datetime
    completed_at: datetime | None = None
    last_watched_at: datetime | None = None
    last_lesson_id: UUID | None = None

    @classmethod
    def from_entity(cls, entity: Enrollment) -> "EnrollmentResponse":
        return cls(
            course_id=entity.course_id,
            user_id=entity.user_id,
            status=entity.status,
            progress_percentage=entity.progress_percentage,
            enrolled_at=entity.enrolled_at,
            completed_at=entity.completed_at,
            last_watched_at=entity.last_watched_at,
            last_lesson_id=entity.last_lesson_id,
        )


class EnrollmentListResponse(BaseModel):
    """List of user enrollments."""

    items: list[EnrollmentResponse]
    total: int


# ==============================================================================
# Course Progress Schemas (Complete View)
# ==============================================================================


class LessonProgressSummary(BaseModel):
    """Lesson of the course tree with the user's state."""

    lesson_id: UUID
    title: str
    sort_order: int
    duration_seconds: int
    completed: bool = False
    watched_seconds: int = 0


class SectionProgressSummary(BaseModel):
    section_id: UUID
    title: str
    lessons_completed: int
    lessons_total: int
    lessons: list[LessonProgressSummary] = []


class CourseProgressResponse(BaseModel):
    """Course tree merged with the user's progress."""

    course_id: UUID
    enrollment: EnrollmentResponse
    summary: ProgressSummaryResponse
    sections: list[SectionProgressSummary] = []
    resume_lesson_id: UUID | None = Field(None, description="Lesson to resume from")
    resume_position_seconds: int = Field(0, description="Video position to resume from")

    @classmethod
    def from_view(cls, view: CourseProgressView) -> "CourseProgressResponse":
        sections = []
        for outline_section in view.outline.sections:
            lessons = []
            for lesson in outline_section.lessons:
                record = view.progress.get(lesson.id)
                lessons.append(
                    LessonProgressSummary(
                        lesson_id=lesson.id,
                        title=lesson.title,
                        sort_order=lesson.sort_order,
                        duration_seconds=lesson.duration_seconds,
                        completed=bool(record and record.is_completed),
                        watched_seconds=record.watched_seconds if record else 0,
                    )
                )
            sections.append(
                SectionProgressSummary(
                    section_id=outline_section.section.id,
                    title=outline_section.section.title,
                    lessons_completed=sum(1 for item in lessons if item.completed),
                    lessons_total=len(lessons),
                    lessons=lessons,
                )
            )

        return cls(
            course_id=view.outline.course_id,
            enrollment=EnrollmentResponse.from_entity(view.enrollment),
            summary=ProgressSummaryResponse.from_summary(view.summary),
            sections=sections,
            resume_lesson_id=view.resume_lesson_id,
            resume_position_seconds=view.resume_position_seconds,
        )


class LearningStatsResponse(BaseModel):
    """Aggregated learning statistics of the current user."""

    total_enrollments: int
    completed_courses: int
    in_progress_courses: int
    completed_lessons: int
    total_watched_hours: int

    @classmethod
    def from_stats(cls, stats: LearningStats) -> "LearningStatsResponse":
        return cls(
            total_enrollments=stats.total_enrollments,
            completed_courses=stats.completed_courses,
            in_progress_courses=stats.in_progress_courses,
            completed_lessons=stats.completed_lessons,
            total_watched_hours=stats.total_watched_hours,
        )
