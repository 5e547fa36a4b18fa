"""Pydantic schemas for the course catalog (learner view)."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from academy.courses.models import CourseOutline, Lesson


class LessonResponse(BaseModel):
    """Lesson as exposed to learners."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    section_id: UUID
    title: str
    sort_order: int
    duration_seconds: int = Field(0, description="Video duration in seconds")
    video_url: str | None = None

    @classmethod
    def from_entity(cls, lesson: Lesson) -> "LessonResponse":
        return cls(
            id=lesson.id,
            section_id=lesson.section_id,
            title=lesson.title,
            sort_order=lesson.sort_order,
            duration_seconds=lesson.duration_seconds,
            video_url=lesson.video_url,
        )


class SectionResponse(BaseModel):
    """Section with its ordered lessons."""

    id: UUID
    title: str
    sort_order: int
    lessons: list[LessonResponse] = []


class CourseOutlineResponse(BaseModel):
    """Course tree, sections and lessons in sort order."""

    id: UUID
    title: str
    slug: str
    sections: list[SectionResponse] = []
    total_lessons: int

    @classmethod
    def from_outline(cls, outline: CourseOutline) -> "CourseOutlineResponse":
        return cls(
            id=outline.course.id,
            title=outline.course.title,
            slug=outline.course.slug,
            sections=[
                SectionResponse(
                    id=s.section.id,
                    title=s.section.title,
                    sort_order=s.section.sort_order,
                    lessons=[LessonResponse.from_entity(lesson) for lesson in s.lessons],
                )
                for s in outline.sections
            ],
            total_lessons=len(outline.lesson_ids()),
        )
