"""Student course progress service layer.

Business logic for:
- Listing the courses a user is enrolled in
- Reading and merging per-chapter completion
- Seeding progress when a user enrolls
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from learnhub.core.errors import ForbiddenError, NotFoundError
from learnhub.courses.models import Course
from learnhub.progress.models import (
    UserCourseProgress,
    calculate_overall_progress,
    merge_section_progress,
)
from learnhub.progress.schemas import UpdateProgressRequest


if TYPE_CHECKING:
    from learnhub.courses.repository import CourseRepository
    from learnhub.progress.repository import ProgressRepository

logger = structlog.get_logger(__name__)


class ProgressNotFoundError(NotFoundError):
    """No progress record for this user and course."""

    def __init__(self, message: str = "Course progress not found for this user"):
        super().__init__(message)


def _ensure_self(user_id: str, caller_id: str | None) -> None:
    if caller_id != user_id:
        logger.warning("progress_access_denied", user_id=user_id, caller_id=caller_id)
        raise ForbiddenError("Not authorized to access this user's progress")


class ProgressService:
    """Service for student progress tracking."""

    def __init__(
        self,
        repository: "ProgressRepository",
        course_repository: "CourseRepository",
    ):
        self.repository = repository
        self.course_repository = course_repository

    async def get_enrolled_courses(
        self, user_id: str, caller_id: str | None
    ) -> list[Course]:
        """Courses the user has progress records for.

        Progress rows whose course has since been deleted are skipped.

        Raises:
            ForbiddenError: If caller is not `user_id`
        """
        _ensure_self(user_id, caller_id)

        courses = []
        for progress in await self.repository.list_by_user(user_id):
            course = await self.course_repository.get(progress.course_id)
            if course is not None:
                courses.append(course)
        return courses

    async def get_progress(
        self, user_id: str, course_id: str, caller_id: str | None
    ) -> UserCourseProgress:
        """Get a user's progress in a course.

        Raises:
            ForbiddenError: If caller is not `user_id`
            ProgressNotFoundError: If the user has no progress for the course
        """
        _ensure_self(user_id, caller_id)

        progress = await self.repository.get(user_id, course_id)
        if progress is None:
            raise ProgressNotFoundError
        return progress

    async def update_progress(
        self,
        user_id: str,
        course_id: str,
        caller_id: str | None,
        data: UpdateProgressRequest,
    ) -> UserCourseProgress:
        """Merge chapter completion updates into stored progress.

        Raises:
            ForbiddenError: If caller is not `user_id`
            ProgressNotFoundError: If the user has no progress for the course
        """
        progress = await self.get_progress(user_id, course_id, caller_id)

        progress.sections = merge_section_progress(
            progress.sections, data.section_documents()
        )
        if data.overall_progress is not None:
            progress.overall_progress = data.overall_progress
        else:
            progress.overall_progress = calculate_overall_progress(progress.sections)
        progress.last_accessed_timestamp = datetime.now(UTC)

        await self.repository.put(progress)

        logger.info(
            "course_progress_updated",
            user_id=user_id,
            course_id=course_id,
            overall_progress=progress.overall_progress,
        )
        return progress

    async def start_course(self, user_id: str, course: Course) -> UserCourseProgress:
        """Seed progress for a newly enrolled user, every chapter incomplete."""
        progress = UserCourseProgress(
            user_id=user_id,
            course_id=course.course_id,
            overall_progress=0.0,
            sections=course.chapter_skeleton(),
        )
        await self.repository.put(progress)

        logger.info("course_progress_created", user_id=user_id, course_id=course.course_id)
        return progress
