"""Course catalog service layer.

Business logic for:
- Listing courses, optionally by category
- Creating a draft course for a teacher
- Owner-only update (price normalization, section/chapter id back-fill)
- Owner-only delete

The ownership check and the following write are separate store calls;
concurrent updates to the same course are last-write-wins.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from learnhub.core.errors import ForbiddenError, NotFoundError, ValidationError
from learnhub.courses.models import (
    ALL_CATEGORIES,
    Course,
    normalize_sections,
    parse_price,
)
from learnhub.courses.schemas import CreateCourseRequest, UpdateCourseRequest


if TYPE_CHECKING:
    from learnhub.courses.repository import CourseRepository
    from learnhub.storage.service import StorageService

logger = structlog.get_logger(__name__)

# Prices are submitted in major units and stored in minor units
MINOR_UNITS = 100


class CourseNotFoundError(NotFoundError):
    """Course not found."""

    def __init__(self, message: str = "Course not found"):
        super().__init__(message)


@dataclass
class ImageUpload:
    """Image file received with a multipart course update."""

    content: bytes
    content_type: str
    filename: str | None = None


class CourseService:
    """Service for course management."""

    def __init__(
        self,
        repository: "CourseRepository",
        storage: "StorageService | None" = None,
    ):
        self.repository = repository
        self.storage = storage

    async def list_courses(self, category: str | None = None) -> list[Course]:
        """List courses; `None` or "all" means every course."""
        if not category or category == ALL_CATEGORIES:
            return await self.repository.scan()
        return await self.repository.scan(category=category)

    async def get_course(self, course_id: str) -> Course:
        """Get course by ID.

        Raises:
            CourseNotFoundError: If course doesn't exist
        """
        course = await self.repository.get(course_id)
        if course is None:
            raise CourseNotFoundError
        return course

    async def create_course(self, data: CreateCourseRequest) -> Course:
        """Create a draft course owned by `data.teacher_id`.

        The caller's identity is not compared with the teacher id.

        Raises:
            ValidationError: If teacher id or name is missing
        """
        if not data.teacher_id or not data.teacher_name:
            raise ValidationError("Teacher Id and name are required")

        course = Course(teacher_id=data.teacher_id, teacher_name=data.teacher_name)
        await self.repository.put(course)

        logger.info(
            "course_created", course_id=course.course_id, teacher_id=course.teacher_id
        )
        return course

    async def _get_owned_course(
        self, course_id: str, caller_id: str | None, action: str
    ) -> Course:
        course = await self.get_course(course_id)
        if not course.is_owned_by(caller_id):
            logger.warning(
                "course_access_denied",
                course_id=course_id,
                caller_id=caller_id,
                action=action,
            )
            raise ForbiddenError(f"Not authorized to {action} this course")
        return course

    async def update_course(
        self,
        course_id: str,
        caller_id: str | None,
        data: UpdateCourseRequest,
        image: ImageUpload | None = None,
    ) -> Course:
        """Apply a patch to a course owned by the caller.

        The whole patch is validated before anything is written, so a
        rejected patch leaves the stored course unchanged.

        Raises:
            CourseNotFoundError: If course doesn't exist
            ForbiddenError: If caller is not the owning teacher
            ValidationError: If price does not parse as a non-negative integer
        """
        course = await self._get_owned_course(course_id, caller_id, "update")

        price: int | None = None
        if data.price is not None:
            parsed = parse_price(data.price)
            if parsed is None or parsed < 0:
                raise ValidationError(
                    "Invalid price format", "Price must be a valid number"
                )
            price = parsed * MINOR_UNITS

        updates = data.field_updates()

        if image is not None and self.storage is not None:
            uploaded = await self.storage.upload_course_image(
                content=image.content,
                content_type=image.content_type,
                course_id=course.course_id,
                filename=image.filename,
            )
            updates["image"] = uploaded["url"]

        sections = data.section_documents()
        if price is not None:
            updates["price"] = price
        if sections is not None:
            updates["sections"] = normalize_sections(sections)

        for name, value in updates.items():
            setattr(course, name, value)
        course.updated_at = datetime.now(UTC)

        await self.repository.put(course)

        logger.info("course_updated", course_id=course.course_id, fields=sorted(updates))
        return course

    async def delete_course(self, course_id: str, caller_id: str | None) -> Course:
        """Delete a course owned by the caller.

        Returns:
            The course as it was before deletion

        Raises:
            CourseNotFoundError: If course doesn't exist
            ForbiddenError: If caller is not the owning teacher
        """
        course = await self._get_owned_course(course_id, caller_id, "delete")
        await self.repository.delete(course_id)

        logger.info("course_deleted", course_id=course_id)
        return course

    async def enroll(self, course: Course, user_id: str) -> None:
        """Add an enrollment record for `user_id`, if not already present."""
        if course.add_enrollment(user_id):
            course.updated_at = datetime.now(UTC)
            await self.repository.put(course)
            logger.info("course_enrollment_added", course_id=course.course_id)
