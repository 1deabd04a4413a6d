"""Course catalog API endpoints.

Provides routes for:
- Courses: list, get, create, update (JSON or multipart), delete
- Signed video upload URLs for chapters
"""

from typing import Any

from fastapi import APIRouter

from learnhub.auth.dependencies import CurrentUser
from learnhub.core.errors import envelope
from learnhub.courses.dependencies import CourseServiceDep, UpdatePayload
from learnhub.courses.schemas import CreateCourseRequest, UploadUrlRequest
from learnhub.storage.dependencies import StorageServiceDep


router = APIRouter(prefix="/courses", tags=["courses"])


@router.get("", summary="List courses")
async def list_courses(
    course_service: CourseServiceDep,
    category: str | None = None,
) -> dict[str, Any]:
    """List all courses, or only those in `category` ("all" means no filter)."""
    courses = await course_service.list_courses(category)
    return envelope(
        "Courses retrieved successfully", [c.to_document() for c in courses]
    )


@router.post("", summary="Create course")
async def create_course(
    data: CreateCourseRequest,
    course_service: CourseServiceDep,
    _user: CurrentUser,
) -> dict[str, Any]:
    """Create a draft course for the given teacher."""
    course = await course_service.create_course(data)
    return envelope("Course created successfully", course.to_document())


@router.get("/{course_id}", summary="Get course")
async def get_course(
    course_id: str,
    course_service: CourseServiceDep,
) -> dict[str, Any]:
    course = await course_service.get_course(course_id)
    return envelope("Course retrieved successfully", course.to_document())


@router.put("/{course_id}", summary="Update course")
async def update_course(
    course_id: str,
    payload: UpdatePayload,
    course_service: CourseServiceDep,
    user: CurrentUser,
) -> dict[str, Any]:
    """Update a course owned by the caller.

    Accepts a JSON body or a multipart form with an optional `image` file.
    """
    data, image = payload
    course = await course_service.update_course(course_id, user.user_id, data, image)
    return envelope("Course updated successfully", course.to_document())


@router.delete("/{course_id}", summary="Delete course")
async def delete_course(
    course_id: str,
    course_service: CourseServiceDep,
    user: CurrentUser,
) -> dict[str, Any]:
    course = await course_service.delete_course(course_id, user.user_id)
    return envelope("Course deleted successfully", course.to_document())


@router.post(
    "/{course_id}/sections/{section_id}/chapters/{chapter_id}/get-upload-url",
    summary="Get signed video upload URL",
)
async def get_upload_video_url(
    course_id: str,
    section_id: str,
    chapter_id: str,
    data: UploadUrlRequest,
    storage_service: StorageServiceDep,
    _user: CurrentUser,
) -> dict[str, Any]:
    """Issue a 60-second signed PUT URL and the video's public URL."""
    urls = storage_service.generate_upload_url(data.file_name, data.file_type)
    return envelope("Upload URL generated successfully", urls)
