"""Student course progress API endpoints.

Provides routes for:
- Enrolled courses of a user
- Reading and updating a user's progress in a course
"""

from typing import Any

from fastapi import APIRouter

from learnhub.auth.dependencies import CurrentUser
from learnhub.core.errors import envelope
from learnhub.progress.dependencies import ProgressServiceDep
from learnhub.progress.schemas import UpdateProgressRequest


router = APIRouter(prefix="/users/course-progress", tags=["progress"])


@router.get("/{user_id}/enrolled-courses", summary="List enrolled courses")
async def get_user_enrolled_courses(
    user_id: str,
    progress_service: ProgressServiceDep,
    user: CurrentUser,
) -> dict[str, Any]:
    courses = await progress_service.get_enrolled_courses(user_id, user.user_id)
    return envelope(
        "Enrolled courses retrieved successfully",
        [course.to_document() for course in courses],
    )


@router.get("/{user_id}/courses/{course_id}", summary="Get course progress")
async def get_user_course_progress(
    user_id: str,
    course_id: str,
    progress_service: ProgressServiceDep,
    user: CurrentUser,
) -> dict[str, Any]:
    progress = await progress_service.get_progress(user_id, course_id, user.user_id)
    return envelope("Course progress retrieved successfully", progress.to_document())


@router.put("/{user_id}/courses/{course_id}", summary="Update course progress")
async def update_user_course_progress(
    user_id: str,
    course_id: str,
    data: UpdateProgressRequest,
    progress_service: ProgressServiceDep,
    user: CurrentUser,
) -> dict[str, Any]:
    """Merge chapter completion flags and recompute overall progress."""
    progress = await progress_service.update_progress(
        user_id, course_id, user.user_id, data
    )
    return envelope("User course progress updated successfully", progress.to_document())
