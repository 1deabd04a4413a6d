"""FastAPI dependencies for the course catalog."""

from collections.abc import Callable
from typing import Annotated, Any

from fastapi import Depends, Request
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import UploadFile

from learnhub.core.errors import ValidationError
from learnhub.courses.schemas import UpdateCourseRequest
from learnhub.courses.service import CourseService, ImageUpload


# ==============================================================================
# Service Getter (set by main.py)
# ==============================================================================

_course_service_getter: Callable[[], CourseService] | None = None


def set_course_service_getter(getter: Callable[[], CourseService]) -> None:
    """Set the course service getter function."""
    global _course_service_getter
    _course_service_getter = getter


def get_course_service() -> CourseService:
    """Get CourseService instance from app state."""
    if _course_service_getter is None:
        msg = "CourseService not configured"
        raise RuntimeError(msg)
    return _course_service_getter()


CourseServiceDep = Annotated[CourseService, Depends(get_course_service)]


# ==============================================================================
# Update Payload
# ==============================================================================


async def read_update_payload(
    request: Request,
) -> tuple[UpdateCourseRequest, ImageUpload | None]:
    """Parse a course update from a JSON body or a multipart form.

    A multipart `image` part that carries a named file becomes an
    `ImageUpload`. File parts without a filename are skipped. A plain-text
    `image` field is kept as the new image URL.

    Raises:
        ValidationError: If the body is not a valid course patch
    """
    content_type = request.headers.get("content-type", "")
    image: ImageUpload | None = None
    payload: Any

    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        payload = {}
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if key == "image" and value.filename:
                    image = ImageUpload(
                        content=await value.read(),
                        content_type=value.content_type or "application/octet-stream",
                        filename=value.filename,
                    )
                continue
            payload[key] = value
    else:
        body = await request.body()
        try:
            payload = await request.json() if body else {}
        except ValueError as e:
            raise ValidationError("Invalid request body", "Body must be valid JSON") from e

    try:
        return UpdateCourseRequest.model_validate(payload), image
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid course data",
            [
                {
                    "field": ".".join(str(loc) for loc in err.get("loc", [])),
                    "message": err.get("msg", "Invalid value"),
                }
                for err in e.errors()
            ],
        ) from e


UpdatePayload = Annotated[
    tuple[UpdateCourseRequest, ImageUpload | None], Depends(read_update_payload)
]
