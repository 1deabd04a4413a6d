"""Pydantic schemas for the course catalog.

Payloads use the camelCase keys clients send (`teacherId`, `sectionId`,
`chapterId`, ...). Section and chapter payloads keep unknown keys so they
pass through to storage untouched.
"""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from learnhub.courses.models import CourseLevel, CourseStatus


# ==============================================================================
# Course Schemas
# ==============================================================================


class CreateCourseRequest(BaseModel):
    """Course creation request.

    Both fields are optional here so that the service can answer a missing
    one with its own validation message.
    """

    model_config = ConfigDict(populate_by_name=True)

    teacher_id: str | None = Field(None, alias="teacherId")
    teacher_name: str | None = Field(None, alias="teacherName")


class ChapterPayload(BaseModel):
    """Chapter as submitted in a course update."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    chapter_id: str | None = Field(None, alias="chapterId")


class SectionPayload(BaseModel):
    """Section as submitted in a course update."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    section_id: str | None = Field(None, alias="sectionId")
    chapters: list[ChapterPayload] = Field(default_factory=list)

    @field_validator("chapters", mode="before")
    @classmethod
    def default_chapters(cls, value: Any) -> Any:
        return [] if value is None else value


class UpdateCourseRequest(BaseModel):
    """Course update patch.

    `sections` may arrive JSON-encoded (multipart forms) or structured;
    either way it is validated into the same shape here. Fields not listed
    (courseId, teacherId, enrollments, ...) are ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str | None = None
    description: str | None = None
    category: str | None = None
    image: str | None = None
    level: CourseLevel | None = None
    status: CourseStatus | None = None
    price: str | int | float | None = None
    sections: list[SectionPayload] | None = None

    @field_validator("sections", mode="before")
    @classmethod
    def decode_sections(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return json.loads(value)
            except json.JSONDecodeError as e:
                msg = "sections must be valid JSON"
                raise ValueError(msg) from e
        return value

    def section_documents(self) -> list[dict[str, Any]] | None:
        """Sections as plain documents, keys as submitted."""
        if self.sections is None:
            return None
        documents = []
        for section in self.sections:
            doc = section.model_dump(by_alias=True, exclude={"chapters"})
            doc["chapters"] = [
                chapter.model_dump(by_alias=True)
                for chapter in section.chapters
            ]
            documents.append(doc)
        return documents

    def field_updates(self) -> dict[str, Any]:
        """Descriptive fields present in the patch, enum values unwrapped."""
        updates: dict[str, Any] = {}
        for name in ("title", "description", "category", "image", "level", "status"):
            value = getattr(self, name)
            if value is None:
                continue
            updates[name] = value.value if hasattr(value, "value") else value
        return updates


# ==============================================================================
# Upload Schemas
# ==============================================================================


class UploadUrlRequest(BaseModel):
    """Signed upload URL request."""

    model_config = ConfigDict(populate_by_name=True)

    file_name: str | None = Field(None, alias="fileName")
    file_type: str | None = Field(None, alias="fileType")
