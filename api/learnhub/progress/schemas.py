"""Pydantic schemas for course progress."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChapterProgressPayload(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    chapter_id: str = Field(..., alias="chapterId")
    completed: bool | None = None


class SectionProgressPayload(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    section_id: str = Field(..., alias="sectionId")
    chapters: list[ChapterProgressPayload] = Field(default_factory=list)

    @field_validator("chapters", mode="before")
    @classmethod
    def default_chapters(cls, value: Any) -> Any:
        return [] if value is None else value


class UpdateProgressRequest(BaseModel):
    """Progress patch.

    `overallProgress` is recomputed from the merged sections unless given.
    """

    model_config = ConfigDict(populate_by_name=True)

    sections: list[SectionProgressPayload] = Field(default_factory=list)
    overall_progress: float | None = Field(None, alias="overallProgress", ge=0, le=100)

    def section_documents(self) -> list[dict[str, Any]]:
        return [
            section.model_dump(by_alias=True, exclude_none=True)
            for section in self.sections
        ]
