"""Database models for the course catalog.

A Course is an aggregate root: its sections and chapters have no identity
outside it and are stored with it as JSON documents. Enrollments are stored
the same way.
"""

import json
import math
import re
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import uuid4


class CourseStatus(str, Enum):
    """Course publication status."""

    DRAFT = "Draft"
    PUBLISHED = "Published"


class CourseLevel(str, Enum):
    """Course difficulty level."""

    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class ChapterType(str, Enum):
    """Chapter content type."""

    TEXT = "Text"
    QUIZ = "Quiz"
    VIDEO = "Video"


# Sentinel category meaning "no filter"
ALL_CATEGORIES = "all"

DEFAULT_TITLE = "Untitled Course"
DEFAULT_CATEGORY = "Uncategorized"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

COURSE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.courses (
    course_id TEXT PRIMARY KEY,
    teacher_id TEXT,
    teacher_name TEXT,
    title TEXT,
    description TEXT,
    category TEXT,
    image TEXT,
    price BIGINT,
    level TEXT,
    status TEXT,
    sections TEXT,
    enrollments TEXT,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

COURSE_CATEGORY_INDEX_CQL = """
CREATE INDEX IF NOT EXISTS courses_category_idx ON {keyspace}.courses (category)
"""

COURSES_TABLES_CQL = [
    COURSE_TABLE_CQL,
    COURSE_CATEGORY_INDEX_CQL,
]


# ==============================================================================
# Helper Functions
# ==============================================================================


def ensure_utc_aware(dt: datetime | None) -> datetime | None:
    """Ensure datetime is UTC-aware (Cassandra returns naive datetimes)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def new_id() -> str:
    """Generate a new opaque identifier."""
    return str(uuid4())


_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_price(value: str | int | float) -> int | None:
    """Parse a submitted price the way `parseInt` does.

    Returns the leading integer of a string ("25", "25.99" and "25usd" all
    give 25) or the truncated value of a number. Returns None when nothing
    parses.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def normalize_sections(sections: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Back-fill missing section and chapter identifiers.

    Identifiers already present are kept, so normalizing an already
    normalized structure returns it unchanged. Every other key passes through.
    """
    normalized = []
    for section in sections:
        chapters = [
            {**chapter, "chapterId": chapter.get("chapterId") or new_id()}
            for chapter in section.get("chapters") or []
        ]
        normalized.append(
            {
                **section,
                "sectionId": section.get("sectionId") or new_id(),
                "chapters": chapters,
            }
        )
    return normalized


def _load_json_list(value: str | None) -> list[dict[str, Any]]:
    return json.loads(value) if value else []


# ==============================================================================
# Entity Classes
# ==============================================================================


class Course:
    """Course aggregate.

    Attributes:
        course_id: Opaque unique identifier, immutable
        teacher_id: Owning teacher, immutable
        teacher_name: Owning teacher display name, immutable
        title, description, category, image, level, status: Descriptive fields
        price: Price in minor currency units (non-negative)
        sections: Ordered list of section documents with nested chapters
        enrollments: List of {"userId": ...} documents
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    MUTABLE_FIELDS = ("title", "description", "category", "image", "level", "status")

    def __init__(
        self,
        course_id: str | None = None,
        teacher_id: str = "",
        teacher_name: str = "",
        title: str = DEFAULT_TITLE,
        description: str = "",
        category: str = DEFAULT_CATEGORY,
        image: str = "",
        price: int = 0,
        level: str = CourseLevel.BEGINNER.value,
        status: str = CourseStatus.DRAFT.value,
        sections: list[dict[str, Any]] | None = None,
        enrollments: list[dict[str, Any]] | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self.course_id = course_id or new_id()
        self.teacher_id = teacher_id
        self.teacher_name = teacher_name
        self.title = title
        self.description = description
        self.category = category
        self.image = image
        self.price = price
        self.level = level
        self.status = status
        self.sections = sections if sections is not None else []
        self.enrollments = enrollments if enrollments is not None else []
        self.created_at = ensure_utc_aware(created_at) or datetime.now(UTC)
        self.updated_at = ensure_utc_aware(updated_at)

    @classmethod
    def from_row(cls, row: Any) -> "Course":
        """Create Course instance from Cassandra row."""
        return cls(
            course_id=row.course_id,
            teacher_id=row.teacher_id,
            teacher_name=row.teacher_name,
            title=row.title,
            description=row.description or "",
            category=row.category,
            image=row.image or "",
            price=row.price or 0,
            level=row.level,
            status=row.status,
            sections=_load_json_list(row.sections),
            enrollments=_load_json_list(row.enrollments),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def to_row(self) -> list[Any]:
        """Column values in `courses` table order."""
        return [
            self.course_id,
            self.teacher_id,
            self.teacher_name,
            self.title,
            self.description,
            self.category,
            self.image,
            self.price,
            self.level,
            self.status,
            json.dumps(self.sections),
            json.dumps(self.enrollments),
            self.created_at,
            self.updated_at,
        ]

    def to_document(self) -> dict[str, Any]:
        """Wire representation (camelCase keys)."""
        return {
            "courseId": self.course_id,
            "teacherId": self.teacher_id,
            "teacherName": self.teacher_name,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "image": self.image,
            "price": self.price,
            "level": self.level,
            "status": self.status,
            "sections": self.sections,
            "enrollments": self.enrollments,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def is_owned_by(self, user_id: str | None) -> bool:
        return user_id is not None and self.teacher_id == user_id

    def add_enrollment(self, user_id: str) -> bool:
        """Enroll a user. Returns False if already enrolled."""
        if any(e.get("userId") == user_id for e in self.enrollments):
            return False
        self.enrollments.append({"userId": user_id})
        return True

    def chapter_skeleton(self) -> list[dict[str, Any]]:
        """Per-section progress skeleton with every chapter incomplete."""
        return [
            {
                "sectionId": section.get("sectionId"),
                "chapters": [
                    {"chapterId": chapter.get("chapterId"), "completed": False}
                    for chapter in section.get("chapters") or []
                ],
            }
            for section in self.sections
        ]

    def __repr__(self) -> str:
        return f"<Course {self.title} ({self.status})>"
