"""Database models for student course progress.

One row per (user, course): the per-section chapter completion flags are
stored as a JSON document alongside the computed overall percentage.
"""

import json
from datetime import UTC, datetime
from typing import Any

from learnhub.courses.models import ensure_utc_aware


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

# Partition key: user_id so that "courses this user is enrolled in" is one read
USER_COURSE_PROGRESS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.user_course_progress (
    user_id TEXT,
    course_id TEXT,
    enrollment_date TIMESTAMP,
    overall_progress DOUBLE,
    sections TEXT,
    last_accessed_timestamp TIMESTAMP,
    PRIMARY KEY (user_id, course_id)
)
"""

PROGRESS_TABLES_CQL = [
    USER_COURSE_PROGRESS_TABLE_CQL,
]


# ==============================================================================
# Helper Functions
# ==============================================================================


def merge_section_progress(
    current: list[dict[str, Any]],
    updates: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Merge section progress updates into the stored list.

    Sections match by `sectionId` and chapters by `chapterId`. Matching
    entries are shallow-updated, unknown ones are appended in order.
    """
    merged = [dict(section, chapters=list(section.get("chapters") or [])) for section in current]
    by_id = {section.get("sectionId"): section for section in merged}

    for update in updates:
        section = by_id.get(update.get("sectionId"))
        if section is None:
            section = dict(update, chapters=list(update.get("chapters") or []))
            merged.append(section)
            by_id[section.get("sectionId")] = section
            continue

        chapters = section["chapters"]
        chapter_index = {chapter.get("chapterId"): i for i, chapter in enumerate(chapters)}
        for chapter_update in update.get("chapters") or []:
            i = chapter_index.get(chapter_update.get("chapterId"))
            if i is None:
                chapter_index[chapter_update.get("chapterId")] = len(chapters)
                chapters.append(dict(chapter_update))
            else:
                chapters[i] = {**chapters[i], **chapter_update}

        section.update({k: v for k, v in update.items() if k != "chapters"})

    return merged


def calculate_overall_progress(sections: list[dict[str, Any]]) -> float:
    """Percentage of completed chapters across all sections (0 if none)."""
    chapters = [
        chapter for section in sections for chapter in section.get("chapters") or []
    ]
    if not chapters:
        return 0.0
    completed = sum(1 for chapter in chapters if chapter.get("completed"))
    return completed / len(chapters) * 100


# ==============================================================================
# Entity Classes
# ==============================================================================


class UserCourseProgress:
    """Progress of one user through one course."""

    def __init__(
        self,
        user_id: str,
        course_id: str,
        enrollment_date: datetime | None = None,
        overall_progress: float = 0.0,
        sections: list[dict[str, Any]] | None = None,
        last_accessed_timestamp: datetime | None = None,
    ):
        now = datetime.now(UTC)
        self.user_id = user_id
        self.course_id = course_id
        self.enrollment_date = ensure_utc_aware(enrollment_date) or now
        self.overall_progress = overall_progress
        self.sections = sections if sections is not None else []
        self.last_accessed_timestamp = ensure_utc_aware(last_accessed_timestamp) or now

    @classmethod
    def from_row(cls, row: Any) -> "UserCourseProgress":
        """Create instance from Cassandra row."""
        return cls(
            user_id=row.user_id,
            course_id=row.course_id,
            enrollment_date=row.enrollment_date,
            overall_progress=row.overall_progress or 0.0,
            sections=json.loads(row.sections) if row.sections else [],
            last_accessed_timestamp=row.last_accessed_timestamp,
        )

    def to_row(self) -> list[Any]:
        """Column values in `user_course_progress` table order."""
        return [
            self.user_id,
            self.course_id,
            self.enrollment_date,
            float(self.overall_progress),
            json.dumps(self.sections),
            self.last_accessed_timestamp,
        ]

    def to_document(self) -> dict[str, Any]:
        return {
            "userId": self.user_id,
            "courseId": self.course_id,
            "enrollmentDate": self.enrollment_date.isoformat(),
            "overallProgress": self.overall_progress,
            "sections": self.sections,
            "lastAccessedTimestamp": self.last_accessed_timestamp.isoformat(),
        }

    def __repr__(self) -> str:
        return f"<UserCourseProgress {self.user_id}/{self.course_id} {self.overall_progress:.0f}%>"
