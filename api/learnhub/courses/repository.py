"""Cassandra accessor for the `courses` table."""

from typing import TYPE_CHECKING

from learnhub.core.database import execute
from learnhub.courses.models import Course


if TYPE_CHECKING:
    from cassandra.cluster import Session


class CourseRepository:
    """Primary-key addressed get/put/scan/delete over `courses`."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements."""
        self._get_course = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.courses WHERE course_id = ?"
        )
        self._scan_courses = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.courses"
        )
        self._scan_by_category = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.courses WHERE category = ?"
        )
        self._put_course = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.courses
            (course_id, teacher_id, teacher_name, title, description, category,
             image, price, level, status, sections, enrollments,
             created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)
        self._delete_course = self.session.prepare(
            f"DELETE FROM {self.keyspace}.courses WHERE course_id = ?"
        )

    async def get(self, course_id: str) -> Course | None:
        rows = await execute(self.session, self._get_course, [course_id])
        row = rows.one()
        return Course.from_row(row) if row else None

    async def scan(self, category: str | None = None) -> list[Course]:
        """All courses, or those whose category equals `category`."""
        if category is None:
            rows = await execute(self.session, self._scan_courses)
        else:
            rows = await execute(self.session, self._scan_by_category, [category])
        return [Course.from_row(row) for row in rows]

    async def put(self, course: Course) -> None:
        await execute(self.session, self._put_course, course.to_row())

    async def delete(self, course_id: str) -> None:
        await execute(self.session, self._delete_course, [course_id])
