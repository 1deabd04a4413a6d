"""Cassandra accessor for the `user_course_progress` table."""

from typing import TYPE_CHECKING

from learnhub.core.database import execute
from learnhub.progress.models import UserCourseProgress


if TYPE_CHECKING:
    from cassandra.cluster import Session


class ProgressRepository:
    """Reads and writes progress rows keyed by (user_id, course_id)."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements."""
        self._get_progress = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.user_course_progress
            WHERE user_id = ? AND course_id = ?
        """)
        self._list_by_user = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.user_course_progress WHERE user_id = ?"
        )
        self._put_progress = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.user_course_progress
            (user_id, course_id, enrollment_date, overall_progress,
             sections, last_accessed_timestamp)
            VALUES (?, ?, ?, ?, ?, ?)
        """)

    async def get(self, user_id: str, course_id: str) -> UserCourseProgress | None:
        rows = await execute(self.session, self._get_progress, [user_id, course_id])
        row = rows.one()
        return UserCourseProgress.from_row(row) if row else None

    async def list_by_user(self, user_id: str) -> list[UserCourseProgress]:
        rows = await execute(self.session, self._list_by_user, [user_id])
        return [UserCourseProgress.from_row(row) for row in rows]

    async def put(self, progress: UserCourseProgress) -> None:
        await execute(self.session, self._put_progress, progress.to_row())
