"""Tests for progress merging, ProgressService and the progress routes."""

import pytest
from fastapi.testclient import TestClient

from learnhub.core.errors import ForbiddenError
from learnhub.courses.models import Course
from learnhub.progress.models import (
    UserCourseProgress,
    calculate_overall_progress,
    merge_section_progress,
)
from learnhub.progress.schemas import UpdateProgressRequest
from learnhub.progress.service import ProgressNotFoundError


STORED_SECTIONS = [
    {
        "sectionId": "s1",
        "chapters": [
            {"chapterId": "c1", "completed": False},
            {"chapterId": "c2", "completed": False},
        ],
    },
]


class TestMergeSectionProgress:
    def test_updates_matching_chapter(self) -> None:
        merged = merge_section_progress(
            STORED_SECTIONS,
            [{"sectionId": "s1", "chapters": [{"chapterId": "c2", "completed": True}]}],
        )

        assert merged[0]["chapters"] == [
            {"chapterId": "c1", "completed": False},
            {"chapterId": "c2", "completed": True},
        ]
        assert STORED_SECTIONS[0]["chapters"][1]["completed"] is False

    def test_appends_unknown_entries(self) -> None:
        merged = merge_section_progress(
            STORED_SECTIONS,
            [
                {"sectionId": "s1", "chapters": [{"chapterId": "c3", "completed": True}]},
                {"sectionId": "s2", "chapters": [{"chapterId": "c4", "completed": False}]},
            ],
        )

        assert [c["chapterId"] for c in merged[0]["chapters"]] == ["c1", "c2", "c3"]
        assert [s["sectionId"] for s in merged] == ["s1", "s2"]


class TestCalculateOverallProgress:
    def test_no_chapters(self) -> None:
        assert calculate_overall_progress([]) == 0.0
        assert calculate_overall_progress([{"sectionId": "s", "chapters": []}]) == 0.0

    def test_fraction_completed(self) -> None:
        sections = [
            {"chapters": [{"completed": True}, {"completed": False}]},
            {"chapters": [{"completed": True}, {"completed": True}]},
        ]
        assert calculate_overall_progress(sections) == 75.0


@pytest.fixture
def enrolled(course_repository, progress_repository):
    course = Course(
        course_id="C1",
        teacher_id="T1",
        teacher_name="Alice",
        sections=[{"sectionId": "s1", "chapters": [{"chapterId": "c1"}, {"chapterId": "c2"}]}],
    )
    course_repository.courses[course.course_id] = course
    progress_repository.rows[("U1", "C1")] = UserCourseProgress(
        user_id="U1", course_id="C1", sections=course.chapter_skeleton()
    )
    # Progress for a course that no longer exists
    progress_repository.rows[("U1", "gone")] = UserCourseProgress(user_id="U1", course_id="gone")
    return course


class TestProgressService:
    @pytest.mark.asyncio
    async def test_enrolled_courses_skip_missing(self, progress_service, enrolled) -> None:
        courses = await progress_service.get_enrolled_courses("U1", "U1")
        assert [c.course_id for c in courses] == ["C1"]

    @pytest.mark.asyncio
    async def test_other_caller_forbidden(self, progress_service, enrolled) -> None:
        with pytest.raises(ForbiddenError):
            await progress_service.get_progress("U1", "C1", "U2")

    @pytest.mark.asyncio
    async def test_missing_progress(self, progress_service) -> None:
        with pytest.raises(ProgressNotFoundError, match="Course progress not found for this user"):
            await progress_service.get_progress("U1", "C9", "U1")

    @pytest.mark.asyncio
    async def test_update_recomputes_overall(self, progress_service, enrolled) -> None:
        patch = UpdateProgressRequest.model_validate(
            {"sections": [{"sectionId": "s1", "chapters": [{"chapterId": "c1", "completed": True}]}]}
        )

        progress = await progress_service.update_progress("U1", "C1", "U1", patch)

        assert progress.overall_progress == 50.0
        stored = await progress_service.get_progress("U1", "C1", "U1")
        assert stored.sections[0]["chapters"][0]["completed"] is True

    @pytest.mark.asyncio
    async def test_explicit_overall_kept(self, progress_service, enrolled) -> None:
        patch = UpdateProgressRequest.model_validate({"sections": [], "overallProgress": 90})

        progress = await progress_service.update_progress("U1", "C1", "U1", patch)

        assert progress.overall_progress == 90

    @pytest.mark.asyncio
    async def test_start_course_seeds_incomplete_chapters(self, progress_service) -> None:
        course = Course(
            teacher_id="T1",
            teacher_name="Alice",
            sections=[{"sectionId": "s1", "chapters": [{"chapterId": "c1"}]}],
        )

        progress = await progress_service.start_course("U2", course)

        assert progress.overall_progress == 0.0
        assert progress.sections == [
            {"sectionId": "s1", "chapters": [{"chapterId": "c1", "completed": False}]}
        ]


class TestProgressRoutes:
    @pytest.mark.usefixtures("enrolled")
    def test_get_and_update(self, client: TestClient, auth_headers) -> None:
        response = client.get("/users/course-progress/U1/courses/C1", headers=auth_headers("U1"))
        assert response.status_code == 200
        assert response.json()["data"]["overallProgress"] == 0.0

        response = client.put(
            "/users/course-progress/U1/courses/C1",
            json={"sections": [{"sectionId": "s1", "chapters": [
                {"chapterId": "c1", "completed": True},
                {"chapterId": "c2", "completed": True},
            ]}]},
            headers=auth_headers("U1"),
        )
        assert response.status_code == 200
        assert response.json()["data"]["overallProgress"] == 100.0

    @pytest.mark.usefixtures("enrolled")
    def test_enrolled_courses(self, client: TestClient, auth_headers) -> None:
        response = client.get(
            "/users/course-progress/U1/enrolled-courses", headers=auth_headers("U1")
        )
        assert response.status_code == 200
        assert [c["courseId"] for c in response.json()["data"]] == ["C1"]

    @pytest.mark.usefixtures("enrolled")
    def test_other_user_forbidden(self, client: TestClient, auth_headers) -> None:
        response = client.get("/users/course-progress/U1/courses/C1", headers=auth_headers("U2"))
        assert response.status_code == 403

    def test_not_found(self, client: TestClient, auth_headers) -> None:
        response = client.get("/users/course-progress/U1/courses/C1", headers=auth_headers("U1"))
        assert response.status_code == 404

    def test_malformed_patch(self, client: TestClient, auth_headers) -> None:
        response = client.put(
            "/users/course-progress/U1/courses/C1",
            json={"sections": [{"chapters": []}]},
            headers=auth_headers("U1"),
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid request data"
        assert response.json()["error"]
