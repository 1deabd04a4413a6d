"""Tests for course model helpers and the Course entity."""

from datetime import datetime
from types import SimpleNamespace

import pytest

from learnhub.courses.models import (
    Course,
    CourseStatus,
    normalize_sections,
    parse_price,
)


class TestParsePrice:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("25", 25),
            ("25.99", 25),
            ("  7usd", 7),
            ("-3", -3),
            (42, 42),
            (19.9, 19),
        ],
    )
    def test_leading_integer(self, value, expected) -> None:
        assert parse_price(value) == expected

    @pytest.mark.parametrize("value", ["abc", "", "$10", float("nan"), float("inf"), True])
    def test_unparsable(self, value) -> None:
        assert parse_price(value) is None


class TestNormalizeSections:
    def test_backfills_missing_ids(self) -> None:
        sections = [
            {"sectionTitle": "Intro", "chapters": [{"title": "Welcome"}, {"chapterId": ""}]},
        ]

        result = normalize_sections(sections)

        assert result[0]["sectionId"]
        assert all(chapter["chapterId"] for chapter in result[0]["chapters"])
        assert result[0]["sectionTitle"] == "Intro"
        assert result[0]["chapters"][0]["title"] == "Welcome"

    def test_ids_are_unique(self) -> None:
        sections = [{"chapters": [{}, {}]}, {"chapters": [{}]}]

        result = normalize_sections(sections)

        ids = [s["sectionId"] for s in result] + [
            c["chapterId"] for s in result for c in s["chapters"]
        ]
        assert len(ids) == len(set(ids))

    def test_idempotent(self) -> None:
        once = normalize_sections([{"chapters": [{"type": "Video"}]}])
        assert normalize_sections(once) == once

    def test_missing_chapters_become_empty_list(self) -> None:
        result = normalize_sections([{"sectionId": "s1", "chapters": None}])
        assert result == [{"sectionId": "s1", "chapters": []}]


class TestCourse:
    def test_defaults(self) -> None:
        course = Course(teacher_id="t1", teacher_name="Alice")

        doc = course.to_document()
        assert doc["teacherId"] == "t1"
        assert doc["title"] == "Untitled Course"
        assert doc["category"] == "Uncategorized"
        assert doc["price"] == 0
        assert doc["level"] == "Beginner"
        assert doc["status"] == CourseStatus.DRAFT.value
        assert doc["sections"] == []
        assert doc["enrollments"] == []
        assert doc["updatedAt"] is None

    def test_row_round_trip_restores_documents(self) -> None:
        course = Course(
            teacher_id="t1",
            teacher_name="Alice",
            sections=[{"sectionId": "s1", "chapters": [{"chapterId": "c1"}]}],
            enrollments=[{"userId": "u1"}],
        )
        columns = [
            "course_id", "teacher_id", "teacher_name", "title", "description",
            "category", "image", "price", "level", "status", "sections",
            "enrollments", "created_at", "updated_at",
        ]
        # Cassandra hands back naive timestamps
        values = course.to_row()
        values[12] = values[12].replace(tzinfo=None)
        row = SimpleNamespace(**dict(zip(columns, values, strict=True)))

        restored = Course.from_row(row)

        assert restored.sections == course.sections
        assert restored.enrollments == course.enrollments
        assert restored.created_at.tzinfo is not None
        assert isinstance(restored.created_at, datetime)

    def test_ownership(self) -> None:
        course = Course(teacher_id="t1", teacher_name="Alice")
        assert course.is_owned_by("t1")
        assert not course.is_owned_by("t2")
        assert not course.is_owned_by(None)

    def test_add_enrollment_once(self) -> None:
        course = Course(teacher_id="t1", teacher_name="Alice")
        assert course.add_enrollment("u1") is True
        assert course.add_enrollment("u1") is False
        assert course.enrollments == [{"userId": "u1"}]

    def test_chapter_skeleton(self) -> None:
        course = Course(
            teacher_id="t1",
            teacher_name="Alice",
            sections=[
                {"sectionId": "s1", "chapters": [{"chapterId": "c1"}, {"chapterId": "c2"}]},
                {"sectionId": "s2", "chapters": []},
            ],
        )
        assert course.chapter_skeleton() == [
            {
                "sectionId": "s1",
                "chapters": [
                    {"chapterId": "c1", "completed": False},
                    {"chapterId": "c2", "completed": False},
                ],
            },
            {"sectionId": "s2", "chapters": []},
        ]
