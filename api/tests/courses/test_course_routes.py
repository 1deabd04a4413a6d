"""HTTP tests for the course routes (envelopes, auth, multipart)."""

import json
from datetime import timedelta

from fastapi.testclient import TestClient


def _create(client: TestClient, auth_headers, teacher: str = "T1") -> dict:
    response = client.post(
        "/courses",
        json={"teacherId": teacher, "teacherName": "Alice"},
        headers=auth_headers(teacher),
    )
    assert response.status_code == 200
    return response.json()["data"]


class TestCourseFlow:
    def test_create_update_forbidden_flow(self, client: TestClient, auth_headers) -> None:
        course = _create(client, auth_headers)
        assert course["status"] == "Draft"
        assert course["price"] == 0
        assert course["sections"] == []

        response = client.put(
            f"/courses/{course['courseId']}", json={"price": "25"}, headers=auth_headers("T1")
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Course updated successfully"
        assert response.json()["data"]["price"] == 2500

        response = client.put(
            f"/courses/{course['courseId']}", json={"price": "10"}, headers=auth_headers("T2")
        )
        assert response.status_code == 403
        body = response.json()
        assert body["message"] == "Not authorized to update this course"
        assert "request_id" in body

        stored = client.get(f"/courses/{course['courseId']}").json()["data"]
        assert stored["price"] == 2500

    def test_list_and_get_are_public(self, client: TestClient, auth_headers) -> None:
        course = _create(client, auth_headers)

        listed = client.get("/courses", params={"category": "all"})
        assert listed.status_code == 200
        assert listed.json()["message"] == "Courses retrieved successfully"
        assert [c["courseId"] for c in listed.json()["data"]] == [course["courseId"]]

        filtered = client.get("/courses", params={"category": "Math"})
        assert filtered.json()["data"] == []

        single = client.get(f"/courses/{course['courseId']}")
        assert single.json()["message"] == "Course retrieved successfully"

    def test_delete(self, client: TestClient, auth_headers) -> None:
        course = _create(client, auth_headers)

        response = client.delete(f"/courses/{course['courseId']}", headers=auth_headers("T1"))
        assert response.status_code == 200
        assert response.json()["message"] == "Course deleted successfully"

        missing = client.get(f"/courses/{course['courseId']}")
        assert missing.status_code == 404
        assert missing.json()["message"] == "Course not found"


class TestCourseValidation:
    def test_create_requires_teacher(self, client: TestClient, auth_headers) -> None:
        response = client.post("/courses", json={"teacherId": "T1"}, headers=auth_headers())
        assert response.status_code == 400
        assert response.json()["message"] == "Teacher Id and name are required"

    def test_invalid_price(self, client: TestClient, auth_headers) -> None:
        course = _create(client, auth_headers)

        response = client.put(
            f"/courses/{course['courseId']}", json={"price": "abc"}, headers=auth_headers("T1")
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid price format"
        assert response.json()["error"] == "Price must be a valid number"

    def test_invalid_json_body(self, client: TestClient, auth_headers) -> None:
        course = _create(client, auth_headers)

        response = client.put(
            f"/courses/{course['courseId']}",
            content=b"{not json",
            headers={**auth_headers("T1"), "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid request body"


class TestAuthentication:
    def test_missing_token(self, client: TestClient) -> None:
        response = client.post("/courses", json={"teacherId": "T1", "teacherName": "A"})
        assert response.status_code == 401
        assert response.json()["message"] == "Unauthenticated"

    def test_expired_token(self, client: TestClient, make_token) -> None:
        token = make_token("T1", expires_in=timedelta(minutes=-5))
        response = client.post(
            "/courses",
            json={"teacherId": "T1", "teacherName": "A"},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid or expired session token"


class TestMultipartUpdate:
    def test_form_fields_and_image(self, client: TestClient, auth_headers, mock_bucket) -> None:
        course = _create(client, auth_headers)
        sections = [{"sectionTitle": "Intro", "chapters": [{"title": "Hi", "type": "Video"}]}]

        response = client.put(
            f"/courses/{course['courseId']}",
            data={"title": "Painting 101", "price": "12", "sections": json.dumps(sections)},
            files={"image": ("cover.jpg", b"\xff\xd8\xff", "image/jpeg")},
            headers=auth_headers("T1"),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["title"] == "Painting 101"
        assert data["price"] == 1200
        assert data["image"].startswith("https://cdn.learnhub.test/images/courses/")
        assert data["sections"][0]["sectionId"]
        assert data["sections"][0]["chapters"][0]["chapterId"]
        mock_bucket.blob.return_value.upload_from_string.assert_called_once()

    def test_empty_file_part_ignored(self, client: TestClient, auth_headers, mock_bucket) -> None:
        course = _create(client, auth_headers)

        response = client.put(
            f"/courses/{course['courseId']}",
            data={"title": "Painting 101"},
            files={"image": ("", b"", "application/octet-stream")},
            headers=auth_headers("T1"),
        )

        assert response.status_code == 200
        assert response.json()["data"]["title"] == "Painting 101"
        mock_bucket.blob.return_value.upload_from_string.assert_not_called()


class TestUploadUrl:
    def test_generates_signed_url(self, client: TestClient, auth_headers, mock_bucket) -> None:
        response = client.post(
            "/courses/c1/sections/s1/chapters/ch1/get-upload-url",
            json={"fileName": "intro.mp4", "fileType": "video/mp4"},
            headers=auth_headers("T1"),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Upload URL generated successfully"
        assert body["data"]["uploadUrl"] == "https://signed.example/upload?sig=abc"
        assert body["data"]["videoUrl"].startswith("https://cdn.learnhub.test/videos/")
        assert body["data"]["videoUrl"].endswith("/intro.mp4")

    def test_requires_file_fields(self, client: TestClient, auth_headers) -> None:
        response = client.post(
            "/courses/c1/sections/s1/chapters/ch1/get-upload-url",
            json={"fileName": "intro.mp4"},
            headers=auth_headers("T1"),
        )

        assert response.status_code == 400
        assert response.json()["message"] == "File name and type are required"
