"""Unit tests for lesson access, progress and course access routes."""

import pytest
from fastapi.testclient import TestClient

from tichnuta.site_store import Course, Lesson, SiteStore

STUDENT_EMAIL = "noa@tichnuta.co.il"


@pytest.fixture
def course(store: SiteStore) -> Course:
    return store.create_course("Python")


@pytest.fixture
def preview(store: SiteStore, course: Course) -> Lesson:
    return store.add_lesson(
        course.id, "היכרות", order_index=0, is_preview=True, video_url="https://v.example/0"
    )


@pytest.fixture
def lesson(store: SiteStore, course: Course) -> Lesson:
    return store.add_lesson(
        course.id,
        "לולאות",
        order_index=1,
        video_url="https://v.example/1",
        slides_url="https://s.example/1",
    )


@pytest.fixture
def student(user: dict[str, str]) -> dict[str, str]:
    """Headers of a signed-in user with a known e-mail address."""
    return {**user, "X-User-Email": STUDENT_EMAIL}


@pytest.mark.unit
class TestGetLesson:
    """Tests for GET /lessons/{id}."""

    def test_anonymous_refused(self, client: TestClient, lesson: Lesson) -> None:
        response = client.get(f"/api/v1/lessons/{lesson.id}")

        assert response.status_code == 403
        assert response.json() == {"data": None, "error": "No access to this course"}

    def test_signed_in_without_access_refused(
        self, client: TestClient, lesson: Lesson, student: dict[str, str]
    ) -> None:
        assert client.get(f"/api/v1/lessons/{lesson.id}", headers=student).status_code == 403

    def test_preview_open_to_anonymous(self, client: TestClient, preview: Lesson) -> None:
        response = client.get(f"/api/v1/lessons/{preview.id}")

        assert response.status_code == 200
        assert response.json()["data"]["video_url"] == "https://v.example/0"

    def test_allowed_email(
        self,
        client: TestClient,
        store: SiteStore,
        course: Course,
        lesson: Lesson,
        student: dict[str, str],
    ) -> None:
        store.add_allowed_emails(course.id, [STUDENT_EMAIL])

        response = client.get(f"/api/v1/lessons/{lesson.id}", headers=student)

        assert response.status_code == 200
        assert response.json()["data"]["video_url"] == "https://v.example/1"

    def test_allowed_email_header_case_ignored(
        self, client: TestClient, store: SiteStore, course: Course, lesson: Lesson
    ) -> None:
        store.add_allowed_emails(course.id, [STUDENT_EMAIL])

        response = client.get(
            f"/api/v1/lessons/{lesson.id}", headers={"X-User-Email": "NOA@Tichnuta.co.il"}
        )

        assert response.status_code == 200

    def test_purchaser(
        self,
        client: TestClient,
        store: SiteStore,
        course: Course,
        lesson: Lesson,
        user: dict[str, str],
    ) -> None:
        store.create_purchase("user-1", course.id, "cs_1", 35000, "ils")
        assert client.get(f"/api/v1/lessons/{lesson.id}", headers=user).status_code == 403

        store.complete_purchase("cs_1")
        response = client.get(f"/api/v1/lessons/{lesson.id}", headers=user)

        assert response.status_code == 200
        assert response.json()["data"]["slides_url"] == "https://s.example/1"

    def test_admin(self, client: TestClient, lesson: Lesson, admin: dict[str, str]) -> None:
        assert client.get(f"/api/v1/lessons/{lesson.id}", headers=admin).status_code == 200

    def test_missing_lesson(self, client: TestClient) -> None:
        response = client.get("/api/v1/lessons/missing")

        assert response.status_code == 404
        assert response.json()["error"] == "Lesson not found"


@pytest.mark.unit
class TestListLessons:
    """Tests for GET /courses/{id}/lessons."""

    def test_locked_lessons_without_content(
        self, client: TestClient, course: Course, preview: Lesson, lesson: Lesson
    ) -> None:
        response = client.get(f"/api/v1/courses/{course.id}/lessons")

        assert response.status_code == 200
        data = response.json()["data"]
        assert [item["title"] for item in data] == ["היכרות", "לולאות"]
        assert data[0]["locked"] is False
        assert data[0]["video_url"] == "https://v.example/0"
        assert data[1]["locked"] is True
        assert data[1]["video_url"] is None
        assert data[1]["slides_url"] is None

    def test_unlocked_for_allowed_email(
        self,
        client: TestClient,
        store: SiteStore,
        course: Course,
        lesson: Lesson,
        student: dict[str, str],
    ) -> None:
        store.add_allowed_emails(course.id, [STUDENT_EMAIL])

        data = client.get(f"/api/v1/courses/{course.id}/lessons", headers=student).json()["data"]

        assert data[0]["locked"] is False
        assert data[0]["video_url"] == "https://v.example/1"

    def test_includes_progress(
        self,
        client: TestClient,
        store: SiteStore,
        course: Course,
        preview: Lesson,
        user: dict[str, str],
    ) -> None:
        store.save_lesson_progress("user-1", preview.id, completed=True, watch_time_seconds=90)

        data = client.get(f"/api/v1/courses/{course.id}/lessons", headers=user).json()["data"]

        assert data[0]["progress"]["completed"] is True
        assert data[0]["progress"]["watch_time_seconds"] == 90

    def test_missing_course(self, client: TestClient) -> None:
        assert client.get("/api/v1/courses/missing/lessons").status_code == 404


@pytest.mark.unit
class TestSaveProgress:
    """Tests for PUT /lessons/{id}/progress."""

    def test_requires_sign_in(self, client: TestClient, preview: Lesson) -> None:
        response = client.put(f"/api/v1/lessons/{preview.id}/progress", json={"completed": True})
        assert response.status_code == 401

    def test_save_on_preview(
        self, client: TestClient, store: SiteStore, preview: Lesson, user: dict[str, str]
    ) -> None:
        response = client.put(
            f"/api/v1/lessons/{preview.id}/progress",
            json={"completed": True, "watch_time_seconds": 120},
            headers=user,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["completed"] is True
        assert data["completed_at"] is not None
        assert store.get_lesson_progress("user-1", [preview.id])[preview.id].watch_time_seconds == 120

    def test_refused_without_access(
        self, client: TestClient, lesson: Lesson, user: dict[str, str]
    ) -> None:
        response = client.put(
            f"/api/v1/lessons/{lesson.id}/progress", json={"completed": True}, headers=user
        )
        assert response.status_code == 403

    def test_negative_watch_time_rejected(
        self, client: TestClient, preview: Lesson, user: dict[str, str]
    ) -> None:
        response = client.put(
            f"/api/v1/lessons/{preview.id}/progress",
            json={"completed": False, "watch_time_seconds": -1},
            headers=user,
        )
        assert response.status_code == 422


@pytest.mark.unit
class TestAllowedEmails:
    """Tests for granting and revoking course access."""

    def test_grant_requires_admin(
        self, client: TestClient, course: Course, user: dict[str, str]
    ) -> None:
        response = client.post(
            f"/api/v1/courses/{course.id}/allowed-emails",
            json={"emails": [STUDENT_EMAIL]},
            headers=user,
        )
        assert response.status_code == 403

    def test_grant_list_revoke(
        self, client: TestClient, store: SiteStore, course: Course, admin: dict[str, str]
    ) -> None:
        store.add_allowed_emails(course.id, [STUDENT_EMAIL])

        response = client.post(
            f"/api/v1/courses/{course.id}/allowed-emails",
            json={"emails": ["Dan@Tichnuta.co.il", STUDENT_EMAIL]},
            headers=admin,
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert [entry["email"] for entry in data["added"]] == ["dan@tichnuta.co.il"]
        assert data["skipped"] == [STUDENT_EMAIL]

        listed = client.get(f"/api/v1/courses/{course.id}/allowed-emails", headers=admin)
        assert len(listed.json()["data"]) == 2

        entry_id = data["added"][0]["id"]
        assert client.delete(f"/api/v1/allowed-emails/{entry_id}", headers=admin).status_code == 204
        assert not store.is_email_allowed(course.id, "dan@tichnuta.co.il")

    def test_invalid_email_rejected(
        self, client: TestClient, course: Course, admin: dict[str, str]
    ) -> None:
        response = client.post(
            f"/api/v1/courses/{course.id}/allowed-emails",
            json={"emails": ["not-an-email"]},
            headers=admin,
        )
        assert response.status_code == 422

    def test_revoke_missing_entry(self, client: TestClient, admin: dict[str, str]) -> None:
        response = client.delete("/api/v1/allowed-emails/missing", headers=admin)

        assert response.status_code == 404
        assert response.json()["error"] == "Access entry not found"


@pytest.mark.unit
class TestMyCourses:
    """Tests for GET /me/courses."""

    def test_granted_and_bought(
        self, client: TestClient, store: SiteStore, course: Course, student: dict[str, str]
    ) -> None:
        bought = store.create_course("Scratch")
        store.create_course("Robotics")
        store.add_allowed_emails(course.id, [STUDENT_EMAIL])
        store.create_purchase("user-1", bought.id, "cs_1", 35000, "ils")
        store.complete_purchase("cs_1")

        response = client.get("/api/v1/me/courses", headers=student)

        assert [c["title"] for c in response.json()["data"]] == ["Python", "Scratch"]

    def test_anonymous(self, client: TestClient, course: Course) -> None:
        assert client.get("/api/v1/me/courses").json()["data"] == []
