"""Integration tests for the full API over a file database."""

import tempfile
from pathlib import Path
from urllib.parse import parse_qs

import httpx
import pytest
from fastapi.testclient import TestClient

from tichnuta.api.app import create_app
from tichnuta.api.dependencies import get_checkout_client
from tichnuta.config import Settings
from tichnuta.payments import StripeCheckoutClient

ADMIN = {"Authorization": "Bearer integration-token"}
USER = {"X-User-Id": "parent-1"}


@pytest.fixture
def temp_db_path():
    """Create a temporary database path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        path = f.name
    yield path
    # Cleanup
    Path(path).unlink(missing_ok=True)
    Path(f"{path}-wal").unlink(missing_ok=True)
    Path(f"{path}-shm").unlink(missing_ok=True)


@pytest.fixture
def stripe_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def client(temp_db_path: str, stripe_requests: list[httpx.Request]):
    """Create a test client with temporary database and a fake Stripe API."""

    def stripe_api(request: httpx.Request) -> httpx.Response:
        stripe_requests.append(request)
        if request.method == "POST":
            return httpx.Response(
                200, json={"id": "cs_test_9", "url": "https://checkout.stripe.com/c/cs_test_9"}
            )
        return httpx.Response(
            200, json={"id": "cs_test_9", "payment_status": "paid", "metadata": {}}
        )

    checkout = StripeCheckoutClient("sk_test_integration")
    checkout._client = httpx.Client(
        base_url="https://api.stripe.com", transport=httpx.MockTransport(stripe_api)
    )

    app = create_app(Settings(db_path=temp_db_path, admin_token="integration-token"))

    def override_get_checkout_client():
        yield checkout

    app.dependency_overrides[get_checkout_client] = override_get_checkout_client
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client
    checkout.close()


@pytest.fixture
def course_id(client: TestClient) -> str:
    response = client.post(
        "/api/v1/courses",
        json={"title": "Python for Kids", "slug": "python-kids", "price_number": 350},
        headers=ADMIN,
    )
    course_id = response.json()["data"]["id"]
    for location, day, start in [
        ("Center A", "Sunday", "17:00"),
        ("Center A", "Tuesday", "18:00"),
        ("Center B", "Monday", "16:00"),
    ]:
        client.post(
            f"/api/v1/courses/{course_id}/schedules",
            json={"location": location, "day_of_week": day, "start_time": start},
            headers=ADMIN,
        )
    return course_id


@pytest.mark.integration
class TestRegistrationFunnel:
    """Catalog setup through a stored registration and its handling."""

    def test_registration_full_flow(self, client: TestClient, course_id: str) -> None:
        # 1. Periods: only the active one is offered
        client.post(
            f"/api/v1/courses/{course_id}/periods",
            json={"name": "סמסטר א", "start_date": "2025-09-01", "end_date": "2026-01-31"},
            headers=ADMIN,
        )
        client.post(
            f"/api/v1/courses/{course_id}/periods",
            json={
                "name": "ישן",
                "start_date": "2024-09-01",
                "end_date": "2025-01-31",
                "is_active": False,
            },
            headers=ADMIN,
        )

        # 2. Options cascade
        options = client.get(f"/api/v1/courses/{course_id}/registration-options").json()["data"]
        assert options["locations"] == ["Center A", "Center B"]
        assert options["periods"] == ["סמסטר א"]

        options = client.get(
            f"/api/v1/courses/{course_id}/registration-options",
            params={"location": "Center A"},
        ).json()["data"]
        assert options["time_slots"] == ["Sunday 17:00", "Tuesday 18:00"]

        # 3. Submit
        submitted = client.post(
            "/api/v1/registrations",
            json={
                "name": "דנה לוי",
                "phone": "050-1234567",
                "email": "dana@tichnuta.co.il",
                "course": "Python for Kids",
                "location": "Center A",
                "grade": "ה",
                "time": "Tuesday 18:00",
                "gender": "בנות",
                "learning_period": "סמסטר א",
            },
        )
        assert submitted.status_code == 201
        registration_id = submitted.json()["data"]["id"]

        # 4. Back office sees and handles it
        listed = client.get("/api/v1/registrations", headers=ADMIN).json()["data"]
        assert [r["id"] for r in listed] == [registration_id]
        assert listed[0]["learning_period"] == "סמסטר א"

        client.patch(
            f"/api/v1/registrations/{registration_id}",
            json={"status": "contacted"},
            headers=ADMIN,
        )
        stats = client.get("/api/v1/admin/stats", headers=ADMIN).json()["data"]
        assert stats["registrations"] == {"new": 0, "contacted": 1, "closed": 0}

    def test_invalid_submission_not_stored(self, client: TestClient) -> None:
        response = client.post("/api/v1/registrations", json={"name": "ד", "phone": "abc"})

        assert response.status_code == 422
        assert {"name", "phone", "email", "course"} <= set(response.json()["fields"])
        assert client.get("/api/v1/registrations", headers=ADMIN).json()["data"] == []


@pytest.mark.integration
class TestLessonForum:
    """Lessons and their forum over one database."""

    def test_forum_flow(self, client: TestClient, course_id: str) -> None:
        lesson = client.post(
            f"/api/v1/courses/{course_id}/lessons",
            json={"title": "לולאות", "order_index": 1},
            headers=ADMIN,
        ).json()["data"]
        thread = client.post(
            f"/api/v1/lessons/{lesson['id']}/threads",
            json={"title": "שאלה", "body": "מה זה range?"},
            headers=USER,
        ).json()["data"]
        client.post(
            f"/api/v1/threads/{thread['id']}/replies", json={"body": "טווח מספרים"}, headers=USER
        )

        threads = client.get(f"/api/v1/lessons/{lesson['id']}/threads").json()["data"]
        assert threads[0]["replies_count"] == 1

        # Deleting the lesson removes its threads
        assert client.delete(f"/api/v1/lessons/{lesson['id']}", headers=ADMIN).status_code == 204
        assert client.get(f"/api/v1/threads/{thread['id']}").status_code == 404


@pytest.mark.integration
class TestCourseAccess:
    """Granting an address access, then watching and finishing lessons."""

    def test_granted_email_flow(self, client: TestClient, course_id: str) -> None:
        preview = client.post(
            f"/api/v1/courses/{course_id}/lessons",
            json={"title": "היכרות", "order_index": 0, "is_preview": True},
            headers=ADMIN,
        ).json()["data"]
        lesson = client.post(
            f"/api/v1/courses/{course_id}/lessons",
            json={"title": "תנאים", "order_index": 1, "video_url": "https://v.example/2"},
            headers=ADMIN,
        ).json()["data"]
        student = {**USER, "X-User-Email": "Noa@Tichnuta.co.il"}

        listed = client.get(f"/api/v1/courses/{course_id}/lessons", headers=student).json()
        assert [item["locked"] for item in listed["data"]] == [False, True]
        assert listed["data"][1]["video_url"] is None

        granted = client.post(
            f"/api/v1/courses/{course_id}/allowed-emails",
            json={"emails": ["noa@tichnuta.co.il"]},
            headers=ADMIN,
        )
        assert granted.status_code == 201

        fetched = client.get(f"/api/v1/lessons/{lesson['id']}", headers=student)
        assert fetched.json()["data"]["video_url"] == "https://v.example/2"
        saved = client.put(
            f"/api/v1/lessons/{lesson['id']}/progress",
            json={"completed": True, "watch_time_seconds": 300},
            headers=student,
        )
        assert saved.status_code == 200
        assert saved.json()["data"]["completed_at"] is not None

        listed = client.get(f"/api/v1/courses/{course_id}/lessons", headers=student).json()
        assert listed["data"][0]["id"] == preview["id"]
        assert listed["data"][1]["progress"]["completed"] is True

        # Revoking locks the lesson again
        entry_id = granted.json()["data"]["added"][0]["id"]
        assert client.delete(f"/api/v1/allowed-emails/{entry_id}", headers=ADMIN).status_code == 204
        assert client.get(f"/api/v1/lessons/{lesson['id']}", headers=student).status_code == 403


@pytest.mark.integration
class TestCheckout:
    """Checkout against a fake Stripe API."""

    def test_checkout_and_verify(
        self, client: TestClient, course_id: str, stripe_requests: list[httpx.Request]
    ) -> None:
        lesson = client.post(
            f"/api/v1/courses/{course_id}/lessons", json={"title": "משתנים"}, headers=ADMIN
        ).json()["data"]
        assert client.get(f"/api/v1/lessons/{lesson['id']}", headers=USER).status_code == 403

        created = client.post(
            "/api/v1/payments/checkout",
            json={"course_id": course_id},
            headers={**USER, "Origin": "https://tichnuta.co.il"},
        )
        assert created.status_code == 201

        form = parse_qs(stripe_requests[0].content.decode())
        assert form["line_items[0][price_data][unit_amount]"] == ["35000"]
        assert form["line_items[0][price_data][currency]"] == ["ils"]
        assert form["metadata[userId]"] == ["parent-1"]
        assert stripe_requests[0].headers["Authorization"] == "Bearer sk_test_integration"

        verified = client.post("/api/v1/payments/verify", params={"session_id": "cs_test_9"})
        assert verified.json()["data"] == {"paid": True, "course_id": course_id}

        # A completed purchase opens the lessons
        assert client.get(f"/api/v1/lessons/{lesson['id']}", headers=USER).status_code == 200
        my_courses = client.get("/api/v1/me/courses", headers=USER).json()["data"]
        assert [c["id"] for c in my_courses] == [course_id]

        again = client.post(
            "/api/v1/payments/checkout", json={"course_id": course_id}, headers=USER
        )
        assert again.status_code == 409


@pytest.mark.integration
class TestOpenAPIDocs:
    """OpenAPI documentation is served."""

    def test_openapi_lists_routes(self, client: TestClient) -> None:
        paths = client.get("/openapi.json").json()["paths"]

        assert "/api/v1/registrations" in paths
        assert "/api/v1/courses/{course_id}/registration-options" in paths
        assert "/api/v1/chat/sessions/{session_id}/stream" in paths
        assert "/api/v1/schools/{school_id}/courses" in paths
        assert "/api/v1/lessons/{lesson_id}/progress" in paths
