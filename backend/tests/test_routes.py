"""
DocTrack Backend — HTTP Endpoint Tests
========================================

What:  Exercises the routes through HTTPX + ASGITransport, against SQLite
       and the fake notifier.

What we test:
    ✅ Full lifecycle: register → duplicate → list → mark ready → delete → list
    ✅ Status codes and messages for every failure class
    ✅ Error body shape and X-Request-ID header
    ✅ Banner and health endpoints
"""

import pytest
from sqlalchemy import select

from app.models.notification import Notification
from app.services.notifier import DeliveryStatus


async def add(client, name="Alice", email="a@b.com", request_type="transcript"):
    return await client.post(
        "/add-student",
        json={"name": name, "email": email, "request_type": request_type},
    )


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_register_mark_ready_delete(self, test_client, database, fake_notifier):
        response = await add(test_client)
        assert response.status_code == 201
        assert response.json() == {"message": "Student added and confirmation email sent!"}

        response = await add(test_client)
        assert response.status_code == 400
        assert response.json()["error"] == "Request already exists for this student."

        response = await test_client.get("/students")
        assert response.status_code == 200
        rows = response.json()
        assert len(rows) == 1
        student = rows[0]
        assert student["name"] == "Alice"
        assert student["email"] == "a@b.com"
        assert student["request_type"] == "transcript"
        assert student["request_ready"] is False

        response = await test_client.post("/mark-ready", json={"student_id": student["id"]})
        assert response.status_code == 200
        assert response.json() == {"message": "Student marked as ready and notification email sent!"}

        rows = (await test_client.get("/students")).json()
        assert rows[0]["request_ready"] is True

        async with database.session_factory() as session:
            records = (await session.execute(select(Notification))).scalars().all()
        assert len(records) == 1
        assert records[0].email_sent is True

        response = await test_client.request(
            "DELETE", "/delete-student", json={"student_id": student["id"]}
        )
        assert response.status_code == 200
        assert response.json() == {"message": "Student deleted successfully."}

        assert (await test_client.get("/students")).json() == []
        assert [m["subject"] for m in fake_notifier.sent] == [
            "Application Received",
            "Your transcript is Ready",
        ]


class TestAddStudent:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"email": "a@b.com", "request_type": "transcript"},
            {"name": "Alice", "request_type": "transcript"},
            {"name": "Alice", "email": "a@b.com"},
        ],
    )
    async def test_missing_fields(self, test_client, body):
        response = await test_client.post("/add-student", json=body)
        assert response.status_code == 400
        assert response.json()["error"] == "Name, email, and request type are required"
        assert response.json()["code"] == "validation_error"

    @pytest.mark.asyncio
    async def test_no_body(self, test_client):
        response = await test_client.post("/add-student")
        assert response.status_code == 400
        assert response.json()["error"] == "Name, email, and request type are required"

    @pytest.mark.asyncio
    async def test_invalid_email(self, test_client):
        response = await add(test_client, email="alice.example.com")
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid email format"

    @pytest.mark.asyncio
    async def test_invalid_request_type(self, test_client):
        response = await add(test_client, request_type="diploma")
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request type."

    @pytest.mark.asyncio
    async def test_malformed_json(self, test_client):
        response = await test_client.post(
            "/add-student",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request body."

    @pytest.mark.asyncio
    async def test_numeric_name_taken_as_text(self, test_client):
        response = await test_client.post(
            "/add-student",
            json={"name": 123, "email": "a@b.com", "request_type": "transcript"},
        )
        assert response.status_code == 201
        assert (await test_client.get("/students")).json()[0]["name"] == "123"

    @pytest.mark.asyncio
    async def test_numeric_email_goes_through_validator(self, test_client):
        response = await add(test_client, email=42)
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid email format"

    @pytest.mark.asyncio
    async def test_email_failure_returns_500_and_keeps_row(self, test_client, fake_notifier):
        fake_notifier.fail_with(DeliveryStatus.TRANSPORT_FAILED, "connection refused")

        response = await add(test_client)

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Email service unavailable."
        assert "connection refused" not in response.text
        rows = (await test_client.get("/students")).json()
        assert len(rows) == 1


class TestMarkReady:

    @pytest.mark.asyncio
    async def test_missing_id(self, test_client):
        response = await test_client.post("/mark-ready", json={})
        assert response.status_code == 400
        assert response.json()["error"] == "Student ID is required."

    @pytest.mark.asyncio
    async def test_unknown_id(self, test_client):
        response = await test_client.post("/mark-ready", json={"student_id": 12345})
        assert response.status_code == 404
        assert response.json()["error"] == "Student not found."
        assert response.json()["code"] == "not_found"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("student_id", [10**20, 2**31, 0, -1])
    async def test_id_outside_column_range(self, test_client, fake_notifier, student_id):
        response = await test_client.post("/mark-ready", json={"student_id": student_id})
        assert response.status_code == 404
        assert response.json()["error"] == "Student not found."
        assert fake_notifier.sent == []

    @pytest.mark.asyncio
    async def test_boolean_id_rejected(self, test_client, fake_notifier):
        await add(test_client)

        response = await test_client.post("/mark-ready", json={"student_id": True})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request body."
        assert (await test_client.get("/students")).json()[0]["request_ready"] is False
        assert len(fake_notifier.sent) == 1

    @pytest.mark.asyncio
    async def test_email_failure(self, test_client, database, fake_notifier):
        await add(test_client)
        student = (await test_client.get("/students")).json()[0]
        fake_notifier.fail_with(DeliveryStatus.AUTH_FAILED)

        response = await test_client.post("/mark-ready", json={"student_id": student["id"]})

        assert response.status_code == 500
        assert response.json()["error"] == "Email service unavailable."
        assert (await test_client.get("/students")).json()[0]["request_ready"] is True
        async with database.session_factory() as session:
            records = (await session.execute(select(Notification))).scalars().all()
        assert records == []


class TestDeleteStudent:

    @pytest.mark.asyncio
    async def test_missing_id(self, test_client):
        response = await test_client.request("DELETE", "/delete-student", json={})
        assert response.status_code == 400
        assert response.json()["error"] == "Student ID is required."

    @pytest.mark.asyncio
    async def test_unknown_id(self, test_client):
        response = await test_client.request("DELETE", "/delete-student", json={"student_id": 7})
        assert response.status_code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize("student_id", [10**20, 2**31])
    async def test_id_outside_column_range(self, test_client, student_id):
        response = await test_client.request(
            "DELETE", "/delete-student", json={"student_id": student_id}
        )
        assert response.status_code == 404
        assert response.json()["error"] == "Student not found."

    @pytest.mark.asyncio
    async def test_boolean_id_rejected(self, test_client):
        await add(test_client)

        response = await test_client.request("DELETE", "/delete-student", json={"student_id": True})

        assert response.status_code == 400
        assert len((await test_client.get("/students")).json()) == 1


class TestServiceRoutes:

    @pytest.mark.asyncio
    async def test_banner(self, test_client):
        response = await test_client.get("/")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "Hello! Your HTTPS setup is working 🚀"

    @pytest.mark.asyncio
    async def test_health_connected(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_request_id_header_echoed(self, test_client):
        response = await test_client.post(
            "/mark-ready", json={"student_id": 1}, headers={"X-Request-ID": "abc123"}
        )
        assert response.headers["X-Request-ID"] == "abc123"
        assert response.json()["request_id"] == "abc123"

    @pytest.mark.asyncio
    async def test_request_id_generated(self, test_client):
        response = await test_client.get("/")
        assert len(response.headers["X-Request-ID"]) == 8
