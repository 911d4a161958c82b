"""HTTP tests for the transactional email endpoints."""

from __future__ import annotations

import pytest

from enrollment_db.crud.course import CourseDAO
from enrollment_db.schemas.course import CourseCreate


@pytest.mark.asyncio
async def test_send_course_welcome(client, run_in_db, mail_sender) -> None:
    course = await run_in_db(
        lambda s: CourseDAO().create(
            s, obj_in=CourseCreate(title="Capacity 101", welcome_email_subject="Hi {{name}}", welcome_email_body="Go: {{login_url}}")
        )
    )

    response = await client.post(
        "/api/send-email", json={"type": "course_welcome", "email": "jo@example.com", "name": "Jo", "course_id": str(course.id)}
    )

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["message"] == "Email sent to jo@example.com"
    mail_sender.send.assert_awaited_once_with(
        to="jo@example.com", subject="Hi Jo", body="Go: https://school.example.com/login"
    )


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("body", "status", "error"),
    [
        ({"email": "jo@example.com"}, 400, "Missing type or email"),
        ({"type": "course_welcome"}, 400, "Missing type or email"),
        ({"type": "newsletter", "email": "jo@example.com"}, 400, "Invalid email type"),
        ({"type": "course_welcome", "email": "jo@example.com"}, 400, "Invalid email type"),
        (
            {"type": "course_welcome", "email": "jo@example.com", "course_id": "00000000-0000-0000-0000-000000000001"},
            404,
            "Course not found",
        ),
    ],
)
async def test_send_email_rejections(client, mail_sender, body, status, error) -> None:
    response = await client.post("/api/send-email", json=body)

    assert response.status_code == status
    assert response.json()["error"] == error
    mail_sender.send.assert_not_awaited()


@pytest.mark.asyncio
async def test_test_email_defaults_to_sender_address(client, mail_sender) -> None:
    response = await client.post("/api/test-email", json={})

    assert response.status_code == 200
    assert mail_sender.send.await_args.kwargs["to"] == "team@example.com"


@pytest.mark.asyncio
async def test_test_email_failure(client, mail_sender) -> None:
    mail_sender.send.return_value = False

    response = await client.post("/api/test-email", json={"to": "x@example.com"})

    assert response.status_code == 500
    assert response.json()["code"] == "send_failed"


@pytest.mark.asyncio
async def test_merge_tags_listing(client) -> None:
    response = await client.get("/api/email/merge-tags")

    assert response.status_code == 200
    tags = response.json()["tags"]
    assert {"tag": "{{name}}", "label": "Name", "description": "Participant's name"} in tags
    assert all("fallback" not in tag for tag in tags)
