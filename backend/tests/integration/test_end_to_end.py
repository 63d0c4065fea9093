"""
End-to-end flows over the HTTP API
"""
import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_login_and_session_cookie_flow(client: AsyncClient):
    ok = await client.post("/api/login", json={"username": "admin", "password": "pass123"})
    assert ok.status_code == 200
    assert ok.json()["user"]["username"] == "admin"
    session_cookie = dict(client.cookies)

    bad = await client.post("/api/login", json={"username": "admin", "password": "wrongpass"})
    assert bad.status_code == 401

    client.cookies.clear()
    assert (await client.get("/api/students")).status_code == 401

    for name, value in session_cookie.items():
        client.cookies.set(name, value)
    response = await client.get("/api/students")
    assert response.status_code == 200
    assert isinstance(response.json(), list)


@pytest.mark.asyncio
async def test_jane_doe_lifecycle(auth_client: AsyncClient):
    created = await auth_client.post("/api/students", json={
        "name": "Jane Doe",
        "class": "Grade 3",
        "address": "1 Main St",
        "phone": "(555) 123-4567",
        "rank": "good",
    })
    assert created.status_code == 201
    student_id = created.json()["id"]

    good = (await auth_client.get("/api/students", params={"rank": "good"})).json()
    assert student_id in [s["id"] for s in good]

    deleted = await auth_client.delete(f"/api/students/{student_id}")
    assert deleted.status_code == 200

    assert (await auth_client.get(f"/api/students/{student_id}")).status_code == 404


@pytest.mark.asyncio
async def test_stats_total_tracks_list_length(auth_client: AsyncClient, student_payload):
    ids = []
    for _ in range(4):
        ids.append((await auth_client.post("/api/students", json=student_payload())).json()["id"])
    await auth_client.put(f"/api/students/{ids[0]}", json=student_payload())
    await auth_client.delete(f"/api/students/{ids[1]}")
    await auth_client.delete(f"/api/students/{ids[1]}")

    stats = (await auth_client.get("/api/students/stats")).json()
    students = (await auth_client.get("/api/students")).json()

    assert stats["totalStudents"] == len(students) == 3


@pytest.mark.asyncio
async def test_health_endpoints(client: AsyncClient):
    root = await client.get("/")
    health = await client.get("/health")
    ready = await client.get("/health/ready")

    assert root.status_code == 200
    assert health.json()["status"] == "healthy"
    assert ready.status_code == 200
    assert ready.json()["database"] == "ok"
