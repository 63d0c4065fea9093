"""
Fixtures for CLI tests: an in-memory fake of the HTTP API behind httpx.MockTransport
"""
import io
import json
import re
import uuid
from datetime import datetime, timezone

import httpx
import pytest
from rich.console import Console

from cli.config import CLIConfig


PHONE = re.compile(r"^\([0-9]{3}\) [0-9]{3}-[0-9]{4}$")
COOKIE = "student_mgmt_session"
FIELDS = ("name", "class", "address", "phone", "rank")


class FakeApi:
    """Just enough of /api to drive the client"""

    def __init__(self):
        self.students = []
        self.token = None
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api")

        if path == "/login" and request.method == "POST":
            body = json.loads(request.content)
            if body.get("username") == "admin" and body.get("password") == "pass123":
                self.token = uuid.uuid4().hex
                return httpx.Response(
                    200,
                    json={"message": "Login successful", "user": {"id": "u1", "username": "admin",
                                                                  "firstName": "Admin", "lastName": "User"}},
                    headers={"set-cookie": f"{COOKIE}={self.token}; HttpOnly; Path=/; SameSite=lax"},
                )
            return httpx.Response(401, json={"message": "Invalid credentials"})

        if path == "/logout":
            self.token = None
            return httpx.Response(
                200, json={"message": "Logout successful"},
                headers={"set-cookie": f'{COOKIE}=""; Max-Age=0; Path=/'},
            )

        if self.token is None or f"{COOKIE}={self.token}" not in request.headers.get("cookie", ""):
            return httpx.Response(401, json={"message": "Unauthorized"})

        if path == "/auth/user":
            return httpx.Response(200, json={"id": "u1", "username": "admin", "firstName": "Admin", "lastName": "User"})
        if path == "/students/stats":
            return httpx.Response(200, json={
                "totalStudents": len(self.students),
                "activeClasses": len({s["class"] for s in self.students}),
                "topPerformers": sum(1 for s in self.students if s["rank"] == "excellent"),
                "newThisMonth": len(self.students),
            })
        if path == "/students" and request.method == "GET":
            params = request.url.params
            rows = [
                s for s in self.students
                if ("search" not in params or params["search"].lower() in s["name"].lower())
                and ("class" not in params or params["class"] == s["class"])
                and ("rank" not in params or params["rank"] == s["rank"])
            ]
            return httpx.Response(200, json=rows)
        if path == "/students" and request.method == "POST":
            body = json.loads(request.content)
            error = self._validate(body)
            if error:
                return error
            now = datetime.now(timezone.utc).replace(tzinfo=None).isoformat()
            student = {"id": str(uuid.uuid4()), **{k: body[k] for k in FIELDS}, "createdAt": now, "updatedAt": now}
            self.students.append(student)
            return httpx.Response(201, json=student)

        student_id = path.rsplit("/", 1)[-1]
        student = next((s for s in self.students if s["id"] == student_id), None)
        if student is None:
            return httpx.Response(404, json={"message": "Student not found"})
        if request.method == "GET":
            return httpx.Response(200, json=student)
        if request.method == "PUT":
            body = json.loads(request.content)
            error = self._validate(body)
            if error:
                return error
            student.update({k: body[k] for k in FIELDS})
            return httpx.Response(200, json=student)
        if request.method == "DELETE":
            self.students.remove(student)
            return httpx.Response(200, json={"message": "Student deleted successfully"})
        return httpx.Response(405, json={"message": "Method not allowed"})

    def _validate(self, body):
        if not PHONE.match(body.get("phone") or ""):
            return httpx.Response(400, json={
                "message": "Validation error",
                "errors": [{"field": "phone", "message": "String should match pattern", "type": "string_pattern_mismatch"}],
            })
        return None

    def add(self, **fields):
        now = datetime.now(timezone.utc).replace(tzinfo=None).isoformat()
        student = {"id": str(uuid.uuid4()), "createdAt": now, "updatedAt": now, **fields}
        self.students.append(student)
        return student

    def paths(self, method: str = None):
        return [r.url.path for r in self.requests if method is None or r.method == method]


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def transport(fake_api: FakeApi) -> httpx.MockTransport:
    return httpx.MockTransport(fake_api)


@pytest.fixture
def cli_config(tmp_path) -> CLIConfig:
    return CLIConfig(api_base_url="http://testserver/api", config_dir=str(tmp_path / "cfg"))


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=200, force_terminal=False, color_system=None)


