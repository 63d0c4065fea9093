"""
Unit Tests for the CLI API client
"""
import json
import os
from pathlib import Path

import httpx
import pytest

from cli.api_client import (
    ApiError,
    NotFoundError,
    StudentRecordsClient,
    UnauthorizedError,
    ValidationFailed,
)
from cli.config import CLIConfig


class TestConfig:

    def test_cookie_file_under_config_dir(self, cli_config: CLIConfig):
        assert Path(cli_config.cookie_file).parent == Path(cli_config.config_dir)

    def test_env_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("STUDENTRECORDS_API_URL", "http://example.test/api")

        config = CLIConfig.load_default(config_dir=str(tmp_path))

        assert config.api_base_url == "http://example.test/api"

    def test_save_and_load(self, tmp_path, monkeypatch):
        monkeypatch.delenv("STUDENTRECORDS_API_URL", raising=False)
        config = CLIConfig(config_dir=str(tmp_path), api_base_url="http://saved/api", timeout=5)
        config.save_to_file()

        loaded = CLIConfig.load_default(config_dir=str(tmp_path))

        assert loaded.api_base_url == "http://saved/api"
        assert loaded.timeout == 5


class TestSessionCookie:

    def test_login_returns_user_and_persists_cookie(self, cli_config, transport):
        with StudentRecordsClient(cli_config, transport=transport) as client:
            user = client.login("admin", "pass123")

        assert user["username"] == "admin"
        saved = json.loads(Path(cli_config.cookie_file).read_text())
        assert "student_mgmt_session" in saved

    def test_cookie_shared_between_invocations(self, cli_config, transport):
        with StudentRecordsClient(cli_config, transport=transport) as client:
            client.login("admin", "pass123")

        with StudentRecordsClient(cli_config, transport=transport) as client:
            assert client.has_session
            assert client.current_user()["username"] == "admin"

    def test_bad_login(self, cli_config, transport):
        with StudentRecordsClient(cli_config, transport=transport) as client:
            with pytest.raises(UnauthorizedError) as exc_info:
                client.login("admin", "wrongpass")

        assert exc_info.value.message == "Invalid credentials"
        assert exc_info.value.status_code == 401

    def test_unauthorized_clears_cookie_file(self, cli_config, transport, fake_api):
        with StudentRecordsClient(cli_config, transport=transport) as client:
            client.login("admin", "pass123")
            fake_api.token = None

            with pytest.raises(UnauthorizedError):
                client.list_students()

            assert not client.has_session
        assert not os.path.exists(cli_config.cookie_file)

    def test_logout_clears_cookie(self, cli_config, transport, fake_api):
        with StudentRecordsClient(cli_config, transport=transport) as client:
            client.login("admin", "pass123")
            client.logout()

            assert not client.has_session
        assert fake_api.token is None
        assert not os.path.exists(cli_config.cookie_file)


class TestStudents:

    @pytest.fixture
    def client(self, cli_config, transport):
        with StudentRecordsClient(cli_config, transport=transport) as client:
            client.login("admin", "pass123")
            yield client

    def test_list_sends_only_given_filters(self, client, fake_api):
        client.list_students(search="smi", class_name="Grade 2")

        params = fake_api.requests[-1].url.params
        assert params["search"] == "smi"
        assert params["class"] == "Grade 2"
        assert "rank" not in params

    def test_create_and_get(self, client):
        created = client.create_student({
            "name": "Jane Doe", "class": "Grade 3", "address": "1 Main St",
            "phone": "(555) 123-4567", "rank": "good",
        })

        assert client.get_student(created["id"]) == created

    def test_validation_errors_surface(self, client):
        with pytest.raises(ValidationFailed) as exc_info:
            client.create_student({"name": "X", "class": "Grade 1", "address": "a", "phone": "bad", "rank": "good"})

        assert exc_info.value.status_code == 400
        assert exc_info.value.errors[0]["field"] == "phone"

    def test_not_found(self, client):
        with pytest.raises(NotFoundError):
            client.delete_student("missing")

    def test_connection_error(self, cli_config):
        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        with StudentRecordsClient(cli_config, transport=httpx.MockTransport(refuse)) as client:
            with pytest.raises(ApiError, match="Cannot connect"):
                client.get_stats()
