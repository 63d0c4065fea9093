"""
Student Records API Client
==========================

Thin synchronous wrapper over the HTTP API. The session cookie issued by
POST /login is kept in an httpx cookie jar and persisted to
``CLIConfig.cookie_file`` so separate CLI invocations share one login.

Errors:
    UnauthorizedError   401 - caller must log in again
    ValidationFailed    400 - ``errors`` holds the field errors
    NotFoundError       404
    ApiError            anything else (including connection failures)
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

from cli.config import CLIConfig


class ApiError(Exception):
    """Request failed"""

    def __init__(self, message: str, status_code: Optional[int] = None, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = errors or []


class UnauthorizedError(ApiError):
    pass


class ValidationFailed(ApiError):
    pass


class NotFoundError(ApiError):
    pass


ERRORS_BY_STATUS = {
    400: ValidationFailed,
    401: UnauthorizedError,
    404: NotFoundError,
}


class StudentRecordsClient:
    """Cookie-carrying client for /api"""

    def __init__(self, config: CLIConfig, transport: Optional[httpx.BaseTransport] = None):
        self.config = config
        self.client = httpx.Client(
            base_url=config.api_base_url.rstrip("/"),
            timeout=config.timeout,
            transport=transport,
        )
        self._load_cookies()

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "StudentRecordsClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ==================== Cookie persistence ====================

    def _load_cookies(self) -> None:
        path = Path(self.config.cookie_file)
        if not path.exists():
            return
        try:
            with open(path) as f:
                saved = json.load(f)
        except (OSError, json.JSONDecodeError):
            return
        for name, value in saved.items():
            self.client.cookies.set(name, value)

    def _save_cookies(self) -> None:
        cookies = {cookie.name: cookie.value for cookie in self.client.cookies.jar}
        path = Path(self.config.cookie_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(cookies, f)

    def clear_session(self) -> None:
        """Forget the local session cookie"""
        self.client.cookies.clear()
        path = Path(self.config.cookie_file)
        if path.exists():
            path.unlink()

    @property
    def has_session(self) -> bool:
        return any(True for _ in self.client.cookies.jar)

    # ==================== Transport ====================

    def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = self.client.request(method, path, **kwargs)
        except httpx.ConnectError as e:
            raise ApiError(f"Cannot connect to server at {self.config.api_base_url}") from e
        except httpx.TimeoutException as e:
            raise ApiError("Request timed out") from e

        if response.status_code == 401:
            self.clear_session()
        else:
            self._save_cookies()

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_success:
            return body

        message = body.get("message") if isinstance(body, dict) else None
        errors = body.get("errors") if isinstance(body, dict) else None
        error_class = ERRORS_BY_STATUS.get(response.status_code, ApiError)
        raise error_class(
            message or f"Request failed ({response.status_code})",
            status_code=response.status_code,
            errors=errors,
        )

    # ==================== Auth ====================

    def login(self, username: str, password: str) -> Dict[str, Any]:
        """Log in and persist the session cookie; returns the user"""
        data = self._request("POST", "/login", json={"username": username, "password": password})
        return data["user"]

    def logout(self) -> None:
        try:
            self._request("POST", "/logout")
        finally:
            self.clear_session()

    def current_user(self) -> Dict[str, Any]:
        return self._request("GET", "/auth/user")

    # ==================== Students ====================

    def list_students(
        self,
        search: Optional[str] = None,
        class_name: Optional[str] = None,
        rank: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        params = {}
        if search:
            params["search"] = search
        if class_name:
            params["class"] = class_name
        if rank:
            params["rank"] = rank
        return self._request("GET", "/students", params=params)

    def get_stats(self) -> Dict[str, Any]:
        return self._request("GET", "/students/stats")

    def get_student(self, student_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/students/{student_id}")

    def create_student(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/students", json=data)

    def update_student(self, student_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/students/{student_id}", json=data)

    def delete_student(self, student_id: str) -> None:
        self._request("DELETE", f"/students/{student_id}")
