"""HTTP client for the GymHub API.

Server-reported failures surface as :class:`ApiError` with the server's message
verbatim; requests that never got a response surface as
:class:`ConnectionFailed`. Nothing is ever substituted for a failed call.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .session import SessionContext, SessionStore, Shell, resolve_shell

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3001"


class ApiError(Exception):
    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class ConnectionFailed(Exception):
    def __init__(self, cause: Optional[BaseException] = None) -> None:
        self.cause = cause
        super().__init__("connection failed")


def _is_gate_rejection(status_code: int, message: str) -> bool:
    return status_code == 401 or (status_code == 403 and message == "Invalid token")


class GymHubClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        store: Optional[SessionStore] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.store = store
        self.context: Optional[SessionContext] = store.load() if store is not None else None
        self._http = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def __enter__(self) -> "GymHubClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    @property
    def shell(self) -> Shell:
        return resolve_shell(self.context)

    # --- session ----------------------------------------------------------

    def login_platform_operator(self, email: str, password: str) -> SessionContext:
        return self._login("/api/auth/login", email, password)

    def login_gym_admin(self, email: str, password: str) -> SessionContext:
        return self._login("/api/gym-auth/login", email, password)

    def _login(self, path: str, email: str, password: str) -> SessionContext:
        payload = self.request("POST", path, json={"email": email, "password": password}, authenticated=False)
        context = SessionContext.from_payload(payload)
        self.context = context
        if self.store is not None:
            self.store.save(context)
        return context

    def logout(self) -> None:
        """Forget the session locally; the token stays valid server-side until it expires."""
        self.context = None
        if self.store is not None:
            self.store.clear()

    # --- requests ---------------------------------------------------------

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> Any:
        headers = {}
        if authenticated and self.context is not None:
            headers["Authorization"] = f"Bearer {self.context.token}"
        try:
            response = self._http.request(method, path, json=json, params=params, headers=headers)
        except httpx.TransportError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ConnectionFailed(exc) from exc

        if response.is_success:
            if response.status_code == 204 or not response.content:
                return None
            return response.json()

        message = self._error_message(response)
        if authenticated and _is_gate_rejection(response.status_code, message):
            self.logout()
        raise ApiError(response.status_code, message)

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason_phrase
        if isinstance(body, dict) and isinstance(body.get("error"), str):
            return body["error"]
        return response.reason_phrase

    def get(self, path: str, **params: Any) -> Any:
        return self.request("GET", path, params=params or None)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    # --- tenant helpers ---------------------------------------------------

    def gym_path(self, resource: str) -> str:
        """Path to a resource of the logged-in gym admin's own gym."""
        if self.context is None or self.context.tenant_id is None:
            raise ApiError(401, "Access token required")
        return f"/api/gym/{self.context.tenant_id}/{resource.lstrip('/')}"
