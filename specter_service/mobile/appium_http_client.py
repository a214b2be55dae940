from __future__ import annotations

import base64
import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import requests

from ..models.constants import DEFAULTS

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = DEFAULTS["SHELL_TIMEOUT_MS"] / 1000


class AppiumHTTPError(RuntimeError):
    def __init__(
        self,
        *,
        message: str,
        method: str,
        url: str,
        status_code: Optional[int] = None,
        response_json: Optional[dict[str, Any]] = None,
        response_text: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.url = url
        self.status_code = status_code
        self.response_json = response_json
        self.response_text = response_text


def _unwrap_value(payload: dict[str, Any]) -> Any:
    # W3C responses wrap the result in {"value": ...}
    return payload["value"] if "value" in payload else payload


class AppiumHTTPClient:
    """
    Read-only WebDriver client for an Appium server.

    Covers session lifecycle, page source and screenshots. No gestures.
    """

    def __init__(self, server_url: str, *, timeout_s: float = DEFAULT_TIMEOUT_S) -> None:
        if not server_url:
            raise ValueError("server_url is required")
        self.server_url = server_url.rstrip("/")
        self.timeout_s = timeout_s
        self.session_id: Optional[str] = None
        self._http = requests.Session()

    def _request(self, method: str, path: str, *, json: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        url = f"{self.server_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            response = self._http.request(method, url, json=json, timeout=self.timeout_s)
        except requests.RequestException as e:
            raise AppiumHTTPError(
                message=f"Failed to call Appium server: {e}",
                method=method,
                url=url,
            ) from e

        response_json: Optional[dict[str, Any]] = None
        response_text: Optional[str] = None
        try:
            parsed = response.json()
            if isinstance(parsed, dict):
                response_json = parsed
            else:
                response_text = response.text
        except ValueError:
            response_text = response.text

        if response.status_code >= 400:
            details = None
            if response_json is not None:
                value = _unwrap_value(response_json)
                if isinstance(value, dict):
                    details = value.get("message") or value.get("error")
            raise AppiumHTTPError(
                message=f"Appium HTTP {response.status_code} for {method} {path}"
                + (f": {details}" if details else ""),
                method=method,
                url=url,
                status_code=response.status_code,
                response_json=response_json,
                response_text=response_text,
            )

        if response_json is None:
            raise AppiumHTTPError(
                message=f"Appium returned non-JSON response for {method} {path}",
                method=method,
                url=url,
                status_code=response.status_code,
                response_text=response_text,
            )
        return response_json

    def _session_value(self, method: str, suffix: str, expected: type, what: str) -> Any:
        if not self.session_id:
            raise RuntimeError("No active Appium session. Call create_session() first.")
        path = f"/session/{self.session_id}{suffix}"
        response = self._request(method, path)
        value = _unwrap_value(response)
        if not isinstance(value, expected):
            raise AppiumHTTPError(
                message=f"Unexpected {what} response shape (expected {expected.__name__})",
                method=method,
                url=f"{self.server_url}{path}",
                response_json=response,
            )
        return value

    def create_session(self, session_payload: dict[str, Any]) -> str:
        """
        Create a session from a WebDriver payload, usually
        {"capabilities": {"alwaysMatch": {...}, "firstMatch": [{}]}}.
        """
        if not isinstance(session_payload, dict) or not session_payload:
            raise ValueError("session_payload must be a non-empty dict")

        response = self._request("POST", "/session", json=session_payload)
        value = _unwrap_value(response)
        session_id = value.get("sessionId") if isinstance(value, dict) else None
        session_id = session_id or response.get("sessionId")
        if not session_id:
            raise AppiumHTTPError(
                message="Appium did not return a sessionId in the create_session response",
                method="POST",
                url=f"{self.server_url}/session",
                response_json=response,
            )

        self.session_id = str(session_id)
        logger.info("Appium session %s created", self.session_id)
        return self.session_id

    def delete_session(self) -> None:
        if not self.session_id:
            return
        session_id = self.session_id
        try:
            self._request("DELETE", f"/session/{session_id}")
        finally:
            self.session_id = None
            logger.info("Appium session %s closed", session_id)

    @contextmanager
    def session(self, session_payload: dict[str, Any]) -> Iterator["AppiumHTTPClient"]:
        self.create_session(session_payload)
        try:
            yield self
        finally:
            self.delete_session()

    def get_page_source(self) -> str:
        return self._session_value("GET", "/source", str, "/source")

    def get_screenshot_png_bytes(self) -> bytes:
        encoded = self._session_value("GET", "/screenshot", str, "/screenshot")
        try:
            return base64.b64decode(encoded, validate=True)
        except ValueError as e:
            raise AppiumHTTPError(
                message=f"Failed to decode screenshot base64: {e}",
                method="GET",
                url=f"{self.server_url}/session/{self.session_id}/screenshot",
            ) from e

