"""Thin ``requests`` wrapper around the two chat endpoints."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

DEFAULT_TIMEOUT = 60  # seconds; the backend itself never times out the model call


class ChatApiError(Exception):
    """Backend answered with an error status (or could not be reached)."""

    def __init__(self, status: Optional[int], message: str):
        super().__init__(message)
        self.status = status
        self.message = message


class ChatApiClient:
    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _handle(self, resp: requests.Response) -> Dict[str, Any]:
        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not resp.ok:
            raise ChatApiError(resp.status_code, data.get("error") or f"HTTP {resp.status_code}")
        return data

    def send_message(self, message: str, session_id: Optional[str] = None) -> Dict[str, str]:
        """POST a message; returns ``{"reply": ..., "sessionId": ...}``."""
        payload: Dict[str, Any] = {"message": message}
        if session_id:
            payload["sessionId"] = session_id
        try:
            resp = requests.post(f"{self.base_url}/chat/message", json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise ChatApiError(None, f"Network error: {e}") from e
        return self._handle(resp)

    def fetch_history(self, session_id: str) -> List[Dict[str, Any]]:
        """Return every stored message of ``session_id``, oldest first."""
        try:
            resp = requests.get(
                f"{self.base_url}/chat/history",
                params={"sessionId": session_id},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ChatApiError(None, f"Network error: {e}") from e
        return self._handle(resp).get("messages", [])
