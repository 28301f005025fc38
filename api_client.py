"""
api_client.py
Thin HTTP client for the ChatNotePad backend:
- JSON POST with a bounded timeout
- optional bearer credentials (guest mode sends none)
- errors surface as requests exceptions for the caller to classify
"""

from __future__ import annotations
from typing import Any, Callable, Dict, Optional

import requests

import config as _cfg
from utils.logger import get_logger

log = get_logger(__name__)

TokenProvider = Callable[[], Optional[str]]


def env_token() -> Optional[str]:
    """Token from CHATNOTEPAD_API_TOKEN, or None for guest usage."""
    return getattr(_cfg, "API_TOKEN", None)


class ApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        token_provider: TokenProvider = env_token,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = (base_url or getattr(_cfg, "API_URL", "http://localhost:8000")).rstrip("/")
        self.timeout = timeout if timeout is not None else getattr(_cfg, "REQUEST_TIMEOUT", 30)
        self.token_provider = token_provider
        self.session = session or requests.Session()
        self.session.headers.setdefault("Content-Type", "application/json")

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self) -> Dict[str, str]:
        token = self.token_provider() if self.token_provider else None
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    def post_json(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST `payload` as JSON and return the decoded object.
        Raises requests.Timeout / ConnectionError / HTTPError on failure.
        """
        url = self.url(path)
        headers = self._headers()
        log.debug("POST %s (auth=%s)", url, "yes" if headers else "guest")

        response = self.session.post(url, json=payload, headers=headers, timeout=self.timeout)
        if response.status_code == 401:
            log.warning("Backend rejected credentials for %s", url)
        response.raise_for_status()

        try:
            data = response.json()
        except ValueError:
            log.warning("Non-JSON response from %s", url)
            return {}
        return data if isinstance(data, dict) else {}
