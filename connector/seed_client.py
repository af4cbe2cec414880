"""HTTP client for the placeholder seed-data endpoint.

The demo backend serves each collection as ``{"<collection>": [...]}`` under
``<base_url>/<collection>``. The client owns a ``requests`` session with a
retry adapter and turns every transport, status or decoding failure into a
``SeedClientError`` so callers have a single exception to handle.
"""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

import requests
from requests import Response
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

__all__ = ["SeedClientError", "SeedClient"]


# Handlers are left to the hosting application.
logger = logging.getLogger(__name__)


DEFAULT_SEED_BASE_URL = os.getenv(
    "CLINIC_SEED_BASE_URL", "https://8667c817-0619-4f3d-86d9-1e52e39e61e6.mock.pstmn.io"
)
DEFAULT_TIMEOUT_SECONDS = float(os.getenv("CLINIC_SEED_TIMEOUT", "10"))
DEFAULT_MAX_RETRIES = int(os.getenv("CLINIC_SEED_MAX_RETRIES", "2"))
DEFAULT_BACKOFF_FACTOR = float(os.getenv("CLINIC_SEED_BACKOFF", "0.5"))


class SeedClientError(RuntimeError):
    """Raised when seed data cannot be fetched or decoded."""


class SeedClient:
    """Fetches seed collections from the demo endpoint."""

    def __init__(
        self,
        base_url: str = DEFAULT_SEED_BASE_URL,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not base_url:
            raise ValueError("base_url must be provided")

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or self._build_session(
            max_retries=max_retries, backoff_factor=backoff_factor
        )

    def __enter__(self) -> "SeedClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    @staticmethod
    def _build_session(*, max_retries: int, backoff_factor: float) -> requests.Session:
        session = requests.Session()
        retry_strategy = Retry(
            total=max_retries,
            read=max_retries,
            connect=max_retries,
            status=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=("GET",),
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    def _get(self, path: str) -> Response:
        if not path:
            raise ValueError("path must be provided")
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = self._session.get(
                url,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("Seed request to %s failed: %s", url, exc)
            raise SeedClientError(f"Failed to fetch {url}") from exc

        if not response.ok:
            self._log_error_response(response)
            raise SeedClientError(
                f"Seed endpoint responded with unexpected status {response.status_code}"
            )
        return response

    @staticmethod
    def _log_error_response(response: Response) -> None:
        logger.error(
            "Seed endpoint error response: status=%s body=%s",
            response.status_code,
            response.text[:2048],
        )

    def fetch_collection(self, name: str) -> List[Dict[str, Any]]:
        """Return the raw rows of collection ``name``."""

        response = self._get(name)
        try:
            payload = response.json()
        except ValueError as exc:
            raise SeedClientError(f"Seed response for '{name}' was not valid JSON") from exc

        if not isinstance(payload, dict):
            raise SeedClientError(f"Seed response for '{name}' must be a JSON object")
        rows = payload.get(name)
        if rows is None:
            logger.warning("Seed response for '%s' has no '%s' key", name, name)
            return []
        if not isinstance(rows, list):
            raise SeedClientError(f"Seed collection '{name}' must be a list")
        return [row for row in rows if isinstance(row, dict)]
