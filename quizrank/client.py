"""
HTTP client for the leaderboard endpoints

Rate-limited reads (429) are retried with exponential backoff:
2s, 4s, 8s, then the error is raised.
"""
import logging
import time
from typing import Any, Callable, Dict, List, Optional
from uuid import UUID

import httpx

logger = logging.getLogger(__name__)


class LeaderboardClientError(Exception):
    """Non-retryable failure or retries exhausted"""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class LeaderboardClient:
    """
    Thin client over GET /api/leaderboard and GET /api/leaderboard/user/{id}

    Args:
        base_url: Service root, e.g. http://localhost:8000
        token: Bearer token of the calling user
        max_retries: Retries after the first rate-limited response
        backoff_base: First delay in seconds, doubled on each retry
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        max_retries: int = 3,
        backoff_base: float = 2.0,
        transport: Optional[httpx.BaseTransport] = None,
        sleep: Callable[[float], None] = time.sleep,
        timeout: float = 10.0
    ):
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self._sleep = sleep
        self._http = httpx.Client(
            base_url=base_url,
            headers={"Authorization": f"Bearer {token}"},
            transport=transport,
            timeout=timeout
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _get(self, path: str) -> Dict[str, Any]:
        """GET with backoff on 429; returns the envelope's data"""
        attempt = 0

        while True:
            response = self._http.get(path)

            if response.status_code == 429 and attempt < self.max_retries:
                delay = self.backoff_base * (2 ** attempt)
                attempt += 1
                logger.warning(f"Rate limited on {path}, retry {attempt}/{self.max_retries} in {delay:.0f}s")
                self._sleep(delay)
                continue

            body = response.json()

            if response.status_code >= 400 or not body.get("success", False):
                raise LeaderboardClientError(
                    response.status_code, body.get("message", "Request failed")
                )

            return body["data"]

    def get_leaderboard(self) -> List[Dict[str, Any]]:
        return self._get("/api/leaderboard")["leaderboard"]

    def get_user_rank(self, user_id: UUID) -> Dict[str, Any]:
        """{"userStats": {...} | None, "rank": int | None}"""
        return self._get(f"/api/leaderboard/user/{user_id}")
