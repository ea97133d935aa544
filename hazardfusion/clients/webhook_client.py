"""Webhook delivery client for HazardFusion alert notifications.

Handles HTTP POST of JSON payloads to subscriber endpoints with exponential
backoff on rate limiting, server errors, timeouts and connection failures.

No business logic lives here — deciding who receives which event happens in
hazardfusion.broadcast.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional

import requests
from requests import Session
from requests.adapters import HTTPAdapter

from hazardfusion.exceptions import BroadcastError

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS = (429, 500, 502, 503, 504)


class WebhookClient:
    """POSTs JSON payloads to webhook URLs.

    Args:
        max_retries: Retries after the first attempt for transient failures.
        backoff_base: Base delay in seconds; doubles on each retry.
        request_timeout: HTTP request timeout in seconds.
        session: Optional pre-built requests Session (tests inject a mock).
        sleep: Sleep function; injectable so tests do not wait.
    """

    def __init__(
        self,
        max_retries: int = 3,
        backoff_base: float = 0.5,
        request_timeout: int = 10,
        session: Optional[Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.request_timeout = request_timeout
        self._sleep = sleep

        if session is None:
            session = Session()
            adapter = HTTPAdapter(max_retries=0)   # retries handled in post_json
            session.mount("https://", adapter)
            session.mount("http://", adapter)
            session.headers.update({"Content-Type": "application/json"})
        self._session = session

    def post_json(self, url: str, payload: Dict[str, Any]) -> int:
        """Deliver a payload, retrying transient failures.

        Args:
            url: Webhook endpoint.
            payload: JSON-serialisable body.

        Returns:
            HTTP status code of the successful response (2xx).

        Raises:
            BroadcastError: On a non-retryable status, a permanent request
                failure, or when retries are exhausted.
        """
        last_status: Optional[int] = None
        for attempt in range(self.max_retries + 1):
            wait = self.backoff_base * (2 ** attempt)
            try:
                resp = self._session.post(url, json=payload, timeout=self.request_timeout)
            except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as exc:
                logger.warning(
                    "Webhook %s unreachable: %s — retrying in %.1fs (attempt %d/%d)",
                    url, exc, wait, attempt + 1, self.max_retries,
                )
                if attempt < self.max_retries:
                    self._sleep(wait)
                continue
            except requests.exceptions.RequestException as exc:
                raise BroadcastError(f"Webhook request failed: {exc}", url=url) from exc

            last_status = resp.status_code
            if 200 <= resp.status_code < 300:
                logger.debug("Webhook %s accepted payload (HTTP %d)", url, resp.status_code)
                return resp.status_code

            if resp.status_code in _RETRYABLE_STATUS:
                logger.warning(
                    "Webhook %s returned HTTP %d — retrying in %.1fs (attempt %d/%d)",
                    url, resp.status_code, wait, attempt + 1, self.max_retries,
                )
                if attempt < self.max_retries:
                    self._sleep(wait)
                continue

            raise BroadcastError(
                f"Webhook rejected payload with HTTP {resp.status_code}",
                url=url,
                status_code=resp.status_code,
            )

        raise BroadcastError(
            f"Webhook delivery exhausted {self.max_retries} retries",
            url=url,
            status_code=last_status,
        )

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    def __enter__(self) -> "WebhookClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
