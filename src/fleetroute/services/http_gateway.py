"""Shared HTTP plumbing for the gateway adapters."""

from __future__ import annotations

import logging
import time
from typing import Any, Type

import httpx

from ..config import settings
from ..errors import RoutingEngineError

logger = logging.getLogger(__name__)


class JsonHttpClient:
    """GETs JSON documents with a bounded timeout and optional retry/backoff.

    Any transport, timeout, HTTP status or decoding failure that outlives the
    retries is raised as ``error_cls`` so callers see a single error type per
    collaborator.
    """

    def __init__(
        self,
        *,
        service_name: str,
        error_cls: Type[RoutingEngineError],
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.service_name = service_name
        self.error_cls = error_cls
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.gateway_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.gateway_backoff_seconds
        self.transport = transport

    def _get_client(self) -> httpx.Client:
        # One client per call keeps the adapters safe to share across threads
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 10.0)),
            transport=self.transport,
        )

    def get_json(self, url: str, params: dict[str, Any] | None = None) -> dict:
        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(url, params=params)
                    response.raise_for_status()
                    data = response.json()
                    if not isinstance(data, dict):
                        raise ValueError(f"{self.service_name} returned a non-object JSON payload.")
                    return data
                except httpx.TimeoutException as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"{self.service_name} request timed out after {attempt} attempt(s): {e}")
                        raise self.error_cls(f"{self.service_name} request timed out: {e}") from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(
                        f"{self.service_name} timeout, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})"
                    )
                    time.sleep(wait_time)
                except httpx.HTTPStatusError as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise self.error_cls(
                            f"{self.service_name} responded with HTTP {e.response.status_code}"
                        ) from e
                    time.sleep(self.backoff_seconds * attempt)
                except httpx.HTTPError as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise self.error_cls(f"Failed to reach {self.service_name}: {e}") from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(
                        f"{self.service_name} network error, retrying in {wait_time:.1f}s "
                        f"(attempt {attempt}/{self.max_retries}): {e}"
                    )
                    time.sleep(wait_time)
                except ValueError as e:
                    raise self.error_cls(f"{self.service_name} returned an unreadable response: {e}") from e
        finally:
            client.close()
