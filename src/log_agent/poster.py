"""Delivery of log batches to the management backend."""

from __future__ import annotations

import logging

import httpx

from .collector.errors import PostError

logger = logging.getLogger(__name__)


class BatchPoster:
    """Posts JSON array payloads to backend endpoints.

    Delivery is attempted once per call; a failed batch is picked up again on
    the next tick because its offset was never committed.
    """

    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        app_id: str | None = None,
        app_secret: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.Client | None = None,
    ):
        """Initialize the poster.

        Args:
            app_id: Sent as ``X-OpenRASP-AppID``.
            app_secret: Sent as ``X-OpenRASP-AppSecret``.
            timeout: Request timeout in seconds.
            client: HTTP client to use; one is created and owned if None.
        """
        self.headers = {"Content-Type": "application/json"}
        if app_id:
            self.headers["X-OpenRASP-AppID"] = app_id
        if app_secret:
            self.headers["X-OpenRASP-AppSecret"] = app_secret
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def __enter__(self) -> BatchPoster:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def post(self, url: str, body: bytes | str) -> int:
        """Send one batch.

        Args:
            url: Complete endpoint URL.
            body: JSON array payload, sent as is; text is encoded as UTF-8.

        Returns:
            HTTP status code of the accepted request.

        Raises:
            PostError: On network errors or a non-2xx response.
        """
        content = body.encode("utf-8") if isinstance(body, str) else body
        try:
            response = self._client.post(url, content=content, headers=self.headers)
        except httpx.HTTPError as e:
            raise PostError(url, f"{type(e).__name__}: {e}") from e

        if not 200 <= response.status_code < 300:
            raise PostError(
                url,
                f"status {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        logger.debug(f"Posted {len(content)} bytes to {url} ({response.status_code})")
        return response.status_code

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
