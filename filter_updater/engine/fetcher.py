"""HTTP fetching of filter list bodies."""

from __future__ import annotations

import httpx
import structlog

from ..errors import NetworkError, ProtocolError


class Fetcher:
    """Download raw filter content through an injected HTTP client.

    A single GET per call; retrying is left to the next refresh cycle.
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        timeout: float = 30.0,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(follow_redirects=True, timeout=timeout)
        self.logger = logger or structlog.get_logger("filter_updater.fetcher")

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def download(self, url: str) -> bytes:
        self.logger.debug("filter_download_started", url=url)
        try:
            response = self._client.get(url)
        except httpx.HTTPError as exc:
            raise NetworkError(url, str(exc) or exc.__class__.__name__) from exc
        if not response.is_success:
            raise ProtocolError(url, response.status_code)
        return response.content


__all__ = ["Fetcher"]
