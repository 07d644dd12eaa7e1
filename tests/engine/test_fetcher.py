from __future__ import annotations

import httpx
import pytest

from filter_updater.engine import Fetcher
from filter_updater.errors import NetworkError, ProtocolError

URL = "https://lists.example.com/ads.txt"


def test_download_returns_raw_bytes(upstream) -> None:
    upstream.routes[URL] = (200, b"||ads.example^\n")
    fetcher = Fetcher(upstream.client())
    assert fetcher.download(URL) == b"||ads.example^\n"
    assert upstream.requested == [URL]


def test_non_success_status_is_protocol_error(upstream) -> None:
    upstream.routes[URL] = (503, b"busy")
    fetcher = Fetcher(upstream.client())
    with pytest.raises(ProtocolError) as excinfo:
        fetcher.download(URL)
    assert excinfo.value.status_code == 503
    assert excinfo.value.url == URL


def test_transport_failure_is_network_error(upstream) -> None:
    upstream.routes[URL] = httpx.ConnectError("connection refused")
    fetcher = Fetcher(upstream.client())
    with pytest.raises(NetworkError) as excinfo:
        fetcher.download(URL)
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)
    assert len(upstream.requested) == 1


def test_close_leaves_injected_client_open(upstream) -> None:
    client = upstream.client()
    Fetcher(client).close()
    assert not client.is_closed

    owned = Fetcher(timeout=5)
    owned.close()
    assert owned._client.is_closed
