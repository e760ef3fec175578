from __future__ import annotations

import ssl

import aiohttp
import certifi


def make_http_session(timeout_s: float | None = None) -> aiohttp.ClientSession:
    """
    Create the shared HTTP session for tile and routing requests.

    Certificates come from certifi. With timeout_s=None no client-side
    timeout is applied, so a hung request only stalls its own tile.
    """
    ssl_context = ssl.create_default_context(cafile=certifi.where())
    connector = aiohttp.TCPConnector(ssl=ssl_context)
    timeout = aiohttp.ClientTimeout(total=timeout_s)
    return aiohttp.ClientSession(connector=connector, timeout=timeout)
