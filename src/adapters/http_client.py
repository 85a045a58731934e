"""httpx wrapper.

Used by `chartseed doctor` to check that the git remote's host answers before
a destructive reset is attempted.
"""

from __future__ import annotations

from urllib.parse import urlparse

import httpx

from core.config import AppSettings


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` with the configured timeout and User-Agent."""

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "*/*",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
    )


def remote_http_url(remote_url: str) -> str | None:
    """HTTP(S) URL to probe for a git remote, or None for ssh/local remotes."""

    parsed = urlparse(remote_url)
    if parsed.scheme in ("http", "https") and parsed.netloc:
        return remote_url
    return None


async def probe_remote(
    remote_url: str,
    *,
    settings: AppSettings | None = None,
    client: httpx.AsyncClient | None = None,
) -> tuple[bool | None, str]:
    """Probe the remote over HTTP.

    Returns (reachable, detail); `reachable` is None when the remote is not
    an HTTP(S) URL and was not probed.
    """

    url = remote_http_url(remote_url)
    if url is None:
        return None, "not an http(s) remote; skipped"

    try:
        if client is not None:
            response = await client.get(url)
        else:
            async with build_async_client(settings) as owned:
                response = await owned.get(url)
    except httpx.HTTPError as exc:
        return False, str(exc) or exc.__class__.__name__

    if response.status_code == 404:
        return False, "HTTP 404 (repository missing or private)"
    return response.status_code < 500, f"HTTP {response.status_code}"
