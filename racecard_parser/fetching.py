# fetching.py
from __future__ import annotations
import asyncio
import logging
from typing import Optional, Dict

import httpx

from .config_manager import config_manager


class FetchingError(Exception):
    """Raised when a page cannot be retrieved after all attempts."""

    pass


class BlockingDetectedError(FetchingError):
    """Raised when the site keeps answering 403/429 after all attempts."""

    pass


_shared_async_client: Optional[httpx.AsyncClient] = None


def _http_config() -> Dict:
    return config_manager.get_section("HTTP_CLIENT")


def _base_headers() -> Dict[str, str]:
    http_cfg = _http_config()
    return {
        "User-Agent": http_cfg.get("user_agent", "Mozilla/5.0"),
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    }


def get_shared_async_client() -> httpx.AsyncClient:
    global _shared_async_client
    if _shared_async_client is None or _shared_async_client.is_closed:
        http_cfg = _http_config()
        _shared_async_client = httpx.AsyncClient(
            follow_redirects=bool(http_cfg.get("follow_redirects", True)),
            http2=bool(http_cfg.get("http2", False)),
            timeout=httpx.Timeout(
                float(http_cfg.get("timeout_sec", 15.0)),
                connect=float(http_cfg.get("connect_timeout_sec", 10.0)),
            ),
            proxy=http_cfg.get("proxy") or None,
            headers=_base_headers(),
        )
    return _shared_async_client


async def close_shared_async_client():
    global _shared_async_client
    if _shared_async_client is not None:
        await _shared_async_client.aclose()
        _shared_async_client = None


async def polite_pause():
    """Fixed delay between successive page fetches."""
    await asyncio.sleep(float(_http_config().get("request_pause_sec", 0.5)))


async def resilient_get(url: str, attempts: int | None = None) -> httpx.Response:
    """
    GET a page, retrying with a fixed backoff. Raises FetchingError (or
    BlockingDetectedError for persistent 403/429) once attempts run out.
    """
    http_cfg = _http_config()
    attempts = attempts or int(http_cfg.get("attempts", 3))
    backoff = float(http_cfg.get("backoff_sec", 1.0))
    client = get_shared_async_client()

    last_error: Exception | None = None
    for i in range(attempts):
        try:
            r = await client.get(url)
            if r.status_code == 200:
                return r
            r.raise_for_status()
            # 1xx/3xx that survived redirect handling
            raise httpx.HTTPStatusError(
                f"Unexpected status {r.status_code}", request=r.request, response=r
            )
        except httpx.HTTPError as e:
            last_error = e
            logging.warning(f"Attempt {i + 1}/{attempts} for {url} failed: {e}")
            if i < attempts - 1:
                await asyncio.sleep(backoff)

    message = f"Failed to fetch {url} after {attempts} attempts. Last error: {last_error}"
    if isinstance(last_error, httpx.HTTPStatusError) and last_error.response.status_code in (403, 429):
        raise BlockingDetectedError(message) from last_error
    raise FetchingError(message) from last_error


async def fetch_html(url: str) -> str:
    response = await resilient_get(url)
    return response.text
