from __future__ import annotations

"""Lightweight HTTP client util with retry.

Focus: GET a text document (the ECB XML feeds) with limited retries and
exponential backoff.
"""
import logging
import time
from typing import Optional

import httpx

logger = logging.getLogger("exchangerates.http")

USER_AGENT = "exchangerates/1.0"


class HttpError(Exception):
    pass


def get_text(
    url: str,
    *,
    timeout: float = 30.0,
    retries: int = 2,
    backoff: float = 1.0,
    transport: Optional[httpx.BaseTransport] = None,
) -> str:
    last_err: Optional[Exception] = None
    with httpx.Client(
        timeout=timeout,
        transport=transport,
        follow_redirects=True,
        headers={"User-Agent": USER_AGENT},
    ) as client:
        for attempt in range(retries + 1):
            try:
                resp = client.get(url)
                if resp.status_code >= 400:
                    raise HttpError(f"HTTP {resp.status_code} for {url}")
                return resp.text
            except (httpx.HTTPError, HttpError) as e:
                last_err = e
                logger.warning(
                    "GET %s failed (attempt %d/%d): %s", url, attempt + 1, retries + 1, e
                )
                if attempt == retries:
                    break
                time.sleep(backoff * (2**attempt))
    raise HttpError(f"Failed to fetch {url}: {last_err}")
