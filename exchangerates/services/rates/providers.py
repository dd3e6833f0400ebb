from __future__ import annotations

"""Concrete dataset sources and factory.

All sources download one of the ECB euro reference rate feeds. They differ only
in how much history the feed carries.
"""
from typing import TYPE_CHECKING, Dict, Optional

import httpx

from .base import DatasetSource
from exchangerates.services.http_client import get_text

if TYPE_CHECKING:  # pragma: no cover
    from exchangerates.core.config import Settings

_ECB_BASE = "https://www.ecb.europa.eu/stats/eurofxref"

DATASET_SOURCE_URLS: Dict[str, str] = {
    "ecb-hist": f"{_ECB_BASE}/eurofxref-hist.xml",
    "ecb-hist-90d": f"{_ECB_BASE}/eurofxref-hist-90d.xml",
    "ecb-daily": f"{_ECB_BASE}/eurofxref-daily.xml",
}


class EcbHttpSource(DatasetSource):
    name = "ecb-http"

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 30.0,
        retries: int = 2,
        backoff: float = 1.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.url = url
        self._timeout = timeout
        self._retries = retries
        self._backoff = backoff
        self._transport = transport

    def fetch(self) -> str:  # type: ignore[override]
        return get_text(
            self.url,
            timeout=self._timeout,
            retries=self._retries,
            backoff=self._backoff,
            transport=self._transport,
        )

    def __repr__(self) -> str:
        return f"EcbHttpSource({self.url!r})"


def make_dataset_source(
    settings: "Settings", transport: Optional[httpx.BaseTransport] = None
) -> DatasetSource:
    kind = settings.dataset_source
    url = DATASET_SOURCE_URLS.get(kind)
    if not url:
        raise ValueError(f"Unknown dataset source kind '{kind}'")
    source = EcbHttpSource(
        settings.dataset_url or url,
        timeout=settings.http_timeout_seconds,
        retries=settings.http_retries,
        backoff=settings.http_backoff_seconds,
        transport=transport,
    )
    source.name = kind
    return source
