from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from datetime import datetime, time, timezone
from pathlib import Path
from typing import Callable, Optional

from exchangerates.core.errors import NoRatesAvailable
from exchangerates.services.http_client import HttpError
from .base import DatasetSource
from .dataset import Dataset
from .parser import DatasetParseError, parse_dataset
from .scheduler import previous_update_before, utcnow

"""Dataset cache and shared store.

Purpose:
    Keep the parsed dataset in memory for the request handlers and mirror the raw
    ECB document on disk so a restart does not have to download it again.

Design:
    - DiskCache stores the raw XML (not the parsed form) so the same parser
      handles fresh downloads and cached copies.
    - The disk cache is optional: when the directory is not writable (no volume
      mounted, read-only filesystem) we log and keep serving from memory.
    - DatasetStore swaps the whole Dataset reference on refresh, so readers never
      observe a half-updated dataset. Refreshes are serialised with a lock and
      the blocking download/parse runs in a worker thread.
"""

logger = logging.getLogger("exchangerates.cache")


class DiskCache:
    def __init__(self, directory: Path, filename: str):
        self.path = Path(directory) / filename

    def read(self) -> Optional[str]:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError:
            logger.warning("cannot read dataset cache %s", self.path, exc_info=True)
            return None

    def modified_at(self) -> Optional[datetime]:
        try:
            mtime = self.path.stat().st_mtime
        except OSError:
            return None
        return datetime.fromtimestamp(mtime, tz=timezone.utc)

    def write(self, raw: str) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".dataset-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(raw)
                os.replace(tmp, self.path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError:
            logger.warning("cannot write dataset cache %s", self.path, exc_info=True)
            return False
        logger.debug("dataset cached at %s", self.path)
        return True


class DatasetStore:
    """Holds the current Dataset and knows how to (re)load it."""

    def __init__(
        self,
        source: DatasetSource,
        cache: Optional[DiskCache] = None,
        *,
        update_slot: time = time(15, 30),
        clock: Callable[[], datetime] = utcnow,
        dataset: Optional[Dataset] = None,
    ):
        self._source = source
        self._cache = cache
        self._update_slot = update_slot
        self._clock = clock
        self._dataset = dataset
        self._lock = asyncio.Lock()
        self.updated_at: Optional[datetime] = clock() if dataset is not None else None

    # Read side -------------------------------------------------
    @property
    def dataset(self) -> Optional[Dataset]:
        return self._dataset

    def require(self) -> Dataset:
        dataset = self._dataset
        if dataset is None or not dataset.days:
            raise NoRatesAvailable()
        return dataset

    def replace(self, dataset: Dataset) -> None:
        self._dataset = dataset
        self.updated_at = self._clock()
        tf = dataset.timeframe()
        logger.info(
            "dataset loaded: %d days, %d currencies, %s..%s",
            len(dataset),
            len(dataset.currencies),
            tf[0] if tf else "-",
            tf[1] if tf else "-",
        )

    # Loading ---------------------------------------------------
    def _cache_is_fresh(self) -> bool:
        if self._cache is None:
            return False
        modified = self._cache.modified_at()
        if modified is None:
            return False
        return modified >= previous_update_before(self._clock(), self._update_slot)

    def _download(self) -> Dataset:
        logger.info("downloading dataset from %r", self._source)
        raw = self._source.fetch()
        dataset = parse_dataset(raw)
        if self._cache is not None:
            self._cache.write(raw)
        return dataset

    def _load_cached(self) -> Optional[Dataset]:
        if self._cache is None:
            return None
        raw = self._cache.read()
        if raw is None:
            return None
        try:
            return parse_dataset(raw)
        except DatasetParseError:
            logger.warning("ignoring corrupt dataset cache %s", self._cache.path, exc_info=True)
            return None

    def load_initial_sync(self) -> Dataset:
        if self._cache_is_fresh():
            cached = self._load_cached()
            if cached is not None:
                logger.info("using cached dataset %s", self._cache.path)  # type: ignore[union-attr]
                self.replace(cached)
                return cached
        try:
            dataset = self._download()
        except (HttpError, DatasetParseError):
            stale = self._load_cached()
            if stale is None:
                raise
            logger.warning("download failed; serving stale cached dataset", exc_info=True)
            dataset = stale
        self.replace(dataset)
        return dataset

    async def load_initial(self) -> Dataset:
        async with self._lock:
            return await asyncio.to_thread(self.load_initial_sync)

    async def refresh(self) -> Dataset:
        async with self._lock:
            dataset = await asyncio.to_thread(self._download)
            self.replace(dataset)
            return dataset
