# -*- coding: utf-8 -*-
"""Food datasets: decompression and the per-language record cache."""

from __future__ import annotations

import asyncio
import gzip
import json
import logging
import zlib
from typing import Any, Dict, List

from fastapi.concurrency import run_in_threadpool

from .errors import DatasetCorrupt
from .locator import JSON_PARTS, DatasetFormat, DatasetLocator

logger = logging.getLogger(__name__)

FoodRecords = List[Dict[str, Any]]


def decode_part(payload: bytes, name: str) -> FoodRecords:
    """gunzip + UTF-8 decode + parse one part; the payload must be a JSON array of objects."""
    try:
        text = gzip.decompress(payload).decode("utf-8")
        records = json.loads(text)
    except (OSError, EOFError, zlib.error, UnicodeDecodeError, ValueError) as exc:
        raise DatasetCorrupt(details=f"{name}: {exc}") from exc
    if not isinstance(records, list):
        raise DatasetCorrupt(details=f"{name}: expected a JSON array, got {type(records).__name__}")
    for position, record in enumerate(records):
        if not isinstance(record, dict):
            raise DatasetCorrupt(details=f"{name}: item {position} is not an object")
    return records


def _consume_failure(task: asyncio.Task) -> None:
    # Waiters may all be cancelled before a load fails; read the error so it is not reported as lost.
    if not task.cancelled() and task.exception() is not None:
        logger.warning("Record load failed: %s", task.exception())


class RecordCache:
    """Process-scoped language -> records mapping, populated lazily and never evicted.

    Concurrent first requests for a language share one in-flight load task. A load
    either stores the complete record list or nothing; failures are re-raised to
    every waiter and the next request starts a fresh load.
    """

    def __init__(self, locator: DatasetLocator, fmt: DatasetFormat = JSON_PARTS) -> None:
        self.locator = locator
        self.fmt = fmt
        self._records: Dict[str, FoodRecords] = {}
        self._inflight: Dict[str, asyncio.Task] = {}

    def cached(self, lang: str) -> bool:
        return lang in self._records

    async def get(self, lang: str) -> FoodRecords:
        records = self._records.get(lang)
        if records is not None:
            return records
        task = self._inflight.get(lang)
        if task is None:
            task = asyncio.ensure_future(self._load(lang))
            task.add_done_callback(_consume_failure)
            self._inflight[lang] = task
        # A cancelled waiter must not cancel the load other requests are waiting on.
        return await asyncio.shield(task)

    async def _load(self, lang: str) -> FoodRecords:
        try:
            parts = await self.locator.list_parts(self.fmt, lang)
            logger.info("Loading %d part(s) for %s", len(parts), lang)
            loaded: FoodRecords = []
            for part in parts:
                payload = await self.locator.store.read(part.path)
                records = await run_in_threadpool(decode_part, payload, part.name)
                loaded.extend(records)
                logger.info("Loaded %d records from %s", len(records), part.name)
            self._records[lang] = loaded
            logger.info("Total %d records cached for %s", len(loaded), lang)
            return loaded
        finally:
            self._inflight.pop(lang, None)
