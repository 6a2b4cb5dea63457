# -*- coding: utf-8 -*-
"""Food datasets: dataset info and delivery service.

One object owns the store, the locator and the record cache; routes receive it
through a FastAPI dependency.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..config import Settings, settings
from .cache import RecordCache
from .errors import DatasetCorrupt, DatasetNotFound, InvalidPartNumber
from .languages import normalize_language
from .locator import CHUNKS, CHUNKS_MANIFEST, JSON_PARTS, SQLITE, DatasetFormat, DatasetLocator, DatasetPart
from .search import search as search_records
from .store import StoredObject, build_store

logger = logging.getLogger(__name__)


def epoch_ms(value: Optional[datetime]) -> Optional[int]:
    if value is None:
        return None
    return int(value.timestamp() * 1000)


def iso_utc(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_part_number(raw: Any) -> int:
    try:
        part = int(str(raw).strip())
    except (TypeError, ValueError) as exc:
        raise InvalidPartNumber(details=f"'{raw}' is not a number") from exc
    if part < 1:
        raise InvalidPartNumber(details="part numbers start at 1")
    return part


def part_info(part: DatasetPart) -> Dict[str, Any]:
    return {
        "fileName": part.name,
        "size": part.size,
        "modifiedAt": iso_utc(part.modified_at),
        "modifiedTimestamp": epoch_ms(part.modified_at),
    }


class DatasetService:
    def __init__(self, store, cfg: Settings = settings) -> None:
        self.cfg = cfg
        self.store = store
        self.locator = DatasetLocator(store)
        self.cache = RecordCache(self.locator, JSON_PARTS)

    def language(self, raw: str) -> str:
        return normalize_language(raw, self.cfg.supported_languages)

    # ---- JSON parts ----

    async def list_parts(self, lang: str, fmt: DatasetFormat = JSON_PARTS) -> List[DatasetPart]:
        """Parts in the same order the record cache concatenates them."""
        return await self.locator.list_parts(fmt, self.language(lang))

    async def locate_part(self, lang: str, part: Any, fmt: DatasetFormat = JSON_PARTS) -> StoredObject:
        number = parse_part_number(part)
        return await self.locator.locate(fmt, self.language(lang), number)

    async def get_records(self, lang: str) -> List[Dict[str, Any]]:
        return await self.cache.get(self.language(lang))

    async def search(self, lang: str, query: str, limit: int, offset: int) -> List[Mapping[str, Any]]:
        code = self.language(lang)
        if len((query or "").strip()) < 2:
            # Short queries never touch storage.
            return []
        records = await self.cache.get(code)
        return search_records(records, query, code, limit=limit, offset=offset)

    # ---- Legacy chunks ----

    async def list_chunks(self, lang: str) -> List[DatasetPart]:
        return await self.list_parts(lang, CHUNKS)

    async def locate_chunk(self, lang: str, part: Any) -> StoredObject:
        return await self.locate_part(lang, part, CHUNKS)

    async def chunks_info(self, lang: str) -> Dict[str, Any]:
        """``chunks_info.json`` merged with per-chunk modification times from the store."""
        code = self.language(lang)
        manifest = await self.locator.locate(CHUNKS_MANIFEST, code)
        raw = await self.store.read(manifest.path)
        try:
            info = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise DatasetCorrupt(details=f"{manifest.path}: {exc}") from exc
        if not isinstance(info, dict):
            raise DatasetCorrupt(details=f"{manifest.path}: expected a JSON object")

        try:
            stored = {p.index: p for p in await self.locator.list_parts(CHUNKS, code)}
        except DatasetNotFound:
            logger.warning("Chunk manifest %s has no chunk files next to it", manifest.path)
            stored = {}

        chunks: List[Dict[str, Any]] = []
        for chunk in info.get("chunks") or []:
            if not isinstance(chunk, dict):
                continue
            merged = dict(chunk)
            try:
                found = stored.get(int(chunk.get("part")))
            except (TypeError, ValueError):
                found = None
            if found is not None:
                merged["modifiedAt"] = iso_utc(found.modified_at)
                merged["modifiedTimestamp"] = epoch_ms(found.modified_at)
            chunks.append(merged)

        return {**info, "exists": True, "chunks": chunks}

    # ---- SQLite ----

    def uses_json(self, lang: str) -> bool:
        return self.language(lang) in self.cfg.json_languages

    async def locate_sqlite(self, lang: str) -> StoredObject:
        return await self.locator.locate(SQLITE, self.language(lang))

    async def open_bytes(self, obj: StoredObject) -> bytes:
        return await self.store.read(obj.path)

    def iter_bytes(self, obj: StoredObject):
        return self.store.iter_bytes(obj.path)


def build_service(cfg: Settings = settings) -> DatasetService:
    return DatasetService(build_store(cfg), cfg)


def page_bounds(
    limit: Optional[str],
    offset: Optional[str],
    *,
    default_limit: int,
    max_limit: int,
) -> Tuple[int, int]:
    """Clamp client-supplied paging to limit in [1, max_limit] and offset >= 0."""

    def _int(raw: Optional[str], default: int) -> int:
        try:
            return int(str(raw).strip()) if raw is not None and str(raw).strip() else default
        except ValueError:
            return default

    lim = min(max(_int(limit, default_limit), 1), max_limit)
    off = max(_int(offset, 0), 0)
    return lim, off
