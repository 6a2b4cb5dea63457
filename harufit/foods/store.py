# -*- coding: utf-8 -*-
"""Food datasets: chunk store clients (local directory / Supabase Storage).

Stores are read-only. They hand out raw bytes and object metadata; nothing here
decompresses or parses payloads.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Any, AsyncIterator, Dict, List, Optional
from urllib.parse import quote

import httpx
from fastapi.concurrency import run_in_threadpool

from ..config import Settings, settings
from .errors import ObjectNotFound, StoreUnavailable

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_BYTES = 256 * 1024


@dataclass(frozen=True)
class StoredObject:
    path: str
    name: str
    size: Optional[int] = None
    modified_at: Optional[datetime] = None


def join_path(folder: str, name: str) -> str:
    folder = folder.strip("/")
    return f"{folder}/{name}" if folder else name


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class LocalChunkStore:
    """Objects are files below ``root``; object paths are ``/``-separated and relative."""

    def __init__(self, root: Path, *, chunk_size: int = DEFAULT_CHUNK_BYTES) -> None:
        self.root = Path(root)
        self.chunk_size = chunk_size

    def _resolve(self, path: str) -> Path:
        parts = PurePosixPath(path.strip("/")).parts
        if any(p in ("..", "") for p in parts):
            raise ObjectNotFound(details=path)
        return self.root.joinpath(*parts)

    def _object_for(self, path: str, fp: Path) -> StoredObject:
        st = fp.stat()
        return StoredObject(
            path=path.strip("/"),
            name=fp.name,
            size=int(st.st_size),
            modified_at=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        )

    def _stat_sync(self, path: str) -> StoredObject:
        fp = self._resolve(path)
        try:
            if not fp.is_file():
                raise ObjectNotFound(details=path)
            return self._object_for(path, fp)
        except OSError as exc:
            raise StoreUnavailable(details=str(exc)) from exc

    def _list_sync(self, folder: str) -> List[StoredObject]:
        directory = self._resolve(folder) if folder.strip("/") else self.root
        if not directory.is_dir():
            return []
        try:
            return [
                self._object_for(join_path(folder, fp.name), fp)
                for fp in sorted(directory.iterdir())
                if fp.is_file()
            ]
        except OSError as exc:
            raise StoreUnavailable(details=str(exc)) from exc

    def _read_sync(self, path: str) -> bytes:
        fp = self._resolve(path)
        try:
            return fp.read_bytes()
        except (FileNotFoundError, IsADirectoryError) as exc:
            raise ObjectNotFound(details=path) from exc
        except OSError as exc:
            raise StoreUnavailable(details=str(exc)) from exc

    async def stat(self, path: str) -> StoredObject:
        return await run_in_threadpool(self._stat_sync, path)

    async def list(self, folder: str) -> List[StoredObject]:
        return await run_in_threadpool(self._list_sync, folder)

    async def read(self, path: str) -> bytes:
        return await run_in_threadpool(self._read_sync, path)

    async def iter_bytes(self, path: str, chunk_size: Optional[int] = None) -> AsyncIterator[bytes]:
        fp = self._resolve(path)
        size = chunk_size or self.chunk_size
        try:
            fh = await run_in_threadpool(fp.open, "rb")
        except (FileNotFoundError, IsADirectoryError) as exc:
            raise ObjectNotFound(details=path) from exc
        except OSError as exc:
            raise StoreUnavailable(details=str(exc)) from exc
        try:
            while True:
                chunk = await run_in_threadpool(fh.read, size)
                if not chunk:
                    break
                yield chunk
        finally:
            fh.close()


class SupabaseChunkStore:
    """Supabase Storage bucket accessed through its REST API."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        bucket: str,
        *,
        timeout: float = 60.0,
        chunk_size: int = DEFAULT_CHUNK_BYTES,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.bucket = bucket
        self.timeout = timeout
        self.chunk_size = chunk_size
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}", "apikey": self.api_key}

    def _client(self, *, timeout: Optional[float]) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers(),
            timeout=timeout,
            follow_redirects=True,
            transport=self._transport,
        )

    def _object_url(self, path: str) -> str:
        return f"/storage/v1/object/{self.bucket}/{quote(path.strip('/'))}"

    def _raise_for_download(self, path: str, status_code: int) -> None:
        # Storage answers 400 with a "not_found" body for missing objects.
        if status_code in (400, 404):
            raise ObjectNotFound(details=path)
        if status_code >= 400:
            raise StoreUnavailable(details=f"download {path}: HTTP {status_code}")

    async def list(self, folder: str, *, search: Optional[str] = None) -> List[StoredObject]:
        body: Dict[str, Any] = {
            "prefix": folder.strip("/"),
            "limit": 1000,
            "offset": 0,
            "sortBy": {"column": "name", "order": "asc"},
        }
        if search:
            body["search"] = search
        try:
            async with self._client(timeout=self.timeout) as client:
                resp = await client.post(f"/storage/v1/object/list/{self.bucket}", json=body)
        except httpx.RequestError as exc:
            raise StoreUnavailable(details=f"list {folder!r}: {exc}") from exc
        if resp.status_code >= 400:
            raise StoreUnavailable(details=f"list {folder!r}: HTTP {resp.status_code}")

        items = resp.json()
        if not isinstance(items, list):
            raise StoreUnavailable(details=f"list {folder!r}: unexpected payload")
        objects: List[StoredObject] = []
        for item in items:
            if not isinstance(item, dict) or not item.get("name"):
                continue
            # Folder placeholders come back without an id.
            if item.get("id") is None:
                continue
            meta = item.get("metadata") or {}
            size = meta.get("size")
            modified = _parse_timestamp(
                item.get("updated_at") or item.get("created_at") or meta.get("lastModified")
            )
            objects.append(
                StoredObject(
                    path=join_path(folder, item["name"]),
                    name=item["name"],
                    size=int(size) if size is not None else None,
                    modified_at=modified,
                )
            )
        return objects

    async def stat(self, path: str) -> StoredObject:
        folder, _, name = path.strip("/").rpartition("/")
        for obj in await self.list(folder, search=name):
            if obj.name == name:
                return obj
        raise ObjectNotFound(details=path)

    async def read(self, path: str) -> bytes:
        try:
            async with self._client(timeout=self.timeout) as client:
                resp = await client.get(self._object_url(path))
        except httpx.RequestError as exc:
            raise StoreUnavailable(details=f"download {path}: {exc}") from exc
        self._raise_for_download(path, resp.status_code)
        return resp.content

    async def iter_bytes(self, path: str, chunk_size: Optional[int] = None) -> AsyncIterator[bytes]:
        client = self._client(timeout=None)
        try:
            req = client.build_request("GET", self._object_url(path))
            resp = await client.send(req, stream=True)
        except httpx.RequestError as exc:
            await client.aclose()
            raise StoreUnavailable(details=f"download {path}: {exc}") from exc
        try:
            self._raise_for_download(path, resp.status_code)
            async for chunk in resp.aiter_bytes(chunk_size or self.chunk_size):
                yield chunk
        finally:
            await resp.aclose()
            await client.aclose()


def build_store(cfg: Settings = settings):
    if cfg.storage_backend == "supabase":
        if not cfg.supabase_url or not cfg.supabase_key:
            raise RuntimeError(
                "Supabase storage requires SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY"
            )
        logger.info("Using Supabase storage bucket %s", cfg.storage_bucket)
        return SupabaseChunkStore(
            cfg.supabase_url,
            cfg.supabase_key,
            cfg.storage_bucket,
            timeout=cfg.storage_timeout,
            chunk_size=cfg.stream_chunk_bytes,
        )
    if cfg.storage_backend != "local":
        raise RuntimeError(f"Unknown storage backend: {cfg.storage_backend}")
    logger.info("Using local food data directory %s", cfg.food_data_dir)
    return LocalChunkStore(cfg.food_data_dir, chunk_size=cfg.stream_chunk_bytes)
