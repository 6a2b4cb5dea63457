# -*- coding: utf-8 -*-
"""Food datasets: API endpoints."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Dict, Optional

import httpx
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response, StreamingResponse

from ..config import settings
from .errors import DatasetNotFound
from .models import (
    ChunksInfoResponse,
    DatasetPartsResponse,
    FoodLookupResponse,
    FoodSearchResponse,
    SqliteMetaResponse,
)
from .locator import CHUNKS, JSON_PARTS, SQLITE, DatasetFormat
from .openfoodfacts import OpenFoodFactsClient, UpstreamError
from .service import DatasetService, build_service, epoch_ms, iso_utc, page_bounds, part_info
from .store import StoredObject

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/datasets", tags=["Food datasets"])
lookup_router = APIRouter(tags=["Food lookup"])

CACHE_CONTROL = "public, max-age=86400"

_service: Optional[DatasetService] = None


def get_dataset_service() -> DatasetService:
    global _service
    if _service is None:
        _service = build_service(settings)
    return _service


def get_lookup_client() -> OpenFoodFactsClient:
    return OpenFoodFactsClient(settings)


def _validators(size: int, modified: datetime) -> Dict[str, str]:
    return {
        "ETag": f'"{epoch_ms(modified)}-{size}"',
        "Last-Modified": format_datetime(modified.astimezone(timezone.utc), usegmt=True),
    }


async def _download(service: DatasetService, obj: StoredObject, fmt: DatasetFormat) -> Response:
    headers = {
        "Content-Disposition": f'attachment; filename="{obj.name}"',
        "Cache-Control": CACHE_CONTROL,
    }
    if obj.size is None or obj.modified_at is None:
        # No usable store metadata: read the object to learn its size, stamp it with now.
        payload = await service.open_bytes(obj)
        size = obj.size if obj.size is not None else len(payload)
        modified = obj.modified_at or datetime.now(timezone.utc)
        headers.update(_validators(size, modified))
        return Response(content=payload, media_type=fmt.media_type, headers=headers)

    headers.update(_validators(obj.size, obj.modified_at))
    return StreamingResponse(service.iter_bytes(obj), media_type=fmt.media_type, headers=headers)


@router.get("/{lang}/parts", response_model=DatasetPartsResponse, summary="List gzip JSON parts for a language")
async def list_parts(lang: str, service: DatasetService = Depends(get_dataset_service)):
    code = service.language(lang)
    parts = await service.list_parts(code)
    return DatasetPartsResponse(lang=code, parts=[part_info(p) for p in parts], total_parts=len(parts))


@router.get("/{lang}/parts/{part_number}", summary="Download one gzip JSON part")
async def download_part(lang: str, part_number: str, service: DatasetService = Depends(get_dataset_service)):
    obj = await service.locate_part(lang, part_number)
    return await _download(service, obj, JSON_PARTS)


@router.get("/{lang}/search", response_model=FoodSearchResponse, summary="Ranked search over a cached dataset")
async def search_foods(
    lang: str,
    q: Optional[str] = Query(default=None, description="At least 2 characters"),
    limit: Optional[str] = Query(default=None, description="Page size, clamped to [1, max]"),
    offset: Optional[str] = Query(default=None, description="Items to skip"),
    service: DatasetService = Depends(get_dataset_service),
):
    code = service.language(lang)
    lim, off = page_bounds(
        limit,
        offset,
        default_limit=service.cfg.search_default_limit,
        max_limit=service.cfg.search_max_limit,
    )
    try:
        results = await service.search(code, q or "", lim, off)
        return FoodSearchResponse(results=results, total=len(results), limit=lim, offset=off)
    except Exception as exc:
        # Search stays usable for clients when storage is down or a dataset is broken.
        logger.warning("Food search failed for %s (q=%r): %s", code, q, exc)
        return FoodSearchResponse(results=[], total=0, limit=lim, offset=off)


@router.get("/{lang}/chunks", response_model=DatasetPartsResponse, summary="List legacy binary chunks")
async def list_chunks(lang: str, service: DatasetService = Depends(get_dataset_service)):
    code = service.language(lang)
    parts = await service.list_chunks(code)
    return DatasetPartsResponse(lang=code, parts=[part_info(p) for p in parts], total_parts=len(parts))


@router.get("/{lang}/chunks/info", response_model=ChunksInfoResponse, summary="Chunk manifest with modification times")
async def chunks_info(lang: str, service: DatasetService = Depends(get_dataset_service)):
    try:
        info = await service.chunks_info(lang)
    except DatasetNotFound as exc:
        return JSONResponse(status_code=exc.status_code, content={"exists": False, **exc.to_payload()})
    return ChunksInfoResponse.model_validate(info)


@router.get("/{lang}/chunks/{part}", summary="Download one legacy binary chunk")
async def download_chunk(lang: str, part: str, service: DatasetService = Depends(get_dataset_service)):
    obj = await service.locate_chunk(lang, part)
    return await _download(service, obj, CHUNKS)


@router.get("/{lang}/sqlite", summary="Download the whole SQLite dataset")
async def download_sqlite(lang: str, service: DatasetService = Depends(get_dataset_service)):
    code = service.language(lang)
    if service.uses_json(code):
        raise DatasetNotFound(
            f"This language uses JSON format. Please use the /datasets/{code}/search endpoint instead.",
            details="Large datasets are served as gzip JSON parts.",
        )
    obj = await service.locate_sqlite(code)
    return await _download(service, obj, SQLITE)


@router.get("/{lang}/sqlite/meta", response_model=SqliteMetaResponse, summary="SQLite dataset size and timestamps")
async def sqlite_meta(lang: str, service: DatasetService = Depends(get_dataset_service)):
    code = service.language(lang)
    try:
        obj = await service.locate_sqlite(code)
    except DatasetNotFound as exc:
        return JSONResponse(status_code=exc.status_code, content={"exists": False, "error": exc.error})
    return SqliteMetaResponse(
        exists=True,
        size=obj.size,
        modified_at=iso_utc(obj.modified_at),
        modified_timestamp=epoch_ms(obj.modified_at),
    )


@lookup_router.get(
    "/food-search",
    response_model=FoodLookupResponse,
    response_model_exclude_none=True,
    summary="Product lookup on Open Food Facts",
)
async def lookup_foods(
    query: Optional[str] = Query(default=None),
    q: Optional[str] = Query(default=None),
    language: Optional[str] = Query(default=None),
    lc: Optional[str] = Query(default=None),
    limit: Optional[str] = Query(default=None),
    page_size: Optional[str] = Query(default=None),
    client: OpenFoodFactsClient = Depends(get_lookup_client),
):
    term = (query if query is not None else q or "").strip()
    lang = (language if language is not None else lc or "").strip()
    size, _ = page_bounds(limit if limit is not None else page_size, None, default_limit=10, max_limit=25)

    if len(term) < 2:
        return FoodLookupResponse(items=[], total=0)

    try:
        items = await client.search(term, language=lang or None, limit=size)
    except UpstreamError as exc:
        logger.error("Open Food Facts request failed: %s %s", exc.status_code, exc.body)
        return JSONResponse(
            status_code=502,
            content={"error": "Failed to fetch food data from upstream service."},
        )
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("Open Food Facts request error: %s", exc)
        return JSONResponse(
            status_code=500,
            content={"error": "Unexpected error while fetching food data."},
        )
    return FoodLookupResponse(items=items, total=len(items))
