# -*- coding: utf-8 -*-
"""
HaruFit food dataset API

Serves gzip JSON dataset parts, legacy chunks and SQLite files for client-side
search, plus a ranked server-side search over cached datasets.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .foods.api import lookup_router
from .foods.api import router as datasets_router
from .foods.errors import DatasetError

logger = logging.getLogger(__name__)

app = FastAPI(
    title="HaruFit food datasets",
    description="Dataset part delivery and food search",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DatasetError)
async def _dataset_error_handler(request: Request, exc: DatasetError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


app.include_router(datasets_router)
app.include_router(lookup_router)


@app.get("/health")
def health_check() -> dict:
    return {"ok": True}


def run() -> None:
    """Console entry point (used by pyproject [project.scripts])."""
    import uvicorn

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("harufit.api:app", host=settings.host, port=settings.port, reload=False, log_level=settings.log_level)
