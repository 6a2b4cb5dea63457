# -*- coding: utf-8 -*-
"""Open Food Facts product lookup (remote search for foods missing from the datasets)."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

import httpx

from ..config import Settings, settings

logger = logging.getLogger(__name__)

_FIELDS = "id,product_name,generic_name,brands,serving_size,serving_quantity,nutriments"
_KJ_PER_KCAL = 4.184


class UpstreamError(Exception):
    def __init__(self, status_code: int, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Open Food Facts returned HTTP {status_code}")


def _number(nutriments: Mapping[str, Any], keys: Iterable[str]) -> Optional[float]:
    for key in keys:
        value = nutriments.get(key)
        if isinstance(value, bool):
            continue
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                continue
    return None


def _kj_to_kcal(value: Optional[float]) -> Optional[float]:
    if not value:
        return None
    return value / _KJ_PER_KCAL


def primary_brand(brands: Optional[str]) -> Optional[str]:
    if not brands:
        return None
    for entry in brands.split(","):
        if entry.strip():
            return entry.strip()
    return None


def map_product(product: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    """Flatten one Open Food Facts product; products without id or name are dropped."""
    product_id = product.get("id") or product.get("_id")
    name = product.get("product_name") or product.get("generic_name") or ""
    if not product_id or not name:
        return None

    nutriments = product.get("nutriments") or {}
    # Plain "energy_*" values are kilojoules.
    per_serving = _number(nutriments, ["energy-kcal_serving", "energy-kcal_value"])
    if per_serving is None:
        per_serving = _kj_to_kcal(_number(nutriments, ["energy_serving"]))
    per_100g = _number(nutriments, ["energy-kcal_100g"])
    if per_100g is None:
        per_100g = _kj_to_kcal(_number(nutriments, ["energy_100g"]))

    return {
        "id": str(product_id),
        "name": name,
        "brand": primary_brand(product.get("brands")),
        "servingSize": product.get("serving_size"),
        "servingQuantity": product.get("serving_quantity"),
        "caloriesPerServing": per_serving,
        "caloriesPer100g": per_100g,
    }


class OpenFoodFactsClient:
    def __init__(
        self,
        cfg: Settings = settings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = cfg.openfoodfacts_url
        self.timeout = cfg.openfoodfacts_timeout
        self.user_agent = cfg.user_agent
        self._transport = transport

    async def search(self, query: str, *, language: Optional[str] = None, limit: int = 10) -> List[Dict[str, Any]]:
        params = {
            "search_terms": query,
            "search_simple": "1",
            "action": "process",
            "json": "1",
            "page_size": str(limit),
            "fields": _FIELDS,
        }
        if language:
            params["lc"] = language
        headers = {"Accept": "application/json", "User-Agent": self.user_agent}
        async with httpx.AsyncClient(
            timeout=self.timeout, follow_redirects=True, transport=self._transport
        ) as client:
            resp = await client.get(self.url, params=params, headers=headers)
        if resp.status_code >= 400:
            raise UpstreamError(resp.status_code, resp.text[:500])
        data = resp.json()
        products = (data.get("products") if isinstance(data, dict) else None) or []
        items = []
        for product in products:
            if not isinstance(product, dict):
                continue
            item = map_product(product)
            if item is not None:
                items.append(item)
        return items
