# -*- coding: utf-8 -*-
"""Food datasets: ranked name/brand search over cached records."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence, Tuple

MIN_QUERY_LENGTH = 2

# Comparison name field per dataset language; everything else searches English names.
NAME_FIELDS: Dict[str, str] = {"kr": "name_kor"}
DEFAULT_NAME_FIELD = "name_eng"

EXACT_NAME = 1000
EXACT_BRAND = 900
PREFIX_NAME = 800
PREFIX_BRAND = 700
CONTAINS_NAME = 600
CONTAINS_BRAND = 500


def name_field_for(lang: str) -> str:
    return NAME_FIELDS.get(lang, DEFAULT_NAME_FIELD)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).lower()


def score_record(record: Mapping[str, Any], query: str, name_field: str) -> int:
    """Match quality of one record for an already trimmed, lower-cased query; 0 means no match."""
    name = _text(record.get(name_field))
    brand = _text(record.get("brand"))
    if name == query:
        return EXACT_NAME
    if brand == query:
        return EXACT_BRAND
    if name.startswith(query):
        return PREFIX_NAME
    if brand.startswith(query):
        return PREFIX_BRAND
    if query in name:
        return CONTAINS_NAME
    if query in brand:
        return CONTAINS_BRAND
    return 0


def rank(records: Sequence[Mapping[str, Any]], query: str, lang: str) -> List[Tuple[int, Mapping[str, Any]]]:
    """All matches as (score, record), best first.

    Within one score, records carrying calories come first; the sort is stable so
    the dataset order breaks the remaining ties.
    """
    q = (query or "").strip().lower()
    if len(q) < MIN_QUERY_LENGTH:
        return []
    name_field = name_field_for(lang)
    scored = []
    for record in records:
        score = score_record(record, q, name_field)
        if score > 0:
            scored.append((score, record))
    scored.sort(key=lambda item: (-item[0], 0 if item[1].get("calories") else 1))
    return scored


def search(
    records: Sequence[Mapping[str, Any]],
    query: str,
    lang: str,
    limit: int = 30,
    offset: int = 0,
) -> List[Mapping[str, Any]]:
    ranked = rank(records, query, lang)
    offset = max(0, offset)
    limit = max(0, limit)
    return [record for _, record in ranked[offset : offset + limit]]
