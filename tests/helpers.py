# -*- coding: utf-8 -*-
"""Fixtures shared by the food dataset tests."""

from __future__ import annotations

import gzip
import json
from pathlib import Path
from typing import Any, List


def write_part(root: Path, relpath: str, records: List[Any]) -> Path:
    fp = root / relpath
    fp.parent.mkdir(parents=True, exist_ok=True)
    fp.write_bytes(gzip.compress(json.dumps(records, ensure_ascii=False).encode("utf-8")))
    return fp


def write_bytes(root: Path, relpath: str, payload: bytes) -> Path:
    fp = root / relpath
    fp.parent.mkdir(parents=True, exist_ok=True)
    fp.write_bytes(payload)
    return fp
