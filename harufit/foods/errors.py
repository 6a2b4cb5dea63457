# -*- coding: utf-8 -*-
"""Food datasets: error taxonomy.

Every error carries the HTTP status and the user-facing ``error`` text the route
layer renders as ``{"error": ..., "details": ...}``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class DatasetError(Exception):
    status_code: int = 500
    default_error: str = "Internal server error"

    def __init__(self, error: Optional[str] = None, *, details: Optional[str] = None) -> None:
        self.error = error or self.default_error
        self.details = details
        super().__init__(f"{self.error}: {details}" if details else self.error)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.error}
        if self.details:
            payload["details"] = self.details
        return payload


class UnsupportedLanguage(DatasetError):
    status_code = 400
    default_error = "Unsupported language"


class InvalidPartNumber(DatasetError):
    status_code = 400
    default_error = "Invalid part number"


class DatasetNotFound(DatasetError):
    status_code = 404
    default_error = "Dataset not found"


class ObjectNotFound(DatasetError):
    status_code = 404
    default_error = "Object not found"


class DatasetCorrupt(DatasetError):
    status_code = 500
    default_error = "Dataset corrupt"


class StoreUnavailable(DatasetError):
    status_code = 500
    default_error = "Failed to read files"
