# -*- coding: utf-8 -*-
"""Food datasets: Pydantic models (wire format is camelCase)."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DatasetPartInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(..., alias="fileName")
    size: Optional[int] = None
    modified_at: Optional[str] = Field(None, alias="modifiedAt", description="ISO8601 timestamp")
    modified_timestamp: Optional[int] = Field(None, alias="modifiedTimestamp", description="epoch ms")


class DatasetPartsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    lang: str
    parts: List[DatasetPartInfo]
    total_parts: int = Field(..., alias="totalParts")


class FoodSearchResponse(BaseModel):
    # Records go out exactly as stored in the dataset parts.
    results: List[Dict[str, Any]] = Field(default_factory=list)
    # Size of this page, not the number of matches in the dataset.
    total: int = 0
    limit: int
    offset: int


class SqliteMetaResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    exists: bool = True
    size: Optional[int] = None
    modified_at: Optional[str] = Field(None, alias="modifiedAt")
    modified_timestamp: Optional[int] = Field(None, alias="modifiedTimestamp")


class ChunksInfoResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    exists: bool = True
    original_size: Optional[int] = Field(None, alias="originalSize")
    created_at: Optional[str] = Field(None, alias="createdAt")
    chunks: List[Dict[str, Any]] = Field(default_factory=list)


class FoodLookupItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    brand: Optional[str] = None
    serving_size: Optional[str] = Field(None, alias="servingSize")
    serving_quantity: Optional[float] = Field(None, alias="servingQuantity")
    calories_per_serving: Optional[float] = Field(None, alias="caloriesPerServing")
    calories_per_100g: Optional[float] = Field(None, alias="caloriesPer100g")


class FoodLookupResponse(BaseModel):
    items: List[FoodLookupItem] = Field(default_factory=list)
    total: int = 0
