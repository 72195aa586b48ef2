"""
Pydantic response schemas for the API.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    loaded: bool
    stores: int
    products: int
    unique_products: int


class GroupCount(BaseModel):
    name: str
    count: int


class GroupCountsResponse(BaseModel):
    field: str
    counts: list[GroupCount]


class PriceStatsModel(BaseModel):
    min: int
    max: int
    count: int


class ProductHit(BaseModel):
    name: str
    store_count: int


class ProductSearchResponse(BaseModel):
    query: str
    results: list[ProductHit]


class ProductSummaryResponse(BaseModel):
    name: str
    store_count: int
    listing_count: int
    price_stats: PriceStatsModel
    avg_price: float
    promo_count: int
    promo_percentage: float
    min_price_label: str
    max_price_label: str
    avg_price_label: str


class MapCenter(BaseModel):
    latitude: float
    longitude: float


class MapResponse(BaseModel):
    product: Optional[str] = None
    center: Optional[MapCenter] = None
    price_stats: Optional[PriceStatsModel] = None
    markers: list[dict]
