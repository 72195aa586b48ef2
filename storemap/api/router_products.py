"""
Product endpoints — catalog, search, per-product summary, map markers.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from storemap.config import SEARCH_LIMIT
from storemap.data.store import DataStore
from storemap.api.dependencies import get_store
from storemap.api.response_models import (
    MapResponse, ProductSearchResponse, ProductSummaryResponse,
)
from storemap.analytics.common import frame_to_records, sanitize_for_json

router = APIRouter(prefix="/api", tags=["products"])


@router.get("/products")
def list_products(store: DataStore = Depends(get_store)):
    """One representative listing per product name."""
    return {"count": len(store.unique_products), "products": frame_to_records(store.unique_products)}


@router.get("/products/search", response_model=ProductSearchResponse)
def search_products(
    q: str = Query("", description="Case-insensitive name fragment"),
    limit: int = Query(SEARCH_LIMIT, ge=1, le=100),
    store: DataStore = Depends(get_store),
):
    return ProductSearchResponse(query=q, results=store.search(q, limit))


@router.get("/products/summary", response_model=ProductSummaryResponse)
def product_summary(
    name: str = Query(..., description="Exact product name"),
    store: DataStore = Depends(get_store),
):
    if not store.has_product(name):
        raise HTTPException(404, f"Product not found: {name}")
    return sanitize_for_json(store.product_summary(name))


@router.get("/map", response_model=MapResponse)
def map_markers(
    product: Optional[str] = Query(None, description="Exact product name to filter by"),
    store: DataStore = Depends(get_store),
):
    """Map markers for all stores, or for the stores carrying a product."""
    if product and not store.has_product(product):
        raise HTTPException(404, f"Product not found: {product}")
    stats = store.price_stats(product).to_dict() if product else None
    return MapResponse(
        product=product or None,
        center=store.map_center(),
        price_stats=stats,
        markers=sanitize_for_json(store.markers(product or None)),
    )
