"""
Meta endpoints: health, reload.
"""
from __future__ import annotations

import threading

from fastapi import APIRouter, Depends

from storemap.data.store import DataStore
from storemap.api.dependencies import get_store_or_empty
from storemap.api.response_models import HealthResponse

router = APIRouter(prefix="/api", tags=["meta"])


@router.get("/health", response_model=HealthResponse)
def health(store: DataStore = Depends(get_store_or_empty)):
    return HealthResponse(
        status="ok",
        loaded=store.is_loaded,
        stores=store.store_count(),
        products=store.product_count(),
        unique_products=len(store.unique_products),
    )


@router.post("/reload")
def reload_data(store: DataStore = Depends(get_store_or_empty)):
    """Re-read both CSV files.

    Returns immediately, reload happens in background.
    """
    def _do_reload():
        store.load()
        print(f"  Reload complete — {store.store_count():,} stores, {store.product_count():,} products")

    threading.Thread(target=_do_reload, daemon=True).start()
    return {
        "status": "reloading",
        "message": "Data reload started in background. Check /api/health for updated counts.",
    }
