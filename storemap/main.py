"""
StoreMap Analytics — FastAPI app factory with startup data loading.
"""
from __future__ import annotations

import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from storemap.data.store import DataStore
from storemap.api.dependencies import set_store
from storemap.api.router_meta import router as meta_router
from storemap.api.router_stores import router as stores_router
from storemap.api.router_products import router as products_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load both datasets once at startup."""
    from storemap.config import STORES_FILE, PRODUCTS_FILE

    print(f"  STOREMAP_DATA_DIR = {os.environ.get('STOREMAP_DATA_DIR', '(not set)')}")
    print(f"  STORES_FILE = {STORES_FILE} (exists = {STORES_FILE.exists()})")
    print(f"  PRODUCTS_FILE = {PRODUCTS_FILE} (exists = {PRODUCTS_FILE.exists()})")

    store = DataStore().load(STORES_FILE, PRODUCTS_FILE)
    set_store(store)

    if store.store_count() > 0:
        print(f"\nStoreMap ready — {store.store_count():,} stores, "
              f"{len(store.unique_products):,} products\n")
    else:
        print("\nStoreMap ready — no stores loaded. Check STOREMAP_DATA_DIR.\n")
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="StoreMap Analytics API",
        description="Retail store network map, banner/group analytics, product price search",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(meta_router)
    app.include_router(stores_router)
    app.include_router(products_router)

    # Dashboard front-end bundle, when one is shipped alongside the package
    static_dir = Path(__file__).parent / "static"
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(static_dir), html=True), name="static")

    return app


app = create_app()
