"""
DataStore — In-memory store/product collections backed by pandas.

Loaded once at startup and shared (read-only) by the API and CLI.
Queries always recompute from the loaded frames.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import pandas as pd

from storemap.config import STORES_FILE, PRODUCTS_FILE
from storemap.data.parser import parse_csv, empty_frame
from storemap.data.normalize import normalize_stores, normalize_products, unique_product_names
from storemap.data.schemas import (
    CsvSchema, PriceStats, StoreRecord, ProductRecord, store_records, product_records,
)
from storemap.analytics import queries


def _read_text(path: Path, label: str) -> Optional[str]:
    if not path.exists():
        print(f"  No {label} file at {path} — starting with empty {label}")
        return None
    return path.read_text(encoding="utf-8")


@dataclass(frozen=True)
class Collections:
    """One consistent generation of loaded data."""
    stores: pd.DataFrame
    products: pd.DataFrame
    unique_products: pd.DataFrame
    summaries: dict = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "Collections":
        products = empty_frame(CsvSchema.PRODUCTS)
        return cls(empty_frame(CsvSchema.STORES), products, products)


class DataStore:
    """Normalized stores and products with aggregate accessors.

    A load builds a complete new ``Collections`` and swaps it in with a single
    assignment; every accessor reads one snapshot, so a request served during
    a background reload sees either the old data or the new data.
    """

    def __init__(self) -> None:
        self._data = Collections.empty()
        self._loaded = False

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, stores_path: Path = STORES_FILE, products_path: Path = PRODUCTS_FILE) -> "DataStore":
        """Read both CSV files and build the collections."""
        print("Loading store data...")
        return self.load_text(
            _read_text(Path(stores_path), "stores"),
            _read_text(Path(products_path), "products"),
        )

    def load_text(self, stores_text: Optional[str], products_text: Optional[str]) -> "DataStore":
        """Build the collections from raw CSV text (None → empty collection)."""
        raw_stores = parse_csv(stores_text, CsvSchema.STORES) if stores_text else empty_frame(CsvSchema.STORES)
        raw_products = parse_csv(products_text, CsvSchema.PRODUCTS) if products_text else empty_frame(CsvSchema.PRODUCTS)

        products = normalize_products(raw_products)
        data = Collections(
            stores=normalize_stores(raw_stores),
            products=products,
            unique_products=unique_product_names(products),
        )
        self._data = data

        print(f"  Products: {len(data.products):,} listings, {len(data.unique_products):,} unique names")
        self._loaded = True
        return self

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def stores(self) -> pd.DataFrame:
        return self._data.stores

    @property
    def products(self) -> pd.DataFrame:
        return self._data.products

    @property
    def unique_products(self) -> pd.DataFrame:
        return self._data.unique_products

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def store_records(self) -> list[StoreRecord]:
        return store_records(self.stores)

    def product_records(self) -> list[ProductRecord]:
        return product_records(self.products)

    def store_count(self) -> int:
        return len(self.stores)

    def product_count(self) -> int:
        return len(self.products)

    def product_names(self) -> list[str]:
        """Unique product names in first-seen order."""
        return self.unique_products["name"].tolist()

    def has_product(self, name: str) -> bool:
        unique = self.unique_products
        return bool((unique["name"] == name).any()) if not unique.empty else False

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def group_counts(self, field: str) -> list[dict]:
        """Counts per insegna/gruppo, sorted descending for display."""
        return queries.sort_counts(queries.group_count_by(self.stores, field))

    def overview(self) -> dict:
        return queries.store_overview(self.stores)

    def stores_for_product(self, name: str) -> pd.DataFrame:
        data = self._data
        return queries.stores_for_product(data.stores, data.products, name)

    def price_stats(self, name: str) -> PriceStats:
        return queries.price_stats(self.products, name)

    def search(self, query: str, limit: int | None = None) -> list[dict]:
        data = self._data
        if limit is None:
            return queries.search_products(data.unique_products, data.products, query)
        return queries.search_products(data.unique_products, data.products, query, limit)

    def product_summary(self, name: str) -> dict:
        """Memoized per product name; the cache resets on every load."""
        data = self._data
        if name not in data.summaries:
            data.summaries[name] = queries.product_summary(data.stores, data.products, name)
        return data.summaries[name]

    def markers(self, name: str | None = None) -> list[dict]:
        data = self._data
        return queries.map_markers(data.stores, data.products, name)

    def map_center(self) -> Optional[dict]:
        return queries.map_center(self.stores)
