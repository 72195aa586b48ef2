"""
Record schemas: CSV schema tags and typed row views over the loaded frames.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import pandas as pd

from storemap.config import ADDRESS_FIELDS, UNKNOWN


class CsvSchema(str, Enum):
    STORES = "stores"
    PRODUCTS = "products"


def sentinel_address() -> dict:
    """Address substituted when the embedded JSON cannot be recovered."""
    return {key: UNKNOWN for key in ("city", "street", "province", "postalCode")}


def _opt_int(value) -> Optional[int]:
    if value is None or pd.isna(value):
        return None
    return int(value)


def _opt_float(value) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    return float(value)


@dataclass(frozen=True)
class Address:
    street: str = UNKNOWN
    city: str = UNKNOWN
    province: str = UNKNOWN
    postalCode: str = UNKNOWN

    @classmethod
    def from_dict(cls, data: dict | None) -> "Address":
        """Build from a decoded address dict; absent keys stay at "Unknown"."""
        data = data or {}
        values = {}
        for key in ADDRESS_FIELDS:
            v = data.get(key)
            if v is not None and str(v).strip():
                values[key] = str(v)
        return cls(**values)


@dataclass(frozen=True)
class StoreRecord:
    """One store row. Coordinates are None when they could not be parsed."""
    store_id: Optional[int]
    address: dict = field(default_factory=sentinel_address)
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    services: str = UNKNOWN
    centrale: str = UNKNOWN
    gruppo: str = UNKNOWN
    orgcedi: str = UNKNOWN
    insegna: str = UNKNOWN

    @classmethod
    def from_row(cls, row: pd.Series) -> "StoreRecord":
        return cls(
            store_id=_opt_int(row.get("store_id")),
            address=dict(row.get("address") or sentinel_address()),
            latitude=_opt_float(row.get("latitude")),
            longitude=_opt_float(row.get("longitude")),
            services=row.get("services", UNKNOWN),
            centrale=row.get("centrale", UNKNOWN),
            gruppo=row.get("gruppo", UNKNOWN),
            orgcedi=row.get("orgcedi", UNKNOWN),
            insegna=row.get("insegna", UNKNOWN),
        )

    @property
    def structured_address(self) -> Address:
        return Address.from_dict(self.address)


@dataclass(frozen=True)
class ProductRecord:
    """One product-at-store row. Prices are integer cents."""
    store_id: Optional[int]
    base_price: Optional[int] = None
    promo_price: Optional[int] = None
    name: str = ""
    brand: str = UNKNOWN

    @classmethod
    def from_row(cls, row: pd.Series) -> "ProductRecord":
        return cls(
            store_id=_opt_int(row.get("store_id")),
            base_price=_opt_int(row.get("base_price")),
            promo_price=_opt_int(row.get("promo_price")),
            name=row.get("name", ""),
            brand=row.get("brand", UNKNOWN),
        )


@dataclass(frozen=True)
class PriceStats:
    """Min/max base price for a product name.

    ``count`` is the number of priced rows behind the stats, so a real
    zero price (count > 0) can be told apart from "no data" (count == 0).
    """
    min: int = 0
    max: int = 0
    count: int = 0

    @property
    def has_data(self) -> bool:
        return self.count > 0

    def to_dict(self) -> dict:
        return {"min": self.min, "max": self.max, "count": self.count}


def store_records(df: pd.DataFrame) -> list[StoreRecord]:
    return [StoreRecord.from_row(row) for _, row in df.iterrows()]


def product_records(df: pd.DataFrame) -> list[ProductRecord]:
    return [ProductRecord.from_row(row) for _, row in df.iterrows()]
