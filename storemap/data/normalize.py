"""
Store normalization (geodata filter + dedup) and the product catalog views.
"""
from __future__ import annotations

import numpy as np
import pandas as pd


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------

def valid_coordinates(df: pd.DataFrame) -> pd.Series:
    """Mask of rows whose latitude/longitude are finite and non-zero.

    Zero is the "unset" marker in the source data, not a real coordinate.
    """
    lat = df["latitude"].to_numpy(dtype="float64", na_value=np.nan)
    lon = df["longitude"].to_numpy(dtype="float64", na_value=np.nan)
    ok = np.isfinite(lat) & np.isfinite(lon) & (lat != 0) & (lon != 0)
    return pd.Series(ok, index=df.index)


def dedup_last_wins(df: pd.DataFrame, key: str) -> pd.DataFrame:
    """Keep one row per key: values from the last occurrence, placed at the
    position of the first occurrence."""
    if df.empty:
        return df.reset_index(drop=True)
    order = {k: i for i, k in enumerate(df[key].drop_duplicates(keep="first"))}
    last = df.drop_duplicates(subset=key, keep="last")
    return (
        last.sort_values(key, key=lambda s: s.map(order), kind="stable")
        .reset_index(drop=True)
    )


def normalize_stores(stores: pd.DataFrame) -> pd.DataFrame:
    """Displayable, unique-by-store_id stores.

    Drops rows with missing/zero/non-finite coordinates or no store_id, then
    deduplicates store_id with last-write-wins values.
    """
    if stores.empty:
        return stores.reset_index(drop=True)

    geo_ok = valid_coordinates(stores)
    id_ok = stores["store_id"].notna()
    kept = stores[geo_ok & id_ok]
    result = dedup_last_wins(kept, "store_id")

    no_geo = int((~geo_ok).sum())
    no_id = int((geo_ok & ~id_ok).sum())
    dupes = len(kept) - len(result)
    print(f"  Stores: {len(stores):,} rows → {len(result):,} unique "
          f"(no coordinates -{no_geo:,}, no id -{no_id:,}, duplicates -{dupes:,})")
    return result


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------

def normalize_products(products: pd.DataFrame) -> pd.DataFrame:
    """Products pass through unfiltered."""
    return products.reset_index(drop=True).copy()


def unique_product_names(products: pd.DataFrame) -> pd.DataFrame:
    """One representative row per non-empty product name, first seen wins."""
    if products.empty:
        return products.reset_index(drop=True)
    named = products[products["name"].fillna("").astype(str) != ""]
    return named.drop_duplicates(subset="name", keep="first").reset_index(drop=True)
