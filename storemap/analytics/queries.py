"""
Aggregate/query engine — pure functions over the normalized store and
product frames. Nothing here mutates its inputs or raises on data.
"""
from __future__ import annotations

from typing import Optional

import pandas as pd

from storemap.config import (
    CURRENCY_SYMBOL, GROUP_FIELDS, MISSING_PRICE, SAME_PRICE_COLOR, SEARCH_LIMIT, UNKNOWN,
)
from storemap.data.schemas import PriceStats
from storemap.analytics.common import round_half_up, safe_divide


# ---------------------------------------------------------------------------
# Store grouping
# ---------------------------------------------------------------------------

def group_count_by(stores: pd.DataFrame, field: str) -> list[dict]:
    """Store counts per distinct insegna or gruppo, in first-seen order.

    Empty or missing values are counted under "Unknown".
    """
    if field not in GROUP_FIELDS:
        raise ValueError(f"Cannot group stores by {field!r}; expected one of {', '.join(GROUP_FIELDS)}")
    if stores.empty:
        return []

    keys = stores[field].fillna("").astype(str).str.strip()
    keys = keys.where(keys != "", UNKNOWN)
    counts = keys.groupby(keys, sort=False).size()
    return [{"name": name, "count": int(count)} for name, count in counts.items()]


def sort_counts(counts: list[dict]) -> list[dict]:
    """Descending by count, for charts. Ties keep their original order."""
    return sorted(counts, key=lambda c: c["count"], reverse=True)


def store_overview(stores: pd.DataFrame) -> dict:
    """Analytics panel: totals plus sorted insegna/gruppo distributions."""
    insegna = sort_counts(group_count_by(stores, "insegna"))
    gruppo = sort_counts(group_count_by(stores, "gruppo"))
    return {
        "total_stores": len(stores),
        "unique_insegna": len(insegna),
        "unique_gruppo": len(gruppo),
        "insegna": insegna,
        "gruppo": gruppo,
        "top_insegna": insegna[0] if insegna else None,
        "top_gruppo": gruppo[0] if gruppo else None,
    }


# ---------------------------------------------------------------------------
# Product joins & price statistics
# ---------------------------------------------------------------------------

def _matching(products: pd.DataFrame, name: str) -> pd.DataFrame:
    if products.empty:
        return products
    return products[products["name"] == name]


def stores_for_product(stores: pd.DataFrame, products: pd.DataFrame, name: str) -> pd.DataFrame:
    """Stores carrying a product (exact, case-sensitive name match)."""
    if stores.empty or products.empty:
        return stores.iloc[0:0].reset_index(drop=True)
    store_ids = _matching(products, name)["store_id"].dropna()
    return stores[stores["store_id"].isin(store_ids)].reset_index(drop=True)


def price_stats(products: pd.DataFrame, name: str) -> PriceStats:
    """Min/max base price over the priced rows for a product name.

    (0, 0) with count 0 when nothing matches.
    """
    if products.empty:
        return PriceStats()
    prices = _matching(products, name)["base_price"].dropna()
    if prices.empty:
        return PriceStats()
    return PriceStats(min=int(prices.min()), max=int(prices.max()), count=len(prices))


def store_product(products: pd.DataFrame, store_id: int, name: str) -> Optional[dict]:
    """First product row for (store_id, name), or None."""
    if products.empty:
        return None
    same_store = products["store_id"].eq(store_id).fillna(False).astype(bool)
    rows = products[same_store & (products["name"] == name)]
    if rows.empty:
        return None
    return rows.iloc[0].to_dict()


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------

def price_color(price: float, min_price: float, max_price: float) -> str:
    """Green (cheapest) → red (priciest) marker color.

    Prices outside [min, max] are clamped to the nearest end.
    """
    if min_price == max_price:
        return SAME_PRICE_COLOR
    ratio = (price - min_price) / (max_price - min_price)
    ratio = min(max(ratio, 0.0), 1.0)
    red = round_half_up(255 * ratio)
    green = round_half_up(255 * (1 - ratio))
    return f"rgb({red}, {green}, 0)"


def _missing(cents) -> bool:
    return cents is None or (pd.api.types.is_scalar(cents) and pd.isna(cents))


def format_price(cents, zero_as_missing: bool = True) -> str:
    """Integer cents → "€5.99". None/NA → "N/A".

    A zero price also renders as "N/A" unless zero_as_missing is False.
    """
    if _missing(cents) or (zero_as_missing and cents == 0):
        return MISSING_PRICE
    return f"{CURRENCY_SYMBOL}{cents / 100:.2f}"


# ---------------------------------------------------------------------------
# Product search & summary
# ---------------------------------------------------------------------------

def search_products(
    unique: pd.DataFrame,
    products: pd.DataFrame,
    query: str,
    limit: int = SEARCH_LIMIT,
) -> list[dict]:
    """Case-insensitive substring search over unique product names.

    Each hit carries the number of product rows (one per store) for the name.
    """
    query = (query or "").strip()
    if not query or unique.empty:
        return []

    names = unique["name"].astype(str)
    hits = names[names.str.lower().str.contains(query.lower(), regex=False)].head(limit)
    rows_per_name = products["name"].value_counts() if not products.empty else pd.Series(dtype="int64")
    return [
        {"name": n, "store_count": int(rows_per_name.get(n, 0))}
        for n in hits
    ]


def product_summary(stores: pd.DataFrame, products: pd.DataFrame, name: str) -> dict:
    """Stats card data for a selected product."""
    matches = _matching(products, name)
    stats = price_stats(products, name)

    if matches.empty:
        priced = pd.Series(dtype="float64")
        promo_count = 0
    else:
        priced = matches["base_price"].dropna()
        promo_count = int((matches["promo_price"].fillna(0) > 0).sum())

    avg_price = safe_divide(float(priced.sum()), len(priced))
    store_count = len(stores_for_product(stores, products, name))
    return {
        "name": name,
        "store_count": store_count,
        "listing_count": len(matches),
        "price_stats": stats.to_dict(),
        "avg_price": round(avg_price, 2),
        "promo_count": promo_count,
        "promo_percentage": round(safe_divide(promo_count * 100.0, store_count), 2),
        "min_price_label": format_price(stats.min) if stats.has_data else MISSING_PRICE,
        "max_price_label": format_price(stats.max) if stats.has_data else MISSING_PRICE,
        "avg_price_label": format_price(round_half_up(avg_price)) if len(priced) else MISSING_PRICE,
    }


# ---------------------------------------------------------------------------
# Map markers
# ---------------------------------------------------------------------------

def map_center(stores: pd.DataFrame) -> Optional[dict]:
    """Mean latitude/longitude of all stores, or None when there are none."""
    if stores.empty:
        return None
    return {
        "latitude": float(stores["latitude"].mean()),
        "longitude": float(stores["longitude"].mean()),
    }


def _label(address: dict, key: str, fallback: str) -> str:
    value = (address or {}).get(key)
    return str(value) if value not in (None, "") else fallback


def map_markers(stores: pd.DataFrame, products: pd.DataFrame, name: str | None = None) -> list[dict]:
    """One marker per displayed store.

    Without a product every store is shown with the default marker; with one,
    only stores carrying it are shown, colored by base price.
    """
    if name:
        display = stores_for_product(stores, products, name)
        stats = price_stats(products, name)
    else:
        display = stores
        stats = None

    markers = []
    for _, store in display.iterrows():
        address = store["address"] if isinstance(store["address"], dict) else {}
        marker = {
            "store_id": int(store["store_id"]),
            "latitude": float(store["latitude"]),
            "longitude": float(store["longitude"]),
            "street": _label(address, "street", "Unknown Street"),
            "city": _label(address, "city", "Unknown City"),
            "province": _label(address, "province", "Unknown Province"),
            "insegna": store["insegna"],
            "gruppo": store["gruppo"],
            "color": None,
        }

        if name:
            row = store_product(products, int(store["store_id"]), name)
            if row is not None:
                base = row["base_price"]
                promo = row["promo_price"]
                marker["price"] = format_price(base)
                if not _missing(promo) and promo:
                    marker["promo_price"] = format_price(promo)
                if not _missing(base) and base and stats.has_data:
                    marker["color"] = price_color(base, stats.min, stats.max)

        markers.append(marker)
    return markers
