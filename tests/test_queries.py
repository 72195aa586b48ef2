"""Tests for storemap.analytics.queries."""
import pandas as pd
import pytest

from storemap.analytics.queries import (
    format_price,
    group_count_by,
    map_center,
    map_markers,
    price_color,
    price_stats,
    product_summary,
    search_products,
    sort_counts,
    store_overview,
    store_product,
    stores_for_product,
)
from storemap.data.parser import empty_frame
from storemap.data.schemas import CsvSchema, PriceStats


# ---------------------------------------------------------------------------
# Grouping
# ---------------------------------------------------------------------------

def test_group_count_by_insegna_first_seen_order(data_store):
    assert group_count_by(data_store.stores, "insegna") == [
        {"name": "Conad", "count": 2},
        {"name": "Coop", "count": 1},
        {"name": "Unknown", "count": 1},
    ]


def test_group_count_by_gruppo(data_store):
    counts = {c["name"]: c["count"] for c in group_count_by(data_store.stores, "gruppo")}
    assert counts == {"Gruppo X": 2, "Gruppo Y": 1, "Unknown": 1}


def test_group_count_by_blank_values_are_unknown():
    stores = pd.DataFrame({"insegna": ["", None, " ", "Coop"]})
    assert group_count_by(stores, "insegna") == [
        {"name": "Unknown", "count": 3},
        {"name": "Coop", "count": 1},
    ]


def test_group_count_by_rejects_other_fields(data_store):
    with pytest.raises(ValueError):
        group_count_by(data_store.stores, "centrale")


def test_group_count_by_empty():
    assert group_count_by(empty_frame(CsvSchema.STORES), "gruppo") == []


def test_sort_counts_descending_stable():
    counts = [{"name": "a", "count": 1}, {"name": "b", "count": 3}, {"name": "c", "count": 1}]
    assert [c["name"] for c in sort_counts(counts)] == ["b", "a", "c"]


def test_store_overview(data_store):
    ov = store_overview(data_store.stores)
    assert ov["total_stores"] == 4
    assert ov["unique_insegna"] == 3
    assert ov["top_insegna"] == {"name": "Conad", "count": 2}
    assert ov["top_gruppo"] == {"name": "Gruppo X", "count": 2}


def test_store_overview_empty():
    ov = store_overview(empty_frame(CsvSchema.STORES))
    assert ov["total_stores"] == 0
    assert ov["top_insegna"] is None


# ---------------------------------------------------------------------------
# Joins & price stats
# ---------------------------------------------------------------------------

def test_stores_for_product_exact_match(data_store):
    df = stores_for_product(data_store.stores, data_store.products, "Peach Nectar")
    assert df["store_id"].tolist() == [1, 2, 3]


def test_stores_for_product_ignores_unknown_store_ids(data_store):
    df = stores_for_product(data_store.stores, data_store.products, "Apple Juice, 1L")
    assert df["store_id"].tolist() == [1]


def test_stores_for_product_case_sensitive_and_unmatched(data_store):
    assert stores_for_product(data_store.stores, data_store.products, "peach nectar").empty
    assert stores_for_product(data_store.stores, data_store.products, "Orphan Jam").empty


def test_price_stats(data_store):
    stats = price_stats(data_store.products, "Peach Nectar")
    assert stats == PriceStats(min=249, max=299, count=2)


def test_price_stats_bounds(data_store):
    for name in data_store.product_names():
        stats = price_stats(data_store.products, name)
        prices = data_store.products.loc[data_store.products["name"] == name, "base_price"].dropna()
        for p in prices:
            assert stats.min <= p <= stats.max


def test_price_stats_no_data():
    assert price_stats(empty_frame(CsvSchema.PRODUCTS), "Ghost Product") == PriceStats(0, 0, 0)


def test_price_stats_zero_price_is_data(data_store):
    stats = price_stats(data_store.products, "Free Sample")
    assert (stats.min, stats.max) == (0, 0)
    assert stats.has_data


def test_store_product(data_store):
    row = store_product(data_store.products, 1, "Peach Nectar")
    assert row["base_price"] == 249
    assert row["promo_price"] == 199
    assert store_product(data_store.products, 6, "Peach Nectar") is None


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------

def test_price_color_boundaries():
    assert price_color(100, 100, 200) == "rgb(0, 255, 0)"
    assert price_color(200, 100, 200) == "rgb(255, 0, 0)"


def test_price_color_midpoint_rounds_half_up():
    assert price_color(274, 249, 299) == "rgb(128, 128, 0)"


@pytest.mark.parametrize("price", [0, 150, 999])
def test_price_color_same_min_max(price):
    assert price_color(price, 150, 150) == "#52c41a"


def test_price_color_clamps_out_of_range():
    assert price_color(50, 100, 200) == "rgb(0, 255, 0)"
    assert price_color(500, 100, 200) == "rgb(255, 0, 0)"


def test_format_price():
    assert format_price(599) == "€5.99"
    assert format_price(5) == "€0.05"
    assert format_price(None) == "N/A"
    assert format_price(pd.NA) == "N/A"


def test_format_price_zero():
    assert format_price(0) == "N/A"
    assert format_price(0, zero_as_missing=False) == "€0.00"


# ---------------------------------------------------------------------------
# Search & summary
# ---------------------------------------------------------------------------

def test_search_products_case_insensitive(data_store):
    hits = search_products(data_store.unique_products, data_store.products, "JUICE")
    assert hits == [{"name": "Apple Juice, 1L", "store_count": 2}]


def test_search_products_limit_and_empty_query(data_store):
    assert search_products(data_store.unique_products, data_store.products, "") == []
    assert len(search_products(data_store.unique_products, data_store.products, "e", limit=2)) == 2


def test_search_products_literal_match(data_store):
    assert search_products(data_store.unique_products, data_store.products, "1L)") == []
    assert search_products(data_store.unique_products, data_store.products, ", 1")[0]["name"] == "Apple Juice, 1L"


def test_product_summary(data_store):
    s = product_summary(data_store.stores, data_store.products, "Peach Nectar")
    assert s["store_count"] == 3
    assert s["listing_count"] == 3
    assert s["price_stats"] == {"min": 249, "max": 299, "count": 2}
    assert s["avg_price"] == 274.0
    assert s["promo_count"] == 1
    assert s["min_price_label"] == "€2.49"
    assert s["max_price_label"] == "€2.99"
    assert s["avg_price_label"] == "€2.74"
    assert s["promo_percentage"] == 33.33


def test_product_summary_unknown_product(data_store):
    s = product_summary(data_store.stores, data_store.products, "Ghost Product")
    assert s["store_count"] == 0
    assert s["price_stats"] == {"min": 0, "max": 0, "count": 0}
    assert s["min_price_label"] == "N/A"
    assert s["avg_price_label"] == "N/A"
    assert s["promo_percentage"] == 0.0


# ---------------------------------------------------------------------------
# Map markers
# ---------------------------------------------------------------------------

def test_map_markers_all_stores(data_store):
    markers = map_markers(data_store.stores, data_store.products)
    assert [m["store_id"] for m in markers] == [1, 2, 3, 6]
    assert all(m["color"] is None for m in markers)
    florence = markers[3]
    assert florence["city"] == "Florence"
    assert florence["province"] == "Unknown Province"


def test_map_markers_for_product(data_store):
    markers = {m["store_id"]: m for m in map_markers(data_store.stores, data_store.products, "Peach Nectar")}
    assert set(markers) == {1, 2, 3}

    assert markers[1]["price"] == "€2.49"
    assert markers[1]["promo_price"] == "€1.99"
    assert markers[1]["color"] == "rgb(0, 255, 0)"

    assert markers[2]["color"] == "rgb(255, 0, 0)"
    assert "promo_price" not in markers[2]

    # listed without a price: default marker
    assert markers[3]["price"] == "N/A"
    assert markers[3]["color"] is None


def test_product_summary_promo_percentage_without_stores(data_store):
    # listed only at a store id that is not in the stores file
    s = product_summary(data_store.stores, data_store.products, "Orphan Jam")
    assert s["store_count"] == 0
    assert s["promo_percentage"] == 0.0


def test_product_summary_avg_includes_zero_prices(data_store):
    s = product_summary(data_store.stores, data_store.products, "Free Sample")
    assert s["avg_price"] == 0.0
    assert s["price_stats"] == {"min": 0, "max": 0, "count": 1}


def test_map_center_is_mean_of_store_coordinates(data_store):
    center = map_center(data_store.stores)
    assert center["latitude"] == pytest.approx((41.9028 + 45.47 + 44.4949 + 43.7696) / 4)
    assert center["longitude"] == pytest.approx((12.4964 + 9.2 + 11.3426 + 11.2558) / 4)


def test_map_center_no_stores():
    assert map_center(empty_frame(CsvSchema.STORES)) is None
