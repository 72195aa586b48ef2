#!/usr/bin/env python3
"""
StoreMap CLI — store/product summaries, static JSON export, and API server.

USAGE:
  python -m storemap.cli summary                         # Store network overview
  python -m storemap.cli search "juice"                  # Find products by name
  python -m storemap.cli product "Apple Juice, 1L"       # Price analysis for one product

  python -m storemap.cli export                          # Export static JSON to data/public/
  python -m storemap.cli export --output ./dist          # Custom output directory

  python -m storemap.cli serve                           # Start API server
  python -m storemap.cli serve --port 8000
"""
from __future__ import annotations

import argparse
import json
import os
import re
import unicodedata
from datetime import datetime
from pathlib import Path

from storemap.config import EXPORT_FOLDER, PRODUCTS_FILE, STORES_FILE
from storemap.data.store import DataStore
from storemap.analytics.common import frame_to_records, sanitize_for_json


def _load(args) -> DataStore:
    return DataStore().load(Path(args.stores), Path(args.products))


def cmd_summary(args):
    """Print store totals and the insegna/gruppo distributions."""
    print("\n" + "=" * 70)
    print("  STOREMAP — STORE NETWORK SUMMARY")
    print("=" * 70)

    store = _load(args)
    ov = store.overview()

    print(f"\n  Stores: {ov['total_stores']:,}  |  Insegne: {ov['unique_insegna']}  |  Gruppi: {ov['unique_gruppo']}")
    print(f"  Products: {store.product_count():,} listings, {len(store.unique_products):,} unique\n")

    for title, key in (("INSEGNA", "insegna"), ("GRUPPO", "gruppo")):
        print(f"  {title}:")
        for i, row in enumerate(ov[key][:args.top], 1):
            print(f"    {i:<4}{row['name'][:40]:<42}{row['count']:>6,}")
        print()


def cmd_search(args):
    """List products whose name contains the query."""
    store = _load(args)
    hits = store.search(args.query, args.limit)
    if not hits:
        print(f"\n  No products match '{args.query}'\n")
        return
    print(f"\n  PRODUCTS MATCHING '{args.query}' ({len(hits)}):\n")
    for h in hits:
        print(f"    {h['name'][:50]:<52}{h['store_count']:>5} stores")
    print()


def cmd_product(args):
    """Price analysis and store list for one product."""
    store = _load(args)
    if not store.has_product(args.name):
        print(f"\n  Product not found: '{args.name}'\n")
        return

    s = store.product_summary(args.name)
    print(f"\n  {s['name']}")
    print(f"    Stores: {s['store_count']}  |  Listings: {s['listing_count']}  |  On promo: {s['promo_count']} ({s['promo_percentage']:.0f}%)")
    print(f"    Price: {s['min_price_label']} – {s['max_price_label']}  (avg {s['avg_price_label']})\n")

    for m in store.markers(args.name):
        promo = f"  promo {m['promo_price']}" if "promo_price" in m else ""
        print(f"    #{m['store_id']:<8}{m['insegna'][:20]:<22}{m['city'][:20]:<22}{m.get('price', ''):>10}{promo}")
    print()


def _slug(name: str) -> str:
    """Convert a product name to a filesystem-safe slug."""
    s = name.lower().strip()
    s = unicodedata.normalize("NFKD", s)
    s = re.sub(r"[^\w\s-]", "", s)
    s = re.sub(r"[\s_]+", "-", s).strip("-")
    return s or "unknown"


def _write_json(path: Path, data):
    """Write sanitised JSON to path, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    clean = sanitize_for_json(data)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(clean, f, separators=(",", ":"), ensure_ascii=False, default=str)


def product_slugs(names: list[str]) -> dict[str, str]:
    """Unique slug per product name (numeric suffix on collisions)."""
    slugs = {}
    used = set()
    for n in names:
        s = _slug(n)
        if s in used:
            i = 2
            while f"{s}-{i}" in used:
                i += 1
            s = f"{s}-{i}"
        used.add(s)
        slugs[n] = s
    return slugs


def cmd_export(args):
    """Export pre-computed JSON for a static dashboard build."""
    print("\n" + "=" * 70)
    print("  STOREMAP — STATIC DATA EXPORT")
    print("=" * 70)
    print(f"  Started: {datetime.now():%Y-%m-%d %H:%M:%S}")

    out = Path(args.output)
    out.mkdir(parents=True, exist_ok=True)

    store = _load(args)
    names = store.product_names()
    slugs = product_slugs(names)

    print(f"  Output: {out.resolve()}\n")

    print("  [1/3] Meta + collections...")
    _write_json(out / "data/health.json", {
        "status": "ok",
        "stores": store.store_count(),
        "products": store.product_count(),
        "unique_products": len(names),
    })
    _write_json(out / "data/stores.json", frame_to_records(store.stores))
    _write_json(out / "data/products.json", {
        "products": frame_to_records(store.unique_products),
        "product_slugs": slugs,
    })

    print("  [2/3] Store analytics + default map...")
    _write_json(out / "data/overview.json", store.overview())
    _write_json(out / "data/map/all.json", {"product": None, "center": store.map_center(), "markers": store.markers()})

    print(f"  [3/3] Product pages ({len(names)} products)...")
    for i, name in enumerate(names, 1):
        if i % 100 == 0 or i == len(names):
            print(f"    [{i}/{len(names)}]")
        _write_json(out / f"data/products/{slugs[name]}.json", {
            "summary": store.product_summary(name),
            "price_stats": store.price_stats(name).to_dict(),
            "markers": store.markers(name),
        })

    file_count = sum(1 for _ in out.rglob("*.json"))
    print(f"\n  Done! {file_count} JSON files")
    print("=" * 70 + "\n")


def cmd_serve(args):
    """Start the API server."""
    import uvicorn
    print(f"\nStarting StoreMap API on port {args.port}...")
    uvicorn.run("storemap.main:app", host="0.0.0.0", port=args.port, reload=args.reload,
                timeout_keep_alive=65)


def _add_data_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--stores", default=str(STORES_FILE), help=f"Stores CSV (default {STORES_FILE})")
    p.add_argument("--products", default=str(PRODUCTS_FILE), help=f"Products CSV (default {PRODUCTS_FILE})")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="StoreMap — retail store network and product pricing analytics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command")

    summary_parser = subparsers.add_parser("summary", help="Store network overview")
    summary_parser.add_argument("--top", type=int, default=10, help="Rows per distribution (default 10)")
    _add_data_args(summary_parser)
    summary_parser.set_defaults(func=cmd_summary)

    search_parser = subparsers.add_parser("search", help="Search products by name")
    search_parser.add_argument("query", help="Case-insensitive name fragment")
    search_parser.add_argument("--limit", type=int, default=10, help="Max results (default 10)")
    _add_data_args(search_parser)
    search_parser.set_defaults(func=cmd_search)

    product_parser = subparsers.add_parser("product", help="Price analysis for one product")
    product_parser.add_argument("name", help="Exact product name")
    _add_data_args(product_parser)
    product_parser.set_defaults(func=cmd_product)

    export_parser = subparsers.add_parser("export", help="Export static JSON for the dashboard")
    export_parser.add_argument("--output", default=str(EXPORT_FOLDER), help=f"Output directory (default: {EXPORT_FOLDER})")
    _add_data_args(export_parser)
    export_parser.set_defaults(func=cmd_export)

    serve_parser = subparsers.add_parser("serve", help="Start API server")
    serve_parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", "8000")), help="Port (default 8000)")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    serve_parser.set_defaults(func=cmd_serve)

    return parser


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return

    args.func(args)


if __name__ == "__main__":
    main()
