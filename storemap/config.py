"""
StoreMap Analytics — Configuration: paths, schema columns, display constants.
"""
import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Paths: override with STOREMAP_DATA_DIR env var for deployment
# ---------------------------------------------------------------------------
_data_dir = Path(os.environ.get("STOREMAP_DATA_DIR", str(Path.cwd() / "data")))
DATA_FOLDER = _data_dir
STORES_FILE = Path(os.environ.get("STOREMAP_STORES_FILE", str(_data_dir / "stores.csv")))
PRODUCTS_FILE = Path(os.environ.get("STOREMAP_PRODUCTS_FILE", str(_data_dir / "products.csv")))
EXPORT_FOLDER = _data_dir / "public"

# ---------------------------------------------------------------------------
# CSV schemas (order-significant)
# ---------------------------------------------------------------------------
STORE_COLUMNS = [
    "store_id",
    "address",
    "latitude",
    "longitude",
    "services",
    "centrale",
    "gruppo",
    "orgcedi",
    "insegna",
]
STORE_TEXT_COLUMNS = ["services", "centrale", "gruppo", "orgcedi", "insegna"]

PRODUCT_COLUMNS = ["store_id", "base_price", "promo_price", "name", "brand"]
PRODUCT_INT_COLUMNS = ["store_id", "base_price", "promo_price"]

ADDRESS_FIELDS = ["street", "city", "province", "postalCode"]

# Placeholder for missing or unparsable categorical fields
UNKNOWN = "Unknown"

# ---------------------------------------------------------------------------
# Aggregates & display
# ---------------------------------------------------------------------------
GROUP_FIELDS = ("insegna", "gruppo")

# Marker color when every store charges the same price
SAME_PRICE_COLOR = "#52c41a"

CURRENCY_SYMBOL = "€"
MISSING_PRICE = "N/A"

# Max autocomplete hits returned by product search
SEARCH_LIMIT = 10
