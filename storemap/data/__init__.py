"""CSV parsing, normalization, and the in-memory store/product collections."""
from .parser import parse_csv, decode_address, extract_json_span
from .normalize import normalize_stores, normalize_products, unique_product_names
from .schemas import CsvSchema, StoreRecord, ProductRecord, PriceStats
from .store import DataStore
