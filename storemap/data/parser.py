"""
CSV ingestion for the two fixed schemas: stores (with an embedded JSON address
cell) and products (whose name may contain unquoted commas).

Rows are tokenized one line at a time so a malformed row only costs that row;
typed columns are then built with pandas.
"""
from __future__ import annotations

import csv
import json

import pandas as pd

from storemap.config import (
    STORE_COLUMNS, STORE_TEXT_COLUMNS, PRODUCT_COLUMNS, PRODUCT_INT_COLUMNS, UNKNOWN,
)
from storemap.data.schemas import CsvSchema, sentinel_address

SCHEMA_COLUMNS = {
    CsvSchema.STORES: STORE_COLUMNS,
    CsvSchema.PRODUCTS: PRODUCT_COLUMNS,
}


# ---------------------------------------------------------------------------
# Embedded address JSON
# ---------------------------------------------------------------------------

def extract_json_span(text: str) -> str | None:
    """Return the first balanced ``{...}`` span in text, or None.

    Braces are counted without tracking JSON string state, so a brace inside
    an address value must itself be balanced.
    """
    start = text.find("{")
    if start < 0:
        return None
    depth = 0
    for i in range(start, len(text)):
        ch = text[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    return None


def _loads_address(span: str):
    try:
        return json.loads(span)
    except ValueError:
        # Cell still carries CSV-style doubled quotes
        return json.loads(span.replace('""', '"'))


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def decode_address(value) -> dict:
    """Decode an address cell into a dict, or the sentinel address on failure.

    Keys missing from the JSON stay missing; only a failed decode or an
    all-empty object is replaced by the sentinel.
    """
    addr = None
    if isinstance(value, dict):
        addr = value
    elif isinstance(value, str):
        span = extract_json_span(value)
        if span is not None:
            try:
                addr = _loads_address(span)
            except ValueError:
                addr = None

    if not isinstance(addr, dict) or all(_is_blank(v) for v in addr.values()):
        print(f"  Warning: failed to parse address JSON: {value!r}")
        return sentinel_address()
    return addr


# ---------------------------------------------------------------------------
# Row repair (more tokens than header fields)
# ---------------------------------------------------------------------------

def repair_store_tokens(tokens: list[str], header: list[str]) -> list[str] | None:
    """Rejoin an unquoted, comma-split address JSON cell.

    The address span starts at the header's address position and runs until
    its braces balance.
    """
    if "address" not in header:
        return None
    pos = header.index("address")
    if pos >= len(tokens) or not tokens[pos].lstrip(' "').startswith("{"):
        return None

    depth = 0
    end = None
    for i in range(pos, len(tokens)):
        depth += tokens[i].count("{") - tokens[i].count("}")
        if depth <= 0:
            end = i
            break
    if end is None:
        return None

    repaired = tokens[:pos] + [",".join(tokens[pos:end + 1])] + tokens[end + 1:]
    if len(repaired) != len(header):
        return None
    return repaired


def repair_product_tokens(tokens: list[str], header: list[str]) -> list[str] | None:
    """Rebuild a product name that was split on its own commas.

    Fields before ``name`` map one-to-one, fields after it are taken from the
    end of the row, and everything in between is the name. A comma inside
    ``brand`` cannot be told apart from one inside ``name``.
    """
    if "name" not in header or len(tokens) < len(header):
        return None
    pos = header.index("name")
    end = len(tokens) - (len(header) - pos - 1)
    return tokens[:pos] + [",".join(tokens[pos:end])] + tokens[end:]


_REPAIRS = {
    CsvSchema.STORES: repair_store_tokens,
    CsvSchema.PRODUCTS: repair_product_tokens,
}


def _fallback_tokens(schema: CsvSchema, header: list[str]) -> list[str]:
    """Tokens for a row that could not be parsed: every field at its default."""
    tokens = [""] * len(header)
    if schema == CsvSchema.STORES and "address" in header:
        tokens[header.index("address")] = json.dumps(sentinel_address())
    return tokens


# ---------------------------------------------------------------------------
# Tokenizing
# ---------------------------------------------------------------------------

def _tokenize_line(line: str) -> list[str]:
    return next(csv.reader([line], strict=True))


def _split_raw(line: str) -> list[str]:
    """Plain comma split; wrapping quotes are dropped except on JSON pieces."""
    return [t if ("{" in t or "}" in t) else t.strip().strip('"') for t in line.split(",")]


def parse_header(line: str) -> list[str]:
    """Header field names with surrounding whitespace and quotes removed."""
    try:
        fields = _tokenize_line(line)
    except csv.Error:
        fields = line.split(",")
    return [f.strip().strip('"').strip() for f in fields]


def tokenize_rows(text: str, schema: CsvSchema) -> tuple[list[str], list[list[str]]]:
    """Split CSV text into (header, rows) where every row has len(header) tokens."""
    lines = [ln for ln in text.lstrip("\ufeff").splitlines() if ln.strip()]
    if not lines:
        return [], []

    header = parse_header(lines[0])
    repair = _REPAIRS[schema]
    rows: list[list[str]] = []
    failed = 0

    for line in lines[1:]:
        try:
            tokens = _tokenize_line(line)
        except csv.Error:
            # Stray quotes, e.g. an unquoted JSON cell: split on raw commas
            # and let the schema repair rebuild the logical fields
            tokens = _split_raw(line)

        if len(tokens) > len(header):
            repaired = repair(tokens, header)
            if repaired is None:
                print(f"  Warning: unparseable {schema.value} row, using defaults: {line[:120]}")
                rows.append(_fallback_tokens(schema, header))
                failed += 1
                continue
            tokens = repaired
        elif len(tokens) < len(header):
            tokens = tokens + [""] * (len(header) - len(tokens))

        rows.append(tokens)

    if failed:
        print(f"  {schema.value}: {failed:,} of {len(rows):,} rows fell back to defaults")
    return header, rows


# ---------------------------------------------------------------------------
# Typed columns
# ---------------------------------------------------------------------------

def _stripped(series: pd.Series) -> pd.Series:
    return series.fillna("").astype(str).str.strip()


def to_nullable_int(series: pd.Series) -> pd.Series:
    """Numeric strings → Int64; blanks, text and non-integral values → <NA>."""
    nums = pd.to_numeric(_stripped(series), errors="coerce")
    nums = nums.where(nums.isna() | (nums % 1 == 0))
    return nums.astype("Float64").astype("Int64")


def to_float(series: pd.Series) -> pd.Series:
    """Numeric strings → float64; anything else → NaN."""
    return pd.to_numeric(_stripped(series), errors="coerce").astype("float64")


def _clean_text(series: pd.Series, default: str) -> pd.Series:
    s = series.fillna("").astype(str).str.strip()
    return s.where(s != "", default)


def _store_frame(raw: pd.DataFrame) -> pd.DataFrame:
    df = pd.DataFrame(index=raw.index)
    df["store_id"] = to_nullable_int(raw["store_id"])
    df["address"] = raw["address"].map(decode_address)
    df["latitude"] = to_float(raw["latitude"])
    df["longitude"] = to_float(raw["longitude"])
    for col in STORE_TEXT_COLUMNS:
        df[col] = _clean_text(raw[col], UNKNOWN)
    return df


def _product_frame(raw: pd.DataFrame) -> pd.DataFrame:
    df = pd.DataFrame(index=raw.index)
    for col in PRODUCT_INT_COLUMNS:
        df[col] = to_nullable_int(raw[col])
    df["name"] = _clean_text(raw["name"], "")
    df["brand"] = _clean_text(raw["brand"], UNKNOWN)
    return df


_BUILDERS = {
    CsvSchema.STORES: _store_frame,
    CsvSchema.PRODUCTS: _product_frame,
}


def empty_frame(schema: CsvSchema) -> pd.DataFrame:
    """Typed, zero-row frame for a schema."""
    raw = pd.DataFrame({col: pd.Series(dtype="object") for col in SCHEMA_COLUMNS[schema]})
    return _BUILDERS[schema](raw)


def parse_csv(text: str, schema: CsvSchema) -> pd.DataFrame:
    """Parse CSV text for a schema into a typed DataFrame in input row order.

    Never raises on bad data: unparseable rows become default-valued rows and
    a warning is printed.
    """
    columns = SCHEMA_COLUMNS[schema]
    header, rows = tokenize_rows(text or "", schema)
    if not rows:
        return empty_frame(schema)

    raw = pd.DataFrame(rows, columns=header, dtype="object")
    # Duplicate header names: keep the first occurrence
    raw = raw.loc[:, ~raw.columns.duplicated()]
    missing = [c for c in columns if c not in raw.columns]
    if missing:
        print(f"  Warning: {schema.value} CSV has no column(s) {', '.join(missing)}; using defaults")
        for col in missing:
            raw[col] = ""

    return _BUILDERS[schema](raw[columns].reset_index(drop=True))
