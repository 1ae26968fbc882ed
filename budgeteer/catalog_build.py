from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd
from loguru import logger
from pydantic import ValidationError

from .config import CATALOG_CSV_PATH, CatalogItem
from .normalize import basic_clean, split_tags


# ---------------------------
# Column detection / standardization
# ---------------------------

# Exported datasets do not agree on headers, so several variants are accepted.
COLUMN_CANDIDATES: Dict[str, List[str]] = {
    "product_id": ["item_id", "Item ID", "product_id", "id", "ID"],
    "name": ["item_name", "Item Name", "name", "Name", "product_name", "Title"],
    "description": ["item_description", "Item Description", "description", "Description"],
    "price": ["current_price", "Current Price", "price", "Price"],
    "source": ["store", "Store", "source", "Source", "vendor", "Vendor"],
    "categories": ["category_tags", "Category Tags", "categories", "Categories", "tags"],
    "image_ref": ["image_url", "Image URL", "image", "image_ref"],
    "price_date": ["price_date", "Price Date", "date", "Date"],
}

CANONICAL_COLUMNS = list(COLUMN_CANDIDATES)


def _standardize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Rename raw CSV headers onto the canonical record fields."""
    col_map: Dict[str, str] = {}
    lower_to_original = {c.lower(): c for c in df.columns}

    for canon, candidates in COLUMN_CANDIDATES.items():
        for candidate in candidates:
            if candidate in df.columns:
                col_map[candidate] = canon
                break
            cand_lower = candidate.lower()
            if cand_lower in lower_to_original:
                col_map[lower_to_original[cand_lower]] = canon
                break

    logger.info("Standardizing columns with map: {}", col_map)
    df_std = df.rename(columns=col_map)

    missing = [c for c in ("product_id", "name", "price", "source") if c not in df_std.columns]
    if missing:
        logger.warning("Raw catalog is missing required columns: {}", missing)
    return df_std


# ---------------------------
# Field parsing helpers
# ---------------------------

def parse_price(value) -> float:
    """
    Parse a price cell. Accepts "4.99", "$4.99", "1,299.00".

    Raises ValueError for blanks or non-numeric text.
    """
    text = str(value if value is not None else "").strip()
    text = text.replace("$", "").replace(",", "")
    if not text:
        raise ValueError("empty price")
    return float(text)


def parse_categories(value) -> frozenset:
    return frozenset(split_tags(value))


def row_to_item(row: pd.Series) -> CatalogItem:
    """Build a CatalogItem from a standardized row; raises on bad data."""
    return CatalogItem(
        product_id=int(str(row.get("product_id", "")).strip()),
        name=basic_clean(row.get("name", "")),
        description=basic_clean(row.get("description", "")),
        price=parse_price(row.get("price")),
        source=basic_clean(row.get("source", "")),
        categories=parse_categories(row.get("categories", "")),
        image_ref=str(row.get("image_ref", "") or "").strip(),
        price_date=str(row.get("price_date", "") or "").strip(),
    )


def normalize_catalog_df(df_raw: pd.DataFrame) -> List[CatalogItem]:
    """
    Turn a raw catalog frame into validated records, in file order.

    Rows that fail to parse (bad id, bad/negative price, blank source) are
    logged and skipped.
    """
    logger.info("Normalizing catalog dataframe with {} raw rows", len(df_raw))
    df = _standardize_columns(df_raw.copy())
    for col in CANONICAL_COLUMNS:
        if col not in df.columns:
            df[col] = ""

    items: List[CatalogItem] = []
    skipped = 0
    for idx, row in df.iterrows():
        try:
            items.append(row_to_item(row))
        except (ValueError, ValidationError) as e:
            skipped += 1
            logger.warning("Skipping catalog row {}: {}", idx, e)

    logger.info("Catalog normalization complete. Loaded {} items, skipped {}", len(items), skipped)
    return items


# ---------------------------
# IO helpers
# ---------------------------

def load_raw_catalog(path: Path) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(
            f"Catalog CSV not found at {path}. Set BUDGETEER_CATALOG_PATH or place it there."
        )
    logger.info("Loading raw catalog from {}", path)
    df = pd.read_csv(path, dtype=str, keep_default_na=False, skipinitialspace=True)
    logger.info("Loaded {} rows from raw catalog", len(df))
    return df


def load_catalog_items(path: Optional[Path] = None) -> List[CatalogItem]:
    """End-to-end: read CSV → normalize → validated records."""
    path = Path(path) if path is not None else CATALOG_CSV_PATH
    return normalize_catalog_df(load_raw_catalog(path))
