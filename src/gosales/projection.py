"""
Projection and persistence: fixed output column list, single Parquet artifact.
"""
import os
from pathlib import Path

import pandas as pd

from src.logging_config import get_logger
from src.gosales.errors import MissingColumnError

logger = get_logger(__name__)

# (output name, column in the enriched frame), in artifact order
OUTPUT_COLUMNS: list[tuple[str, str]] = [
    ("order_numb", "order_number"),
    ("order_date", "order_date"),
    ("order_close_date", "order_close_date"),
    ("order_ship_date", "ship_date"),
    ("order_method", "order_method"),
    ("prod_numb", "product_number"),
    ("prod_line", "prod_line"),
    ("prod_line_2", "prod_line_2"),
    ("prod_type", "product_type"),
    ("prod_name", "product_name"),
    ("prod_brand", "product_brand"),
    ("prod_color", "product_color"),
    ("prod_size", "product_size"),
    ("prod_intro_date", "introduction_date"),
    ("prod_disc_date", "discontinued_date"),
    ("retailer_code", "retailer_code"),
    ("retailer", "retailer"),
    ("retailer_site_code", "retailer_site_code"),
    ("retailer_site", "retailer_site_key"),
    ("retailer_type", "retailer_type"),
    ("region", "region_en"),
    ("region2", "region2"),
    ("country", "country"),
    ("city", "city"),
    ("quantity", "quantity"),
    ("unit_price", "unit_price"),
    ("unit_sale_price", "unit_sale_price"),
    ("unit_cost", "unit_cost"),
    ("unit_gross_margin", "unit_gross_margin"),
    ("return_count", "return_count"),
    ("production_cost", "production_cost"),
    ("revenue", "revenue"),
    ("planned_revenue", "planned_revenue"),
    ("gross_profit", "gross_profit"),
    ("fin_year", "fin_year"),
    ("quarter_all", "quarter_all"),
    ("quarter_sel", "quarter_sel"),
]


def output_names() -> list[str]:
    return [out for out, _ in OUTPUT_COLUMNS]


def project(enriched: pd.DataFrame) -> pd.DataFrame:
    """
    Select, rename and order the output columns; every other column is dropped.

    Args:
        enriched (pd.DataFrame): Frame returned by derive_features.

    Returns:
        pd.DataFrame: New frame whose columns are exactly `output_names()`, in order, with a fresh RangeIndex.

    Raises:
        MissingColumnError: If any source column of OUTPUT_COLUMNS is absent (all missing names are reported).
    """
    sources = [src for _, src in OUTPUT_COLUMNS]
    missing = [c for c in sources if c not in enriched.columns]
    if missing:
        raise MissingColumnError(missing, "output projection")
    out = enriched[sources].copy()
    out.columns = output_names()
    dropped = len(enriched.columns) - len(set(sources))
    logger.info("Projected %d output columns (%d dropped)", len(out.columns), dropped)
    return out.reset_index(drop=True)


def write_artifact(df: pd.DataFrame, path: Path) -> Path:
    """
    Write the final frame as a single Parquet file.

    The data goes to a temporary sibling first and is moved into place only once fully written,
    so a failed write never leaves a partial artifact at `path`.

    Args:
        df (pd.DataFrame): Projected frame.
        path (Path): Destination Parquet file; parent directories are created.

    Returns:
        Path: The written artifact path.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        df.to_parquet(tmp_path, index=False)
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()
    logger.info("Wrote artifact: %s (%d rows)", path, len(df))
    return path


def read_artifact(path: Path) -> pd.DataFrame:
    return pd.read_parquet(path)
