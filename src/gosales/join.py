"""
Join stage: orders -> products -> retailers, both left-outer, defined lazily in DuckDB.
Right-hand keys must be unique; checked with aggregate queries before the join and by row count after materialization.
"""
import duckdb
import pandas as pd

from src.logging_config import get_logger
from src.gosales.config import ORDER_KEY, PRODUCT_KEY, RETAILER_KEY
from src.gosales.errors import JoinKeyViolation, MissingColumnError

logger = get_logger(__name__)

DUPLICATE_SAMPLE_SIZE = 5


def count_rows(rel: duckdb.DuckDBPyRelation) -> int:
    return rel.aggregate("count(*)").fetchone()[0]


def ensure_unique_key(rel: duckdb.DuckDBPyRelation, key: str, name: str) -> None:
    """
    Fail if `key` is not unique across the non-null rows of `rel`.

    Null keys never match in a join, so they cannot inflate the row count and are allowed.

    Raises:
        MissingColumnError: If `key` is not a column of `rel`.
        JoinKeyViolation: If any non-null key value occurs more than once.
    """
    if key not in rel.columns:
        raise MissingColumnError([key], f"join key of {name}")
    qkey = f'"{key}"'
    n_keys, n_distinct = rel.aggregate(f"count({qkey}), count(DISTINCT {qkey})").fetchone()
    if n_keys == n_distinct:
        return
    sample = (
        rel.filter(f"{qkey} IS NOT NULL")
        .aggregate(f"{qkey}, count(*) AS n", qkey)
        .filter("n > 1")
        .order(qkey)
        .limit(DUPLICATE_SAMPLE_SIZE)
        .fetchall()
    )
    examples = ", ".join(f"{value!r} (x{n})" for value, n in sample)
    raise JoinKeyViolation(
        f"{name}.{key} is not unique: {n_keys - n_distinct} duplicate row(s), e.g. {examples}"
    )


def join_sources(orders: duckdb.DuckDBPyRelation, products: duckdb.DuckDBPyRelation,
                 retailers: duckdb.DuckDBPyRelation) -> tuple[duckdb.DuckDBPyRelation, int]:
    """
    Define orders LEFT JOIN products USING (product_number) LEFT JOIN retailers USING (retailer_site_code).

    Rows come out sorted by order number then product number.
    Nothing is materialized: the key checks and the order count are aggregate queries.

    Args:
        orders (duckdb.DuckDBPyRelation): Prepared orders relation (left side).
        products (duckdb.DuckDBPyRelation): Prepared products relation, unique on `product_number`.
        retailers (duckdb.DuckDBPyRelation): Prepared retailers relation, unique on `retailer_site_code`.

    Returns:
        tuple[duckdb.DuckDBPyRelation, int]: The lazy joined relation and the number of rows it must produce.

    Raises:
        MissingColumnError: If a join key is missing from either side.
        JoinKeyViolation: If products or retailers have duplicate keys.
    """
    missing = [c for c in (ORDER_KEY, PRODUCT_KEY, RETAILER_KEY) if c not in orders.columns]
    if missing:
        raise MissingColumnError(missing, "join keys of orders")
    ensure_unique_key(products, PRODUCT_KEY, "products")
    ensure_unique_key(retailers, RETAILER_KEY, "retailers")

    expected_rows = count_rows(orders)
    logger.info("Joining %d orders with products and retailers", expected_rows)
    joined = (
        orders.join(products, PRODUCT_KEY, how="left")
        .join(retailers, RETAILER_KEY, how="left")
        .order(f'"{ORDER_KEY}", "{PRODUCT_KEY}"')
    )
    return joined, expected_rows


def check_row_count(frame: pd.DataFrame, expected_rows: int) -> None:
    """Raise JoinKeyViolation when the joined frame does not have one row per order."""
    if len(frame) != expected_rows:
        raise JoinKeyViolation(
            f"Join changed the row count: expected {expected_rows} orders, got {len(frame)} rows"
        )


def materialize(joined: duckdb.DuckDBPyRelation, expected_rows: int) -> pd.DataFrame:
    """Execute the joined relation once and verify the left join preserved every order."""
    frame = joined.df()
    check_row_count(frame, expected_rows)
    logger.info("Materialized joined relation (%d rows, %d columns)", len(frame), len(frame.columns))
    return frame
