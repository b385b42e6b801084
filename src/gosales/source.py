"""
Table acquisition: lazy DuckDB relations over the source database.
Relations expose columns and types; no rows are read here.
"""
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import duckdb

from src.logging_config import get_logger
from src.gosales.errors import MissingColumnError, RelationNotFound

logger = get_logger(__name__)

ORDER_METHOD_PREFIX = "order_method_"
ORDER_RENAMES = {"order_method_en": "order_method"}
RETAILER_RENAMES = {"retailer_name": "retailer"}


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


@contextmanager
def source_connection(db_path: Path) -> Iterator[duckdb.DuckDBPyConnection]:
    """
    Open the source database read-only and close it exactly once on exit.

    Connection errors (missing file, lock held, ...) are raised by duckdb and propagate unchanged.
    """
    logger.info("Connecting to source: %s", db_path)
    conn = duckdb.connect(str(db_path), read_only=True)
    try:
        yield conn
    finally:
        conn.close()
        logger.info("Closed source connection")


def list_relations(conn: duckdb.DuckDBPyConnection) -> list[str]:
    """Names of the tables and views visible in the current schema, sorted."""
    rows = conn.execute(
        "SELECT table_name FROM information_schema.tables "
        "WHERE table_catalog = current_database() AND table_schema = current_schema() "
        "ORDER BY table_name"
    ).fetchall()
    return [r[0] for r in rows]


def get_relation(conn: duckdb.DuckDBPyConnection, name: str) -> duckdb.DuckDBPyRelation:
    """
    Return a lazy relation for `name`.

    Args:
        conn (duckdb.DuckDBPyConnection): Open source connection.
        name (str): Relation name at the source.

    Returns:
        duckdb.DuckDBPyRelation: Unmaterialized relation aliased to `name`.

    Raises:
        RelationNotFound: If the source has no relation called `name`.
    """
    available = list_relations(conn)
    if name not in available:
        raise RelationNotFound(name, available)
    rel = conn.table(name).set_alias(name)
    logger.info("Acquired relation %s (%d columns)", name, len(rel.columns))
    return rel


def rename_and_drop(rel: duckdb.DuckDBPyRelation, renames: dict[str, str], drop_prefix: str | None = None,
                    alias: str | None = None) -> duckdb.DuckDBPyRelation:
    """
    Project `rel` with columns renamed and, optionally, every column matching `drop_prefix` removed.

    Renamed columns are never dropped, even when their old name matches the prefix.
    Returns a new lazy relation; `rel` itself is left as is.

    Raises:
        MissingColumnError: If a column to rename is not present.
    """
    columns = list(rel.columns)
    missing = [c for c in renames if c not in columns]
    if missing:
        raise MissingColumnError(missing, f"renaming {rel.alias}")

    exprs = []
    dropped = []
    for col in columns:
        if col in renames:
            exprs.append(f"{_quote(col)} AS {_quote(renames[col])}")
        elif drop_prefix and col.startswith(drop_prefix):
            dropped.append(col)
        else:
            exprs.append(_quote(col))
    if dropped:
        logger.info("Dropping %d column(s) from %s: %s", len(dropped), rel.alias, ", ".join(dropped))
    return rel.project(", ".join(exprs)).set_alias(alias or rel.alias)


def prepare_orders(rel: duckdb.DuckDBPyRelation) -> duckdb.DuckDBPyRelation:
    return rename_and_drop(rel, ORDER_RENAMES, drop_prefix=ORDER_METHOD_PREFIX, alias="orders")


def prepare_products(rel: duckdb.DuckDBPyRelation) -> duckdb.DuckDBPyRelation:
    return rename_and_drop(rel, {}, alias="products")


def prepare_retailers(rel: duckdb.DuckDBPyRelation) -> duckdb.DuckDBPyRelation:
    return rename_and_drop(rel, RETAILER_RENAMES, alias="retailers")
