"""
Orchestrates the pipeline: acquire -> join -> derive features -> project -> write Parquet.
DuckDB holds the source and runs the join; pandas does the feature work.
"""
from pathlib import Path
from typing import Optional

import duckdb
import pandas as pd

from src.logging_config import get_logger
from src.gosales.config import ORDERS, OUTPUT_PATH, PRODUCTS, RETAILERS, SOURCE_DB
from src.gosales.features import derive_features
from src.gosales.join import join_sources, materialize
from src.gosales.projection import project, write_artifact
from src.gosales.source import (
    get_relation,
    list_relations,
    prepare_orders,
    prepare_products,
    prepare_retailers,
    source_connection,
)

logger = get_logger(__name__)


def acquire_joined(conn: duckdb.DuckDBPyConnection) -> pd.DataFrame:
    """
    Read orders, products and retailers from an open connection, join them and materialize the result once.

    Raises:
        RelationNotFound: If one of the three relations is missing.
        MissingColumnError: If a renamed column or a join key is missing.
        JoinKeyViolation: If products or retailers have duplicate keys, or the join changed the row count.
    """
    logger.info("Relations at source: %s", ", ".join(list_relations(conn)))
    orders = prepare_orders(get_relation(conn, ORDERS))
    products = prepare_products(get_relation(conn, PRODUCTS))
    retailers = prepare_retailers(get_relation(conn, RETAILERS))
    joined, expected_rows = join_sources(orders, products, retailers)
    return materialize(joined, expected_rows)


def transform(joined: pd.DataFrame) -> pd.DataFrame:
    """Derived features plus the fixed output projection."""
    return project(derive_features(joined))


def run(db_path: Optional[Path] = None, output_path: Optional[Path] = None) -> Path:
    """
        Run the pipeline once against the source database and write the enriched orders artifact.

        The source connection is opened once and closed right after the joined relation is materialized,
        whether or not the run succeeds. Nothing is written unless every stage succeeds.

        Args:
            db_path (Optional[Path], optional): DuckDB source database. Defaults to `SOURCE_DB`.
            output_path (Optional[Path], optional): Parquet artifact to write. Defaults to `OUTPUT_PATH`.

        Returns:
            Path: The written artifact.

        Raises:
            duckdb.Error: Connection failures from duckdb, unchanged.
            PipelineError: RelationNotFound, JoinKeyViolation or MissingColumnError; all fatal.
    """
    db_path = Path(db_path or SOURCE_DB)
    output_path = Path(output_path or OUTPUT_PATH)
    logger.info("Starting pipeline")
    try:
        with source_connection(db_path) as conn:
            joined = acquire_joined(conn)
        out = write_artifact(transform(joined), output_path)
    except Exception:
        logger.exception("Pipeline failed")
        raise
    logger.info("Pipeline finished successfully")
    return out


if __name__ == "__main__":
    run()
