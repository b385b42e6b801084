"""
Build the source database from CSV exports of the orders / products / retailers tables.
"""
from pathlib import Path

import duckdb

from src.logging_config import get_logger
from src.gosales.config import CSV_SOURCES, SOURCE_DB

logger = get_logger(__name__)


def csv_sources_in(csv_dir: Path) -> dict[str, Path]:
    """Expected CSV file per relation when all exports sit in one directory."""
    return {name: Path(csv_dir) / path.name for name, path in CSV_SOURCES.items()}


def load_csv_sources(db_path: Path | None = None, csv_sources: dict[str, Path] | None = None) -> dict[str, int]:
    """
    Create (or replace) one table per CSV file in the DuckDB source database.

    Args:
        db_path (Path, optional): Database file to write. Defaults to `SOURCE_DB`.
        csv_sources (dict[str, Path], optional): Relation name -> CSV path. Defaults to `CSV_SOURCES`.

    Returns:
        dict[str, int]: Row count loaded per relation.

    Raises:
        FileNotFoundError: If any CSV file does not exist (checked before the database is touched).
        ValueError: If a CSV file has no data rows.
    """
    db_path = Path(db_path or SOURCE_DB)
    csv_sources = csv_sources or CSV_SOURCES
    for name, csv_path in csv_sources.items():
        if not Path(csv_path).exists():
            raise FileNotFoundError(f"CSV for {name} not found: {csv_path}")

    db_path.parent.mkdir(parents=True, exist_ok=True)
    counts = {}
    conn = duckdb.connect(str(db_path))
    try:
        for name, csv_path in csv_sources.items():
            csv_str = str(Path(csv_path).resolve()).replace("\\", "/").replace("'", "''")
            logger.info("Loading %s from %s", name, csv_path)
            conn.execute(f'CREATE OR REPLACE TABLE "{name}" AS SELECT * FROM read_csv_auto(\'{csv_str}\', header = true)')
            n = conn.execute(f'SELECT count(*) FROM "{name}"').fetchone()[0]
            if n == 0:
                raise ValueError(f"{Path(csv_path).name} is empty")
            counts[name] = n
            logger.info("Loaded %s: %d rows", name, n)
    finally:
        conn.close()
    return counts
