"""
Entrypoint: run the GO Sales enrichment pipeline once.
  python -m src.main
  python -m src.main [--log-file PATH] run [--db PATH] [--output PATH]
  python -m src.main tables [--db PATH]
  python -m src.main load [--db PATH] [--csv-dir DIR]
"""
import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def build_parser() -> argparse.ArgumentParser:
    from src.gosales.config import DATA_DIR, OUTPUT_PATH, SOURCE_DB

    parser = argparse.ArgumentParser(prog="gosales", description="GO Sales enrichment pipeline")
    parser.add_argument("--log-file", type=Path, default=None, help="log file (default: logs/pipeline.log)")
    sub = parser.add_subparsers(dest="command")

    run_p = sub.add_parser("run", help="join, enrich and write the Parquet artifact")
    run_p.add_argument("--db", type=Path, default=SOURCE_DB)
    run_p.add_argument("--output", type=Path, default=OUTPUT_PATH)

    tables_p = sub.add_parser("tables", help="list relations at the source")
    tables_p.add_argument("--db", type=Path, default=SOURCE_DB)

    load_p = sub.add_parser("load", help="build the source database from CSV exports")
    load_p.add_argument("--db", type=Path, default=SOURCE_DB)
    load_p.add_argument("--csv-dir", type=Path, default=DATA_DIR)
    return parser


def main(argv: list[str] | None = None) -> int:
    from src.logging_config import setup_logging
    from src.gosales.errors import PipelineError
    from src.gosales.load import csv_sources_in, load_csv_sources
    from src.gosales.run import run
    from src.gosales.source import list_relations, source_connection

    args = build_parser().parse_args(argv)
    setup_logging(log_file=args.log_file)
    try:
        if args.command == "tables":
            with source_connection(args.db) as conn:
                for name in list_relations(conn):
                    print(name)
        elif args.command == "load":
            load_csv_sources(args.db, csv_sources_in(args.csv_dir))
        elif args.command == "run":
            run(args.db, args.output)
        else:
            run()
    except PipelineError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
