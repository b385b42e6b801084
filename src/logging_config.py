"""
Defines simple logging for the pipeline.
"""

import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
LOG_DIR = ROOT / "logs"
LOG_FILE = LOG_DIR / "pipeline.log"


def setup_logging(level: int = logging.INFO, log_file: Path | None = None) -> None:
    log_file = log_file or LOG_FILE
    log_file.parent.mkdir(parents=True, exist_ok=True)
    fmt = "%(asctime)s [%(levelname)s] %(message)s"
    logging.basicConfig(level=level, format=fmt, handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(log_file, encoding="utf-8"),
    ])


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
