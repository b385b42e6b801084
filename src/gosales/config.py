"""
Pipeline paths and settings (single source of truth for source and artifact locations)
"""
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
DATA_DIR = ROOT / "data"

# Source database holding the orders / products / retailers relations
SOURCE_DB = DATA_DIR / "gosales.duckdb"

# Relation names at the source
ORDERS = "orders"
PRODUCTS = "products"
RETAILERS = "retailers"

# CSV exports used to (re)build the source database: relation name -> file
CSV_SOURCES = {
    ORDERS: DATA_DIR / "orders.csv",
    PRODUCTS: DATA_DIR / "products.csv",
    RETAILERS: DATA_DIR / "retailers.csv",
}

# Join keys (ORDER_KEY only orders the output)
ORDER_KEY = "order_number"
PRODUCT_KEY = "product_number"
RETAILER_KEY = "retailer_site_code"

# Output artifact (single Parquet file)
OUTPUT_DIR = ROOT / "output"
OUTPUT_PATH = OUTPUT_DIR / "gosales_enriched.parquet"
