"""
Pytest Configuration and Fixtures
==================================
Small orders / products / retailers tables and DuckDB sources built from them.
"""

import duckdb
import pandas as pd
import pytest


def make_orders() -> pd.DataFrame:
    return pd.DataFrame({
        'order_number': [1001, 1001, 1002, 1003, 1004],
        'product_number': [1, 2, 3, 99, 1],
        'retailer_site_code': [10, 10, 20, 30, 999],
        'quantity': [10, 5, 2, 1, 3],
        'unit_price': [9.0, 20.0, 100.0, 4.0, 9.0],
        'unit_sale_price': [8.0, 18.0, 95.0, 4.0, 8.5],
        'unit_cost': [5.0, 12.0, 60.0, 2.0, 5.0],
        'unit_gross_margin': [0.375, 0.333, 0.368, 0.5, 0.412],
        'order_date': ['2006-08-15', '2005-06-30', '2003-01-01', '2007-09-30', '2004-07-01'],
        'order_close_date': ['2006-08-20', '2005-07-02', '2003-01-05', '2007-10-02', '2004-07-03'],
        'ship_date': ['2006-08-17', '2005-07-01', '2003-01-03', '2007-10-01', '2004-07-02'],
        'return_count': pd.array([None, 1, None, 2, None], dtype='Int64'),
        'order_method_en': ['Web', 'Fax', 'E-mail', 'Web', 'Telephone'],
        'order_method_de': ['Web', 'Fax', 'E-Mail', 'Web', 'Telefon'],
        'order_method_fr': ['Web', 'Télécopie', 'Courriel', 'Web', 'Téléphone'],
    })


def make_products() -> pd.DataFrame:
    return pd.DataFrame({
        'product_number': [1, 2, 3],
        'product_line': ['Outdoor Protection', 'Golf Equipment', 'Camping Equipment'],
        'product_type': ['Sunscreen', 'Putters', 'Tents'],
        'product_name': ['Sun Shelter 30', 'Blue Steel Putter', 'Star Dome'],
        'product_brand': ['Extreme', 'Blue Steel', 'Star'],
        'product_color': ['Unspecified', 'Blue', 'Green'],
        'product_size': ['Small', 'Unspecified', 'Large'],
        'introduction_date': ['2004-01-15', '2003-03-01', '2002-06-10'],
        'discontinued_date': [None, '2007-01-01', None],
    })


def make_retailers() -> pd.DataFrame:
    return pd.DataFrame({
        'retailer_site_code': [10, 20, 30],
        'retailer_name': ['Sport Scheck', 'Grand choix', 'Outdoor Mart'],
        'retailer_code': [7001, 7002, 7003],
        'retailer_site_key': [501, 502, 503],
        'retailer_type': ['Outdoors Shop', 'Department Store', 'Sports Store'],
        'region_en': ['Central Europe', 'Central Europe', 'Americas'],
        'country': ['Germany', 'France', 'United States'],
        'city': ['Munich', 'Paris', 'Denver'],
    })


def create_tables(conn, tables: dict) -> None:
    """Create one DuckDB table per DataFrame."""
    for name, df in tables.items():
        conn.register('staging_df', df)
        conn.execute(f'CREATE TABLE "{name}" AS SELECT * FROM staging_df')
        conn.unregister('staging_df')


@pytest.fixture
def orders_df():
    return make_orders()


@pytest.fixture
def products_df():
    return make_products()


@pytest.fixture
def retailers_df():
    return make_retailers()


@pytest.fixture
def source_tables(orders_df, products_df, retailers_df):
    return {'orders': orders_df, 'products': products_df, 'retailers': retailers_df}


@pytest.fixture
def memory_conn(source_tables):
    """In-memory DuckDB connection holding the three source relations."""
    conn = duckdb.connect(':memory:')
    create_tables(conn, source_tables)
    yield conn
    conn.close()


@pytest.fixture
def make_source_db(tmp_path):
    """Factory writing a DuckDB file with the given tables; returns its path."""
    def _make(tables: dict, name: str = 'gosales.duckdb'):
        db_path = tmp_path / name
        conn = duckdb.connect(str(db_path))
        try:
            create_tables(conn, tables)
        finally:
            conn.close()
        return db_path
    return _make


@pytest.fixture
def source_db(make_source_db, source_tables):
    return make_source_db(source_tables)
