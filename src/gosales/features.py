"""
Feature derivation on the joined orders frame.
Each rule is a pure function over Series; derive_features applies them all to a copy of the frame.
"""
import pandas as pd

from src.logging_config import get_logger
from src.gosales.buckets import FISCAL_YEARS, QUARTERS_ALL, QUARTERS_SELECTED, classify_dates, to_datetimes
from src.gosales.errors import MissingColumnError

logger = get_logger(__name__)

PROD_LINE_MAP = {
    "Camping Equipment": "Camping_Eqpt",
    "Golf Equipment": "Golf_Eqpt",
    "Mountaineering Equipment": "Mountain_Eqpt",
    "Personal Accessories": "Personal_Acces",
    "Outdoor Protection": "Outdoor_Prot",
}

# Outdoor Protection is folded into Personal Accessories
PROD_LINE_2_MAP = {**PROD_LINE_MAP, "Outdoor Protection": "Personal_Acces"}

WEST_EUROPE = ["United Kingdom", "France", "Spain", "Netherlands", "Belgium", "Switzerland"]
EAST_EUROPE = ["Germany", "Italy", "Finland", "Austria", "Sweden", "Denmark"]
COUNTRY_REGION_MAP = {
    **{country: "West_Europe" for country in WEST_EUROPE},
    **{country: "East_Europe" for country in EAST_EUROPE},
}

DATE_COLUMNS = ["order_date", "order_close_date", "ship_date", "introduction_date", "discontinued_date"]

REQUIRED_COLUMNS = [
    "quantity", "unit_cost", "unit_sale_price", "unit_price", "return_count",
    "product_line", "country", "region_en", "order_date",
]


def remap(values: pd.Series, mapping: dict) -> pd.Series:
    """Exact-match lookup; values not in `mapping` (including nulls) pass through unchanged."""
    mapped = values.map(mapping)
    return mapped.where(values.isin(list(mapping)), values)


def prod_line(product_line: pd.Series) -> pd.Series:
    return remap(product_line, PROD_LINE_MAP)


def prod_line_2(product_line: pd.Series) -> pd.Series:
    return remap(product_line, PROD_LINE_2_MAP)


def region2(country: pd.Series, region: pd.Series) -> pd.Series:
    """European countries regrouped into West_Europe / East_Europe; every other row keeps its region."""
    grouped = country.map(COUNTRY_REGION_MAP)
    return grouped.where(grouped.notna(), region)


def fill_return_count(return_count: pd.Series) -> pd.Series:
    """Absent return counts mean no returns."""
    return return_count.fillna(0).astype("int64")


def fin_year(order_date: pd.Series) -> pd.Series:
    return classify_dates(order_date, FISCAL_YEARS)


def quarter_all(order_date: pd.Series) -> pd.Series:
    return classify_dates(order_date, QUARTERS_ALL)


def quarter_sel(order_date: pd.Series) -> pd.Series:
    return classify_dates(order_date, QUARTERS_SELECTED)


def economics(quantity: pd.Series, unit_cost: pd.Series, unit_sale_price: pd.Series,
              unit_price: pd.Series) -> pd.DataFrame:
    """
    Order-line money figures. A null operand makes the dependent figures null; nothing is raised.

    Returns:
        pd.DataFrame: Columns production_cost, revenue, planned_revenue, gross_profit.
    """
    production_cost = quantity * unit_cost
    revenue = quantity * unit_sale_price
    return pd.DataFrame({
        "production_cost": production_cost,
        "revenue": revenue,
        "planned_revenue": quantity * unit_price,
        "gross_profit": revenue - production_cost,
    })


def parse_dates(frame: pd.DataFrame, columns: list[str] | None = None) -> pd.DataFrame:
    """Coerce the date columns that are present to naive datetime64[us]; unparsable values become NaT."""
    frame = frame.copy()
    for col in columns or DATE_COLUMNS:
        if col in frame.columns:
            frame[col] = to_datetimes(frame[col])
    return frame


def derive_features(joined: pd.DataFrame) -> pd.DataFrame:
    """
    Add the derived columns to the joined orders frame.

    Args:
        joined (pd.DataFrame): Materialized orders/products/retailers join.

    Returns:
        pd.DataFrame: A new frame with return_count filled and production_cost, revenue, planned_revenue,
                      gross_profit, prod_line, prod_line_2, region2, fin_year, quarter_all, quarter_sel added.
                      Date columns are typed as naive datetime64[us].

    Raises:
        MissingColumnError: If a column any rule reads from is absent.
    """
    missing = [c for c in REQUIRED_COLUMNS if c not in joined.columns]
    if missing:
        raise MissingColumnError(missing, "feature derivation")

    df = parse_dates(joined)
    df["return_count"] = fill_return_count(df["return_count"])
    money = economics(df["quantity"], df["unit_cost"], df["unit_sale_price"], df["unit_price"])
    for col in money.columns:
        df[col] = money[col]
    df["prod_line"] = prod_line(df["product_line"])
    df["prod_line_2"] = prod_line_2(df["product_line"])
    df["region2"] = region2(df["country"], df["region_en"])
    df["fin_year"] = fin_year(df["order_date"])
    df["quarter_all"] = quarter_all(df["order_date"])
    df["quarter_sel"] = quarter_sel(df["order_date"])

    unmatched = int((df["fin_year"] == "other").sum())
    logger.info("Derived features for %d rows (%d outside the fiscal years)", len(df), unmatched)
    return df
